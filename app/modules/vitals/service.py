from collections import defaultdict
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable

import structlog

from app.core.config import settings
from app.core.exceptions import InvalidInputError
from app.modules.vitals.classifier import VitalClassifier, status_badge
from app.modules.vitals.config import VitalProfileTable, load_profiles
from app.modules.vitals.models import VitalAssessment, VitalReading
from app.modules.vitals.trends import (
    DEFAULT_RECENT_COUNT,
    DEFAULT_WINDOW,
    TrendWindow,
    recent_trend,
    summarize_windows,
)
from app.shared.constants import SeverityTier, StatusBadge, TrendDirection, VitalType

log = structlog.get_logger()


class VitalAssessmentService:
    """Classify readings for presentation, degrading bad input to a review-required verdict."""

    def __init__(self, classifier: VitalClassifier) -> None:
        self._classifier = classifier

    @property
    def profiles(self) -> VitalProfileTable:
        return self._classifier.profiles

    def assess(
        self, vital_type: VitalType | str, value: float, unit: str | None = None
    ) -> VitalAssessment:
        profiles = self._classifier.profiles
        display_name = profiles.display_name(vital_type)
        resolved_unit = unit or profiles.unit(vital_type)
        type_key = vital_type.value if isinstance(vital_type, VitalType) else str(vital_type)
        try:
            tier = self._classifier.classify(vital_type, value)
        except InvalidInputError as exc:
            log.warning(
                "vital classification degraded",
                vital_type=type_key,
                error=exc.message,
            )
            return VitalAssessment(
                vital_type=type_key,
                value=None,
                tier=SeverityTier.ELEVATED,
                out_of_range=True,
                requires_review=True,
                display_name=display_name,
                unit=resolved_unit,
                reason=exc.message,
            )

        if profiles.get(vital_type) is None:
            log.info("vital type has no profile", vital_type=type_key, tier=tier.value)
        return VitalAssessment(
            vital_type=type_key,
            value=float(value),
            tier=tier,
            out_of_range=tier is not SeverityTier.NORMAL,
            display_name=display_name,
            unit=resolved_unit,
        )

    def assess_reading(self, reading: VitalReading) -> VitalAssessment:
        return self.assess(reading.type, reading.value, reading.unit or None)

    def assess_batch(
        self, readings: Iterable[VitalReading]
    ) -> tuple[list[VitalAssessment], StatusBadge]:
        """Assess every reading; the badge reflects only the newest reading per type."""
        ordered = sorted(readings, key=lambda r: r.timestamp)
        assessments = [self.assess_reading(reading) for reading in ordered]
        latest: dict[str, VitalAssessment] = {}
        for assessment in assessments:
            latest[assessment.vital_type] = assessment
        return assessments, status_badge(a.tier for a in latest.values())

    def trends(
        self,
        readings: Iterable[VitalReading],
        now: datetime | None = None,
        window: timedelta = DEFAULT_WINDOW,
        recent_count: int = DEFAULT_RECENT_COUNT,
    ) -> dict[str, tuple[TrendWindow, TrendDirection | None]]:
        collected = list(readings)
        windows = summarize_windows(collected, now=now, profiles=self.profiles, window=window)
        by_type: dict[str, list[VitalReading]] = defaultdict(list)
        for reading in collected:
            by_type[reading.type_key].append(reading)
        return {
            vital_type: (
                windows[vital_type],
                recent_trend(
                    by_type[vital_type],
                    count=recent_count,
                    noise_threshold=self.profiles.noise_threshold(vital_type),
                ),
            )
            for vital_type in windows
        }


def _optional_path(raw: str | None) -> Path | None:
    return Path(raw) if raw else None


vital_profiles = load_profiles(_optional_path(settings.VITAL_PROFILES_PATH))
vital_classifier = VitalClassifier(
    profiles=vital_profiles, unknown_tier=SeverityTier(settings.UNKNOWN_VITAL_TIER)
)
assessment_service = VitalAssessmentService(vital_classifier)


def get_assessment_service() -> VitalAssessmentService:
    return assessment_service
