"""Per-type threshold classification of single vital readings."""

from __future__ import annotations

import math
from typing import Iterable

from app.core.exceptions import InvalidInputError
from app.modules.vitals.config import DEFAULT_PROFILES, VitalProfileTable
from app.modules.vitals.models import VitalReading
from app.shared.constants import SeverityTier, StatusBadge, VitalType


def require_finite(value: float, field: str = "value") -> float:
    """Reject NaN, infinities and non-numeric values before they reach any comparison."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"{field} must be a number", field=field, value=repr(value))
    if not math.isfinite(value):
        raise InvalidInputError(f"{field} must be finite", field=field, value=repr(value))
    return float(value)


class VitalClassifier:
    """Map (vital type, value) to a severity tier using a profile table."""

    def __init__(
        self,
        profiles: VitalProfileTable = DEFAULT_PROFILES,
        unknown_tier: SeverityTier = SeverityTier.NORMAL,
    ) -> None:
        self._profiles = profiles
        self._unknown_tier = unknown_tier

    @property
    def profiles(self) -> VitalProfileTable:
        return self._profiles

    def classify(self, vital_type: VitalType | str, value: float) -> SeverityTier:
        numeric = require_finite(value)
        profile = self._profiles.get(vital_type)
        if profile is None:
            return self._unknown_tier
        if not profile.critical_range.contains(numeric):
            return SeverityTier.CRITICAL
        if not profile.normal_range.contains(numeric):
            return SeverityTier.ELEVATED
        return SeverityTier.NORMAL

    def classify_reading(self, reading: VitalReading) -> SeverityTier:
        return self.classify(reading.type, reading.value)

    def is_out_of_range(self, vital_type: VitalType | str, value: float) -> bool:
        return self.classify(vital_type, value) is not SeverityTier.NORMAL


def classify(
    vital_type: VitalType | str,
    value: float,
    profiles: VitalProfileTable = DEFAULT_PROFILES,
) -> SeverityTier:
    return VitalClassifier(profiles).classify(vital_type, value)


def worst_tier(tiers: Iterable[SeverityTier]) -> SeverityTier:
    return max(tiers, key=lambda tier: tier.rank, default=SeverityTier.NORMAL)


def status_badge(tiers: Iterable[SeverityTier]) -> StatusBadge:
    """Collapse the tiers of a patient's latest readings into a dashboard badge."""
    worst = worst_tier(tiers)
    if worst is SeverityTier.CRITICAL:
        return StatusBadge.RED
    if worst is SeverityTier.ELEVATED:
        return StatusBadge.YELLOW
    return StatusBadge.GREEN
