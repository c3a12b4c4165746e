"""Direction of change between readings, pairwise and across time windows."""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Sequence

from app.core.exceptions import InvalidInputError
from app.modules.vitals.classifier import require_finite
from app.modules.vitals.config import DEFAULT_PROFILES, VitalProfileTable
from app.modules.vitals.models import VitalReading, ensure_utc
from app.shared.constants import TrendDirection, VitalType

DEFAULT_WINDOW = timedelta(days=7)
DEFAULT_RECENT_COUNT = 3

_RISING_IS_WORSE = {
    VitalType.BLOOD_PRESSURE_SYSTOLIC.value,
    VitalType.BLOOD_PRESSURE_DIASTOLIC.value,
    VitalType.HEART_RATE.value,
    VitalType.BLOOD_GLUCOSE.value,
}
_FALLING_IS_WORSE = {VitalType.OXYGEN_SATURATION.value}


@dataclass(frozen=True)
class TrendWindow:
    this_window_avg: float | None
    prior_window_avg: float | None
    direction: TrendDirection | None
    this_window_count: int = 0
    prior_window_count: int = 0

    @property
    def has_trend(self) -> bool:
        return self.direction is not None


def trend_direction(
    current: float, previous: float, noise_threshold: float = 0.0
) -> TrendDirection:
    current = require_finite(current, "current")
    previous = require_finite(previous, "previous")
    noise_threshold = require_finite(noise_threshold, "noise_threshold")
    if noise_threshold < 0:
        raise InvalidInputError(
            "noise_threshold must not be negative",
            field="noise_threshold",
            value=noise_threshold,
        )
    delta = current - previous
    # Float subtraction must not push a change equal to the threshold past it
    if abs(delta) <= noise_threshold or math.isclose(
        abs(delta), noise_threshold, rel_tol=1e-9, abs_tol=1e-9
    ):
        return TrendDirection.STABLE
    return TrendDirection.UP if delta > 0 else TrendDirection.DOWN


def window_average(values: Iterable[float]) -> float | None:
    collected = list(values)
    if not collected:
        return None
    return sum(collected) / len(collected)


def partition_windows(
    readings: Iterable[VitalReading],
    now: datetime,
    window: timedelta = DEFAULT_WINDOW,
) -> tuple[list[VitalReading], list[VitalReading]]:
    """Split readings into [now - window, now] and [now - 2*window, now - window)."""
    if window <= timedelta(0):
        raise InvalidInputError("window must be positive", field="window", value=str(window))
    now = ensure_utc(now)
    this_start = now - window
    prior_start = this_start - window
    this_window: list[VitalReading] = []
    prior_window: list[VitalReading] = []
    for reading in readings:
        if this_start <= reading.timestamp <= now:
            this_window.append(reading)
        elif prior_start <= reading.timestamp < this_start:
            prior_window.append(reading)
    return this_window, prior_window


def compare_windows(
    readings: Iterable[VitalReading],
    now: datetime | None = None,
    window: timedelta = DEFAULT_WINDOW,
    noise_threshold: float = 0.0,
) -> TrendWindow:
    this_window, prior_window = partition_windows(
        readings, now or datetime.now(timezone.utc), window
    )
    this_avg = window_average(r.value for r in this_window)
    prior_avg = window_average(r.value for r in prior_window)
    direction = None
    if this_avg is not None and prior_avg is not None:
        direction = trend_direction(this_avg, prior_avg, noise_threshold)
    return TrendWindow(
        this_window_avg=this_avg,
        prior_window_avg=prior_avg,
        direction=direction,
        this_window_count=len(this_window),
        prior_window_count=len(prior_window),
    )


def recent_trend(
    readings: Sequence[VitalReading],
    count: int = DEFAULT_RECENT_COUNT,
    noise_threshold: float = 0.0,
) -> TrendDirection | None:
    """Compare the oldest and newest of the last ``count`` readings."""
    if count < 2:
        raise InvalidInputError("count must be at least 2", field="count", value=count)
    latest = sorted(readings, key=lambda r: r.timestamp)[-count:]
    if len(latest) < 2:
        return None
    return trend_direction(latest[-1].value, latest[0].value, noise_threshold)


def consecutive_run(values: Sequence[float], direction: TrendDirection) -> bool:
    """True when every successive pair strictly moves in ``direction``."""
    if direction is TrendDirection.STABLE or len(values) < 2:
        return False
    pairs = zip(values, values[1:])
    if direction is TrendDirection.UP:
        return all(curr > prev for prev, curr in pairs)
    return all(curr < prev for prev, curr in pairs)


def trend_concern(vital_type: VitalType | str, direction: TrendDirection | None) -> str:
    """Whether a direction of change is clinically worse, better or neither for a type."""
    key = vital_type.value if isinstance(vital_type, VitalType) else str(vital_type)
    if direction is None or direction is TrendDirection.STABLE:
        return "neutral"
    if key in _RISING_IS_WORSE:
        return "worsening" if direction is TrendDirection.UP else "improving"
    if key in _FALLING_IS_WORSE:
        return "worsening" if direction is TrendDirection.DOWN else "improving"
    return "neutral"


def summarize_windows(
    readings: Iterable[VitalReading],
    now: datetime | None = None,
    profiles: VitalProfileTable = DEFAULT_PROFILES,
    window: timedelta = DEFAULT_WINDOW,
) -> dict[str, TrendWindow]:
    """Window comparison per vital type, using each profile's noise threshold."""
    resolved_now = now or datetime.now(timezone.utc)
    by_type: dict[str, list[VitalReading]] = defaultdict(list)
    for reading in readings:
        by_type[reading.type_key].append(reading)
    return {
        vital_type: compare_windows(
            grouped,
            now=resolved_now,
            window=window,
            noise_threshold=profiles.noise_threshold(vital_type),
        )
        for vital_type, grouped in sorted(by_type.items())
    }
