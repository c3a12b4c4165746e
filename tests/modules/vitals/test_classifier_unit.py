import math

import pytest
from pydantic import ValidationError

from app.core.exceptions import InvalidInputError
from app.modules.vitals.classifier import VitalClassifier, classify, status_badge, worst_tier
from app.modules.vitals.config import (
    DEFAULT_PROFILES,
    NEUTRAL_COLOR,
    ZERO_RANGE,
    VitalRange,
    VitalTypeProfile,
)
from app.shared.constants import SeverityTier, StatusBadge, VitalType


@pytest.mark.parametrize("vital_type", list(VitalType))
def test_boundaries_are_never_critical(vital_type: VitalType) -> None:
    profile = DEFAULT_PROFILES.get(vital_type)
    assert profile is not None
    boundaries = (
        profile.normal_range.min,
        profile.normal_range.max,
        profile.critical_range.min,
        profile.critical_range.max,
    )
    for value in boundaries:
        assert classify(vital_type, value) in (SeverityTier.NORMAL, SeverityTier.ELEVATED)
    # The normal range's own bounds are safe
    assert classify(vital_type, profile.normal_range.min) is SeverityTier.NORMAL
    assert classify(vital_type, profile.normal_range.max) is SeverityTier.NORMAL


@pytest.mark.parametrize("vital_type", list(VitalType))
def test_values_beyond_critical_range_are_critical(vital_type: VitalType) -> None:
    profile = DEFAULT_PROFILES.get(vital_type)
    assert profile is not None
    assert classify(vital_type, profile.critical_range.min - 0.01) is SeverityTier.CRITICAL
    assert classify(vital_type, profile.critical_range.max + 0.01) is SeverityTier.CRITICAL


@pytest.mark.parametrize(
    ("vital_type", "value", "expected"),
    [
        (VitalType.HEART_RATE, 75, SeverityTier.NORMAL),
        (VitalType.HEART_RATE, 110, SeverityTier.ELEVATED),
        (VitalType.HEART_RATE, 55, SeverityTier.ELEVATED),
        (VitalType.HEART_RATE, 151, SeverityTier.CRITICAL),
        (VitalType.BLOOD_PRESSURE_SYSTOLIC, 160, SeverityTier.ELEVATED),
        (VitalType.BLOOD_PRESSURE_SYSTOLIC, 185, SeverityTier.CRITICAL),
        (VitalType.OXYGEN_SATURATION, 92, SeverityTier.ELEVATED),
        (VitalType.OXYGEN_SATURATION, 89, SeverityTier.CRITICAL),
        (VitalType.TEMPERATURE, 99.6, SeverityTier.ELEVATED),
        (VitalType.BLOOD_GLUCOSE, 45, SeverityTier.CRITICAL),
    ],
)
def test_classify_default_table(vital_type: VitalType, value: float, expected: SeverityTier) -> None:
    assert classify(vital_type, value) is expected


def test_classify_accepts_plain_string_types() -> None:
    assert classify("heart_rate", 110) is SeverityTier.ELEVATED
    assert classify(" Heart_Rate ", 110) is SeverityTier.ELEVATED


def test_unknown_type_fails_open_by_default() -> None:
    assert classify("respiratory_rate", 400) is SeverityTier.NORMAL


def test_unknown_type_tier_is_configurable() -> None:
    strict = VitalClassifier(unknown_tier=SeverityTier.ELEVATED)
    assert strict.classify("respiratory_rate", 18) is SeverityTier.ELEVATED
    assert strict.classify(VitalType.HEART_RATE, 75) is SeverityTier.NORMAL


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
def test_non_finite_values_are_rejected(value: float) -> None:
    with pytest.raises(InvalidInputError):
        classify(VitalType.HEART_RATE, value)


@pytest.mark.parametrize("value", ["80", None, True])
def test_non_numeric_values_are_rejected(value: object) -> None:
    with pytest.raises(InvalidInputError):
        classify(VitalType.HEART_RATE, value)  # type: ignore[arg-type]


def test_override_table_changes_ranges_without_touching_defaults() -> None:
    table = DEFAULT_PROFILES.with_overrides(
        {
            "heart_rate": {
                "normalRange": {"min": 50, "max": 90},
                "criticalRange": {"min": 30, "max": 130},
            }
        }
    )
    classifier = VitalClassifier(table)

    assert classifier.classify(VitalType.HEART_RATE, 95) is SeverityTier.ELEVATED
    assert classifier.classify(VitalType.HEART_RATE, 140) is SeverityTier.CRITICAL
    assert classify(VitalType.HEART_RATE, 95) is SeverityTier.NORMAL
    assert classifier.is_out_of_range(VitalType.HEART_RATE, 95)


def test_profile_rejects_critical_range_narrower_than_normal() -> None:
    with pytest.raises(ValidationError):
        VitalTypeProfile(
            normal_range=VitalRange(min=60, max=100),
            critical_range=VitalRange(min=70, max=150),
        )


def test_range_rejects_inverted_bounds() -> None:
    with pytest.raises(ValidationError):
        VitalRange(min=10, max=5)


def test_unknown_type_lookups_use_defaults() -> None:
    assert DEFAULT_PROFILES.display_name("respiratory_rate") == "respiratory_rate"
    assert DEFAULT_PROFILES.unit("respiratory_rate") == ""
    assert DEFAULT_PROFILES.color("respiratory_rate") == NEUTRAL_COLOR
    assert DEFAULT_PROFILES.normal_range("respiratory_rate") == ZERO_RANGE
    assert DEFAULT_PROFILES.critical_range("respiratory_rate") == ZERO_RANGE


def test_known_type_lookups() -> None:
    assert DEFAULT_PROFILES.display_name(VitalType.HEART_RATE) == "Heart Rate"
    assert DEFAULT_PROFILES.unit(VitalType.BLOOD_GLUCOSE) == "mg/dL"
    assert DEFAULT_PROFILES.noise_threshold(VitalType.TEMPERATURE) == 0.1


def test_status_badge_follows_worst_tier() -> None:
    assert status_badge([]) is StatusBadge.GREEN
    assert status_badge([SeverityTier.NORMAL, SeverityTier.ELEVATED]) is StatusBadge.YELLOW
    assert status_badge([SeverityTier.CRITICAL, SeverityTier.NORMAL]) is StatusBadge.RED
    assert worst_tier([SeverityTier.ELEVATED, SeverityTier.NORMAL]) is SeverityTier.ELEVATED
