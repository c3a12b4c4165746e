from enum import Enum


class VitalType(str, Enum):
    """Vital kinds recorded by monitoring devices."""

    BLOOD_PRESSURE_SYSTOLIC = "blood_pressure_systolic"
    BLOOD_PRESSURE_DIASTOLIC = "blood_pressure_diastolic"
    HEART_RATE = "heart_rate"
    BLOOD_GLUCOSE = "blood_glucose"
    WEIGHT = "weight"
    OXYGEN_SATURATION = "oxygen_saturation"
    TEMPERATURE = "temperature"


class SeverityTier(str, Enum):
    """Classifier output for a single reading, ordered normal < elevated < critical."""

    NORMAL = "normal"
    ELEVATED = "elevated"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]


_TIER_RANK = {
    SeverityTier.NORMAL: 0,
    SeverityTier.ELEVATED: 1,
    SeverityTier.CRITICAL: 2,
}


class AlertSeverity(str, Enum):
    """Product-facing triage level for a surfaced condition."""

    CRITICAL = "critical"
    ELEVATED = "elevated"
    INFORMATIONAL = "informational"

    @property
    def rank(self) -> int:
        # Ascending rank lists critical first
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    AlertSeverity.CRITICAL: 1,
    AlertSeverity.ELEVATED: 2,
    AlertSeverity.INFORMATIONAL: 3,
}


class AlertStatus(str, Enum):
    ACTIVE = "active"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"

    @property
    def is_terminal(self) -> bool:
        return self is not AlertStatus.ACTIVE


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"

    def reversed(self) -> "TrendDirection":
        if self is TrendDirection.UP:
            return TrendDirection.DOWN
        if self is TrendDirection.DOWN:
            return TrendDirection.UP
        return self


class StatusBadge(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
