import json
from pathlib import Path
from typing import Literal

import structlog
from pydantic import Field, model_validator

from app.shared.constants import AlertSeverity, VitalType
from app.shared.schemas import FrozenCamelModel

log = structlog.get_logger()

Operator = Literal["gt", "lt", "ge", "le"]


def compare(operator: Operator, observed: float, threshold: float) -> bool:
    if operator == "gt":
        return observed > threshold
    if operator == "lt":
        return observed < threshold
    if operator == "ge":
        return observed >= threshold
    return observed <= threshold


class ThresholdBound(FrozenCamelModel):
    operator: Operator
    value: float
    severity: AlertSeverity
    label: str

    def matches(self, observed: float) -> bool:
        return compare(self.operator, observed, self.value)


class ThresholdRule(FrozenCamelModel):
    """Fires on the latest reading; bounds are ordered most severe first and the first match wins."""

    id: str
    name: str
    vital_type: str
    # daily_delta compares the latest reading with the oldest one from the past day
    mode: Literal["absolute", "daily_delta"] = "absolute"
    bounds: list[ThresholdBound] = Field(default_factory=list)


class TrendRule(FrozenCamelModel):
    """Fires when the last N readings all strictly rise or all strictly fall."""

    id: str
    name: str
    vital_type: str
    consecutive_count: int = Field(default=3, ge=2)
    direction: Literal["rising", "falling"]
    severity: AlertSeverity


class CompositeCondition(FrozenCamelModel):
    source: Literal["vital_delta", "missed_doses"] = "vital_delta"
    vital_type: str | None = None
    operator: Operator = "gt"
    value: float
    lookback_days: int = Field(default=3, ge=1)
    label: str

    @model_validator(mode="after")
    def check_vital_type(self) -> "CompositeCondition":
        if self.source == "vital_delta" and not self.vital_type:
            raise ValueError("vital_delta conditions require a vital type")
        return self


class CompositeRule(FrozenCamelModel):
    """Fires when at least ``min_conditions_met`` of its conditions hold together."""

    id: str
    name: str
    conditions: list[CompositeCondition] = Field(default_factory=list)
    min_conditions_met: int = Field(default=1, ge=1)
    severity: AlertSeverity

    @model_validator(mode="after")
    def check_quorum(self) -> "CompositeRule":
        if self.min_conditions_met > len(self.conditions):
            raise ValueError("min_conditions_met exceeds the number of conditions")
        return self


class AlertRulesConfig(FrozenCamelModel):
    version: str = "default-v1"
    # Severities that may spawn a new alert; anything else is evaluated but not reported
    reporting_severities: list[AlertSeverity] = Field(
        default_factory=lambda: list(AlertSeverity)
    )
    threshold_rules: list[ThresholdRule] = Field(default_factory=list)
    trend_rules: list[TrendRule] = Field(default_factory=list)
    composite_rules: list[CompositeRule] = Field(default_factory=list)

    def reports(self, severity: AlertSeverity) -> bool:
        return severity in self.reporting_severities


_SYS = VitalType.BLOOD_PRESSURE_SYSTOLIC.value
_DIA = VitalType.BLOOD_PRESSURE_DIASTOLIC.value
_HR = VitalType.HEART_RATE.value
_GLU = VitalType.BLOOD_GLUCOSE.value
_WT = VitalType.WEIGHT.value
_SPO2 = VitalType.OXYGEN_SATURATION.value
_TEMP = VitalType.TEMPERATURE.value


def _bound(operator: Operator, value: float, severity: AlertSeverity, label: str) -> ThresholdBound:
    return ThresholdBound(operator=operator, value=value, severity=severity, label=label)


def _trend(
    rule_id: str, name: str, vital_type: str, direction: str, severity: AlertSeverity
) -> TrendRule:
    return TrendRule(
        id=rule_id,
        name=name,
        vital_type=vital_type,
        consecutive_count=3,
        direction=direction,
        severity=severity,
    )


DEFAULT_RULES = AlertRulesConfig(
    threshold_rules=[
        ThresholdRule(
            id="threshold-bp-systolic",
            name="Blood Pressure (Systolic) Threshold",
            vital_type=_SYS,
            bounds=[
                _bound("gt", 180, AlertSeverity.CRITICAL, "Hypertensive crisis"),
                _bound("gt", 140, AlertSeverity.ELEVATED, "Hypertension Stage 2"),
            ],
        ),
        ThresholdRule(
            id="threshold-bp-diastolic",
            name="Blood Pressure (Diastolic) Threshold",
            vital_type=_DIA,
            bounds=[
                _bound("gt", 120, AlertSeverity.CRITICAL, "Hypertensive crisis (diastolic)"),
                _bound("gt", 90, AlertSeverity.ELEVATED, "Diastolic hypertension"),
            ],
        ),
        ThresholdRule(
            id="threshold-heart-rate",
            name="Heart Rate Threshold",
            vital_type=_HR,
            bounds=[
                _bound("gt", 120, AlertSeverity.CRITICAL, "Tachycardia (severe)"),
                _bound("lt", 50, AlertSeverity.ELEVATED, "Bradycardia"),
                _bound("gt", 100, AlertSeverity.ELEVATED, "Tachycardia (mild)"),
            ],
        ),
        ThresholdRule(
            id="threshold-blood-glucose",
            name="Blood Glucose Threshold",
            vital_type=_GLU,
            bounds=[
                _bound("gt", 300, AlertSeverity.CRITICAL, "Severe hyperglycemia"),
                _bound("lt", 70, AlertSeverity.CRITICAL, "Hypoglycemia"),
                _bound("gt", 200, AlertSeverity.ELEVATED, "Hyperglycemia"),
            ],
        ),
        ThresholdRule(
            id="threshold-oxygen-saturation",
            name="Oxygen Saturation Threshold",
            vital_type=_SPO2,
            bounds=[
                _bound("lt", 90, AlertSeverity.CRITICAL, "Severe hypoxemia"),
                _bound("lt", 94, AlertSeverity.ELEVATED, "Low oxygen saturation"),
            ],
        ),
        ThresholdRule(
            id="threshold-temperature",
            name="Temperature Threshold",
            vital_type=_TEMP,
            bounds=[
                _bound("gt", 103, AlertSeverity.CRITICAL, "High fever"),
                _bound("gt", 100.4, AlertSeverity.ELEVATED, "Fever"),
            ],
        ),
        ThresholdRule(
            id="threshold-weight-gain",
            name="Sudden Weight Gain",
            vital_type=_WT,
            mode="daily_delta",
            bounds=[
                _bound("gt", 3, AlertSeverity.ELEVATED, "Sudden weight gain (>3 lbs/day)"),
            ],
        ),
    ],
    trend_rules=[
        _trend("trend-bp-systolic-rising", "Rising Systolic BP Trend", _SYS, "rising", AlertSeverity.ELEVATED),
        _trend("trend-bp-systolic-falling", "Falling Systolic BP Trend", _SYS, "falling", AlertSeverity.ELEVATED),
        _trend("trend-bp-diastolic-rising", "Rising Diastolic BP Trend", _DIA, "rising", AlertSeverity.ELEVATED),
        _trend("trend-bp-diastolic-falling", "Falling Diastolic BP Trend", _DIA, "falling", AlertSeverity.ELEVATED),
        _trend("trend-glucose-rising", "Rising Blood Glucose Trend", _GLU, "rising", AlertSeverity.ELEVATED),
        _trend("trend-glucose-falling", "Falling Blood Glucose Trend", _GLU, "falling", AlertSeverity.ELEVATED),
        _trend("trend-weight-rising", "Rising Weight Trend", _WT, "rising", AlertSeverity.ELEVATED),
        _trend("trend-weight-falling", "Falling Weight Trend", _WT, "falling", AlertSeverity.INFORMATIONAL),
        _trend("trend-heart-rate-rising", "Rising Heart Rate Trend", _HR, "rising", AlertSeverity.ELEVATED),
        _trend("trend-heart-rate-falling", "Falling Heart Rate Trend", _HR, "falling", AlertSeverity.INFORMATIONAL),
    ],
    composite_rules=[
        CompositeRule(
            id="composite-chf-exacerbation",
            name="CHF Exacerbation Detection",
            conditions=[
                CompositeCondition(vital_type=_WT, value=3, label="Weight gain > 3 lbs over 3 days"),
                CompositeCondition(vital_type=_SYS, value=20, label="Systolic BP rise > 20 mmHg over 3 days"),
                CompositeCondition(vital_type=_HR, value=15, label="Heart rate increase > 15 bpm over 3 days"),
            ],
            min_conditions_met=2,
            severity=AlertSeverity.CRITICAL,
        ),
        CompositeRule(
            id="composite-med-nonadherence-bp",
            name="Medication Non-Adherence + BP Rise",
            conditions=[
                CompositeCondition(
                    source="missed_doses",
                    operator="ge",
                    value=2,
                    label="2+ missed medication doses in past 3 days",
                ),
                CompositeCondition(vital_type=_SYS, value=15, label="Systolic BP rise > 15 mmHg over 3 days"),
            ],
            min_conditions_met=2,
            severity=AlertSeverity.ELEVATED,
        ),
    ],
)


def load_rules(path: Path | None) -> AlertRulesConfig:
    if path is None:
        return DEFAULT_RULES
    try:
        payload = json.loads(path.read_text())
        rules = AlertRulesConfig.model_validate(payload)
    except FileNotFoundError:
        log.info("alert rules file not found, using defaults", path=str(path))
        return DEFAULT_RULES
    except Exception as exc:
        log.warning("alert rules load failed, using defaults", path=str(path), error=str(exc))
        return DEFAULT_RULES
    log.info("alert rules loaded", path=str(path), version=rules.version)
    return rules
