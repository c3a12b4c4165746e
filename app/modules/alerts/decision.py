from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from app.modules.alerts.config import (
    AlertRulesConfig,
    CompositeCondition,
    CompositeRule,
    ThresholdRule,
    TrendRule,
    compare,
)
from app.modules.alerts.models import (
    Alert,
    PatientHistory,
    PendingAlert,
    RuleMatch,
    lookback_cutoff,
)
from app.modules.vitals.models import ensure_utc
from app.modules.vitals.trends import consecutive_run
from app.shared.constants import TrendDirection


def _fmt(value: float) -> str:
    return f"{value:g}"


class AlertDecisionEngine:
    """Evaluate a patient's readings against the rule set and return alerts that should open."""

    def __init__(self, rules: AlertRulesConfig) -> None:
        self._rules = rules

    @property
    def rules(self) -> AlertRulesConfig:
        return self._rules

    def evaluate(
        self,
        history: PatientHistory,
        open_alerts: Iterable[Alert] = (),
        now: datetime | None = None,
    ) -> list[PendingAlert]:
        resolved_now = ensure_utc(now) if now else datetime.now(timezone.utc)
        # One active alert per (patient, rule); a rule with an open alert is skipped
        suppressed = {
            alert.rule_id
            for alert in open_alerts
            if alert.is_active and alert.patient_id == history.patient_id
        }

        pending: list[PendingAlert] = []
        for rule in self._rules.threshold_rules:
            if rule.id not in suppressed:
                pending.extend(self._evaluate_threshold(rule, history, resolved_now))
        for rule in self._rules.trend_rules:
            if rule.id not in suppressed:
                pending.extend(self._evaluate_trend(rule, history))
        for rule in self._rules.composite_rules:
            if rule.id not in suppressed:
                pending.extend(self._evaluate_composite(rule, history, resolved_now))
        return [alert for alert in pending if self._rules.reports(alert.severity)]

    def _evaluate_threshold(
        self, rule: ThresholdRule, history: PatientHistory, now: datetime
    ) -> list[PendingAlert]:
        latest = history.latest(rule.vital_type)
        if latest is None:
            return []

        if rule.mode == "daily_delta":
            previous = history.oldest_since(rule.vital_type, lookback_cutoff(now, 1))
            if previous is None:
                return []
            delta = latest.value - previous.value
            unit = f" {latest.unit}" if latest.unit else ""
            for bound in rule.bounds:
                if bound.matches(delta):
                    return [
                        PendingAlert(
                            patient_id=history.patient_id,
                            severity=bound.severity,
                            rule_id=rule.id,
                            rule_name=rule.name,
                            title=bound.label,
                            description=(
                                f"{rule.name}: changed by {delta:+.1f}{unit} in the last day "
                                f"(threshold: {_fmt(bound.value)}{unit})."
                            ),
                            vitals_snapshot={
                                "vital_type": rule.vital_type,
                                "current": latest.value,
                                "previous": previous.value,
                                "delta": delta,
                            },
                        )
                    ]
            return []

        for bound in rule.bounds:
            if bound.matches(latest.value):
                relation = "exceeds" if bound.operator in ("gt", "ge") else "is below"
                unit = f" {latest.unit}" if latest.unit else ""
                return [
                    PendingAlert(
                        patient_id=history.patient_id,
                        severity=bound.severity,
                        rule_id=rule.id,
                        rule_name=rule.name,
                        title=bound.label,
                        description=(
                            f"{rule.name}: reading {_fmt(latest.value)}{unit} {relation} "
                            f"threshold of {_fmt(bound.value)}{unit}."
                        ),
                        vitals_snapshot={
                            "vital_type": rule.vital_type,
                            "value": latest.value,
                            "unit": latest.unit,
                            "recorded_at": latest.timestamp.isoformat(),
                        },
                    )
                ]
        return []

    def _evaluate_trend(self, rule: TrendRule, history: PatientHistory) -> list[PendingAlert]:
        window = history.series(rule.vital_type)[-rule.consecutive_count:]
        if len(window) < rule.consecutive_count:
            return []
        direction = TrendDirection.UP if rule.direction == "rising" else TrendDirection.DOWN
        if not consecutive_run([r.value for r in window], direction):
            return []

        first, last = window[0], window[-1]
        readable_type = rule.vital_type.replace("_", " ")
        return [
            PendingAlert(
                patient_id=history.patient_id,
                severity=rule.severity,
                rule_id=rule.id,
                rule_name=rule.name,
                title=f"{rule.name}: {rule.consecutive_count} consecutive {rule.direction} readings",
                description=(
                    f"{readable_type} has been {rule.direction} over the last "
                    f"{rule.consecutive_count} readings ({_fmt(first.value)} {first.unit} -> "
                    f"{_fmt(last.value)} {last.unit})."
                ),
                vitals_snapshot={
                    "vital_type": rule.vital_type,
                    "direction": rule.direction,
                    "readings": [
                        {
                            "value": r.value,
                            "unit": r.unit,
                            "recorded_at": r.timestamp.isoformat(),
                        }
                        for r in window
                    ],
                },
            )
        ]

    def _evaluate_composite(
        self, rule: CompositeRule, history: PatientHistory, now: datetime
    ) -> list[PendingAlert]:
        matches = [self._evaluate_condition(c, history, now) for c in rule.conditions]
        met = [m for m in matches if m.met]
        if len(met) < rule.min_conditions_met:
            return []

        snapshot: dict[str, object] = {}
        for match in met:
            snapshot.update(match.snapshot)
        return [
            PendingAlert(
                patient_id=history.patient_id,
                severity=rule.severity,
                rule_id=rule.id,
                rule_name=rule.name,
                title=f"{rule.name} ({len(met)}/{len(rule.conditions)} conditions met)",
                description=f"Triggered conditions: {'; '.join(m.label for m in met)}.",
                vitals_snapshot=snapshot,
            )
        ]

    @staticmethod
    def _evaluate_condition(
        condition: CompositeCondition, history: PatientHistory, now: datetime
    ) -> RuleMatch:
        cutoff = lookback_cutoff(now, condition.lookback_days)
        if condition.source == "missed_doses":
            missed = history.missed_doses_since(cutoff)
            return RuleMatch(
                met=compare(condition.operator, missed, condition.value),
                label=condition.label,
                snapshot={"missed_doses": missed},
            )

        if condition.vital_type is None:
            return RuleMatch(met=False, label=condition.label)
        latest = history.latest(condition.vital_type)
        baseline = history.oldest_since(condition.vital_type, cutoff)
        if latest is None or baseline is None:
            return RuleMatch(met=False, label=condition.label)
        delta = latest.value - baseline.value
        return RuleMatch(
            met=compare(condition.operator, delta, condition.value),
            label=condition.label,
            snapshot={
                condition.vital_type: {
                    "current": latest.value,
                    "baseline": baseline.value,
                    "delta": delta,
                }
            },
        )
