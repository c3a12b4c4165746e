"""Alert status transitions and the presentation ordering contract."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from app.core.exceptions import InvalidTransitionError
from app.modules.alerts.models import Alert
from app.modules.vitals.models import ensure_utc
from app.shared.constants import AlertSeverity, AlertStatus

ALLOWED_TRANSITIONS: dict[AlertStatus, frozenset[AlertStatus]] = {
    AlertStatus.ACTIVE: frozenset(
        {AlertStatus.ACKNOWLEDGED, AlertStatus.RESOLVED, AlertStatus.DISMISSED}
    ),
}


def can_transition(current: AlertStatus, requested: AlertStatus) -> bool:
    return requested in ALLOWED_TRANSITIONS.get(current, frozenset())


def transition(
    alert: Alert,
    new_status: AlertStatus,
    note: str | None = None,
    actor: str | None = None,
    now: datetime | None = None,
) -> Alert:
    """
    Return a copy of ``alert`` moved to ``new_status``.

    Resolved and dismissed alerts are stamped with ``resolved_at``; an
    acknowledgment is stamped only when it carries a note. ``note`` is kept
    verbatim, so an empty string stays distinct from no note at all.
    """
    if not can_transition(alert.status, new_status):
        raise InvalidTransitionError(
            f"cannot move alert from {alert.status.value} to {new_status.value}",
            alert_id=alert.id,
            current=alert.status.value,
            requested=new_status.value,
        )

    stamped_at = ensure_utc(now) if now else datetime.now(timezone.utc)
    closes = new_status in (AlertStatus.RESOLVED, AlertStatus.DISMISSED) or note is not None
    update: dict[str, object] = {"status": new_status}
    if closes:
        update["resolved_at"] = stamped_at
        if actor is not None:
            update["resolved_by"] = actor
    if note is not None:
        update["resolution_note"] = note
    return Alert.model_validate({**alert.model_dump(), **update})


def sort_key(alert: Alert) -> tuple[int, float, str]:
    return (alert.severity.rank, -alert.created_at.timestamp(), alert.id)


def order_alerts(alerts: Iterable[Alert]) -> list[Alert]:
    """Critical first, newest first within a severity, then by id."""
    return sorted(alerts, key=sort_key)


def group_by_severity(alerts: Iterable[Alert]) -> dict[AlertSeverity, list[Alert]]:
    """Active alerts bucketed by severity; every bucket is present, possibly empty."""
    groups: dict[AlertSeverity, list[Alert]] = {severity: [] for severity in AlertSeverity}
    for alert in order_alerts(a for a in alerts if a.is_active):
        groups[alert.severity].append(alert)
    return groups


def severity_counts(alerts: Iterable[Alert]) -> dict[AlertSeverity, int]:
    return {severity: len(bucket) for severity, bucket in group_by_severity(alerts).items()}
