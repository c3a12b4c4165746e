import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable

import structlog

from app.core.config import settings
from app.core.exceptions import InvalidTransitionError
from app.modules.alerts import lifecycle
from app.modules.alerts.config import load_rules
from app.modules.alerts.decision import AlertDecisionEngine
from app.modules.alerts.models import Alert, PatientHistory, PendingAlert
from app.modules.vitals.models import ensure_utc
from app.shared.constants import AlertSeverity, AlertStatus

log = structlog.get_logger()


class AlertService:
    """Turn rule matches into alerts and apply status changes, never holding alerts itself."""

    def __init__(
        self,
        decision_engine: AlertDecisionEngine,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ) -> None:
        self._decision_engine = decision_engine
        self._id_factory = id_factory

    def evaluate(
        self,
        history: PatientHistory,
        open_alerts: Iterable[Alert] = (),
        now: datetime | None = None,
    ) -> list[PendingAlert]:
        return self._decision_engine.evaluate(history, open_alerts, now)

    def open_alerts(
        self,
        pending: Iterable[PendingAlert],
        existing: Iterable[Alert] = (),
        now: datetime | None = None,
    ) -> list[Alert]:
        """Create alerts for pending matches that have no active alert for the same rule."""
        created_at = ensure_utc(now) if now else datetime.now(timezone.utc)
        taken = {(a.patient_id, a.rule_id) for a in existing if a.is_active}
        created: list[Alert] = []
        for match in pending:
            key = (match.patient_id, match.rule_id)
            if key in taken:
                log.debug("alert suppressed, already active", patient_id=match.patient_id, rule_id=match.rule_id)
                continue
            taken.add(key)
            created.append(
                Alert(
                    id=self._id_factory(),
                    created_at=created_at,
                    **match.model_dump(),
                )
            )
        for alert in created:
            log.info(
                "alert opened",
                alert_id=alert.id,
                patient_id=alert.patient_id,
                rule_id=alert.rule_id,
                severity=alert.severity.value,
            )
        return created

    def process(
        self,
        history: PatientHistory,
        existing: Iterable[Alert] = (),
        now: datetime | None = None,
    ) -> tuple[list[PendingAlert], list[Alert]]:
        existing = list(existing)
        pending = self.evaluate(history, existing, now)
        return pending, self.open_alerts(pending, existing, now)

    def transition(
        self,
        alert: Alert,
        status: AlertStatus,
        note: str | None = None,
        actor: str | None = None,
        now: datetime | None = None,
    ) -> Alert:
        try:
            updated = lifecycle.transition(alert, status, note=note, actor=actor, now=now)
        except InvalidTransitionError:
            log.info(
                "alert transition refused",
                alert_id=alert.id,
                current=alert.status.value,
                requested=status.value,
            )
            raise
        log.info(
            "alert transitioned",
            alert_id=alert.id,
            patient_id=alert.patient_id,
            status=updated.status.value,
            has_note=note is not None,
        )
        return updated

    @staticmethod
    def order(alerts: Iterable[Alert]) -> list[Alert]:
        return lifecycle.order_alerts(alerts)

    @staticmethod
    def groups(alerts: Iterable[Alert]) -> dict[AlertSeverity, list[Alert]]:
        return lifecycle.group_by_severity(alerts)


rules_path = Path(settings.ALERT_RULES_PATH) if settings.ALERT_RULES_PATH else None
decision_engine = AlertDecisionEngine(rules=load_rules(rules_path))
alert_service = AlertService(decision_engine=decision_engine)


def get_alert_service() -> AlertService:
    return alert_service
