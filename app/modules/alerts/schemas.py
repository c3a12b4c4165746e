from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from app.modules.alerts.models import Alert, PendingAlert
from app.modules.vitals.models import VitalReading
from app.shared.constants import AlertSeverity, AlertStatus
from app.shared.schemas import CamelModel, parse_epoch


class AlertEvaluationRequest(CamelModel):
    """Patient history to run through the rule set, plus the patient's currently open alerts."""

    patient_id: str = Field(min_length=1)
    readings: list[VitalReading] = Field(default_factory=list)
    missed_doses: list[datetime] = Field(default_factory=list)
    open_alerts: list[Alert] = Field(default_factory=list)
    now: Optional[datetime] = None

    @field_validator("now", mode="before")
    @classmethod
    def parse_epoch_timestamp(cls, value: object) -> object:
        return parse_epoch(value)


class AlertEvaluationResponse(CamelModel):
    pending: list[PendingAlert]
    created: list[Alert]


class AlertListRequest(CamelModel):
    alerts: list[Alert] = Field(default_factory=list)


class AlertGroupsResponse(CamelModel):
    groups: dict[AlertSeverity, list[Alert]]
    counts: dict[AlertSeverity, int]


class AlertTransitionRequest(CamelModel):
    """Status change for the alert value carried in the body."""

    alert: Alert
    status: AlertStatus = Field(description="Target status: acknowledged, resolved or dismissed")
    resolution_note: Optional[str] = Field(None, description="Kept verbatim when provided")
    resolved_by: Optional[str] = Field(None, description="Identifier of the acting clinician")
