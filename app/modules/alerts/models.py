from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from pydantic import Field, field_validator, model_validator

from app.modules.vitals.models import VitalReading, ensure_utc
from app.shared.constants import AlertSeverity, AlertStatus
from app.shared.schemas import FrozenCamelModel


class PendingAlert(FrozenCamelModel):
    """A rule match that has not yet been turned into an alert."""

    patient_id: str
    severity: AlertSeverity
    rule_id: str
    rule_name: str
    title: str
    description: str
    vitals_snapshot: dict[str, Any] = Field(default_factory=dict)


class Alert(FrozenCamelModel):
    """Surfaced condition for a patient. Only its status and resolution fields ever change."""

    id: str
    patient_id: str
    severity: AlertSeverity
    status: AlertStatus = AlertStatus.ACTIVE
    rule_id: str
    rule_name: str
    title: str
    description: str = ""
    vitals_snapshot: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    resolved_at: datetime | None = None
    resolved_by: str | None = None
    resolution_note: str | None = None

    @field_validator("created_at", "resolved_at")
    @classmethod
    def normalize_timestamp(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None

    @model_validator(mode="after")
    def check_resolution_fields(self) -> "Alert":
        has_resolution = any(
            value is not None
            for value in (self.resolved_at, self.resolved_by, self.resolution_note)
        )
        if self.status is AlertStatus.ACTIVE and has_resolution:
            raise ValueError("active alerts cannot carry resolution fields")
        if self.status in (AlertStatus.RESOLVED, AlertStatus.DISMISSED) and self.resolved_at is None:
            raise ValueError(f"{self.status.value} alerts require resolved_at")
        if self.status is AlertStatus.ACKNOWLEDGED:
            # An acknowledgment is stamped only when it carries a note
            if self.resolution_note is None and has_resolution:
                raise ValueError("acknowledged alerts without a note cannot carry resolution fields")
            if self.resolution_note is not None and self.resolved_at is None:
                raise ValueError("acknowledged alerts with a note require resolved_at")
        if self.resolved_by is not None and self.resolved_at is None:
            raise ValueError("resolved_by requires resolved_at")
        return self

    @property
    def is_active(self) -> bool:
        return self.status is AlertStatus.ACTIVE


@dataclass
class PatientHistory:
    """Readings and missed medication doses for one patient, as handed over by the caller."""

    patient_id: str
    readings: list[VitalReading] = field(default_factory=list)
    missed_doses: list[datetime] = field(default_factory=list)

    def series(self, vital_type: str) -> list[VitalReading]:
        """Readings of one type, oldest first."""
        return sorted(
            (r for r in self.readings if r.type_key == vital_type),
            key=lambda r: r.timestamp,
        )

    def latest(self, vital_type: str) -> VitalReading | None:
        series = self.series(vital_type)
        return series[-1] if series else None

    def oldest_since(self, vital_type: str, cutoff: datetime) -> VitalReading | None:
        for reading in self.series(vital_type):
            if reading.timestamp >= cutoff:
                return reading
        return None

    def missed_doses_since(self, cutoff: datetime) -> int:
        return sum(1 for scheduled in self.missed_doses if ensure_utc(scheduled) >= cutoff)


@dataclass
class RuleMatch:
    """Outcome of evaluating one composite condition."""

    met: bool
    label: str
    snapshot: dict[str, Any] = field(default_factory=dict)


def lookback_cutoff(now: datetime, days: int) -> datetime:
    return ensure_utc(now) - timedelta(days=days)
