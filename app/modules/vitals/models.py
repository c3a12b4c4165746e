from datetime import datetime, timezone

from pydantic import field_validator

from app.shared.constants import SeverityTier, VitalType
from app.shared.schemas import FrozenCamelModel, parse_epoch


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class VitalReading(FrozenCamelModel):
    """A single recorded measurement. Never mutated after creation."""

    type: VitalType | str
    value: float
    unit: str = ""
    timestamp: datetime
    source: str = "device"

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value: object) -> object:
        if isinstance(value, str) and not isinstance(value, VitalType):
            return value.strip().lower()
        return value

    # Allow integer/float epoch seconds as timestamp input
    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_epoch_timestamp(cls, value: object) -> object:
        return parse_epoch(value)

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def type_key(self) -> str:
        return self.type.value if isinstance(self.type, VitalType) else self.type


class VitalAssessment(FrozenCamelModel):
    """Classifier verdict for one reading plus the display metadata it was judged against."""

    vital_type: str
    value: float | None
    tier: SeverityTier
    out_of_range: bool
    requires_review: bool = False
    display_name: str
    unit: str
    reason: str | None = None
