from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from app.modules.vitals.models import VitalAssessment, VitalReading
from app.modules.vitals.trends import TrendWindow
from app.shared.constants import StatusBadge, TrendDirection
from app.shared.schemas import CamelModel, parse_epoch


class ClassifyRequest(CamelModel):
    """Batch of readings to classify."""

    readings: list[VitalReading] = Field(default_factory=list)

    @field_validator("readings")
    @classmethod
    def ensure_non_empty(cls, value: list[VitalReading]) -> list[VitalReading]:
        if not value:
            raise ValueError("readings list cannot be empty")
        return value


class ClassifyResponse(CamelModel):
    assessments: list[VitalAssessment]
    status_badge: StatusBadge


class TrendRequest(CamelModel):
    """Pairwise comparison of two readings of the same vital type."""

    current: float = Field(allow_inf_nan=False)
    previous: float = Field(allow_inf_nan=False)
    noise_threshold: Optional[float] = Field(
        default=None,
        ge=0,
        allow_inf_nan=False,
        description="Minimum absolute change counted as movement. Defaults to the vital type's profile, else 0.",
    )
    vital_type: Optional[str] = None


class TrendResponse(CamelModel):
    direction: TrendDirection
    concern: str
    noise_threshold: float


class WindowTrendRequest(CamelModel):
    """Readings to compare across two consecutive windows ending at ``now``."""

    readings: list[VitalReading] = Field(default_factory=list)
    now: Optional[datetime] = None
    window_days: int = Field(default=7, ge=1, le=90)
    recent_count: int = Field(default=3, ge=2, le=50)

    @field_validator("now", mode="before")
    @classmethod
    def parse_epoch_timestamp(cls, value: object) -> object:
        return parse_epoch(value)


class TrendWindowOut(CamelModel):
    this_window_avg: float | None
    prior_window_avg: float | None
    direction: TrendDirection | None
    this_window_count: int
    prior_window_count: int
    recent_direction: TrendDirection | None = None
    concern: str = "neutral"

    @classmethod
    def from_window(
        cls, window: TrendWindow, recent: TrendDirection | None, concern: str
    ) -> "TrendWindowOut":
        return cls(
            this_window_avg=window.this_window_avg,
            prior_window_avg=window.prior_window_avg,
            direction=window.direction,
            this_window_count=window.this_window_count,
            prior_window_count=window.prior_window_count,
            recent_direction=recent,
            concern=concern,
        )


class WindowTrendResponse(CamelModel):
    windows: dict[str, TrendWindowOut]


class VitalProfileOut(CamelModel):
    vital_type: str
    display_name: str
    unit: str
    color: str
    normal_min: float
    normal_max: float
    critical_min: float
    critical_max: float
    noise_threshold: float
