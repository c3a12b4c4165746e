import json
from pathlib import Path
from typing import Any, Mapping

import structlog
from pydantic import Field, model_validator

from app.shared.constants import VitalType
from app.shared.schemas import FrozenCamelModel

log = structlog.get_logger()

NEUTRAL_COLOR = "#6b7280"


class VitalRange(FrozenCamelModel):
    """Closed interval; a value equal to either bound is inside the range."""

    min: float
    max: float

    @model_validator(mode="after")
    def check_order(self) -> "VitalRange":
        if self.min > self.max:
            raise ValueError("range min must not exceed max")
        return self

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def covers(self, other: "VitalRange") -> bool:
        return self.min <= other.min and other.max <= self.max


ZERO_RANGE = VitalRange(min=0, max=0)


class VitalTypeProfile(FrozenCamelModel):
    normal_range: VitalRange
    critical_range: VitalRange
    display_name: str = ""
    unit: str = ""
    color: str = NEUTRAL_COLOR
    noise_threshold: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def check_nesting(self) -> "VitalTypeProfile":
        if not self.critical_range.covers(self.normal_range):
            raise ValueError("critical range must contain the normal range")
        return self


def _key(vital_type: VitalType | str) -> str:
    if isinstance(vital_type, VitalType):
        return vital_type.value
    return str(vital_type).strip().lower()


class VitalProfileTable(FrozenCamelModel):
    """Per-type ranges and display metadata, loaded once and shared read-only."""

    version: str = "default-v1"
    profiles: dict[str, VitalTypeProfile] = Field(default_factory=dict)

    def get(self, vital_type: VitalType | str) -> VitalTypeProfile | None:
        return self.profiles.get(_key(vital_type))

    def display_name(self, vital_type: VitalType | str) -> str:
        profile = self.get(vital_type)
        if profile and profile.display_name:
            return profile.display_name
        return _key(vital_type)

    def unit(self, vital_type: VitalType | str) -> str:
        profile = self.get(vital_type)
        return profile.unit if profile else ""

    def color(self, vital_type: VitalType | str) -> str:
        profile = self.get(vital_type)
        return profile.color if profile else NEUTRAL_COLOR

    def normal_range(self, vital_type: VitalType | str) -> VitalRange:
        profile = self.get(vital_type)
        return profile.normal_range if profile else ZERO_RANGE

    def critical_range(self, vital_type: VitalType | str) -> VitalRange:
        profile = self.get(vital_type)
        return profile.critical_range if profile else ZERO_RANGE

    def noise_threshold(self, vital_type: VitalType | str) -> float:
        profile = self.get(vital_type)
        return profile.noise_threshold if profile else 0.0

    def with_overrides(
        self, overrides: Mapping[str, VitalTypeProfile | Mapping[str, Any]]
    ) -> "VitalProfileTable":
        """Return a new table with the given types replaced or added."""
        merged: dict[str, Any] = {key: profile for key, profile in self.profiles.items()}
        for raw_key, profile in overrides.items():
            merged[_key(raw_key)] = (
                profile
                if isinstance(profile, VitalTypeProfile)
                else VitalTypeProfile.model_validate(profile)
            )
        return VitalProfileTable(version=f"{self.version}+overrides", profiles=merged)


def _profile(
    normal: tuple[float, float],
    critical: tuple[float, float],
    display_name: str,
    unit: str,
    color: str,
    noise_threshold: float = 0.0,
) -> VitalTypeProfile:
    return VitalTypeProfile(
        normal_range=VitalRange(min=normal[0], max=normal[1]),
        critical_range=VitalRange(min=critical[0], max=critical[1]),
        display_name=display_name,
        unit=unit,
        color=color,
        noise_threshold=noise_threshold,
    )


DEFAULT_PROFILES = VitalProfileTable(
    profiles={
        VitalType.BLOOD_PRESSURE_SYSTOLIC.value: _profile(
            (90, 140), (70, 180), "Blood Pressure (Systolic)", "mmHg", "#ef4444", 2
        ),
        VitalType.BLOOD_PRESSURE_DIASTOLIC.value: _profile(
            (60, 90), (40, 120), "Blood Pressure (Diastolic)", "mmHg", "#f97316", 2
        ),
        VitalType.HEART_RATE.value: _profile(
            (60, 100), (40, 150), "Heart Rate", "bpm", "#ec4899"
        ),
        VitalType.BLOOD_GLUCOSE.value: _profile(
            (70, 140), (50, 300), "Blood Glucose", "mg/dL", "#8b5cf6"
        ),
        VitalType.WEIGHT.value: _profile(
            (80, 350), (50, 500), "Weight", "lbs", "#3b82f6"
        ),
        VitalType.OXYGEN_SATURATION.value: _profile(
            (95, 100), (90, 100), "Oxygen Saturation", "%", "#06b6d4"
        ),
        VitalType.TEMPERATURE.value: _profile(
            (97, 99.5), (95, 103), "Temperature", "°F", "#f59e0b", 0.1
        ),
    }
)


def load_profiles(path: Path | None) -> VitalProfileTable:
    """Overlay the JSON profile file at ``path`` onto the default table."""
    if path is None:
        return DEFAULT_PROFILES
    try:
        payload = json.loads(path.read_text())
        overrides = payload.get("profiles", payload) if isinstance(payload, dict) else None
        if not isinstance(overrides, dict):
            raise ValueError("profile file must contain a JSON object")
        table = DEFAULT_PROFILES.with_overrides(overrides)
    except FileNotFoundError:
        log.info("vital profiles file not found, using defaults", path=str(path))
        return DEFAULT_PROFILES
    except Exception as exc:
        log.warning("vital profiles load failed, using defaults", path=str(path), error=str(exc))
        return DEFAULT_PROFILES
    log.info("vital profiles loaded", path=str(path), overridden=sorted(overrides))
    return table
