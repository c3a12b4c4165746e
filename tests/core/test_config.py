import pytest
from pydantic import ValidationError

from app.core.config import Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("UNKNOWN_VITAL_TIER", raising=False)
    monkeypatch.delenv("ALERT_RULES_PATH", raising=False)

    config = Settings(_env_file=None)

    assert config.API_V1_STR == "/api/v1"
    assert config.UNKNOWN_VITAL_TIER == "normal"
    assert config.ALERT_RULES_PATH is None


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("UNKNOWN_VITAL_TIER", "elevated")
    monkeypatch.setenv("VITAL_PROFILES_PATH", "/etc/engine/profiles.json")

    config = Settings(_env_file=None)

    assert config.UNKNOWN_VITAL_TIER == "elevated"
    assert config.VITAL_PROFILES_PATH == "/etc/engine/profiles.json"


def test_unknown_tier_cannot_be_critical(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("UNKNOWN_VITAL_TIER", "critical")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
