from datetime import datetime, timedelta, timezone
from typing import Any, AsyncGenerator, Callable

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app
from app.modules.alerts.models import Alert
from app.modules.vitals.models import VitalReading
from app.shared.constants import AlertSeverity, AlertStatus

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_reading() -> Callable[..., VitalReading]:
    def _make(
        vital_type: str,
        value: float,
        hours_ago: float = 0,
        unit: str = "",
        at: datetime | None = None,
    ) -> VitalReading:
        timestamp = at or (NOW - timedelta(hours=hours_ago))
        return VitalReading(type=vital_type, value=value, unit=unit, timestamp=timestamp)

    return _make


@pytest.fixture
def make_alert() -> Callable[..., Alert]:
    counter = {"n": 0}

    def _make(
        severity: AlertSeverity = AlertSeverity.ELEVATED,
        created_at: datetime | None = None,
        status: AlertStatus = AlertStatus.ACTIVE,
        **overrides: Any,
    ) -> Alert:
        counter["n"] += 1
        fields: dict[str, Any] = {
            "id": f"alert-{counter['n']:03d}",
            "patient_id": "patient-1",
            "severity": severity,
            "status": status,
            "rule_id": f"rule-{counter['n']}",
            "rule_name": "Test Rule",
            "title": "Test alert",
            "created_at": created_at or NOW,
        }
        if status in (AlertStatus.RESOLVED, AlertStatus.DISMISSED):
            fields["resolved_at"] = NOW
        fields.update(overrides)
        return Alert(**fields)

    return _make
