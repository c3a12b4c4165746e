import pytest
from httpx import AsyncClient

BASE = "/api/v1/safety"


@pytest.mark.asyncio
async def test_scan_reply(client: AsyncClient) -> None:
    resp = await client.post(f"{BASE}/scan", json={"text": "Please call 911 immediately"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["flags"] == {
        "emergencyGuidance": True,
        "providerEscalation": False,
        "policyViolations": [],
    }
    assert body["hasAnySafetySignal"] is True
    assert body["hasPolicyViolations"] is False


@pytest.mark.asyncio
async def test_scan_empty_body(client: AsyncClient) -> None:
    resp = await client.post(f"{BASE}/scan", json={})

    assert resp.status_code == 200
    assert resp.json()["hasAnySafetySignal"] is False


@pytest.mark.asyncio
async def test_scan_reports_violations(client: AsyncClient) -> None:
    resp = await client.post(
        f"{BASE}/scan", json={"text": "You should increase your dosage to 20mg"}
    )

    body = resp.json()
    assert body["hasPolicyViolations"] is True
    assert len(body["flags"]["policyViolations"]) == 1
