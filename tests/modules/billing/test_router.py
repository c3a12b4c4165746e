import pytest
from httpx import AsyncClient

BASE = "/api/v1/billing"


@pytest.mark.asyncio
async def test_adherence(client: AsyncClient) -> None:
    resp = await client.post(f"{BASE}/adherence", json={"taken": 2, "total": 3})

    assert resp.status_code == 200
    assert resp.json() == {"taken": 2, "total": 3, "rate": 67}


@pytest.mark.asyncio
async def test_adherence_with_nothing_scheduled(client: AsyncClient) -> None:
    resp = await client.post(f"{BASE}/adherence", json={"taken": 0, "total": 0})
    assert resp.json()["rate"] == 100


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"taken": 4, "total": 3}, {"taken": -1, "total": 3}, {"taken": 1}])
async def test_adherence_rejects_invalid_counts(client: AsyncClient, payload: dict) -> None:
    resp = await client.post(f"{BASE}/adherence", json=payload)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_eligibility(client: AsyncClient) -> None:
    payload = {
        "counters": {"readingDays": 18, "interactiveMinutes": 25, "dataReviewMinutes": 10},
        "activePatients": 3,
    }

    resp = await client.post(f"{BASE}/eligibility", json=payload)

    assert resp.status_code == 200
    body = resp.json()
    eligible = [c["code"] for c in body["codes"] if c["eligible"]]
    assert eligible == ["99454", "99457"]
    assert body["eligibleCount"] == 2
    # 55.72 + 50.94
    assert body["perPatientRevenue"] == "106.66"
    assert body["projectedRevenue"] == "319.98"
    data_review = next(c for c in body["codes"] if c["code"] == "99091")
    assert data_review["progressLabel"] == "10/30 minutes"


@pytest.mark.asyncio
async def test_eligibility_rejects_negative_counters(client: AsyncClient) -> None:
    resp = await client.post(f"{BASE}/eligibility", json={"counters": {"readingDays": -2}})
    assert resp.status_code == 422
