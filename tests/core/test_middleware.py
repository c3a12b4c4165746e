import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient) -> None:
    resp = await client.get("/health", headers={"X-Request-ID": "req-123"})

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers["X-Request-ID"] == "req-123"
    # Correlation falls back to the request id
    assert resp.headers["X-Correlation-ID"] == "req-123"


@pytest.mark.asyncio
async def test_correlation_id_is_preserved(client: AsyncClient) -> None:
    resp = await client.get(
        "/health", headers={"X-Request-ID": "req-1", "X-Correlation-ID": "flow-9"}
    )

    assert resp.headers["X-Correlation-ID"] == "flow-9"


@pytest.mark.asyncio
async def test_request_id_is_generated(client: AsyncClient) -> None:
    resp = await client.get("/health")

    assert resp.headers["X-Request-ID"]
    assert resp.headers["X-Correlation-ID"] == resp.headers["X-Request-ID"]
