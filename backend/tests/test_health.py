from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from leaveflow.db import get_session
from leaveflow.main import app

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


async def test_health_ok(async_client: AsyncClient) -> None:
    response = await async_client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data == {
        "status": "ok",
        "service": "Leave Flow",
        "version": "0.1.0",
        "environment": "development",
        "database": "ok",
    }


async def test_health_needs_no_principal(async_client: AsyncClient) -> None:
    response = await async_client.get("/health", headers={})
    assert response.status_code == 200


async def test_health_degraded_when_database_unreachable() -> None:
    session = AsyncMock(spec=AsyncSession)
    session.execute.side_effect = ConnectionError("DB unreachable")

    async def _unreachable() -> AsyncIterator[AsyncSession]:
        yield session

    app.dependency_overrides[get_session] = _unreachable
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["database"] == "unreachable"
    finally:
        app.dependency_overrides.clear()


async def test_cors_allows_principal_headers(async_client: AsyncClient) -> None:
    response = await async_client.options(
        "/leave-requests",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "X-Employee-Id,X-Role",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
