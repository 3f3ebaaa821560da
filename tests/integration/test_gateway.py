"""Gateway wiring: health, authentication and the shared error shape."""

import uuid

import pytest
from libs.auth.tokens import create_access_token
from tests.conftest import bearer


@pytest.mark.asyncio
@pytest.mark.integration
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_protected_route_without_token_is_401(client):
    response = await client.get("/api/v1/academy/enrollments/me")

    assert response.status_code == 401
    body = response.json()
    assert body["error"] == "Unauthenticated"
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_garbage_token_is_401(client):
    response = await client.get(
        "/api/v1/members/profiles/me",
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.integration
async def test_token_for_unknown_user_is_401(client):
    token = create_access_token(uuid.uuid4())
    response = await client.get(
        "/api/v1/members/profiles/me",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.integration
async def test_forbidden_carries_error_name_and_request_id(client, student):
    response = await client.get("/api/v1/payments/stats", headers=bearer(student))

    assert response.status_code == 403
    body = response.json()
    assert body["error"] == "Forbidden"
    assert "request_id" in body


@pytest.mark.asyncio
@pytest.mark.integration
async def test_openapi_lists_every_service(client):
    paths = (await client.get("/openapi.json")).json()["paths"]

    for prefix in (
        "/api/v1/members/",
        "/api/v1/academy/",
        "/api/v1/attendance/",
        "/api/v1/payments",
        "/api/v1/store/",
        "/api/v1/communications/",
        "/api/v1/media/",
    ):
        assert any(path.startswith(prefix) for path in paths), prefix


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_dashboard_stats(client, admin, student):
    denied = await client.get(
        "/api/v1/admin/dashboard-stats", headers=bearer(student)
    )
    assert denied.status_code == 403

    response = await client.get("/api/v1/admin/dashboard-stats", headers=bearer(admin))
    assert response.status_code == 200
    body = response.json()
    assert body["user_count"] == 2
    assert body["role_distribution"] == {"admin": 1, "student": 1}
    assert body["total_revenue"] == 0.0
    assert body["revenue_by_product"] == {}
