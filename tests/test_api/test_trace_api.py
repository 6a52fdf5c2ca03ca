"""Tests for the trace and admin endpoints."""

import pytest

from app.config import DEFAULT_JWT_SECRET_KEY, get_settings
from app.main import app, lifespan
from app.schemas.trace import TraceErrorDetail
from app.services.routines import get_routine_catalog

pytestmark = pytest.mark.asyncio


class TestTraceEndpoint:
    """Tests for POST /api/v1/trace."""

    async def test_traces_routine(self, client, admin_headers):
        response = await client.post(
            "/api/v1/trace", json={"call": "demo.add(1, 2)"}, headers=admin_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["routine"] == "demo.add"
        assert data["statement_count"] == 1
        assert data["arguments"] == [
            {"position": 1, "type": "integer", "value": 1},
            {"position": 2, "type": "integer", "value": 2},
        ]
        assert "Routine: demo.add" in data["report"]
        assert data["report"].rstrip().endswith("Total execution records: 1")

    async def test_nested_calls_reported_most_recent_first(self, client, admin_headers):
        response = await client.post(
            "/api/v1/trace", json={"call": "demo.fanout(2)"}, headers=admin_headers
        )

        assert response.status_code == 200
        report = response.json()["report"]
        assert response.json()["statement_count"] == 2
        assert report.count("Routine: demo.fanout") == 2

    @pytest.mark.parametrize(
        "call, status_code, kind",
        [
            ("demo.add(1, 2", 400, "parse_error"),
            ("demo.missing()", 404, "resolution_error"),
            ("demo.add(1, 2, 3)", 422, "arity_error"),
            ("demo.add(1, two)", 422, "literal_conversion_error"),
            ("demo.nothing()", 422, "null_result_error"),
            ("demo.fail(oops)", 500, "invocation_error"),
        ],
    )
    async def test_failures_map_to_error_detail(self, client, admin_headers, call, status_code, kind):
        response = await client.post("/api/v1/trace", json={"call": call}, headers=admin_headers)

        assert response.status_code == status_code
        detail = response.json()["detail"]
        assert detail["kind"] == kind
        assert detail["message"]
        assert TraceErrorDetail.model_validate(detail).kind == kind

    async def test_empty_call_rejected(self, client, admin_headers):
        response = await client.post("/api/v1/trace", json={"call": ""}, headers=admin_headers)
        assert response.status_code == 422

    async def test_requires_token(self, client):
        response = await client.post("/api/v1/trace", json={"call": "demo.add(1, 2)"})
        assert response.status_code == 401

    async def test_rejects_bad_token(self, client):
        response = await client.post(
            "/api/v1/trace",
            json={"call": "demo.add(1, 2)"},
            headers={"Authorization": "Bearer not-a-token"},
        )
        assert response.status_code == 401


    async def test_error_responses_are_documented(self):
        operation = app.openapi()["paths"]["/api/v1/trace"]["post"]

        for status_code in ("400", "404", "422", "500"):
            schema = operation["responses"][status_code]["content"]["application/json"]["schema"]
            assert schema["$ref"].endswith("/TraceErrorResponse")

class TestRoutineListing:
    """Tests for GET /api/v1/trace/routines."""

    async def test_lists_demo_routines(self, client, admin_headers):
        response = await client.get("/api/v1/trace/routines", headers=admin_headers)

        assert response.status_code == 200
        by_name = {r["qualified_name"]: r for r in response.json()}
        assert by_name["demo.add"]["parameter_types"] == ["integer", "integer"]
        assert by_name["demo.add"]["signature"] == "demo.add(integer, integer)"


class TestAdminLogin:
    """Tests for POST /api/v1/admin/auth/login."""

    async def test_not_configured(self, client, monkeypatch):
        monkeypatch.setattr(get_settings(), "admin_master_password", "")
        response = await client.post("/api/v1/admin/auth/login", json={"password": "x"})
        assert response.status_code == 503

    async def test_wrong_password(self, client, monkeypatch):
        monkeypatch.setattr(get_settings(), "admin_master_password", "secret")
        response = await client.post("/api/v1/admin/auth/login", json={"password": "guess"})
        assert response.status_code == 401

    async def test_token_grants_trace_access(self, client, monkeypatch):
        monkeypatch.setattr(get_settings(), "admin_master_password", "secret")
        response = await client.post("/api/v1/admin/auth/login", json={"password": "secret"})

        assert response.status_code == 200
        token = response.json()["access_token"]
        assert response.json()["token_type"] == "bearer"

        listed = await client.get(
            "/api/v1/trace/routines", headers={"Authorization": f"Bearer {token}"}
        )
        assert listed.status_code == 200


async def test_health(client):
    response = await client.get("/api/v1/health")
    assert response.json()["status"] == "ok"


class TestStartup:
    """Tests for the application lifespan."""

    async def test_production_requires_jwt_secret(self, monkeypatch):
        monkeypatch.setattr(get_settings(), "app_env", "production")
        monkeypatch.setattr(get_settings(), "jwt_secret_key", DEFAULT_JWT_SECRET_KEY)

        with pytest.raises(RuntimeError, match="JWT_SECRET_KEY"):
            async with lifespan(app):
                pass

    async def test_loads_routine_modules(self, monkeypatch):
        monkeypatch.setattr(get_settings(), "routine_modules", ["app.routines.samples"])

        async with lifespan(app):
            assert get_routine_catalog().lookup("demo", "echo", 1)
