from datetime import datetime, timedelta, timezone

import pytest
import structlog
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import ValidationError

from personaforge.config.settings import Settings, settings
from personaforge.middleware.auth import AuthMiddleware
from personaforge.middleware.logging import LoggingMiddleware
from personaforge.services.token import issue_token

from conftest import auth_headers


def build_app() -> FastAPI:
    app = FastAPI()

    @app.get("/api/v1/context")
    async def context():
        return structlog.contextvars.get_contextvars()

    app.add_middleware(AuthMiddleware)
    app.add_middleware(LoggingMiddleware)
    return app


def test_operator_and_request_id_are_bound(operator):
    client = TestClient(build_app())

    resp = client.get("/api/v1/context", headers=auth_headers(operator))

    assert resp.status_code == 200
    bound = resp.json()
    assert bound["operator_id"] == operator.id
    assert bound["request_id"] == resp.headers["X-Request-ID"]


def test_incoming_request_id_is_reused(operator):
    client = TestClient(build_app())
    headers = {**auth_headers(operator), "X-Request-ID": "trace-123"}

    resp = client.get("/api/v1/context", headers=headers)

    assert resp.headers["X-Request-ID"] == "trace-123"
    assert resp.json()["request_id"] == "trace-123"


def test_unauthenticated_request_still_gets_request_id():
    resp = TestClient(build_app()).get("/api/v1/context")

    assert resp.status_code == 401
    assert resp.headers["X-Request-ID"]


def test_log_level_is_case_insensitive():
    assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"


def test_unknown_log_level_rejected():
    with pytest.raises(ValidationError):
        Settings(LOG_LEVEL="VERBOSE")


def test_stale_token_gets_a_refreshed_cookie(operator):
    stale = issue_token(
        operator,
        lifetime=timedelta(hours=24),
        issued_at=datetime.now(timezone.utc) - timedelta(hours=20),
    )
    client = TestClient(build_app())

    resp = client.get("/api/v1/context", headers={"Authorization": f"Bearer {stale.access_token}"})

    assert resp.status_code == 200
    assert settings.COOKIE_NAME in resp.headers.get("set-cookie", "")


def test_fresh_token_is_left_alone(operator):
    resp = TestClient(build_app()).get("/api/v1/context", headers=auth_headers(operator))

    assert "set-cookie" not in resp.headers
