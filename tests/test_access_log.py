"""Tests for the AccessLogMiddleware."""

import logging

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from readmesync.middleware import RequestIDMiddleware
from readmesync.middleware.access_log import AccessLogMiddleware


@pytest.fixture()
def test_app() -> FastAPI:
    """Standalone FastAPI app with both middleware layers."""
    app = FastAPI()

    # AccessLogMiddleware innermost (added first), RequestIDMiddleware
    # outermost (added second, runs first).
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.post("/hook")
    async def _hook():
        return {"status": "synced"}

    @app.post("/hook-bad")
    async def _hook_bad():
        raise HTTPException(400, detail="bad signature")

    @app.get("/boom")
    async def _boom():
        raise RuntimeError("boom")

    @app.get("/health")
    async def _health():
        return "ok"

    return app


@pytest.fixture()
def client(test_app: FastAPI) -> TestClient:
    return TestClient(test_app, raise_server_exceptions=False)


def _metric_lines(caplog) -> list[str]:
    return [r.message for r in caplog.records if "METRIC" in r.message]


class TestAccessLogMiddleware:
    """Access log middleware emits structured METRIC lines."""

    def test_successful_request_logged(self, client, caplog):
        with caplog.at_level(logging.DEBUG, logger="readmesync.access"):
            client.post("/hook", headers={"X-Github-Event": "push", "X-Request-ID": "req-1"})
        lines = _metric_lines(caplog)
        assert len(lines) == 1
        line = lines[0]
        assert "type=http_request" in line
        assert "method=POST" in line
        assert "path=/hook" in line
        assert "status=200" in line
        assert "wall_ms=" in line
        assert "event=push" in line
        assert "req_id=req-1" in line

    def test_client_error_logged_as_warning(self, client, caplog):
        with caplog.at_level(logging.DEBUG, logger="readmesync.access"):
            client.post("/hook-bad")
        records = [r for r in caplog.records if "METRIC" in r.message]
        assert records[0].levelno == logging.WARNING
        assert "status=400" in records[0].message
        assert "event=-" in records[0].message

    def test_server_error_logged_as_error(self, client, caplog):
        with caplog.at_level(logging.DEBUG, logger="readmesync.access"):
            client.get("/boom")
        records = [r for r in caplog.records if "METRIC" in r.message]
        assert records[0].levelno == logging.ERROR
        assert "status=500" in records[0].message

    def test_health_is_skipped(self, client, caplog):
        with caplog.at_level(logging.DEBUG, logger="readmesync.access"):
            client.get("/health")
        assert _metric_lines(caplog) == []
