"""
Tests for the access logging middleware and log formatting
"""

import json
import logging
import sys

import pytest
from fastapi import FastAPI, HTTPException, Request
from fastapi.testclient import TestClient

from app.middleware.logging import (
    RequestIdFilter,
    StructuredFormatter,
    StructuredLoggingMiddleware,
    get_request_id,
    request_id_var,
)

ACCESS_LOGGER = "dormguard.access"


@pytest.fixture
def client():
    app = FastAPI()

    @app.get("/ok")
    async def ok():
        return {"request_id": get_request_id()}

    @app.get("/missing")
    async def missing():
        raise HTTPException(status_code=404)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    @app.get("/whoami")
    async def whoami(request: Request):
        request.state.user_id = 7
        request.state.role = "helpdesk"
        return {}

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    app.add_middleware(StructuredLoggingMiddleware)
    return TestClient(app, raise_server_exceptions=False)


def access_records(caplog):
    return [r for r in caplog.records if r.name == ACCESS_LOGGER]


class TestRequestId:
    def test_generated_when_absent(self, client):
        response = client.get("/ok")

        request_id = response.headers["X-Request-ID"]
        assert len(request_id) == 36
        assert response.json()["request_id"] == request_id

    def test_propagated_from_caller(self, client):
        response = client.get("/ok", headers={"X-Request-ID": "desk-42"})

        assert response.headers["X-Request-ID"] == "desk-42"
        assert response.json()["request_id"] == "desk-42"


class TestAccessLog:
    @pytest.mark.parametrize(
        "path, status_code, level",
        [("/ok", 200, logging.INFO), ("/missing", 404, logging.WARNING), ("/boom", 500, logging.ERROR)],
    )
    def test_level_follows_status(self, client, caplog, path, status_code, level):
        caplog.set_level(logging.INFO, logger=ACCESS_LOGGER)

        client.get(path)

        [record] = access_records(caplog)
        assert record.levelno == level
        assert record.status_code == status_code
        assert record.path == path
        assert record.method == "GET"

    def test_error_message_is_logged(self, client, caplog):
        caplog.set_level(logging.INFO, logger=ACCESS_LOGGER)

        client.get("/boom")

        assert "kaboom" in access_records(caplog)[0].getMessage()

    def test_caller_identity(self, client, caplog):
        caplog.set_level(logging.INFO, logger=ACCESS_LOGGER)

        client.get("/whoami")

        [record] = access_records(caplog)
        assert record.user_id == 7
        assert record.role == "helpdesk"

    def test_anonymous_has_no_identity(self, client, caplog):
        caplog.set_level(logging.INFO, logger=ACCESS_LOGGER)

        client.get("/ok")

        assert not hasattr(access_records(caplog)[0], "user_id")

    def test_forwarded_client_ip(self, client, caplog):
        caplog.set_level(logging.INFO, logger=ACCESS_LOGGER)

        client.get("/ok", headers={"X-Forwarded-For": "10.0.0.9, 172.16.0.1"})

        assert access_records(caplog)[0].client_ip == "10.0.0.9"

    def test_health_probe_is_quiet(self, client, caplog):
        caplog.set_level(logging.INFO, logger=ACCESS_LOGGER)

        response = client.get("/api/health")

        assert response.status_code == 200
        assert access_records(caplog) == []


class TestFormatting:
    def make_record(self, **extra):
        record = logging.LogRecord("app.services", logging.WARNING, __file__, 1, "Room %s is full", ("101",), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_line(self):
        record = self.make_record(request_id="abc", status_code=409, user_id=3, unrelated="dropped")

        data = json.loads(StructuredFormatter().format(record))

        assert data["message"] == "Room 101 is full"
        assert data["level"] == "WARNING"
        assert data["logger"] == "app.services"
        assert data["request_id"] == "abc"
        assert data["status_code"] == 409
        assert data["user_id"] == 3
        assert "unrelated" not in data

    def test_exception_is_included(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.LogRecord("app", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

        data = json.loads(StructuredFormatter().format(record))

        assert "ValueError: bad" in data["exception"]

    def test_request_id_filter(self):
        token = request_id_var.set("req-9")
        try:
            record = self.make_record()
            assert RequestIdFilter().filter(record) is True
            assert record.request_id == "req-9"
        finally:
            request_id_var.reset(token)
