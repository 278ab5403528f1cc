"""
Tests for structured logging and the error envelope.
"""
import json
import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from myblog.logging_config import (
    REQUEST_ID_HEADER,
    StructuredFormatter,
    StructuredLogger,
    log_request,
    request_id_var,
    timed,
)
from myblog.responses import ApiException, api_exception_handler, not_found


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def captured():
    handler = ListHandler()
    logger = logging.getLogger("myblog.testing")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    yield StructuredLogger("myblog.testing"), handler.records
    logger.removeHandler(handler)


class TestStructuredLogger:
    def test_context_and_request_id(self, captured):
        logger, records = captured
        token = request_id_var.set("req-1")
        try:
            logger.info("post created", post_id=3)
        finally:
            request_id_var.reset(token)

        data = json.loads(StructuredFormatter().format(records[0]))
        assert data["message"] == "post created"
        assert data["post_id"] == 3
        assert data["request_id"] == "req-1"
        assert data["logger"] == "myblog.testing"

    def test_error_details(self, captured):
        logger, records = captured
        try:
            raise ValueError("bad value")
        except ValueError as e:
            logger.error("failed", error=e)
        context = records[0].context
        assert context["error_type"] == "ValueError"
        assert "bad value" in context["traceback"]

    def test_timed_reraises(self, captured):
        logger, records = captured

        @timed(logger)
        def explode():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            explode()
        assert records[-1].getMessage() == "explode failed"


class TestRequestLogging:
    def make_app(self, logger):
        app = FastAPI()
        app.add_middleware(log_request(logger))
        app.add_exception_handler(ApiException, api_exception_handler)

        @app.get("/ok")
        async def ok():
            logger.info("inside handler")
            return {"ok": True}

        @app.get("/missing")
        def missing():
            not_found("Post", 9)

        return app

    def test_request_id_round_trip(self, captured):
        logger, records = captured
        client = TestClient(self.make_app(logger))

        response = client.get("/ok", headers={REQUEST_ID_HEADER: "abc123"})
        assert response.headers[REQUEST_ID_HEADER] == "abc123"
        assert all(r.context.get("request_id") == "abc123" for r in records)
        assert request_id_var.get() is None

    def test_generated_request_id(self, captured):
        logger, _ = captured
        response = TestClient(self.make_app(logger)).get("/ok")
        assert response.headers[REQUEST_ID_HEADER]

    def test_error_envelope(self, captured):
        logger, _ = captured
        response = TestClient(self.make_app(logger)).get("/missing")
        assert response.status_code == 404
        body = response.json()
        assert body["ok"] is False
        assert body["error_code"] == "NOT_FOUND"
        assert body["detail"] == "Post '9' not found"
