import json
import logging
import re
import sys

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import reset_services_for_tests
from src.api.main import app
from src.api.observability import JsonFormatter, trace_id_from_traceparent


@pytest.fixture(autouse=True)
def _fresh_services():
    reset_services_for_tests()
    yield
    reset_services_for_tests()


def test_health_endpoints_return_expected_status_payloads(monkeypatch):
    monkeypatch.delenv("REFERENCE_DATA_BACKEND", raising=False)
    with TestClient(app) as client:
        assert client.get("/health").json() == {"status": "ok"}
        assert client.get("/health/live").json() == {"status": "live"}
        assert client.get("/health/ready").json() == {"status": "ready", "backend": "IN_MEMORY"}


def test_readiness_reports_misconfigured_postgres(monkeypatch):
    monkeypatch.setenv("REFERENCE_DATA_BACKEND", "POSTGRES")
    monkeypatch.delenv("REFERENCE_DATA_POSTGRES_DSN", raising=False)

    with TestClient(app) as client:
        response = client.get("/health/ready")

    assert response.status_code == 503
    assert response.json() == {
        "status": "not_ready",
        "backend": "POSTGRES",
        "detail": "REFERENCE_DATA_POSTGRES_DSN_REQUIRED",
    }


def test_observability_headers_preserve_inbound_ids():
    with TestClient(app) as client:
        response = client.get(
            "/health",
            headers={
                "X-Correlation-Id": "corr-inbound-123",
                "X-Request-Id": "req-inbound-123",
                "traceparent": "00-1234567890abcdef1234567890abcdef-0000000000000001-01",
            },
        )

    assert response.headers["X-Correlation-Id"] == "corr-inbound-123"
    assert response.headers["X-Request-Id"] == "req-inbound-123"
    assert response.headers["X-Trace-Id"] == "1234567890abcdef1234567890abcdef"


def test_observability_headers_generated_when_missing():
    with TestClient(app) as client:
        response = client.get("/health")

    assert re.fullmatch(r"corr_[0-9a-f]{12}", response.headers["X-Correlation-Id"])
    assert re.fullmatch(r"req_[0-9a-f]{12}", response.headers["X-Request-Id"])
    assert re.fullmatch(r"[0-9a-f]{32}", response.headers["X-Trace-Id"])


def test_metrics_endpoint_available():
    with TestClient(app) as client:
        client.post(
            "/portfolio/scenario-analysis",
            json={"prompt": "Increase debt by 5%", "base_allocation": {"equity": "60", "debt": "40"}},
        )
        response = client.get("/metrics")

    assert response.status_code == 200
    assert "http_requests_total" in response.text or "http_request_duration" in response.text


def test_trace_id_from_traceparent():
    assert (
        trace_id_from_traceparent("00-1234567890abcdef1234567890abcdef-0000000000000001-01")
        == "1234567890abcdef1234567890abcdef"
    )
    assert trace_id_from_traceparent("garbage") is None


def test_json_formatter_includes_extra_fields_and_exceptions():
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord(
            "src.core.orders.service", logging.ERROR, __file__, 1, "failed %s", ("x",), sys.exc_info()
        )
    record.extra_fields = {"client_id": 42}

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "failed x"
    assert payload["level"] == "ERROR"
    assert payload["client_id"] == 42
    assert "ValueError: boom" in payload["exception"]
    assert "correlation_id" not in payload
