"""Tests for mapping pipeline errors onto tool error responses."""

import pytest

from gbif_mcp.core.errors import (
    HTTP_ERROR,
    NETWORK_ERROR,
    TIMEOUT,
    CircuitOpenError,
    RateLimitExceeded,
    UpstreamError,
    error_to_response,
)


class TestUpstreamErrorMapping:
    """Status-specific guidance for terminal upstream failures."""

    @pytest.mark.parametrize(
        "status,code,error_type",
        [
            (400, "VALIDATION_ERROR", "validation"),
            (401, "UNAUTHORIZED", "authentication"),
            (403, "FORBIDDEN", "authorization"),
            (404, "NOT_FOUND", "not_found"),
            (429, "RATE_LIMIT_EXCEEDED", "rate_limit"),
            (500, "UNAVAILABLE", "unavailable"),
            (503, "UNAVAILABLE", "unavailable"),
        ],
    )
    def test_status_codes(self, status, code, error_type):
        response = error_to_response(UpstreamError(HTTP_ERROR, "upstream says no", status))
        assert response["success"] is False
        assert response["data"]["error_code"] == code
        assert response["data"]["error_type"] == error_type
        assert response["data"]["details"]["statusCode"] == status

    def test_bad_request_includes_upstream_message(self):
        response = error_to_response(UpstreamError(HTTP_ERROR, "limit must be <= 300", 400))
        assert response["error"] == "Invalid request: limit must be <= 300"

    def test_server_error_message(self):
        response = error_to_response(UpstreamError(HTTP_ERROR, "boom", 502))
        assert response["error"] == "GBIF service temporarily unavailable"

    def test_timeout(self):
        response = error_to_response(UpstreamError(TIMEOUT, "read timed out"))
        assert response["data"]["error_code"] == "UPSTREAM_TIMEOUT"

    def test_network_error(self):
        response = error_to_response(UpstreamError(NETWORK_ERROR, "connection refused"))
        assert response["data"]["error_code"] == "UNAVAILABLE"

    def test_unmapped_status(self):
        response = error_to_response(UpstreamError(HTTP_ERROR, "teapot", 418))
        assert response["data"]["error_code"] == "UPSTREAM_ERROR"
        assert response["error"] == "teapot"

    def test_str_includes_status(self):
        assert str(UpstreamError(HTTP_ERROR, "Not found", 404)) == "Not found (HTTP 404)"


class TestResilienceErrorMapping:
    def test_circuit_open(self):
        response = error_to_response(CircuitOpenError("open", breaker_name="gbif", retry_after=42.04))
        assert response["error"] == "GBIF service temporarily degraded, retry shortly"
        assert response["data"]["error_code"] == "CIRCUIT_OPEN"
        assert response["data"]["details"] == {"breaker": "gbif", "retry_after_seconds": 42.0}

    def test_rate_limit_exceeded(self):
        response = error_to_response(RateLimitExceeded("too many", wait_needed=3.0))
        assert response["data"]["error_code"] == "RATE_LIMIT_EXCEEDED"
        assert response["data"]["details"] == {"wait_needed_seconds": 3.0}


def test_unknown_exception_returns_none():
    assert error_to_response(KeyError("x")) is None
