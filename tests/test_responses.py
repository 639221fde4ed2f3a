"""
Tests for response helper functions and the standard tool response format.
"""

from dataclasses import asdict

from gbif_mcp.core.responses import (
    RESPONSE_VERSION,
    ErrorCode,
    ErrorType,
    ToolResponse,
    error_response,
    success_response,
)


class TestToolResponse:
    """Tests for the ToolResponse dataclass."""

    def test_default_data_is_empty_dict(self):
        """Data defaults to an empty dict."""
        response = ToolResponse(success=True, error=None)
        assert response.data == {}

    def test_default_meta_carries_version(self):
        response = ToolResponse(success=True)
        assert response.meta == {"version": RESPONSE_VERSION}


class TestSuccessResponse:
    """Tests for the success_response helper function."""

    def test_passes_kwargs_to_data(self):
        """Keyword fields are merged into data."""
        response = success_response(count=10, results=[1, 2])
        assert response.success is True
        assert response.error is None
        assert response.data == {"count": 10, "results": [1, 2]}

    def test_data_and_fields_merge(self):
        response = success_response({"a": 1}, b=2)
        assert response.data == {"a": 1, "b": 2}

    def test_warnings_and_truncation_in_meta(self):
        response = success_response(
            result={},
            warnings=["Response truncated"],
            truncation={"original_bytes": 300000},
        )
        assert response.meta["warnings"] == ["Response truncated"]
        assert response.meta["truncation"] == {"original_bytes": 300000}
        assert response.meta["version"] == RESPONSE_VERSION

    def test_meta_omits_empty_sections(self):
        response = success_response()
        assert response.meta == {"version": RESPONSE_VERSION}


class TestErrorResponse:
    """Tests for the error_response helper function."""

    def test_defaults_to_internal_error(self):
        response = error_response("Something went wrong")
        assert response.success is False
        assert response.error == "Something went wrong"
        assert response.data["error_code"] == "INTERNAL_ERROR"
        assert response.data["error_type"] == "internal"

    def test_enums_are_rendered_as_values(self):
        response = error_response(
            "Resource not found in GBIF",
            error_code=ErrorCode.NOT_FOUND,
            error_type=ErrorType.NOT_FOUND,
            remediation="Check the key",
            details={"status_code": 404},
        )
        assert response.data == {
            "error_code": "NOT_FOUND",
            "error_type": "not_found",
            "remediation": "Check the key",
            "details": {"status_code": 404},
        }

    def test_serializes_with_asdict(self):
        payload = asdict(error_response("boom", error_code="CUSTOM"))
        assert set(payload) == {"success", "data", "error", "meta"}
        assert payload["data"]["error_code"] == "CUSTOM"
