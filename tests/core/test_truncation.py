"""Tests for response truncation."""

import pytest

from gbif_mcp.core.truncation import Plain, ResponseTruncator, Truncated, format_size

MAX = 250 * 1024


def _page(n, item_bytes=1000, **extra):
    results = [{"key": i, "payload": "x" * item_bytes} for i in range(n)]
    return {"offset": 0, "limit": n, "endOfRecords": False, "count": 5000, "results": results, **extra}


@pytest.fixture
def truncator():
    return ResponseTruncator(MAX)


class TestFormatSize:
    @pytest.mark.parametrize(
        "num_bytes,expected",
        [
            (0, "0KB"),
            (1536, "1.5KB"),
            (248 * 1024, "248KB"),
            (250 * 1024, "250KB"),
            (int(1.2 * 1024 * 1024), "1.2MB"),
        ],
    )
    def test_human_readable(self, num_bytes, expected):
        assert format_size(num_bytes) == expected


class TestPassThrough:
    """Payloads that are returned unmodified."""

    def test_small_payload_is_plain(self, truncator):
        payload = _page(3)
        shaped = truncator.truncate(payload, {})
        assert isinstance(shaped, Plain)
        assert shaped.body() is payload

    def test_empty_results_never_truncated(self):
        """An empty page is returned as-is even under an absurd budget."""
        payload = {"results": [], "count": 0}
        shaped = ResponseTruncator(1).truncate(payload, {})
        assert isinstance(shaped, Plain)
        assert shaped.body() == {"results": [], "count": 0}

    def test_needs_truncation_boundary(self):
        payload = {"a": "x" * 10}
        size = ResponseTruncator().size_of(payload)
        assert ResponseTruncator(size).needs_truncation(payload) is False
        assert ResponseTruncator(size - 1).needs_truncation(payload) is True


class TestPaginatedTruncation:
    """Oversized pages keep a prefix of whole items."""

    def test_three_hundred_items_fit_budget(self, truncator):
        payload = _page(300)
        assert truncator.needs_truncation(payload)

        shaped = truncator.truncate(payload, {"taxonKey": 1})

        assert isinstance(shaped, Truncated)
        body = shaped.body()
        assert body["truncated"] is True
        assert 0 < body["metadata"]["returnedCount"] < 300
        assert truncator.size_of(body) < MAX

    def test_items_are_an_ordered_prefix(self, truncator):
        payload = _page(300)
        body = truncator.truncate(payload, {}).body()
        kept = body["data"]["results"]
        assert kept == payload["results"][: len(kept)]

    def test_envelope_reports_sizes_and_metadata(self, truncator):
        payload = _page(300)
        body = truncator.truncate(payload, {}).body()
        assert body["originalSize"] == format_size(truncator.size_of(payload))
        assert body["limitSize"] == "250KB"
        assert body["metadata"]["totalCount"] == 5000
        assert body["metadata"]["offset"] == 0
        assert body["metadata"]["limit"] == 300
        assert body["data"]["count"] == 5000

    def test_pagination_hint(self, truncator):
        """The hint suggests a clamped page size and echoes the query."""
        body = truncator.truncate(_page(300), {"taxonKey": 1, "limit": 300}).body()
        hint = body["pagination"]
        assert hint["example"] == {"taxonKey": 1, "limit": 50, "offset": 0}
        assert hint["suggestion"] == (
            "To get more data, use limit=50 with offset pagination: offset=0, then offset=50, offset=100, etc."
        )
        assert body["message"].startswith("Response truncated to 250KB. Total results: 5000, returned: ")

    def test_hint_has_a_floor_of_ten(self, truncator):
        hint = truncator.pagination_hint(3, {})
        assert hint.example == {"limit": 10, "offset": 0}

    def test_envelope_shrinks_when_overhead_underestimated(self):
        """Without a reserve the envelope is still cut down to fit."""
        truncator = ResponseTruncator(2000, reserved_overhead=0)
        shaped = truncator.truncate(_page(50, item_bytes=80), {})
        assert isinstance(shaped, Truncated)
        body = shaped.body()
        assert truncator.size_of(body) <= 2000
        assert body["metadata"]["returnedCount"] > 0

    def test_details_for_meta(self, truncator):
        shaped = truncator.truncate(_page(300), {})
        assert shaped.details["limit_bytes"] == MAX
        assert shaped.details["original_bytes"] > MAX


class TestNonPaginatedTruncation:
    """Oversized non-list payloads lose their data entirely."""

    def test_metadata_only_envelope(self, truncator):
        payload = {"key": 1, "blob": "x" * 300_000}
        shaped = truncator.truncate(payload, {})
        assert isinstance(shaped, Truncated)
        body = shaped.body()
        assert body["data"] is None
        assert body["metadata"] == {"returnedCount": 0}
        assert "exceeds maximum limit (250KB)" in body["message"]
        assert "pagination" not in body
        assert truncator.size_of(body) <= MAX

    def test_oversized_plain_list(self, truncator):
        payload = [{"name": "x" * 1000} for _ in range(300)]
        body = truncator.truncate(payload, {}).body()
        assert body["truncated"] is True
        assert body["data"] is None
