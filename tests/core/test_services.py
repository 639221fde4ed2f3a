"""Tests for the species and occurrence service wrappers."""

import httpx
import pytest

from gbif_mcp.core.client import GbifClient
from gbif_mcp.services import OccurrenceService, SpeciesService


class Router:
    """Fake GBIF answering by path and recording every request."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.replace("/v1", "", 1)
        handler = self.routes.get(path)
        if handler is None:
            return httpx.Response(404, json={"message": "not found"})
        body = handler(request) if callable(handler) else handler
        return httpx.Response(200, json=body)


@pytest.fixture
def make_client(config, clock):
    def factory(routes):
        router = Router(routes)
        client = GbifClient(config, transport=httpx.MockTransport(router), clock=clock, sleep_func=clock.sleep)
        return client, router

    return factory


class TestSpeciesService:
    """Tests for SpeciesService."""

    @pytest.mark.asyncio
    async def test_match_sends_name_and_filters(self, make_client):
        client, router = make_client({"/species/match": {"usageKey": 2435099, "matchType": "EXACT"}})
        async with client:
            result = await SpeciesService(client).match("Puma concolor", kingdom="Animalia")

        assert result["matchType"] == "EXACT"
        params = router.requests[0].url.params
        assert params["name"] == "Puma concolor"
        assert params["strict"] == "false"
        assert params["kingdom"] == "Animalia"

    @pytest.mark.asyncio
    async def test_vernacular_names_unwraps_results(self, make_client):
        client, _ = make_client(
            {"/species/2435099/vernacularNames": {"results": [{"vernacularName": "Cougar", "language": "eng"}]}}
        )
        async with client:
            names = await SpeciesService(client).vernacular_names(2435099)

        assert names == [{"vernacularName": "Cougar", "language": "eng"}]

    @pytest.mark.asyncio
    async def test_suggest_passes_limit(self, make_client):
        client, router = make_client({"/species/suggest": [{"key": 1, "canonicalName": "Puma"}]})
        async with client:
            result = await SpeciesService(client).suggest("Pum", limit=3)

        assert result == [{"key": 1, "canonicalName": "Puma"}]
        assert router.requests[0].url.params["limit"] == "3"

    @pytest.mark.asyncio
    async def test_children_paging(self, make_client):
        client, router = make_client({"/species/5219404/children": {"results": [], "endOfRecords": True}})
        async with client:
            await SpeciesService(client).children(5219404, offset=20, limit=10)

        params = router.requests[0].url.params
        assert params["offset"] == "20"
        assert params["limit"] == "10"


class TestOccurrenceService:
    """Tests for OccurrenceService."""

    @pytest.mark.asyncio
    async def test_count_returns_int(self, make_client):
        client, router = make_client({"/occurrence/count": 1234})
        async with client:
            count = await OccurrenceService(client).count({"taxonKey": 2435099})

        assert count == 1234
        assert router.requests[0].url.params["taxonKey"] == "2435099"

    @pytest.mark.asyncio
    async def test_download_status(self, make_client):
        client, _ = make_client({"/occurrence/download/0001-abc": {"key": "0001-abc", "status": "RUNNING"}})
        async with client:
            status = await OccurrenceService(client).download_status("0001-abc")

        assert status["status"] == "RUNNING"

    @pytest.mark.asyncio
    async def test_iter_search_walks_pages(self, make_client):
        records = [{"key": i} for i in range(5)]

        def search(request):
            offset = int(request.url.params["offset"])
            limit = int(request.url.params["limit"])
            page = records[offset : offset + limit]
            return {"results": page, "endOfRecords": offset + limit >= len(records)}

        client, router = make_client({"/occurrence/search": search})
        async with client:
            seen = [r["key"] async for r in OccurrenceService(client).iter_search({"country": "BR"}, page_size=2)]

        assert seen == [0, 1, 2, 3, 4]
        assert [r.url.params["offset"] for r in router.requests] == ["0", "2", "4"]
        assert all(r.url.params["country"] == "BR" for r in router.requests)

    @pytest.mark.asyncio
    async def test_iter_search_stops_at_max_records(self, make_client):
        def search(request):
            offset = int(request.url.params["offset"])
            return {"results": [{"key": offset}, {"key": offset + 1}], "endOfRecords": False}

        client, router = make_client({"/occurrence/search": search})
        async with client:
            seen = [r["key"] async for r in OccurrenceService(client).iter_search(page_size=2, max_records=3)]

        assert seen == [0, 1, 2]
        assert len(router.requests) == 2

    @pytest.mark.asyncio
    async def test_iter_search_ignores_caller_paging(self, make_client):
        client, router = make_client({"/occurrence/search": {"results": [], "endOfRecords": True}})
        async with client:
            seen = [r async for r in OccurrenceService(client).iter_search({"offset": 40, "limit": 5})]

        assert seen == []
        assert router.requests[0].url.params["offset"] == "0"
