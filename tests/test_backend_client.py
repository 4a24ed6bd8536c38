"""Tests for the REST data store client."""

import json

import httpx
import pytest

from storefront.errors import DataStoreError
from storefront.services.backend_client import DataStore, RestDataStore

BASE_URL = "https://project.backend.test"


def _store(handler, access_token=None) -> RestDataStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RestDataStore(BASE_URL, "anon-key", access_token=access_token, http_client=client)


class TestRestDataStore:
    @pytest.mark.asyncio
    async def test_select_builds_equality_filters(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200, json=[{"id": "1", "order_number": "FF1"}])

        store = _store(handler)
        rows = await store.select("orders", {"session_id": "guest_1_abc"}, order_by="created_at")

        assert rows == [{"id": "1", "order_number": "FF1"}]
        assert seen["path"] == "/rest/v1/orders"
        assert seen["params"] == {"select": "*", "session_id": "eq.guest_1_abc", "order": "created_at.desc"}
        assert seen["auth"] == "Bearer anon-key"
        await store.close()

    @pytest.mark.asyncio
    async def test_insert_returns_representation_and_notifies(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["Prefer"] == "return=representation"
            rows = json.loads(request.content)
            return httpx.Response(201, json=[{"id": "row-1", **rows[0]}])

        store = _store(handler)
        inserted = []
        store.subscribe_inserts("orders", inserted.append)

        saved = await store.insert("orders", [{"order_number": "FF1"}])

        assert saved[0]["id"] == "row-1"
        assert inserted == saved

    @pytest.mark.asyncio
    async def test_upsert_merges_duplicates(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["on_conflict"] == "id"
            assert "resolution=merge-duplicates" in request.headers["Prefer"]
            return httpx.Response(201, json={"id": "user-1"})

        assert await _store(handler).upsert("profiles", {"id": "user-1"}) == [{"id": "user-1"}]

    @pytest.mark.asyncio
    async def test_error_response_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"message": "JWT expired", "code": "PGRST301"})

        with pytest.raises(DataStoreError) as exc_info:
            await _store(handler).select("orders")

        assert exc_info.value.message == "JWT expired"
        assert exc_info.value.code == "PGRST301"

    @pytest.mark.asyncio
    async def test_network_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(DataStoreError, match="Network error"):
            await _store(handler).insert("orders", [{}])

    @pytest.mark.asyncio
    async def test_access_token_is_sent(self):
        tokens = []

        def handler(request: httpx.Request) -> httpx.Response:
            tokens.append(request.headers["Authorization"])
            return httpx.Response(200, json=[])

        store = _store(handler, access_token="user-token")
        await store.select("addresses")
        store.set_access_token(None)
        await store.select("addresses")

        assert tokens == ["Bearer user-token", "Bearer anon-key"]

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_break_insert(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(201, json=[{"id": "row-1"}])

        def broken(row):
            raise RuntimeError("listener crashed")

        store = _store(handler)
        unsubscribe = store.subscribe_inserts("orders", broken)

        assert await store.insert("orders", [{}]) == [{"id": "row-1"}]
        unsubscribe()
        assert store._subscribers["orders"] == []

    @pytest.mark.asyncio
    async def test_insert_without_notify(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(201, json=[{"id": "row-1"}])

        store = _store(handler)
        inserted = []
        store.subscribe_inserts("orders", inserted.append)

        saved = await store.insert("orders", [{}], notify=False)
        assert inserted == []

        await store.notify_inserts("orders", saved)
        assert inserted == [{"id": "row-1"}]


class TestDataStoreInterface:
    def test_partial_implementation_cannot_be_constructed(self):
        class SelectOnly(DataStore):
            async def select(self, table, filters=None, order_by=None, descending=True):
                return []

        with pytest.raises(TypeError):
            SelectOnly()
