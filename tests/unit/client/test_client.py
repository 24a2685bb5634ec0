"""Tests for the catalogsearch async and sync clients."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from catalogsearch.adapters.base.registry import TransportRegistry
from catalogsearch.client.client import AsyncCatalogClient, CatalogClient
from catalogsearch.config.settings import Settings
from catalogsearch.core.context import RequestContext
from catalogsearch.exceptions import ConstructionError, DocumentNotFoundError, SearchCancelledError
from catalogsearch.models.document import Product

# ── Helpers ──────────────────────────────────────────────────────────────────


def _registry_for(transport: MagicMock) -> TransportRegistry:
    registry = TransportRegistry()
    registry.register("elasticsearch", lambda **kwargs: transport)  # type: ignore[arg-type]
    return registry


@pytest.fixture
def client(transport: MagicMock) -> AsyncCatalogClient:
    return AsyncCatalogClient(transport, "products", batch_size=2)


def _sent_query(transport: MagicMock) -> dict[str, Any]:
    index, body = transport.search.await_args.args
    assert index == "products"
    return body


# ── Async client: searches ───────────────────────────────────────────────────


class TestAsyncSearches:
    async def test_match_with_paging(
        self, client: AsyncCatalogClient, transport: MagicMock, sample_source: dict[str, Any], make_response: Any
    ) -> None:
        transport.search.return_value = make_response([sample_source])
        result = await client.match_search("name", "laptop", from_=0, size=5)
        assert _sent_query(transport) == {"query": {"match": {"name": "laptop"}}, "from": 0, "size": 5}
        assert isinstance(result.items[0], Product)

    async def test_multi_match(self, client: AsyncCatalogClient, transport: MagicMock, make_response: Any) -> None:
        transport.search.return_value = make_response([])
        await client.multi_match_search("gaming laptop", ["name", "description"])
        assert _sent_query(transport)["query"]["multi_match"]["fields"] == ["name", "description"]

    async def test_bool(self, client: AsyncCatalogClient, transport: MagicMock, make_response: Any) -> None:
        transport.search.return_value = make_response([])
        await client.bool_search(
            must=[{"match": {"brand": "Apple"}}],
            filter=[{"range": {"price": {"gte": 1000}}}],
        )
        assert _sent_query(transport) == {
            "query": {
                "bool": {
                    "must": [{"match": {"brand": "Apple"}}],
                    "filter": [{"range": {"price": {"gte": 1000}}}],
                }
            }
        }

    async def test_range_drops_unset_bounds(
        self, client: AsyncCatalogClient, transport: MagicMock, make_response: Any
    ) -> None:
        transport.search.return_value = make_response([])
        await client.range_search("price", gte=1000, lte=2000)
        assert _sent_query(transport) == {"query": {"range": {"price": {"gte": 1000, "lte": 2000}}}}

    async def test_range_without_bounds(self, client: AsyncCatalogClient, transport: MagicMock) -> None:
        with pytest.raises(ConstructionError):
            await client.range_search("price")
        transport.search.assert_not_awaited()

    async def test_fuzzy(self, client: AsyncCatalogClient, transport: MagicMock, make_response: Any) -> None:
        transport.search.return_value = make_response([])
        await client.fuzzy_search("name", "lapto", 1)
        assert _sent_query(transport) == {"query": {"fuzzy": {"name": {"value": "lapto", "fuzziness": 1}}}}

    async def test_phrase(self, client: AsyncCatalogClient, transport: MagicMock, make_response: Any) -> None:
        transport.search.return_value = make_response([])
        await client.phrase_search("description", "gaming laptop", 1)
        assert _sent_query(transport)["query"]["match_phrase"]["description"] == {
            "query": "gaming laptop",
            "slop": 1,
        }

    async def test_aggregation(self, client: AsyncCatalogClient, transport: MagicMock) -> None:
        transport.search.return_value = {
            "hits": {"total": {"value": 3, "relation": "eq"}, "hits": []},
            "aggregations": {"avg_price": {"value": 10.0}},
        }
        result = await client.aggregation_search({"avg_price": {"avg": {"field": "price"}}})
        assert _sent_query(transport)["size"] == 0
        assert result.aggregations == {"avg_price": {"value": 10.0}}

    async def test_context_is_honored(self, client: AsyncCatalogClient, transport: MagicMock) -> None:
        ctx = RequestContext()
        ctx.cancel()
        with pytest.raises(SearchCancelledError):
            await client.match_search("name", "laptop", ctx=ctx)


# ── Async client: documents and bulk ─────────────────────────────────────────


class TestAsyncDocuments:
    async def test_get_not_found(self, client: AsyncCatalogClient, transport: MagicMock) -> None:
        transport.get_by_id.side_effect = DocumentNotFoundError("9", "products")
        with pytest.raises(DocumentNotFoundError):
            await client.get("9")

    async def test_create_and_delete(
        self, client: AsyncCatalogClient, transport: MagicMock, sample_product: Product
    ) -> None:
        await client.create(sample_product)
        await client.delete("1")
        transport.create_document.assert_awaited_once()
        transport.delete_by_id.assert_awaited_once_with("products", "1")

    async def test_load_with_prepare(
        self, client: AsyncCatalogClient, transport: MagicMock, sample_product: Product, bulk_ok: Any
    ) -> None:
        transport.bulk_write.return_value = bulk_ok(["1"])
        summary = await client.load([sample_product], prepare=True)
        transport.delete_index.assert_awaited_once()
        transport.create_index.assert_awaited_once()
        assert summary.total_indexed == 1
        assert summary.refreshed


# ── Lifecycle ────────────────────────────────────────────────────────────────


class TestLifecycle:
    async def test_from_settings_uses_registry(self, transport: MagicMock, settings: Settings) -> None:
        registry = _registry_for(transport)
        client = await AsyncCatalogClient.from_settings(settings, registry=registry)

        transport.initialize.assert_awaited_once()
        assert client.executor.index == "products"
        assert client.loader.batch_size == settings.loader.batch_size

        async with client:
            pass
        transport.shutdown.assert_awaited_once()
        assert registry.active_transports == []

    async def test_close_without_registry(self, client: AsyncCatalogClient, transport: MagicMock) -> None:
        await client.close()
        transport.shutdown.assert_awaited_once()


# ── Sync client ──────────────────────────────────────────────────────────────


class TestSyncClient:
    def test_match_search(
        self, transport: MagicMock, settings: Settings, sample_source: dict[str, Any], make_response: Any
    ) -> None:
        transport.search.return_value = make_response([sample_source])
        with patch.object(TransportRegistry, "with_builtin_transports", return_value=_registry_for(transport)):
            result = CatalogClient(settings).match_search("name", "laptop", size=5)

        assert result.total == 1
        assert result.items[0].brand == "Dell"
        transport.shutdown.assert_awaited_once()

    def test_errors_propagate(self, transport: MagicMock, settings: Settings) -> None:
        transport.get_by_id.side_effect = DocumentNotFoundError("9", "products")
        with (
            patch.object(TransportRegistry, "with_builtin_transports", return_value=_registry_for(transport)),
            pytest.raises(DocumentNotFoundError),
        ):
            CatalogClient(settings).get("9")
        transport.shutdown.assert_awaited_once()
