"""Tests for the search executor."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import MagicMock

import pytest

from catalogsearch.core.context import RequestContext
from catalogsearch.core.executor import SearchExecutor
from catalogsearch.exceptions import (
    ConstructionError,
    EngineError,
    MalformedResponseError,
    SearchCancelledError,
    TransportError,
)
from catalogsearch.models.query import AggregationIntent, MatchIntent, MultiMatchIntent, PageWindow


@pytest.fixture
def executor(transport: MagicMock) -> SearchExecutor:
    return SearchExecutor(transport, "products")


class TestExecute:
    async def test_sends_query_to_index(
        self, executor: SearchExecutor, transport: MagicMock, sample_source: dict[str, Any], make_response: Any
    ) -> None:
        transport.search.return_value = make_response([sample_source])
        query = {"query": {"match": {"name": "laptop"}}}

        result = await executor.execute(query)

        transport.search.assert_awaited_once_with("products", query)
        assert result.total == 1
        assert result.items[0].id == "7"

    async def test_engine_error_propagates(self, executor: SearchExecutor, transport: MagicMock) -> None:
        transport.search.side_effect = EngineError(400, "failed to parse", "parsing_exception")
        with pytest.raises(EngineError) as exc_info:
            await executor.execute({"query": {"bogus": {}}})
        assert exc_info.value.status == 400
        assert exc_info.value.error_type == "parsing_exception"

    async def test_transport_error_propagates(self, executor: SearchExecutor, transport: MagicMock) -> None:
        transport.search.side_effect = TransportError("connection refused")
        with pytest.raises(TransportError) as exc_info:
            await executor.execute({"query": {"match_all": {}}})
        assert exc_info.value.retryable

    async def test_unexpected_error_wrapped(self, executor: SearchExecutor, transport: MagicMock) -> None:
        transport.search.side_effect = OSError("socket closed")
        with pytest.raises(TransportError, match="socket closed"):
            await executor.execute({"query": {"match_all": {}}})

    async def test_malformed_response(self, executor: SearchExecutor, transport: MagicMock) -> None:
        transport.search.return_value = {"hits": {"total": "lots"}}
        with pytest.raises(MalformedResponseError):
            await executor.execute({"query": {"match_all": {}}})

    async def test_cancelled_context_skips_transport(self, executor: SearchExecutor, transport: MagicMock) -> None:
        ctx = RequestContext()
        ctx.cancel()
        with pytest.raises(SearchCancelledError):
            await executor.execute({"query": {"match_all": {}}}, ctx)
        transport.search.assert_not_awaited()

    async def test_cancel_during_call(self, executor: SearchExecutor, transport: MagicMock) -> None:
        async def hang(*args: Any) -> dict[str, Any]:
            await asyncio.sleep(10)
            return {}

        transport.search.side_effect = hang
        ctx = RequestContext()
        task = asyncio.ensure_future(executor.execute({"query": {"match_all": {}}}, ctx))
        await asyncio.sleep(0.01)
        ctx.cancel()
        with pytest.raises(SearchCancelledError):
            await asyncio.wait_for(task, timeout=1.0)

    async def test_deadline(self, executor: SearchExecutor, transport: MagicMock) -> None:
        async def hang(*args: Any) -> dict[str, Any]:
            await asyncio.sleep(10)
            return {}

        transport.search.side_effect = hang
        with pytest.raises(SearchCancelledError, match="deadline"):
            await executor.execute({"query": {"match_all": {}}}, RequestContext(timeout=0.05))


class TestSearch:
    async def test_builds_and_executes(
        self, executor: SearchExecutor, transport: MagicMock, sample_source: dict[str, Any], make_response: Any
    ) -> None:
        transport.search.return_value = make_response([sample_source])
        await executor.search(MatchIntent(field="name", text="laptop", page=PageWindow(from_=0, size=5)))
        transport.search.assert_awaited_once_with(
            "products", {"query": {"match": {"name": "laptop"}}, "from": 0, "size": 5}
        )

    async def test_invalid_intent_never_reaches_transport(
        self, executor: SearchExecutor, transport: MagicMock
    ) -> None:
        with pytest.raises(ConstructionError):
            await executor.search(MultiMatchIntent(text="laptop", fields=()))
        transport.search.assert_not_awaited()

    async def test_aggregation_result(self, executor: SearchExecutor, transport: MagicMock) -> None:
        transport.search.return_value = {
            "hits": {"total": {"value": 1000, "relation": "eq"}, "hits": []},
            "aggregations": {"avg_price": {"value": 1550.0}},
        }
        result = await executor.search(AggregationIntent(aggregations={"avg_price": {"avg": {"field": "price"}}}))
        assert result.items == []
        assert result.aggregations == {"avg_price": {"value": 1550.0}}

    def test_index_property(self, executor: SearchExecutor) -> None:
        assert executor.index == "products"
