"""catalogsearch client — Async and sync facades over the query layer.

Usage::

    # Async
    async with await AsyncCatalogClient.from_settings(Settings()) as client:
        result = await client.match_search("name", "laptop", size=5)

    # Sync (wraps the async client internally)
    client = CatalogClient(Settings())
    result = client.fuzzy_search("name", "lapto", fuzziness=1)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine, Iterable, Sequence
from typing import Any, TypeVar

from pydantic import JsonValue

from catalogsearch.adapters.base.registry import TransportRegistry
from catalogsearch.adapters.base.transport import SearchTransport, TransportHealth
from catalogsearch.config.settings import Settings
from catalogsearch.core.context import RequestContext
from catalogsearch.core.executor import SearchExecutor
from catalogsearch.core.loader import BulkLoader
from catalogsearch.core.repository import DocumentRepository
from catalogsearch.models.bulk import LoadSummary
from catalogsearch.models.document import CatalogDocument, Product
from catalogsearch.models.query import (
    AggregationIntent,
    BoolIntent,
    FuzzyIntent,
    MatchIntent,
    MultiMatchIntent,
    PageWindow,
    PhraseIntent,
    RangeIntent,
)
from catalogsearch.models.result import SearchResult

_T = TypeVar("_T")

logger = logging.getLogger(__name__)


def _page(from_: int | None, size: int | None) -> PageWindow | None:
    if from_ is None and size is None:
        return None
    return PageWindow(from_=from_, size=size)


# ═══════════════════════════════════════════════════════════════════════════════
# Async client
# ═══════════════════════════════════════════════════════════════════════════════


class AsyncCatalogClient:
    """Async client bound to one index and one document type.

    Args:
        transport: Initialized engine transport.
        index: Index to search and load.
        item_type: Document model of the index.
        batch_size: Bulk batch size used by ``load``.
        registry: Registry that owns *transport*; shut down by ``close``.
    """

    def __init__(
        self,
        transport: SearchTransport,
        index: str,
        *,
        item_type: type[CatalogDocument] = Product,
        batch_size: int = 100,
        registry: TransportRegistry | None = None,
    ) -> None:
        self._transport = transport
        self._registry = registry
        self.executor = SearchExecutor(transport, index, item_type)
        self.repository = DocumentRepository(transport, index, item_type)
        self.loader = BulkLoader(transport, index, batch_size)

    @classmethod
    async def from_settings(
        cls,
        settings: Settings,
        *,
        item_type: type[CatalogDocument] = Product,
        registry: TransportRegistry | None = None,
    ) -> AsyncCatalogClient:
        """Initialize the configured transport and return a client for it."""
        registry = registry or TransportRegistry.with_builtin_transports()
        transport = await registry.initialize_transport(
            settings.engine.backend,
            **settings.engine.transport_kwargs(),
        )
        return cls(
            transport,
            settings.engine.index,
            item_type=item_type,
            batch_size=settings.loader.batch_size,
            registry=registry,
        )

    async def __aenter__(self) -> AsyncCatalogClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Shut down the transport."""
        if self._registry is not None:
            await self._registry.shutdown_all()
        else:
            await self._transport.shutdown()

    async def health(self) -> TransportHealth:
        return await self._transport.health_check()

    # ── Searches ──

    async def search(self, intent: Any, ctx: RequestContext | None = None) -> SearchResult[Any]:
        return await self.executor.search(intent, ctx)

    async def match_search(
        self,
        field: str,
        text: str,
        *,
        from_: int | None = None,
        size: int | None = None,
        ctx: RequestContext | None = None,
    ) -> SearchResult[Any]:
        """Full-text match on one field, optionally paginated."""
        return await self.search(MatchIntent(field=field, text=text, page=_page(from_, size)), ctx)

    async def multi_match_search(
        self,
        text: str,
        fields: Sequence[str],
        *,
        from_: int | None = None,
        size: int | None = None,
        ctx: RequestContext | None = None,
    ) -> SearchResult[Any]:
        """Search *text* across *fields*; earlier fields take precedence."""
        intent = MultiMatchIntent(text=text, fields=tuple(fields), page=_page(from_, size))
        return await self.search(intent, ctx)

    async def bool_search(
        self,
        *,
        must: Sequence[JsonValue] = (),
        should: Sequence[JsonValue] = (),
        must_not: Sequence[JsonValue] = (),
        filter: Sequence[JsonValue] = (),
        ctx: RequestContext | None = None,
    ) -> SearchResult[Any]:
        """Boolean combination of pre-built query clauses."""
        intent = BoolIntent(must=tuple(must), should=tuple(should), must_not=tuple(must_not), filter=tuple(filter))
        return await self.search(intent, ctx)

    async def range_search(
        self,
        field: str,
        *,
        gte: JsonValue = None,
        gt: JsonValue = None,
        lte: JsonValue = None,
        lt: JsonValue = None,
        ctx: RequestContext | None = None,
    ) -> SearchResult[Any]:
        """Numeric or date range filter; at least one bound is required."""
        bounds = {k: v for k, v in {"gte": gte, "gt": gt, "lte": lte, "lt": lt}.items() if v is not None}
        return await self.search(RangeIntent(field=field, bounds=bounds), ctx)

    async def fuzzy_search(
        self,
        field: str,
        text: str,
        fuzziness: JsonValue = "AUTO",
        *,
        ctx: RequestContext | None = None,
    ) -> SearchResult[Any]:
        """Typo-tolerant match, e.g. ``"lapto"`` finds ``"laptop"``."""
        return await self.search(FuzzyIntent(field=field, text=text, fuzziness=fuzziness), ctx)

    async def phrase_search(
        self,
        field: str,
        phrase: str,
        slop: int = 0,
        *,
        ctx: RequestContext | None = None,
    ) -> SearchResult[Any]:
        """Phrase match allowing *slop* word displacements."""
        return await self.search(PhraseIntent(field=field, phrase=phrase, slop=slop), ctx)

    async def aggregation_search(
        self,
        aggregations: dict[str, JsonValue],
        *,
        ctx: RequestContext | None = None,
    ) -> SearchResult[Any]:
        """Run aggregations only; the result has no items."""
        return await self.search(AggregationIntent(aggregations=aggregations), ctx)

    # ── Documents ──

    async def get(self, doc_id: str, ctx: RequestContext | None = None) -> Any:
        return await self.repository.get(doc_id, ctx)

    async def create(self, item: CatalogDocument, ctx: RequestContext | None = None) -> None:
        await self.repository.create(item, ctx)

    async def update(self, item: CatalogDocument, ctx: RequestContext | None = None) -> None:
        await self.repository.update(item, ctx)

    async def delete(self, doc_id: str, ctx: RequestContext | None = None) -> None:
        await self.repository.delete(doc_id, ctx)

    # ── Bulk ──

    async def load(
        self,
        records: Iterable[CatalogDocument],
        *,
        prepare: bool = False,
        mappings: dict[str, Any] | None = None,
        ctx: RequestContext | None = None,
    ) -> LoadSummary:
        """Bulk-load *records*; with *prepare*, recreate the index first."""
        if prepare:
            await self.loader.prepare_index(mappings, recreate=True, ctx=ctx)
        return await self.loader.load(records, ctx)


# ═══════════════════════════════════════════════════════════════════════════════
# Sync client (wraps AsyncCatalogClient)
# ═══════════════════════════════════════════════════════════════════════════════


class CatalogClient:
    """Synchronous client.

    Each call connects, runs one operation and disconnects, using
    ``asyncio.run``.  Deadlines are given as ``timeout`` seconds.

    Example::

        client = CatalogClient(Settings())
        result = client.range_search("price", gte=1000, lte=2000)
        print(result.total)
    """

    def __init__(self, settings: Settings | None = None, *, item_type: type[CatalogDocument] = Product) -> None:
        self._settings = settings or Settings()
        self._item_type = item_type

    def _run(self, coro: Coroutine[Any, Any, _T]) -> _T:
        """Run an async coroutine synchronously."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop and loop.is_running():
            # Already inside an event loop (e.g. Jupyter); run on a separate thread
            import concurrent.futures

            with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
                return pool.submit(asyncio.run, coro).result()
        return asyncio.run(coro)

    def _call(self, method: str, *args: Any, timeout: float | None = None, **kwargs: Any) -> Any:
        async def _go() -> Any:
            async with await AsyncCatalogClient.from_settings(self._settings, item_type=self._item_type) as c:
                return await getattr(c, method)(*args, ctx=RequestContext(timeout), **kwargs)

        return self._run(_go())

    def match_search(self, field: str, text: str, *, timeout: float | None = None, **kwargs: Any) -> SearchResult[Any]:
        return self._call("match_search", field, text, timeout=timeout, **kwargs)

    def multi_match_search(
        self, text: str, fields: Sequence[str], *, timeout: float | None = None, **kwargs: Any
    ) -> SearchResult[Any]:
        return self._call("multi_match_search", text, fields, timeout=timeout, **kwargs)

    def bool_search(self, *, timeout: float | None = None, **clauses: Any) -> SearchResult[Any]:
        return self._call("bool_search", timeout=timeout, **clauses)

    def range_search(self, field: str, *, timeout: float | None = None, **bounds: Any) -> SearchResult[Any]:
        return self._call("range_search", field, timeout=timeout, **bounds)

    def fuzzy_search(
        self, field: str, text: str, fuzziness: JsonValue = "AUTO", *, timeout: float | None = None
    ) -> SearchResult[Any]:
        return self._call("fuzzy_search", field, text, fuzziness, timeout=timeout)

    def phrase_search(self, field: str, phrase: str, slop: int = 0, *, timeout: float | None = None) -> SearchResult[Any]:
        return self._call("phrase_search", field, phrase, slop, timeout=timeout)

    def aggregation_search(
        self, aggregations: dict[str, JsonValue], *, timeout: float | None = None
    ) -> SearchResult[Any]:
        return self._call("aggregation_search", aggregations, timeout=timeout)

    def get(self, doc_id: str, *, timeout: float | None = None) -> Any:
        return self._call("get", doc_id, timeout=timeout)

    def delete(self, doc_id: str, *, timeout: float | None = None) -> None:
        self._call("delete", doc_id, timeout=timeout)

    def load(self, records: Iterable[CatalogDocument], *, prepare: bool = False, timeout: float | None = None) -> LoadSummary:
        return self._call("load", records, prepare=prepare, timeout=timeout)
