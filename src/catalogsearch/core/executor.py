"""Search executor — Builds, sends and normalizes a search request.

Pipeline::

    SearchIntent → [build_query] → QueryDocument
                 → [transport.search] (bound to RequestContext)
                 → raw response → [extract] → SearchResult

Failures surface as the typed exceptions of ``catalogsearch.exceptions``;
nothing is retried here.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from catalogsearch.core.builder import build_query
from catalogsearch.core.context import RequestContext
from catalogsearch.core.extractor import extract
from catalogsearch.exceptions import CatalogSearchError, MalformedResponseError, TransportError
from catalogsearch.models.document import CatalogDocument, Product
from catalogsearch.models.query import QueryDocument
from catalogsearch.models.result import SearchResult

if TYPE_CHECKING:
    from catalogsearch.adapters.base.transport import SearchTransport

logger = logging.getLogger(__name__)


class SearchExecutor:
    """Executes query documents against one index.

    Args:
        transport: Initialized engine transport.
        index: Index (or index pattern) to search.
        item_type: Document model hits are decoded into.
    """

    def __init__(
        self,
        transport: SearchTransport,
        index: str,
        item_type: type[CatalogDocument] = Product,
    ) -> None:
        self._transport = transport
        self._index = index
        self._item_type = item_type

    @property
    def index(self) -> str:
        return self._index

    async def execute(self, query: QueryDocument, ctx: RequestContext | None = None) -> SearchResult[Any]:
        """Send *query* and normalize the response.

        Raises:
            SearchCancelledError: If *ctx* is cancelled or expires first.
            TransportError: If the engine could not be reached.
            EngineError: If the engine reported an error status.
            MalformedResponseError: If the response has an unexpected shape.
        """
        ctx = ctx or RequestContext()
        start = time.monotonic()
        try:
            raw = await ctx.run(self._transport.search(self._index, query))
        except CatalogSearchError as e:
            logger.warning("Search on '%s' failed: %s", self._index, e)
            raise
        except Exception as e:
            logger.warning("Search on '%s' failed with unexpected error", self._index, exc_info=True)
            raise TransportError(f"Search request failed: {e}") from e

        try:
            result = extract(raw, self._item_type)
        except MalformedResponseError:
            logger.warning("Malformed search response from '%s'", self._index)
            raise

        logger.debug(
            "Search on '%s' returned %d/%d hits in %d ms",
            self._index,
            len(result.items),
            result.total,
            int((time.monotonic() - start) * 1000),
        )
        return result

    async def search(self, intent: Any, ctx: RequestContext | None = None) -> SearchResult[Any]:
        """Build the query for *intent* and execute it.

        Raises:
            ConstructionError: Before any request, if the intent is invalid.
        """
        return await self.execute(build_query(intent), ctx)
