"""Document repository — Typed point operations on one index."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from catalogsearch.core.context import RequestContext
from catalogsearch.core.executor import SearchExecutor
from catalogsearch.exceptions import MalformedResponseError
from catalogsearch.models.document import CatalogDocument, Product
from catalogsearch.models.query import MultiMatchIntent
from catalogsearch.models.result import SearchResult

if TYPE_CHECKING:
    from catalogsearch.adapters.base.transport import SearchTransport

logger = logging.getLogger(__name__)


class DocumentRepository:
    """Create, read, update and delete documents of one type.

    A missing document surfaces as ``DocumentNotFoundError`` (an
    ``EngineError`` subclass), so callers can tell "not there" apart from
    operational failures by type alone.

    Args:
        transport: Initialized engine transport.
        index: Index holding the documents.
        item_type: Document model stored in the index.
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
        self._executor = SearchExecutor(transport, index, item_type)

    async def create(self, item: CatalogDocument, ctx: RequestContext | None = None) -> None:
        """Store *item* under its id.

        Raises:
            DocumentExistsError: If a document with the same id exists.
        """
        ctx = ctx or RequestContext()
        await ctx.run(self._transport.create_document(self._index, item.id, item.model_dump(mode="json")))
        logger.debug("Created document '%s' in '%s'", item.id, self._index)

    async def update(self, item: CatalogDocument, ctx: RequestContext | None = None) -> None:
        """Overwrite the stored fields of *item* with its current values.

        Raises:
            DocumentNotFoundError: If the document does not exist.
        """
        ctx = ctx or RequestContext()
        partial = item.model_dump(mode="json", exclude_none=True)
        await ctx.run(self._transport.update_document(self._index, item.id, partial))

    async def get(self, doc_id: str, ctx: RequestContext | None = None) -> Any:
        """Fetch one typed document.

        Raises:
            DocumentNotFoundError: If the document does not exist.
            MalformedResponseError: If the stored document does not decode.
        """
        ctx = ctx or RequestContext()
        envelope = await ctx.run(self._transport.get_by_id(self._index, doc_id))
        source = envelope.get("_source")
        if not isinstance(source, dict):
            raise MalformedResponseError(f"Document '{doc_id}' response has no _source")
        try:
            return self._item_type.model_validate(source)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Document '{doc_id}' does not match {self._item_type.__name__}: {e}"
            ) from e

    async def delete(self, doc_id: str, ctx: RequestContext | None = None) -> None:
        """Delete one document.

        Raises:
            DocumentNotFoundError: If the document does not exist.
        """
        ctx = ctx or RequestContext()
        await ctx.run(self._transport.delete_by_id(self._index, doc_id))
        logger.debug("Deleted document '%s' from '%s'", doc_id, self._index)

    async def search(
        self,
        text: str,
        fields: Sequence[str],
        ctx: RequestContext | None = None,
    ) -> SearchResult[Any]:
        """Full-text search for *text* across *fields*."""
        return await self._executor.search(MultiMatchIntent(text=text, fields=tuple(fields)), ctx)
