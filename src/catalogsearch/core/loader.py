"""Bulk loader — Streams records into an index in fixed-size batches.

Lifecycle of one ``load()``::

    Accumulating ──(batch full | input exhausted)──▶ Flushing ──▶ Accumulating ...
                                                     (input exhausted)
                                                          ▼
                                                     Refreshing ──▶ Done

A failed batch is recorded in the ``LoadSummary`` and loading moves on to
the next batch; the caller decides how severe partial failure is.  The
refresh call is always made once, after the last batch, because engines
index asynchronously and unrefreshed writes are invisible to searches.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from catalogsearch.core.context import RequestContext
from catalogsearch.exceptions import CatalogSearchError, SearchCancelledError
from catalogsearch.models.bulk import BatchOutcome, LoadSummary
from catalogsearch.models.document import PRODUCT_MAPPINGS, CatalogDocument

if TYPE_CHECKING:
    from catalogsearch.adapters.base.transport import SearchTransport

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100


def encode_bulk_batch(index: str, records: Iterable[CatalogDocument]) -> str:
    """Encode records as newline-delimited ``index`` actions.

    Each record yields an action line naming the target index and id,
    followed by the document line.  The payload ends with a newline, as the
    bulk protocol requires.
    """
    lines: list[str] = []
    for record in records:
        lines.append(json.dumps({"index": {"_index": index, "_id": record.id}}))
        lines.append(record.model_dump_json())
    return "\n".join(lines) + "\n" if lines else ""


class BulkLoader:
    """Batched writer for one index.

    Args:
        transport: Initialized engine transport.
        index: Target index.
        batch_size: Maximum records per bulk call.

    Raises:
        ValueError: If *batch_size* is not positive.
    """

    def __init__(self, transport: SearchTransport, index: str, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self._transport = transport
        self._index = index
        self._batch_size = batch_size

    @property
    def batch_size(self) -> int:
        return self._batch_size

    async def prepare_index(
        self,
        mappings: dict[str, Any] | None = None,
        *,
        recreate: bool = True,
        ctx: RequestContext | None = None,
    ) -> None:
        """Create the target index, dropping an existing one first when *recreate*.

        Raises:
            DocumentExistsError: If the index exists and *recreate* is false.
        """
        ctx = ctx or RequestContext()
        if recreate:
            await ctx.run(self._transport.delete_index(self._index, missing_ok=True))
        await ctx.run(self._transport.create_index(self._index, mappings or PRODUCT_MAPPINGS))
        logger.info("Created index '%s'", self._index)

    async def load(self, records: Iterable[CatalogDocument], ctx: RequestContext | None = None) -> LoadSummary:
        """Write *records* in batches, then refresh the index.

        Args:
            records: Documents to index; consumed lazily.
            ctx: Cancellation context shared by every call of this load.

        Returns:
            Per-batch outcomes and the refresh result.

        Raises:
            SearchCancelledError: If *ctx* is cancelled; batches already
                written stay written.
        """
        ctx = ctx or RequestContext()
        summary = LoadSummary(index=self._index)
        batch: list[CatalogDocument] = []
        sent = 0

        for record in records:
            batch.append(record)
            if len(batch) >= self._batch_size:
                summary.batches.append(await self._flush(batch, len(summary.batches) + 1, ctx))
                sent += len(batch)
                logger.info("Indexed %d documents", sent)
                batch = []
        if batch:
            summary.batches.append(await self._flush(batch, len(summary.batches) + 1, ctx))
            sent += len(batch)
            logger.info("Indexed %d documents", sent)

        try:
            await ctx.run(self._transport.refresh_index(self._index))
            summary.refreshed = True
        except SearchCancelledError:
            raise
        except CatalogSearchError as e:
            summary.refresh_error = str(e)
            logger.error("Refresh of index '%s' failed: %s", self._index, e)
        except Exception as e:
            summary.refresh_error = f"Refresh request failed: {e}"
            logger.error("Refresh of index '%s' failed with unexpected error", self._index, exc_info=True)

        if summary.total_failed:
            logger.warning(
                "Loaded %d of %d documents into '%s' (%d batch(es) with failures)",
                summary.total_indexed,
                sent,
                self._index,
                len(summary.failed_batches),
            )
        else:
            logger.info("Successfully indexed %d documents into '%s'", summary.total_indexed, self._index)
        return summary

    async def _flush(self, batch: list[CatalogDocument], number: int, ctx: RequestContext) -> BatchOutcome:
        payload = encode_bulk_batch(self._index, batch)
        try:
            response = await ctx.run(self._transport.bulk_write(self._index, payload))
        except SearchCancelledError:
            raise
        except CatalogSearchError as e:
            logger.warning("Bulk batch %d failed: %s", number, e)
            return _failed_batch(number, len(batch), str(e))
        except Exception as e:
            logger.warning("Bulk batch %d failed with unexpected error", number, exc_info=True)
            return _failed_batch(number, len(batch), f"Bulk request failed: {e}")
        return _outcome_from_response(number, len(batch), response)


def _failed_batch(number: int, attempted: int, error: str) -> BatchOutcome:
    return BatchOutcome(batch_number=number, attempted=attempted, failed_count=attempted, first_error=error)


def _outcome_from_response(number: int, attempted: int, response: Any) -> BatchOutcome:
    """Count accepted and rejected items in a bulk response."""
    items = response.get("items") if isinstance(response, dict) else None
    if not isinstance(items, list):
        return BatchOutcome(
            batch_number=number,
            attempted=attempted,
            failed_count=attempted,
            first_error="Bulk response has no 'items' list",
        )

    indexed = 0
    first_error: str | None = None
    for item in items:
        result = next(iter(item.values()), {}) if isinstance(item, dict) and item else {}
        error = result.get("error") if isinstance(result, dict) else "malformed bulk item"
        status = result.get("status", 0) if isinstance(result, dict) else 0
        if error is None and isinstance(status, int) and 200 <= status < 300:
            indexed += 1
        elif first_error is None:
            first_error = _describe_item_error(result.get("_id") if isinstance(result, dict) else None, error, status)

    indexed = min(indexed, attempted)
    failed = attempted - indexed
    if failed and first_error is None:
        first_error = f"Engine acknowledged {indexed} of {attempted} documents"
    return BatchOutcome(
        batch_number=number,
        attempted=attempted,
        indexed_count=indexed,
        failed_count=failed,
        first_error=first_error,
    )


def _describe_item_error(doc_id: Any, error: Any, status: Any) -> str:
    if isinstance(error, dict):
        error = f"{error.get('type')}: {error.get('reason')}"
    return f"Document {doc_id!r} failed with status {status}: {error}"
