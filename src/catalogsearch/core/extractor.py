"""Result extractor — Normalizes a raw search response into ``SearchResult``.

The response envelope is untyped JSON.  Engines report ``hits.total`` either
as a bare integer (older Elasticsearch, some OpenSearch settings) or as
``{"value": n, "relation": "eq" | "gte"}``; both are accepted and only the
number is kept.  A hit that fails to decode aborts the whole extraction:
a silently shortened page is worse than an error.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from catalogsearch.exceptions import MalformedResponseError
from catalogsearch.models.document import CatalogDocument, Product
from catalogsearch.models.result import SearchResult


def extract(raw: Any, item_type: type[CatalogDocument] = Product) -> SearchResult[Any]:
    """Extract total, typed items and aggregations from *raw*.

    Args:
        raw: Decoded JSON body of a ``_search`` response.
        item_type: Document model each hit's ``_source`` is decoded into.

    Returns:
        The normalized search result.

    Raises:
        MalformedResponseError: If the envelope or any hit does not match
            the expected shape.
    """
    if not isinstance(raw, Mapping):
        raise MalformedResponseError(f"Search response must be an object, got {type(raw).__name__}")

    hits = raw.get("hits")
    if hits is None:
        hits = {}
    elif not isinstance(hits, Mapping):
        raise MalformedResponseError("'hits' must be an object")

    total = _extract_total(hits.get("total"))
    items = [_decode_hit(i, hit, item_type) for i, hit in enumerate(_hit_list(hits))]

    aggregations = raw.get("aggregations")
    if aggregations is not None and not isinstance(aggregations, Mapping):
        raise MalformedResponseError("'aggregations' must be an object")

    try:
        return SearchResult[item_type](  # type: ignore[valid-type]
            total=total,
            items=items,
            aggregations=dict(aggregations) if aggregations is not None else None,
        )
    except ValidationError as e:
        raise MalformedResponseError(f"Search response could not be normalized: {e}") from e


def _extract_total(total: Any) -> int:
    # Size-0 aggregation queries may omit the total entirely
    if total is None:
        return 0
    if isinstance(total, Mapping):
        total = total.get("value", 0)
    if isinstance(total, bool) or not isinstance(total, int) or total < 0:
        raise MalformedResponseError(f"'hits.total' must be a non-negative integer, got {total!r}")
    return total


def _hit_list(hits: Mapping[str, Any]) -> list[Any]:
    entries = hits.get("hits")
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise MalformedResponseError("'hits.hits' must be a list")
    return entries


def _decode_hit(position: int, hit: Any, item_type: type[CatalogDocument]) -> CatalogDocument:
    if not isinstance(hit, Mapping):
        raise MalformedResponseError(f"Hit {position} is not an object")
    source = hit.get("_source")
    if not isinstance(source, Mapping):
        raise MalformedResponseError(f"Hit {position} (_id={hit.get('_id')!r}) has no _source document")
    try:
        return item_type.model_validate(source)
    except ValidationError as e:
        raise MalformedResponseError(
            f"Hit {position} (_id={hit.get('_id')!r}) does not match {item_type.__name__}: {e}"
        ) from e
