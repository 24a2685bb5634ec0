"""Query builder — Maps search intents to engine-native query documents.

Pure functions, no I/O.  Every validation failure raises
``ConstructionError`` so that a bad intent never reaches the network.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Any

from pydantic import JsonValue

from catalogsearch.exceptions import ConstructionError
from catalogsearch.models.query import (
    AggregationIntent,
    BoolIntent,
    FuzzyIntent,
    MatchIntent,
    MultiMatchIntent,
    PageWindow,
    PhraseIntent,
    QueryDocument,
    RangeIntent,
)

RANGE_BOUNDS = ("gte", "gt", "lte", "lt")
BOOL_CLAUSES = ("must", "should", "must_not", "filter")


def build_query(intent: Any) -> QueryDocument:
    """Build the query document for *intent*.

    Args:
        intent: Any ``SearchIntent`` variant.

    Returns:
        A freshly built query document; equal intents yield equal documents.

    Raises:
        ConstructionError: If the intent parameters are invalid or the
            intent type is unknown.
    """
    builder = _BUILDERS.get(type(intent))
    if builder is None:
        raise ConstructionError(f"Unsupported search intent: {type(intent).__name__}")
    return builder(intent)


def _require_field(kind: str, field: str) -> None:
    if not field:
        raise ConstructionError(f"{kind} requires a non-empty field name")


def _with_page(body: QueryDocument, page: PageWindow | None) -> QueryDocument:
    if page is not None:
        for key, value in (("from", page.from_), ("size", page.size)):
            if value is None:
                continue
            if value < 0:
                raise ConstructionError(f"page '{key}' must be >= 0, got {value}")
            body[key] = value
    return body


def _build_match(intent: MatchIntent) -> QueryDocument:
    _require_field("match", intent.field)
    body: QueryDocument = {"query": {"match": {intent.field: intent.text}}}
    return _with_page(body, intent.page)


def _build_multi_match(intent: MultiMatchIntent) -> QueryDocument:
    if not intent.fields:
        raise ConstructionError("multi_match requires at least one field")
    if any(not f for f in intent.fields):
        raise ConstructionError("multi_match field names must be non-empty")
    body: QueryDocument = {
        "query": {
            "multi_match": {
                "query": intent.text,
                "fields": list(intent.fields),
            }
        }
    }
    return _with_page(body, intent.page)


def _build_bool(intent: BoolIntent) -> QueryDocument:
    clauses: dict[str, JsonValue] = {}
    for name in BOOL_CLAUSES:
        fragments = getattr(intent, name)
        if not fragments:
            continue
        if any(fragment is None for fragment in fragments):
            raise ConstructionError(f"bool '{name}' clause contains a null sub-query")
        clauses[name] = copy.deepcopy(list(fragments))
    return {"query": {"bool": clauses}}


def _build_range(intent: RangeIntent) -> QueryDocument:
    _require_field("range", intent.field)
    unknown = sorted(set(intent.bounds) - set(RANGE_BOUNDS))
    if unknown:
        raise ConstructionError(f"Unknown range bound(s) {unknown}; expected any of {list(RANGE_BOUNDS)}")
    bounds = {k: copy.deepcopy(v) for k, v in intent.bounds.items() if v is not None}
    if not bounds:
        raise ConstructionError(f"range on '{intent.field}' requires at least one bound")
    return {"query": {"range": {intent.field: bounds}}}


def _build_fuzzy(intent: FuzzyIntent) -> QueryDocument:
    _require_field("fuzzy", intent.field)
    return {
        "query": {
            "fuzzy": {
                intent.field: {
                    "value": intent.text,
                    "fuzziness": copy.deepcopy(intent.fuzziness),
                }
            }
        }
    }


def _build_phrase(intent: PhraseIntent) -> QueryDocument:
    _require_field("phrase", intent.field)
    if intent.slop < 0:
        raise ConstructionError(f"phrase slop must be >= 0, got {intent.slop}")
    return {
        "query": {
            "match_phrase": {
                intent.field: {
                    "query": intent.phrase,
                    "slop": intent.slop,
                }
            }
        }
    }


def _build_aggregation(intent: AggregationIntent) -> QueryDocument:
    if not intent.aggregations:
        raise ConstructionError("aggregation search requires at least one aggregation")
    # size=0: only aggregated metrics come back, no hit payload
    return {"size": 0, "aggs": copy.deepcopy(intent.aggregations)}


_BUILDERS: dict[type, Callable[[Any], QueryDocument]] = {
    MatchIntent: _build_match,
    MultiMatchIntent: _build_multi_match,
    BoolIntent: _build_bool,
    RangeIntent: _build_range,
    FuzzyIntent: _build_fuzzy,
    PhraseIntent: _build_phrase,
    AggregationIntent: _build_aggregation,
}
