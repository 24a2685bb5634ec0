"""Data models — intents, stored documents, results and bulk outcomes."""

from catalogsearch.models.bulk import BatchOutcome, LoadSummary
from catalogsearch.models.document import CatalogDocument, Product, User
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
    SearchIntent,
)
from catalogsearch.models.result import SearchResult

__all__ = [
    "AggregationIntent",
    "BatchOutcome",
    "BoolIntent",
    "CatalogDocument",
    "FuzzyIntent",
    "LoadSummary",
    "MatchIntent",
    "MultiMatchIntent",
    "PageWindow",
    "PhraseIntent",
    "Product",
    "QueryDocument",
    "RangeIntent",
    "SearchIntent",
    "SearchResult",
    "User",
]
