"""Normalized search result model."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, JsonValue

from catalogsearch.models.document import CatalogDocument

ItemT = TypeVar("ItemT", bound=CatalogDocument)


class SearchResult(BaseModel, Generic[ItemT]):
    """Result of one executed search.

    ``total`` is the engine's hit count (possibly a lower bound) and may exceed
    ``len(items)`` when the result is paginated.
    """

    model_config = ConfigDict(frozen=True)

    total: int = Field(default=0, ge=0, description="Total number of matching documents")
    items: list[ItemT] = Field(default_factory=list, description="Typed documents for the returned page")
    aggregations: dict[str, JsonValue] | None = Field(default=None, description="Opaque aggregation payload")
