"""Stored document models — Typed projections of engine ``_source`` documents.

Extra fields present in a stored document are ignored so that older clients
keep working when the index gains new fields.  Missing required fields fail
validation; the extractor turns that into ``MalformedResponseError``.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CatalogDocument(BaseModel):
    """Base class for every document type stored in an index."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str = Field(description="Document identifier, also used as the engine ``_id``")


class Product(CatalogDocument):
    """A product in the catalog."""

    name: str = Field(description="Product name (analyzed text)")
    description: str = Field(description="Product description (analyzed text)")
    price: float = Field(ge=0, description="Unit price")
    categories: list[str] = Field(description="Ordered category keywords")
    brand: str = Field(description="Brand keyword")
    in_stock: bool = Field(description="Whether the product is currently in stock")
    rating: float = Field(description="Average rating, 1.0 - 5.0")
    created_at: datetime | None = Field(default=None, description="Creation timestamp")


class User(CatalogDocument):
    """A user account document."""

    name: str = Field(description="Display name")
    email: str = Field(description="Contact email")
    created_at: datetime | None = Field(default=None, description="Creation timestamp")


# Index mapping for ``Product``: identifiers and categorical fields are exact-match
# keywords, free text is analyzed.
PRODUCT_MAPPINGS: dict[str, object] = {
    "mappings": {
        "properties": {
            "id": {"type": "keyword"},
            "name": {"type": "text"},
            "description": {"type": "text"},
            "price": {"type": "float"},
            "categories": {"type": "keyword"},
            "brand": {"type": "keyword"},
            "in_stock": {"type": "boolean"},
            "rating": {"type": "float"},
            "created_at": {"type": "date"},
        }
    }
}
