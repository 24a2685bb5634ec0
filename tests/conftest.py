"""Shared test fixtures and configuration."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from catalogsearch.adapters.base.transport import SearchTransport
from catalogsearch.config.settings import Settings
from catalogsearch.models.document import Product


@pytest.fixture
def settings() -> Settings:
    """Create a test Settings instance with defaults."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        engine={"username": "elastic", "password": "changeme"},
    )


@pytest.fixture
def transport() -> MagicMock:
    """A transport double; every engine call is an AsyncMock."""
    mock = MagicMock(spec=SearchTransport)
    mock.name = "mock"
    for method in (
        "initialize",
        "shutdown",
        "search",
        "bulk_write",
        "refresh_index",
        "get_by_id",
        "delete_by_id",
        "create_document",
        "update_document",
        "create_index",
        "delete_index",
        "health_check",
    ):
        setattr(mock, method, AsyncMock())
    mock.refresh_index.return_value = None
    return mock


@pytest.fixture
def sample_product() -> Product:
    return Product(
        id="1",
        name="Apple Gaming Laptop",
        description="A Gaming Laptop featuring 4K Display and RGB Lighting. Perfect for daily use.",
        price=1899.99,
        categories=["Laptops", "Gaming"],
        brand="Apple",
        in_stock=True,
        rating=4.6,
    )


@pytest.fixture
def sample_source() -> dict[str, Any]:
    """``_source`` of a stored product."""
    return {
        "id": "7",
        "name": "Dell Professional Laptop",
        "description": "A Professional Laptop featuring Long Battery Life and Compact. Perfect for daily use.",
        "price": 1249.5,
        "categories": ["Laptops", "Office"],
        "brand": "Dell",
        "in_stock": True,
        "rating": 4.1,
        "created_at": "2025-03-01T12:00:00Z",
    }


@pytest.fixture
def make_response() -> Any:
    """Factory for ``_search`` response envelopes."""
    return _make_response


@pytest.fixture
def bulk_ok() -> Any:
    """Factory for bulk responses acknowledging every id."""
    return _bulk_ok


def _make_response(sources: list[dict[str, Any]], total: Any = None, **extra: Any) -> dict[str, Any]:
    """Build a ``_search`` response envelope around *sources*."""
    if total is None:
        total = {"value": len(sources), "relation": "eq"}
    return {
        "took": 3,
        "timed_out": False,
        "hits": {
            "total": total,
            "max_score": 1.0,
            "hits": [
                {"_index": "products", "_id": s.get("id"), "_score": 1.0, "_source": s} for s in sources
            ],
        },
        **extra,
    }


def _bulk_ok(ids: list[str]) -> dict[str, Any]:
    """Bulk response acknowledging every id."""
    return {
        "took": 5,
        "errors": False,
        "items": [{"index": {"_index": "products", "_id": i, "status": 201, "result": "created"}} for i in ids],
    }
