"""Tests for DocumentRepository."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from catalogsearch.core.repository import DocumentRepository
from catalogsearch.exceptions import (
    DocumentExistsError,
    DocumentNotFoundError,
    EngineError,
    MalformedResponseError,
)
from catalogsearch.models.document import Product, User


@pytest.fixture
def repo(transport: MagicMock) -> DocumentRepository:
    return DocumentRepository(transport, "products")


class TestGet:
    async def test_returns_typed_document(
        self, repo: DocumentRepository, transport: MagicMock, sample_source: dict[str, Any]
    ) -> None:
        transport.get_by_id.return_value = {"_index": "products", "_id": "7", "found": True, "_source": sample_source}
        product = await repo.get("7")
        transport.get_by_id.assert_awaited_once_with("products", "7")
        assert isinstance(product, Product)
        assert product.price == 1249.5

    async def test_not_found_is_distinct_type(self, repo: DocumentRepository, transport: MagicMock) -> None:
        transport.get_by_id.side_effect = DocumentNotFoundError("missing", "products")
        with pytest.raises(DocumentNotFoundError) as exc_info:
            await repo.get("missing")
        assert exc_info.value.doc_id == "missing"
        assert exc_info.value.status == 404
        assert isinstance(exc_info.value, EngineError)

    async def test_missing_source(self, repo: DocumentRepository, transport: MagicMock) -> None:
        transport.get_by_id.return_value = {"_id": "7", "found": True}
        with pytest.raises(MalformedResponseError, match="_source"):
            await repo.get("7")

    async def test_source_of_wrong_shape(self, repo: DocumentRepository, transport: MagicMock) -> None:
        transport.get_by_id.return_value = {"_id": "7", "_source": {"id": "7", "name": "no price"}}
        with pytest.raises(MalformedResponseError):
            await repo.get("7")


class TestWrite:
    async def test_create_sends_json_document(
        self, repo: DocumentRepository, transport: MagicMock, sample_product: Product
    ) -> None:
        await repo.create(sample_product)
        index, doc_id, document = transport.create_document.await_args.args
        assert (index, doc_id) == ("products", "1")
        assert document["brand"] == "Apple"
        assert document["created_at"] is None

    async def test_create_existing(self, repo: DocumentRepository, transport: MagicMock, sample_product: Product) -> None:
        transport.create_document.side_effect = DocumentExistsError(409, "version conflict")
        with pytest.raises(DocumentExistsError):
            await repo.create(sample_product)

    async def test_update_sends_partial_without_nulls(self, transport: MagicMock) -> None:
        repo = DocumentRepository(transport, "users", User)
        await repo.update(User(id="u1", name="Ada Lovelace", email="ada@example.com"))
        transport.update_document.assert_awaited_once_with(
            "users", "u1", {"id": "u1", "name": "Ada Lovelace", "email": "ada@example.com"}
        )

    async def test_delete(self, repo: DocumentRepository, transport: MagicMock) -> None:
        await repo.delete("7")
        transport.delete_by_id.assert_awaited_once_with("products", "7")

    async def test_delete_missing(self, repo: DocumentRepository, transport: MagicMock) -> None:
        transport.delete_by_id.side_effect = DocumentNotFoundError("7", "products")
        with pytest.raises(DocumentNotFoundError):
            await repo.delete("7")


class TestSearch:
    async def test_multi_match_over_fields(
        self, repo: DocumentRepository, transport: MagicMock, sample_source: dict[str, Any], make_response: Any
    ) -> None:
        transport.search.return_value = make_response([sample_source])
        result = await repo.search("professional laptop", ["name", "description"])
        transport.search.assert_awaited_once_with(
            "products",
            {"query": {"multi_match": {"query": "professional laptop", "fields": ["name", "description"]}}},
        )
        assert result.items[0].id == "7"
