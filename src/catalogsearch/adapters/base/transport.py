"""Base transport — Abstract interface for search engine clients.

Every engine backend implements this interface so the executor, loader and
repository stay engine-agnostic.  A transport is responsible for:
  1. Sending request bodies over the wire and decoding JSON responses
  2. Classifying failures into ``TransportError`` / ``EngineError`` subtypes
  3. Releasing response resources on every exit path
  4. Reporting health status

Transports never retry and never interpret response bodies beyond the
status-level error classification.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field


class TransportHealth(BaseModel):
    """Health status of a transport."""

    status: str = Field(description="Health status: healthy, degraded, unhealthy")
    latency_ms: int = Field(default=0, description="Latency of last health check in ms")
    last_check: str | None = Field(default=None, description="ISO timestamp of last health check")
    message: str | None = Field(default=None, description="Additional health message")


class SearchTransport(ABC):
    """Abstract base class for search engine transports.

    All transports must implement search, bulk write, refresh, and the point
    operations used by the repository.  Instances are safe to share between
    concurrent callers once initialized.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique transport name (e.g., 'elasticsearch', 'opensearch')."""

    @abstractmethod
    async def initialize(self) -> None:
        """Open connections and verify the engine is reachable.

        Raises:
            ConfigurationError: If the configuration is unusable.
            TransportError: If the engine cannot be reached.
        """

    @abstractmethod
    async def shutdown(self) -> None:
        """Close connections and release resources."""

    @abstractmethod
    async def search(self, index: str, body: dict[str, Any]) -> dict[str, Any]:
        """Run a ``_search`` request.

        Args:
            index: Index name or pattern.
            body: Query document.

        Returns:
            Decoded response body.
        """

    @abstractmethod
    async def bulk_write(self, index: str, payload: str) -> dict[str, Any]:
        """Send a newline-delimited bulk payload.

        Args:
            index: Default target index.
            payload: NDJSON action/document lines, newline-terminated.

        Returns:
            Decoded bulk response (``errors`` flag and per-item results).
        """

    @abstractmethod
    async def refresh_index(self, index: str) -> None:
        """Make recently written documents visible to search."""

    @abstractmethod
    async def get_by_id(self, index: str, doc_id: str) -> dict[str, Any]:
        """Fetch one document envelope (``_id``, ``_source``, ...).

        Raises:
            DocumentNotFoundError: If the document does not exist.
        """

    @abstractmethod
    async def delete_by_id(self, index: str, doc_id: str) -> None:
        """Delete one document.

        Raises:
            DocumentNotFoundError: If the document does not exist.
        """

    @abstractmethod
    async def create_document(self, index: str, doc_id: str, document: dict[str, Any]) -> dict[str, Any]:
        """Create a document, failing if the id is taken.

        Raises:
            DocumentExistsError: If a document with *doc_id* exists.
        """

    @abstractmethod
    async def update_document(self, index: str, doc_id: str, partial: dict[str, Any]) -> dict[str, Any]:
        """Merge *partial* into an existing document.

        Raises:
            DocumentNotFoundError: If the document does not exist.
        """

    @abstractmethod
    async def create_index(self, index: str, body: dict[str, Any] | None = None) -> None:
        """Create an index with optional settings/mappings.

        Raises:
            DocumentExistsError: If the index already exists.
        """

    @abstractmethod
    async def delete_index(self, index: str, *, missing_ok: bool = True) -> None:
        """Delete an index; a missing index is ignored when *missing_ok*."""

    @abstractmethod
    async def health_check(self) -> TransportHealth:
        """Check the health of the engine cluster."""
