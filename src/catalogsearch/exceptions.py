"""Exception taxonomy shared by the query layer, the executor and the transports.

Callers classify failures by type, never by message:

  - ``ConstructionError`` — intent parameters rejected before any request
  - ``TransportError`` — the engine could not be reached (retryable)
  - ``EngineError`` — the engine answered with an error status
      - ``DocumentNotFoundError`` — point lookup/delete on a missing id
      - ``DocumentExistsError`` — create on an existing id or index
  - ``MalformedResponseError`` — success envelope with an unexpected shape
  - ``SearchCancelledError`` — the caller's context was cancelled or expired
  - ``ConfigurationError`` — invalid transport configuration
"""

from __future__ import annotations


class CatalogSearchError(Exception):
    """Base exception for all catalogsearch errors."""

    retryable: bool = False


class ConstructionError(CatalogSearchError, ValueError):
    """Raised when a search intent cannot be turned into a query document."""


class ConfigurationError(CatalogSearchError):
    """Raised when transport configuration is invalid."""


class TransportError(CatalogSearchError):
    """Raised when a request cannot reach the engine or its body cannot be serialized."""

    retryable = True


class EngineError(CatalogSearchError):
    """Raised when the engine accepted the call but reported a failure.

    Attributes:
        status: HTTP status reported by the engine.
        error_type: Engine error type (e.g. ``index_not_found_exception``), if any.
        reason: Human-readable reason from the engine, if any.
    """

    def __init__(self, status: int, reason: str = "", error_type: str | None = None) -> None:
        self.status = status
        self.reason = reason
        self.error_type = error_type
        detail = f"{error_type}: {reason}" if error_type else reason
        super().__init__(f"Engine returned HTTP {status}: {detail}" if detail else f"Engine returned HTTP {status}")


class DocumentNotFoundError(EngineError):
    """Raised when a requested document does not exist."""

    def __init__(self, doc_id: str, index: str = "", reason: str = "") -> None:
        self.doc_id = doc_id
        self.index = index
        super().__init__(404, reason or f"Document '{doc_id}' not found", "not_found")


class DocumentExistsError(EngineError):
    """Raised when creating a document or index that already exists."""

    def __init__(self, status: int = 409, reason: str = "", error_type: str | None = None) -> None:
        super().__init__(status, reason, error_type or "already_exists")


class MalformedResponseError(CatalogSearchError):
    """Raised when a success response does not have the expected shape."""


class SearchCancelledError(CatalogSearchError):
    """Raised when the caller's request context is cancelled or its deadline passes."""
