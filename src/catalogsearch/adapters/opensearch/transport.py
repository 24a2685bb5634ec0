"""OpenSearch transport — Engine client for OpenSearch (v2+) via ``opensearch-py``.

OpenSearch is an AWS-maintained fork of Elasticsearch with a compatible
query DSL and API surface, so query documents and bulk payloads are shared
with the Elasticsearch transport.  ``opensearch-py`` exceptions are mapped
onto the catalogsearch taxonomy.

Install the optional dependency::

    pip install catalogsearch[opensearch]
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable
from datetime import UTC, datetime
from typing import Any, TypeVar

from catalogsearch.adapters.base.transport import SearchTransport, TransportHealth
from catalogsearch.exceptions import (
    ConfigurationError,
    DocumentExistsError,
    DocumentNotFoundError,
    EngineError,
    TransportError,
)

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class OpenSearchTransport(SearchTransport):
    """Search transport for OpenSearch (v2+).

    Args:
        hosts: List of OpenSearch node URLs.
        username: Optional HTTP basic-auth username.
        password: Optional HTTP basic-auth password.
        api_key: Optional API key sent as ``Authorization: ApiKey ...``.
        ca_cert: Optional CA certificate path.
        verify_certs: Whether to verify TLS certificates.
        timeout: Request timeout in seconds.
        **kwargs: Additional keyword arguments forwarded to ``AsyncOpenSearch``.
    """

    def __init__(
        self,
        hosts: list[str] | None = None,
        username: str | None = None,
        password: str | None = None,
        api_key: str | None = None,
        ca_cert: str | None = None,
        verify_certs: bool = True,
        timeout: float = 30.0,
        **kwargs: Any,
    ) -> None:
        self._hosts = hosts or ["https://localhost:9200"]
        self._username = username
        self._password = password
        self._api_key = api_key
        self._ca_cert = ca_cert
        self._verify_certs = verify_certs
        self._timeout = timeout
        self._extra_kwargs = kwargs
        self._client: Any = None

    @property
    def name(self) -> str:
        return "opensearch"

    async def initialize(self) -> None:
        """Create and verify the ``AsyncOpenSearch`` client."""
        try:
            from opensearchpy import AsyncOpenSearch
        except ImportError as e:
            raise ConfigurationError(
                "opensearch-py package is required.  Install with: pip install catalogsearch[opensearch]"
            ) from e

        client_kwargs: dict[str, Any] = {
            "hosts": self._hosts,
            "verify_certs": self._verify_certs,
            "ssl_show_warn": False,
            "timeout": self._timeout,
        }
        if self._api_key:
            client_kwargs["headers"] = {"Authorization": f"ApiKey {self._api_key}"}
        elif self._username and self._password:
            client_kwargs["http_auth"] = (self._username, self._password)
        if self._ca_cert:
            client_kwargs["ca_certs"] = self._ca_cert

        client_kwargs.update(self._extra_kwargs)

        self._client = AsyncOpenSearch(**client_kwargs)
        try:
            info = await self._call(self._client.info())
        except TransportError as e:
            await self.shutdown()
            raise TransportError(f"Failed to connect to OpenSearch: {e}") from e
        version = info.get("version", {}).get("number", "unknown")
        cluster = info.get("cluster_name", "unknown")
        logger.info("Connected to OpenSearch cluster: %s (v%s)", cluster, version)

    async def shutdown(self) -> None:
        """Close the OpenSearch client."""
        if self._client:
            await self._client.close()
            self._client = None

    # ── Search / bulk ────────────────────────────────────────────────────

    async def search(self, index: str, body: dict[str, Any]) -> dict[str, Any]:
        client = self._require_client()
        return dict(await self._call(client.search(index=index, body=body)))

    async def bulk_write(self, index: str, payload: str) -> dict[str, Any]:
        client = self._require_client()
        return dict(await self._call(client.bulk(body=payload, index=index)))

    async def refresh_index(self, index: str) -> None:
        client = self._require_client()
        await self._call(client.indices.refresh(index=index))

    # ── Documents ────────────────────────────────────────────────────────

    async def get_by_id(self, index: str, doc_id: str) -> dict[str, Any]:
        client = self._require_client()
        return dict(await self._call(client.get(index=index, id=doc_id), doc=(index, doc_id)))

    async def delete_by_id(self, index: str, doc_id: str) -> None:
        client = self._require_client()
        await self._call(client.delete(index=index, id=doc_id), doc=(index, doc_id))

    async def create_document(self, index: str, doc_id: str, document: dict[str, Any]) -> dict[str, Any]:
        client = self._require_client()
        return dict(await self._call(client.create(index=index, id=doc_id, body=document)))

    async def update_document(self, index: str, doc_id: str, partial: dict[str, Any]) -> dict[str, Any]:
        client = self._require_client()
        return dict(
            await self._call(client.update(index=index, id=doc_id, body={"doc": partial}), doc=(index, doc_id))
        )

    # ── Indices ──────────────────────────────────────────────────────────

    async def create_index(self, index: str, body: dict[str, Any] | None = None) -> None:
        client = self._require_client()
        await self._call(client.indices.create(index=index, body=body or {}))

    async def delete_index(self, index: str, *, missing_ok: bool = True) -> None:
        client = self._require_client()
        try:
            await self._call(client.indices.delete(index=index))
        except EngineError as e:
            if not (missing_ok and e.status == 404):
                raise

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> TransportHealth:
        """Check OpenSearch cluster health."""
        if not self._client:
            return TransportHealth(status="unhealthy", message="Client not initialized")

        try:
            start = time.monotonic()
            health = await self._client.cluster.health()
            latency_ms = int((time.monotonic() - start) * 1000)

            status_map = {"green": "healthy", "yellow": "degraded", "red": "unhealthy"}

            return TransportHealth(
                status=status_map.get(health.get("status", "red"), "unhealthy"),
                latency_ms=latency_ms,
                last_check=datetime.now(UTC).isoformat(),
                message=f"Cluster: {health.get('cluster_name')}, Nodes: {health.get('number_of_nodes')}",
            )
        except Exception as e:
            return TransportHealth(status="unhealthy", message=str(e))

    # ── Helpers ──────────────────────────────────────────────────────────

    def _require_client(self) -> Any:
        if not self._client:
            raise TransportError("OpenSearch client not initialized.")
        return self._client

    @staticmethod
    async def _call(aw: Awaitable[_T], *, doc: tuple[str, str] | None = None) -> _T:
        """Await an ``opensearch-py`` call and translate its exceptions."""
        from opensearchpy import exceptions as os_exc

        try:
            return await aw
        except (os_exc.ConnectionError, os_exc.SerializationError) as e:
            raise TransportError(f"OpenSearch request failed: {e}") from e
        except os_exc.TransportError as e:
            status = e.status_code if isinstance(e.status_code, int) else 500
            error_type = e.error if isinstance(e.error, str) else None
            reason = _reason(e.info) or str(e)
            if status == 404 and doc is not None and error_type != "index_not_found_exception":
                index, doc_id = doc
                raise DocumentNotFoundError(doc_id, index, reason) from e
            if status == 409 or error_type == "resource_already_exists_exception":
                raise DocumentExistsError(status, reason, error_type) from e
            raise EngineError(status, reason, error_type) from e


def _reason(info: Any) -> str:
    if isinstance(info, dict):
        error = info.get("error")
        if isinstance(error, dict):
            return str(error.get("reason", ""))
    return ""
