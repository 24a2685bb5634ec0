"""Elasticsearch transport — REST client for Elasticsearch (v8+) over ``httpx``.

Talks to the Elasticsearch REST API directly using ``httpx`` (async); no
extra dependency beyond ``httpx`` (already a core dependency) is required.
Every response is read in full and closed before it is classified, so no
connection is leaked on error paths.

Usage::

    transport = ElasticsearchTransport(
        hosts=["http://localhost:9200"],
        username="elastic",
        password="changeme",
    )
    await transport.initialize()
    raw = await transport.search("products", {"query": {"match_all": {}}})
"""

from __future__ import annotations

import json
import logging
import ssl
import time
from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

import httpx

from catalogsearch.adapters.base.transport import SearchTransport, TransportHealth
from catalogsearch.exceptions import (
    ConfigurationError,
    DocumentExistsError,
    DocumentNotFoundError,
    EngineError,
    MalformedResponseError,
    TransportError,
)

logger = logging.getLogger(__name__)

_ALREADY_EXISTS = {"resource_already_exists_exception", "version_conflict_engine_exception"}


class ElasticsearchTransport(SearchTransport):
    """Search transport for Elasticsearch (v8+).

    Authentication is either an API key or username/password; one of them
    is required.  TLS verification can use a custom CA certificate, given as
    a file path or as PEM text.

    Args:
        hosts: Elasticsearch node URLs; requests go to the first one.
        username: HTTP basic-auth username.
        password: HTTP basic-auth password.
        api_key: Base64-encoded API key (takes precedence over basic auth).
        ca_cert: CA certificate path or PEM content.
        verify_certs: Whether to verify TLS certificates.
        timeout: HTTP request timeout in seconds.
        **kwargs: Additional keyword arguments forwarded to ``httpx.AsyncClient``.
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
        self._hosts = hosts or ["http://localhost:9200"]
        self._username = username
        self._password = password
        self._api_key = api_key
        self._ca_cert = ca_cert
        self._verify_certs = verify_certs
        self._timeout = timeout
        self._extra_kwargs = kwargs
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return "elasticsearch"

    async def initialize(self) -> None:
        """Create the ``httpx.AsyncClient`` and verify the cluster responds."""
        client_kwargs: dict[str, Any] = {
            "base_url": self._hosts[0].rstrip("/"),
            "timeout": httpx.Timeout(self._timeout),
            "verify": self._ssl_verify(),
        }
        if self._api_key:
            client_kwargs["headers"] = {"Authorization": f"ApiKey {self._api_key}"}
        elif self._username and self._password:
            client_kwargs["auth"] = httpx.BasicAuth(self._username, self._password)
        else:
            raise ConfigurationError("Either api_key or username/password must be provided")

        client_kwargs.update(self._extra_kwargs)
        self._client = httpx.AsyncClient(**client_kwargs)

        try:
            info = self._json(await self._request("GET", "/"))
        except TransportError as e:
            await self.shutdown()
            raise TransportError(f"Failed to connect to Elasticsearch: {e}") from e
        except (EngineError, MalformedResponseError):
            await self.shutdown()
            raise

        version = info.get("version", {}).get("number", "unknown")
        cluster = info.get("cluster_name", "unknown")
        logger.info("Connected to Elasticsearch cluster: %s (v%s)", cluster, version)

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    # ── Search / bulk ────────────────────────────────────────────────────

    async def search(self, index: str, body: dict[str, Any]) -> dict[str, Any]:
        resp = await self._request("POST", f"/{_path(index)}/_search", body=body)
        return self._json(resp)

    async def bulk_write(self, index: str, payload: str) -> dict[str, Any]:
        resp = await self._request(
            "POST",
            f"/{_path(index)}/_bulk",
            content=payload.encode("utf-8"),
            content_type="application/x-ndjson",
        )
        return self._json(resp)

    async def refresh_index(self, index: str) -> None:
        await self._request("POST", f"/{_path(index)}/_refresh")

    # ── Documents ────────────────────────────────────────────────────────

    async def get_by_id(self, index: str, doc_id: str) -> dict[str, Any]:
        resp = await self._request("GET", f"/{_path(index)}/_doc/{_path(doc_id)}", doc=(index, doc_id))
        return self._json(resp)

    async def delete_by_id(self, index: str, doc_id: str) -> None:
        await self._request("DELETE", f"/{_path(index)}/_doc/{_path(doc_id)}", doc=(index, doc_id))

    async def create_document(self, index: str, doc_id: str, document: dict[str, Any]) -> dict[str, Any]:
        resp = await self._request("PUT", f"/{_path(index)}/_create/{_path(doc_id)}", body=document)
        return self._json(resp)

    async def update_document(self, index: str, doc_id: str, partial: dict[str, Any]) -> dict[str, Any]:
        resp = await self._request(
            "POST",
            f"/{_path(index)}/_update/{_path(doc_id)}",
            body={"doc": partial},
            doc=(index, doc_id),
        )
        return self._json(resp)

    # ── Indices ──────────────────────────────────────────────────────────

    async def create_index(self, index: str, body: dict[str, Any] | None = None) -> None:
        await self._request("PUT", f"/{_path(index)}", body=body or {})

    async def delete_index(self, index: str, *, missing_ok: bool = True) -> None:
        try:
            await self._request("DELETE", f"/{_path(index)}")
        except EngineError as e:
            if not (missing_ok and e.status == 404):
                raise
            logger.debug("Index '%s' did not exist", index)

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> TransportHealth:
        """Check Elasticsearch cluster health."""
        if not self._client:
            return TransportHealth(status="unhealthy", message="Client not initialized")

        try:
            start = time.monotonic()
            health = self._json(await self._request("GET", "/_cluster/health"))
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

    async def _request(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        content: bytes | None = None,
        content_type: str = "application/json",
        doc: tuple[str, str] | None = None,
    ) -> httpx.Response:
        """Send one request and classify error statuses.

        Args:
            doc: ``(index, doc_id)`` for point operations, so a 404 becomes
                ``DocumentNotFoundError``.
        """
        if not self._client:
            raise TransportError("Elasticsearch client not initialized.")

        if body is not None:
            try:
                content = json.dumps(body).encode("utf-8")
            except (TypeError, ValueError) as e:
                raise TransportError(f"Failed to serialize request body: {e}") from e

        headers = {"Content-Type": content_type} if content is not None else None
        try:
            resp = await self._client.request(method, path, content=content, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        if resp.is_error:
            raise self._classify_error(resp, doc)
        return resp

    @staticmethod
    def _classify_error(resp: httpx.Response, doc: tuple[str, str] | None) -> EngineError:
        error_type, reason = _error_details(resp)
        if resp.status_code == 404 and doc is not None and error_type != "index_not_found_exception":
            index, doc_id = doc
            return DocumentNotFoundError(doc_id, index, reason)
        if resp.status_code == 409 or error_type in _ALREADY_EXISTS:
            return DocumentExistsError(resp.status_code, reason, error_type)
        return EngineError(resp.status_code, reason, error_type)

    @staticmethod
    def _json(resp: httpx.Response) -> dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise MalformedResponseError(f"Expected a JSON object, got {type(data).__name__}")
        return data

    def _ssl_verify(self) -> ssl.SSLContext | bool:
        if not self._ca_cert:
            return self._verify_certs
        if self._ca_cert.lstrip().startswith("-----BEGIN"):
            return ssl.create_default_context(cadata=self._ca_cert)
        return ssl.create_default_context(cafile=self._ca_cert)


def _path(segment: str) -> str:
    return quote(segment, safe=",*")


def _error_details(resp: httpx.Response) -> tuple[str | None, str]:
    """Pull ``(error_type, reason)`` out of an Elasticsearch error body."""
    try:
        data = resp.json()
    except ValueError:
        return None, resp.text[:500]
    if not isinstance(data, dict):
        return None, str(data)[:500]
    error = data.get("error")
    if isinstance(error, dict):
        return error.get("type"), str(error.get("reason", ""))
    if error is not None:
        return None, str(error)
    if data.get("found") is False:
        return None, "document not found"
    if data.get("result") == "not_found":
        return None, "document not found"
    return None, ""
