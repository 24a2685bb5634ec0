"""OpenSearch transport (requires the ``opensearch`` extra)."""

from catalogsearch.adapters.opensearch.transport import OpenSearchTransport

__all__ = ["OpenSearchTransport"]
