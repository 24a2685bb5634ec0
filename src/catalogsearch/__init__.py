"""catalogsearch — Typed query layer over Elasticsearch-compatible engines."""

from catalogsearch.client import AsyncCatalogClient, CatalogClient
from catalogsearch.core import BulkLoader, RequestContext, SearchExecutor, build_query, extract

__version__ = "0.1.0"

__all__ = [
    "AsyncCatalogClient",
    "BulkLoader",
    "CatalogClient",
    "RequestContext",
    "SearchExecutor",
    "__version__",
    "build_query",
    "extract",
]
