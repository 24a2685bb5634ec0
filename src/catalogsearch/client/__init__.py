"""catalogsearch client — Async and sync facades.

Usage::

    from catalogsearch.client import AsyncCatalogClient, CatalogClient
"""

from catalogsearch.client.client import AsyncCatalogClient, CatalogClient

__all__ = ["AsyncCatalogClient", "CatalogClient"]
