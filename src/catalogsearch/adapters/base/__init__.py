"""Base transport interface — Abstract classes for search engine clients."""

from catalogsearch.adapters.base.registry import TransportRegistry
from catalogsearch.adapters.base.transport import SearchTransport, TransportHealth

__all__ = ["SearchTransport", "TransportHealth", "TransportRegistry"]
