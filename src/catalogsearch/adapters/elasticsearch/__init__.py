"""Elasticsearch transport."""

from catalogsearch.adapters.elasticsearch.transport import ElasticsearchTransport

__all__ = ["ElasticsearchTransport"]
