"""Transport layer — Pluggable clients for search engines.

Built-in transports:
  - elasticsearch: Elasticsearch v8+ REST API over ``httpx``
  - opensearch: OpenSearch v2+ via ``opensearch-py`` (optional extra)

Implement ``SearchTransport`` to connect another engine.
"""
