"""Integration test fixtures — a live Elasticsearch on localhost:9200.

Start one with, for example:
    docker run -p 9200:9200 -e discovery.type=single-node \
        -e ELASTIC_PASSWORD=changeme docker.elastic.co/elasticsearch/elasticsearch:8.13.0

Credentials are read from CATALOGSEARCH_ENGINE__USERNAME / __PASSWORD
(default ``elastic`` / ``changeme``).  Tests are skipped when the cluster is
not reachable.
"""

from __future__ import annotations

import os
import time

import httpx
import pytest

ES_HOST = os.environ.get("CATALOGSEARCH_TEST_HOST", "http://localhost:9200")
ES_USER = os.environ.get("CATALOGSEARCH_ENGINE__USERNAME", "elastic")
ES_PASSWORD = os.environ.get("CATALOGSEARCH_ENGINE__PASSWORD", "changeme")


def _wait_for_service(url: str, timeout: float = 30.0) -> bool:
    """Block until *url* answers (any status below 500), or timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            r = httpx.get(url, timeout=5, auth=(ES_USER, ES_PASSWORD), verify=False)
            if r.status_code < 500:
                return True
        except httpx.HTTPError:
            pass
        time.sleep(2)
    return False


@pytest.fixture(scope="session")
def elasticsearch_ready() -> str:
    """Ensure Elasticsearch is running."""
    if not _wait_for_service(ES_HOST):
        pytest.skip(f"Elasticsearch not available at {ES_HOST}")
    return ES_HOST


@pytest.fixture(scope="session")
def elasticsearch_auth() -> tuple[str, str]:
    return ES_USER, ES_PASSWORD
