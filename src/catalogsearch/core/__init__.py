"""Core query layer — build, execute, extract, bulk load."""

from catalogsearch.core.builder import build_query
from catalogsearch.core.context import RequestContext
from catalogsearch.core.executor import SearchExecutor
from catalogsearch.core.extractor import extract
from catalogsearch.core.loader import BulkLoader, encode_bulk_batch
from catalogsearch.core.repository import DocumentRepository

__all__ = [
    "BulkLoader",
    "DocumentRepository",
    "RequestContext",
    "SearchExecutor",
    "build_query",
    "encode_bulk_batch",
    "extract",
]
