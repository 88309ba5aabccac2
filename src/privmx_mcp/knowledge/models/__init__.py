"""Data models for API knowledge, indexed documents and search results."""

from privmx_mcp.knowledge.models.api import APIClass, Constant, Method, Namespace, Parameter
from privmx_mcp.knowledge.models.document import DocumentType, IndexedDocument
from privmx_mcp.knowledge.models.search_result import ScoredId, SearchResult

__all__ = [
    "APIClass",
    "Constant",
    "Method",
    "Namespace",
    "Parameter",
    "DocumentType",
    "IndexedDocument",
    "ScoredId",
    "SearchResult",
]
