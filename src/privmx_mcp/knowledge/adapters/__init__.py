"""Adapters that turn knowledge sources into IndexedDocuments."""

from privmx_mcp.knowledge.adapters.api_adapter import APIDocumentAdapter, class_doc_id, namespace_doc_id

__all__ = ["APIDocumentAdapter", "class_doc_id", "namespace_doc_id"]
