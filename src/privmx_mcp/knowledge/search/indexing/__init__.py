"""Inverted index construction."""

from privmx_mcp.knowledge.search.indexing.lexical_indexer import LexicalIndexer

__all__ = ["LexicalIndexer"]
