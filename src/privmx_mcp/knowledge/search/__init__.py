"""Search over the PrivMX API knowledge graph."""

from privmx_mcp.knowledge.search.engines import HybridRanker, LexicalSearchEngine, SemanticIndex

__all__ = ["HybridRanker", "LexicalSearchEngine", "SemanticIndex"]
