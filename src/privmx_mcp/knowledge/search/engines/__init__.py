"""Search engines: lexical, semantic and the hybrid ranker that fuses them."""

from privmx_mcp.knowledge.search.engines.base_engine import BaseSearchEngine, is_language_compatible
from privmx_mcp.knowledge.search.engines.hybrid_engine import HybridRanker, normalize_scores
from privmx_mcp.knowledge.search.engines.lexical_engine import LexicalSearchEngine
from privmx_mcp.knowledge.search.engines.semantic_engine import SemanticIndex

__all__ = [
    "BaseSearchEngine",
    "is_language_compatible",
    "LexicalSearchEngine",
    "SemanticIndex",
    "HybridRanker",
    "normalize_scores",
]
