"""Lexical scoring algorithms (BM25, TF-IDF)."""

from privmx_mcp.knowledge.search.indexing.lexical_indexer import LexicalIndexer
from privmx_mcp.knowledge.search.scoring.base import LexicalScorer
from privmx_mcp.knowledge.search.scoring.bm25_scorer import BM25Scorer
from privmx_mcp.knowledge.search.scoring.tfidf_scorer import TFIDFScorer

SCORERS = {
    BM25Scorer.name: BM25Scorer,
    TFIDFScorer.name: TFIDFScorer,
}


def create_scorer(algorithm: str, indexer: LexicalIndexer, k1: float | None = None, b: float | None = None) -> LexicalScorer:
    """Create the scorer for ``algorithm`` ("bm25" or "tfidf")."""
    algorithm = algorithm.lower()
    if algorithm == BM25Scorer.name:
        return BM25Scorer(indexer, k1=k1, b=b)
    if algorithm == TFIDFScorer.name:
        return TFIDFScorer(indexer)
    raise ValueError(f"Unknown text algorithm: {algorithm}. Must be one of {sorted(SCORERS)}")


__all__ = ["LexicalScorer", "BM25Scorer", "TFIDFScorer", "SCORERS", "create_scorer"]
