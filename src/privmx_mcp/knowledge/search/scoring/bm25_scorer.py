"""BM25 scoring algorithm for the PrivMX search system.

Pure Python (no NumPy). Operates on the shared inverted index.
"""

import math

from privmx_mcp.knowledge.search.indexing.lexical_indexer import LexicalIndexer
from privmx_mcp.knowledge.search.scoring.base import LexicalScorer


class BM25Scorer(LexicalScorer):
    """BM25 ranking function with configurable parameters.

    BM25 formula:
    score(t, D) = IDF(t) × (TF(t, D) × (k1 + 1)) / (TF(t, D) + k1 × (1 - b + b × |D| / avgdl))

    where:
    - IDF(t): Robertson-Spärck Jones IDF, log((N - df + 0.5) / (df + 0.5) + 1)
    - TF(t, D): Frequency of term t in document D
    - |D|: Length of document D in tokens
    - avgdl: Average document length across the index
    - k1: Term frequency saturation (default 1.2)
    - b: Document length normalisation (default 0.75)

    Shorter documents with the same term frequency score higher than longer
    ones whenever b > 0.
    """

    name = "bm25"

    # BM25 hyperparameters (tunable)
    K1 = 1.2
    B = 0.75

    def __init__(self, indexer: LexicalIndexer, k1: float | None = None, b: float | None = None):
        super().__init__(indexer)
        self.k1 = self.K1 if k1 is None else k1
        self.b = self.B if b is None else b

    def idf(self, term: str) -> float:
        df = self.indexer.get_doc_freq(term)
        n = self.indexer.doc_count
        if n == 0 or df == 0:
            return 0.0
        return max(0.0, math.log((n - df + 0.5) / (df + 0.5) + 1))

    def score_term(self, term: str, tf: int, doc_id: str) -> float:
        if tf == 0:
            return 0.0

        doc_len = self.indexer.get_doc_length(doc_id)
        avg_len = self.indexer.avg_doc_len

        if avg_len == 0:
            norm_factor = 1.0
        else:
            norm_factor = 1 - self.b + self.b * (doc_len / avg_len)

        saturated_tf = (tf * (self.k1 + 1)) / (tf + self.k1 * norm_factor)
        return self.idf(term) * saturated_tf
