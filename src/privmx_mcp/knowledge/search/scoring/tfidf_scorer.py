"""TF-IDF scoring without length normalisation.

score(q, D) = Σ_t tf(t, D) × log(N / df(t))
"""

import math

from privmx_mcp.knowledge.search.scoring.base import LexicalScorer


class TFIDFScorer(LexicalScorer):
    """Classic TF-IDF over raw term frequencies.

    Document length is ignored: two documents with the same term frequency
    score the same regardless of how long they are.

    Usage:
        >>> scorer = TFIDFScorer(indexer)
        >>> scorer.score({"send", "message"})
        {'javascript.privmx.sendMessage()': (2.77, {'send', 'message'})}
    """

    name = "tfidf"

    def idf(self, term: str) -> float:
        df = self.indexer.get_doc_freq(term)
        n = self.indexer.doc_count
        if n == 0 or df == 0:
            return 0.0
        return math.log(n / df)

    def score_term(self, term: str, tf: int, doc_id: str) -> float:
        return tf * self.idf(term)
