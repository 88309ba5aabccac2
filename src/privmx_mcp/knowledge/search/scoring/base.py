"""Base interface for lexical scoring algorithms."""

from abc import ABC, abstractmethod

from privmx_mcp.knowledge.search.indexing.lexical_indexer import LexicalIndexer


class LexicalScorer(ABC):
    """Scores documents from the postings of an inverted index.

    Subclasses implement the per-term contribution; accumulation over the
    postings lists is shared so both algorithms visit candidates identically.
    """

    name: str = "lexical"

    def __init__(self, indexer: LexicalIndexer):
        self.indexer = indexer

    @abstractmethod
    def idf(self, term: str) -> float:
        """Inverse document frequency of a term."""

    @abstractmethod
    def score_term(self, term: str, tf: int, doc_id: str) -> float:
        """Contribution of one query term with frequency ``tf`` in ``doc_id``."""

    def score(self, query_terms: set[str]) -> dict[str, tuple[float, set[str]]]:
        """Score every document containing at least one query term.

        Returns:
            doc_id → (raw score, matched query terms)
        """
        scores: dict[str, tuple[float, set[str]]] = {}
        for term in sorted(query_terms):
            for doc_id, tf in self.indexer.get_postings(term):
                contribution = self.score_term(term, tf, doc_id)
                total, matched = scores.get(doc_id, (0.0, set()))
                matched.add(term)
                scores[doc_id] = (total + contribution, matched)
        return scores
