"""Lexical search engine with selectable BM25 / TF-IDF scoring.

Builds one inverted index and scores it with either algorithm. The algorithm
is fixed at construction (from configuration) and may be overridden per query;
switching it changes only the raw scores, never the result contract.
"""

from collections.abc import Callable
from typing import Any

from privmx_mcp.knowledge.models.document import IndexedDocument
from privmx_mcp.knowledge.models.search_result import ScoredId
from privmx_mcp.knowledge.search.engines.base_engine import BaseSearchEngine, is_language_compatible
from privmx_mcp.knowledge.search.indexing.lexical_indexer import LexicalIndexer
from privmx_mcp.knowledge.search.scoring import LexicalScorer, create_scorer


class LexicalSearchEngine(BaseSearchEngine):
    """Inverted-index search engine.

    Ranking order (deterministic):
    1. Raw score, highest first
    2. Documents matching a query term in the name field before
       documents matching only in the description/examples
    3. Document id, ascending

    Querying before build() returns an empty list, so callers can build once,
    lazily, after loading every namespace.

    Usage:
        >>> engine = LexicalSearchEngine(document_loader=adapter.load_all, algorithm="bm25")
        >>> engine.build()
        >>> hits = engine.search("send message", language="typescript")
        >>> hits[0].id
        'javascript.privmx.ThreadApi.sendMessage(string,string)'
    """

    def __init__(
        self,
        document_loader: Callable[[], list[IndexedDocument]],
        algorithm: str = "bm25",
        k1: float | None = None,
        b: float | None = None,
    ):
        super().__init__(document_loader)
        self.algorithm = algorithm.lower()
        self.k1 = k1
        self.b = b
        self.indexer = LexicalIndexer()
        self._scorers: dict[str, LexicalScorer] = {}
        # fail fast on an unknown algorithm name
        create_scorer(self.algorithm, self.indexer, k1=k1, b=b)

    def build(self) -> None:
        """Load documents and build the inverted index (idempotent)."""
        self.documents = list(self.document_loader())
        self.indexer.build(self.documents)
        self._scorers = {}
        self._is_built = True

    def scorer(self, algorithm: str | None = None) -> LexicalScorer:
        name = (algorithm or self.algorithm).lower()
        if name not in self._scorers:
            self._scorers[name] = create_scorer(name, self.indexer, k1=self.k1, b=self.b)
        return self._scorers[name]

    def search(
        self,
        query: str,
        language: str | None = None,
        top_k: int | None = None,
        algorithm: str | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[ScoredId]:
        """Score the query against every indexed document.

        Args:
            query: Free-text query ("send message", "ThreadApi.createThread")
            language: Optional language filter (compatible families match)
            top_k: Optional maximum number of hits
            algorithm: Override the engine's algorithm for this query
            filters: Optional exact-match filters: ``doc_type`` (value string)
                and ``namespace``

        Returns:
            ScoredId hits with raw scores, best first
        """
        if not self._is_built or not query or not query.strip():
            return []

        query_terms = self.indexer.tokenizer.tokenize_to_set(query)
        if not query_terms:
            return []

        scored = self.scorer(algorithm).score(query_terms)

        hits = []
        for doc_id, (score, matched) in scored.items():
            doc = self.indexer.get_document(doc_id)
            if doc is None:
                continue
            if not is_language_compatible(language, doc.language):
                continue
            if filters and not self._matches_filters(doc, filters):
                continue
            hits.append(
                ScoredId(
                    id=doc_id,
                    score=score,
                    name_match=self.indexer.has_name_match(doc_id, query_terms),
                    matched_terms=tuple(sorted(matched)),
                )
            )

        hits.sort(key=lambda h: (-h.score, not h.name_match, h.id))
        if top_k is not None:
            hits = hits[:top_k]
        return hits

    def get_document(self, doc_id: str) -> IndexedDocument | None:
        return self.indexer.get_document(doc_id)

    def get_index_stats(self) -> dict[str, Any]:
        stats = self.indexer.get_stats()
        stats["algorithm"] = self.algorithm
        stats["is_built"] = self._is_built
        return stats

    @staticmethod
    def _matches_filters(doc: IndexedDocument, filters: dict[str, Any]) -> bool:
        if "doc_type" in filters and doc.doc_type.value != filters["doc_type"]:
            return False
        if "namespace" in filters and doc.namespace != filters["namespace"]:
            return False
        return True
