"""Hybrid ranker: lexical + semantic score fusion.

Fusion rules:
1. Each engine's scores are max-normalised to [0, 1] (negative cosine
   similarities are clamped to 0 first)
2. ``fused = w_lex * lexical + w_sem * semantic`` with weights normalised to
   sum to 1; a document missing from one engine scores 0 there
3. If the semantic side returned nothing (unavailable), ``w_lex = 1``
4. Order: fused desc, lexical desc, name-field match, id asc

With semantic search unavailable the fused order is exactly the lexical order.
"""

import logging
from typing import Any

from privmx_mcp.knowledge.models.document import IndexedDocument
from privmx_mcp.knowledge.models.search_result import ScoredId, SearchResult
from privmx_mcp.knowledge.search.engines.base_engine import is_language_compatible
from privmx_mcp.knowledge.search.engines.lexical_engine import LexicalSearchEngine
from privmx_mcp.knowledge.search.engines.semantic_engine import SemanticIndex

logger = logging.getLogger("privmx-mcp.search")

# How many semantic candidates to pull per requested result
SEMANTIC_CANDIDATE_FACTOR = 5


def normalize_scores(hits: list[ScoredId]) -> dict[str, float]:
    """Max-normalise hit scores to [0, 1].

    Example:
        >>> normalize_scores([ScoredId("a", 4.0), ScoredId("b", 1.0), ScoredId("c", -0.2)])
        {'a': 1.0, 'b': 0.25, 'c': 0.0}
    """
    clamped = {hit.id: max(0.0, hit.score) for hit in hits}
    top = max(clamped.values(), default=0.0)
    if top <= 0.0:
        return {doc_id: 0.0 for doc_id in clamped}
    return {doc_id: score / top for doc_id, score in clamped.items()}


class HybridRanker:
    """Run one query through both engines and fuse the results.

    Usage:
        >>> ranker = HybridRanker(lexical_engine, semantic_index)
        >>> results = await ranker.search("send message", language="typescript")
        >>> results[0].rank
        1
    """

    def __init__(
        self,
        lexical: LexicalSearchEngine,
        semantic: SemanticIndex | None = None,
        lexical_weight: float = 0.6,
        semantic_weight: float = 0.4,
        max_results: int = 10,
    ):
        self.lexical = lexical
        self.semantic = semantic
        self.lexical_weight = lexical_weight
        self.semantic_weight = semantic_weight
        self.max_results = max_results

    def _weights(self, has_semantic: bool) -> tuple[float, float]:
        total = self.lexical_weight + self.semantic_weight
        if not has_semantic or total <= 0:
            return 1.0, 0.0
        return self.lexical_weight / total, self.semantic_weight / total

    async def search(
        self,
        query: str,
        language: str | None = None,
        limit: int | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[SearchResult]:
        """Fused search.

        Args:
            query: Free-text query
            language: Optional language filter (compatible families match)
            limit: Maximum results, defaults to ``max_results``
            filters: Exact-match filters (``doc_type``, ``namespace``)

        Returns:
            SearchResult list with fused scores in [0, 1], ranks 1..n
        """
        if not query or not query.strip():
            return []
        limit = limit or self.max_results

        lexical_hits = self.lexical.search(query, language=language, filters=filters)
        semantic_hits = await self._semantic_hits(query, language, limit, filters)

        lex_norm = normalize_scores(lexical_hits)
        sem_norm = normalize_scores(semantic_hits)
        w_lex, w_sem = self._weights(bool(semantic_hits))

        lexical_by_id = {hit.id: hit for hit in lexical_hits}
        results: list[SearchResult] = []
        for doc_id in set(lex_norm) | set(sem_norm):
            lex = lex_norm.get(doc_id, 0.0)
            sem = sem_norm.get(doc_id, 0.0)
            document = self.lexical.get_document(doc_id)
            lexical_hit = lexical_by_id.get(doc_id)
            results.append(
                SearchResult(
                    id=doc_id,
                    score=w_lex * lex + w_sem * sem,
                    source_type=document.doc_type.value if document else "unknown",
                    matched_fields=self._matched_fields(lexical_hit, doc_id in sem_norm),
                    lexical_score=lex,
                    semantic_score=sem,
                    document=document,
                )
            )

        name_matches = {hit.id for hit in lexical_hits if hit.name_match}
        results.sort(key=lambda r: (-r.score, -r.lexical_score, r.id not in name_matches, r.id))
        results = results[:limit]
        for rank, result in enumerate(results, start=1):
            result.rank = rank

        logger.debug(
            "query=%r lexical=%d semantic=%d returned=%d",
            query,
            len(lexical_hits),
            len(semantic_hits),
            len(results),
        )
        return results

    async def _semantic_hits(
        self,
        query: str,
        language: str | None,
        limit: int,
        filters: dict[str, Any] | None,
    ) -> list[ScoredId]:
        if self.semantic is None:
            return []
        candidates = await self.semantic.search(query, filters=filters, limit=limit * SEMANTIC_CANDIDATE_FACTOR)
        hits = []
        for hit in candidates:
            document = self.lexical.get_document(hit.id)
            # vectors for documents outside the current generation are ignored
            if document is None:
                continue
            if not is_language_compatible(language, document.language):
                continue
            hits.append(hit)
        return hits

    @staticmethod
    def _matched_fields(lexical_hit: ScoredId | None, semantic_match: bool) -> list[str]:
        fields = []
        if lexical_hit is not None:
            if lexical_hit.name_match:
                fields.append("name")
            fields.append("text")
        if semantic_match:
            fields.append("semantic")
        return fields

    def get_document(self, doc_id: str) -> IndexedDocument | None:
        return self.lexical.get_document(doc_id)
