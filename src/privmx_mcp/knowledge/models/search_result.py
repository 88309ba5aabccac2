"""Search result models for the PrivMX search system.

Two result shapes exist:
- ScoredId: raw engine hit (lexical or semantic) before fusion
- SearchResult: fused, normalised hit returned to callers
"""

from dataclasses import dataclass, field
from typing import Any

from privmx_mcp.knowledge.models.document import IndexedDocument


@dataclass(frozen=True)
class ScoredId:
    """Raw engine hit.

    Attributes:
        id: Document id
        score: Raw engine score (BM25/TF-IDF sum, or similarity)
        name_match: True if a query term matched the document name field
        matched_terms: Query terms found in the document (lexical only)
    """

    id: str
    score: float
    name_match: bool = False
    matched_terms: tuple[str, ...] = ()


@dataclass
class SearchResult:
    """Fused search result.

    Attributes:
        id: Document id
        score: Fused relevance in [0, 1]
        source_type: Document type value ("method", "class", "workflow", ...)
        matched_fields: Fields the query matched ("name", "text", "semantic")
        lexical_score: Normalised lexical component in [0, 1]
        semantic_score: Normalised semantic component in [0, 1]
        rank: 1-based rank within this ranking pass
        document: Matched document, when the ranker knows it

    Usage:
        >>> result.score
        1.0
        >>> result.matched_fields
        ['name', 'text']
    """

    id: str
    score: float
    source_type: str
    matched_fields: list[str] = field(default_factory=list)
    lexical_score: float = 0.0
    semantic_score: float = 0.0
    rank: int = 0
    document: IndexedDocument | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "score": round(self.score, 4),
            "source_type": self.source_type,
            "matched_fields": self.matched_fields,
            "lexical_score": round(self.lexical_score, 4),
            "semantic_score": round(self.semantic_score, 4),
            "rank": self.rank,
        }
        if self.document is not None:
            payload["name"] = self.document.name
            payload["description"] = self.document.description
            payload["language"] = self.document.language
            payload["namespace"] = self.document.namespace
            payload["metadata"] = self.document.metadata
        return payload
