"""Base search engine interface for PrivMX API search.

This module defines the abstract interface that lexical search engines
implement, plus the language compatibility rule shared by every engine.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from privmx_mcp.knowledge.models.document import IndexedDocument
from privmx_mcp.knowledge.models.search_result import ScoredId

# Languages whose SDK surfaces are interchangeable for search purposes
_COMPATIBLE_LANGUAGES = {
    frozenset({"typescript", "javascript"}),
    frozenset({"java", "kotlin"}),
    frozenset({"csharp", "dotnet"}),
}


def is_language_compatible(requested: str | None, actual: str | None) -> bool:
    """Check whether a document in ``actual`` language answers a ``requested`` filter.

    Documents without a language (workflows, guides) match every filter.

    Example:
        >>> is_language_compatible("typescript", "javascript")
        True
        >>> is_language_compatible("java", "swift")
        False
    """
    if not requested or not actual:
        return True
    requested = requested.lower()
    actual = actual.lower()
    if requested == actual:
        return True
    return frozenset({requested, actual}) in _COMPATIBLE_LANGUAGES


class BaseSearchEngine(ABC):
    """Abstract base class for search engines.

    The engine is responsible for:
    - Building and maintaining search indices
    - Executing queries with language filtering and deterministic ranking
    - Returning raw ScoredId hits (fusion happens in the hybrid ranker)

    Usage:
        >>> engine = LexicalSearchEngine(document_loader=adapter.load_all)
        >>> engine.build()
        >>> hits = engine.search("send message")
    """

    def __init__(self, document_loader: Callable[[], list[IndexedDocument]]):
        """Initialize search engine with document loader.

        Args:
            document_loader: Callable that returns the IndexedDocument list to index.
        """
        self.document_loader = document_loader
        self.documents: list[IndexedDocument] = []
        self._is_built = False

    @abstractmethod
    def build(self) -> None:
        """Load documents and build internal indices, then set ``_is_built``."""

    @abstractmethod
    def search(self, query: str, language: str | None = None, top_k: int | None = None) -> list[ScoredId]:
        """Execute a query.

        Returns:
            Hits sorted best first. Empty list for empty queries or an
            unbuilt index.
        """

    def rebuild(self) -> None:
        self._is_built = False
        self.build()

    def is_built(self) -> bool:
        return self._is_built

    def get_document_count(self) -> int:
        return len(self.documents)
