"""Semantic index: embedding provider + vector store adapter.

Degrades instead of failing when semantic search cannot run:

- no provider / no backend / no credential → no-op, ``search`` returns []
- remote backend unreachable at build → documents are kept in the in-memory backend
- backend or provider failing at query time → the query gets no semantic hits

Embedding failures during indexing propagate; the caller decides whether the
build survives without semantics.
"""

import logging
from typing import Any

from privmx_mcp.errors import EmbeddingError, EmbeddingUnavailableError, VectorStoreError
from privmx_mcp.knowledge.models.document import IndexedDocument
from privmx_mcp.knowledge.models.search_result import ScoredId
from privmx_mcp.knowledge.vector.backends import InMemoryVectorBackend, VectorStoreAdapter
from privmx_mcp.knowledge.vector.embedding import EmbeddingProvider

logger = logging.getLogger("privmx-mcp.semantic")


class SemanticIndex:
    """Similarity search over embedded documents.

    An empty result means "unavailable or nothing similar", never an error.

    Usage:
        >>> index = SemanticIndex(provider, InMemoryVectorBackend(provider))
        >>> await index.initialize(documents)
        >>> hits = await index.search("send a message", limit=5)
    """

    def __init__(self, provider: EmbeddingProvider | None, backend: VectorStoreAdapter | None):
        self.provider = provider
        self.backend = backend
        self._available = False
        self._fallback = False
        self._connected = False

    @property
    def is_available(self) -> bool:
        return self._available

    async def initialize(self, documents: list[IndexedDocument]) -> None:
        """Embed and upsert every document.

        Raises:
            EmbeddingError: If the provider fails while embedding
            VectorStoreError: If the backend rejects vectors after connecting
        """
        self._available = False
        if self.provider is None or self.backend is None:
            logger.info("Semantic search disabled (no provider or vector backend)")
            return

        try:
            await self.provider.initialize()
        except EmbeddingUnavailableError as exc:
            logger.info("Semantic search unavailable: %s", exc)
            return

        try:
            await self.backend.initialize()
        except VectorStoreError as exc:
            logger.warning("Vector backend '%s' unreachable, using in-memory vectors: %s", self.backend.name, exc)
            self.backend = InMemoryVectorBackend(self.provider)
            self._fallback = True
            await self.backend.initialize()
        self._connected = True

        await self.backend.clear_collection()
        await self.backend.index_documents(documents)
        self._available = True
        logger.info(
            "Semantic index ready: %d documents (%s, model=%s)",
            len(documents),
            self.backend.name,
            self.provider.model_name,
        )

    async def search(self, query: str, filters: dict[str, Any] | None = None, limit: int = 10) -> list[ScoredId]:
        if not self._available or self.backend is None or not query or not query.strip():
            return []
        try:
            return await self.backend.semantic_search(query, filters=filters, limit=limit)
        except (EmbeddingError, VectorStoreError) as exc:
            logger.warning("Semantic search failed on '%s', using lexical results only: %s", self.backend.name, exc)
            return []

    async def discard(self) -> None:
        """Drop the stored vectors once this index is no longer served."""
        self._available = False
        if self.backend is None or not self._connected:
            return
        try:
            await self.backend.clear_collection()
        except VectorStoreError as exc:
            logger.warning("Could not drop vectors from '%s': %s", self.backend.name, exc)

    async def get_stats(self) -> dict[str, Any]:
        if self.backend is None:
            return {"backend": None, "total_vectors": 0, "is_available": False}
        stats = await self.backend.get_stats()
        stats["is_available"] = self._available and stats.get("is_available", False)
        stats["fallback"] = self._fallback
        return stats
