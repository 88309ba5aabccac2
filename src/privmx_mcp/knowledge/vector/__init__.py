"""Embedding providers and vector store backends.

Backends are registered explicitly by name; the server bootstrap picks one
from ``PRIVMX_MCP_VECTOR_BACKEND`` (``memory``, ``qdrant`` or ``none``).
"""

from collections.abc import Callable

from privmx_mcp.config import VectorConfig
from privmx_mcp.knowledge.vector.backends import (
    InMemoryVectorBackend,
    QdrantVectorBackend,
    VectorStoreAdapter,
    cosine_similarity,
)
from privmx_mcp.knowledge.vector.embedding import EmbeddingProvider, OpenAIEmbeddingProvider

BackendFactory = Callable[[EmbeddingProvider, VectorConfig], VectorStoreAdapter]

VECTOR_BACKENDS: dict[str, BackendFactory] = {
    "memory": lambda embeddings, config: InMemoryVectorBackend(embeddings),
    "qdrant": QdrantVectorBackend.from_config,
}


def register_vector_backend(name: str, factory: BackendFactory) -> None:
    """Register (or replace) a backend factory under ``name``."""
    VECTOR_BACKENDS[name.lower()] = factory


def create_vector_backend(
    name: str, embeddings: EmbeddingProvider, config: VectorConfig
) -> VectorStoreAdapter | None:
    """Instantiate a registered backend.

    Returns:
        The backend, or None for ``"none"`` (semantic search disabled)

    Raises:
        ValueError: If no backend is registered under ``name``
    """
    name = name.lower()
    if name == "none":
        return None
    if name not in VECTOR_BACKENDS:
        raise ValueError(f"Unknown vector backend: {name}. Available: {sorted(VECTOR_BACKENDS)} or 'none'")
    return VECTOR_BACKENDS[name](embeddings, config)


__all__ = [
    "EmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "VectorStoreAdapter",
    "InMemoryVectorBackend",
    "QdrantVectorBackend",
    "cosine_similarity",
    "VECTOR_BACKENDS",
    "register_vector_backend",
    "create_vector_backend",
]
