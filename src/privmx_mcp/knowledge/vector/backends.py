"""
Vector Store Backends

Interchangeable vector stores behind one VectorStoreAdapter interface:

- InMemoryVectorBackend: numpy matrix + cosine similarity, always available
- QdrantVectorBackend: remote Qdrant collection over its REST API (httpx)

Both embed through the EmbeddingProvider they are constructed with, keep one
embedding model per index, and replace (never duplicate) vectors on re-index
of the same document id.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from threading import RLock
from typing import Any, Dict, List, Optional

import httpx
import numpy as np

from privmx_mcp.config import VectorConfig
from privmx_mcp.errors import VectorDimensionError, VectorStoreError
from privmx_mcp.knowledge.models.document import IndexedDocument
from privmx_mcp.knowledge.models.search_result import ScoredId
from privmx_mcp.knowledge.vector.embedding import EmbeddingProvider

logger = logging.getLogger("privmx-mcp.vector")

# Cosine denominator guard for zero vectors
COSINE_EPSILON = 1e-5


def cosine_similarity(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """Row-wise cosine similarity ``dot(a, b) / (||a|| * ||b|| + eps)``."""
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    return (matrix @ query) / (norms + COSINE_EPSILON)


def _document_payload(doc: IndexedDocument) -> Dict[str, Any]:
    return {
        "doc_id": doc.id,
        "language": doc.language,
        "namespace": doc.namespace,
        "doc_type": doc.doc_type.value,
    }


def _payload_matches(payload: Dict[str, Any], filters: Optional[Dict[str, Any]]) -> bool:
    if not filters:
        return True
    return all(payload.get(key) == value for key, value in filters.items())


class VectorStoreAdapter(ABC):
    """Abstraction over vector DB backends."""

    name: str = "vector"

    def __init__(self, embeddings: EmbeddingProvider) -> None:
        self.embeddings = embeddings

    @abstractmethod
    async def initialize(self) -> None:
        """Open connections. Raise VectorStoreError if the backend is unreachable."""

    @abstractmethod
    async def index_documents(self, documents: List[IndexedDocument]) -> None:
        """Embed and upsert documents (same id replaces)."""

    @abstractmethod
    async def semantic_search(
        self,
        query: str,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 10,
    ) -> List[ScoredId]:
        """Return ids ranked by similarity, best first."""

    def bind_generation(self, number: int) -> None:
        """Scope storage to one index generation (backends with shared remote state)."""

    async def clear_collection(self) -> None:
        """Remove all vectors (optional for backends)."""

    @abstractmethod
    async def get_stats(self) -> Dict[str, Any]:
        """Diagnostics: ``{"total_vectors": int, "is_available": bool, ...}``."""


class InMemoryVectorBackend(VectorStoreAdapter):
    """
    In-process cosine similarity search.

    Scores are raw cosine similarities in [-1, 1]. Thread-safe via an
    internal lock; vectors are held as one float32 matrix.
    """

    name = "memory"

    def __init__(self, embeddings: EmbeddingProvider) -> None:
        super().__init__(embeddings)
        self._ids: List[str] = []
        self._payloads: List[Dict[str, Any]] = []
        self._matrix: Optional[np.ndarray] = None
        self._model: Optional[str] = None
        self._lock = RLock()

    async def initialize(self) -> None:
        return None

    async def index_documents(self, documents: List[IndexedDocument]) -> None:
        if not documents:
            return

        # dedupe within the batch, last one wins
        unique: Dict[str, IndexedDocument] = {doc.id: doc for doc in documents}
        docs = list(unique.values())
        vectors = await self.embeddings.embed_documents([doc.text for doc in docs])
        new_matrix = self._validate(vectors, len(docs))

        with self._lock:
            self._check_model()
            if self._matrix is not None and self._matrix.shape[1] != new_matrix.shape[1]:
                raise VectorDimensionError(
                    f"Vector dimension {new_matrix.shape[1]} does not match index dimension "
                    f"{self._matrix.shape[1]}"
                )

            positions = {doc_id: i for i, doc_id in enumerate(self._ids)}
            rows = [] if self._matrix is None else list(self._matrix)
            for doc, vector in zip(docs, new_matrix):
                payload = _document_payload(doc)
                if doc.id in positions:
                    rows[positions[doc.id]] = vector
                    self._payloads[positions[doc.id]] = payload
                else:
                    positions[doc.id] = len(self._ids)
                    self._ids.append(doc.id)
                    self._payloads.append(payload)
                    rows.append(vector)

            self._matrix = np.vstack(rows).astype(np.float32)
            self._model = self.embeddings.model_name

    async def semantic_search(
        self,
        query: str,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 10,
    ) -> List[ScoredId]:
        with self._lock:
            if self._matrix is None or not self._ids:
                return []

        query_vector = np.asarray(await self.embeddings.embed_query(query), dtype=np.float32)

        with self._lock:
            if query_vector.shape[0] != self._matrix.shape[1]:
                raise VectorDimensionError(
                    f"Query dimension {query_vector.shape[0]} does not match index dimension "
                    f"{self._matrix.shape[1]}"
                )
            scores = cosine_similarity(self._matrix, query_vector)
            hits = [
                ScoredId(id=doc_id, score=float(score))
                for doc_id, payload, score in zip(self._ids, self._payloads, scores)
                if _payload_matches(payload, filters)
            ]

        hits.sort(key=lambda h: (-h.score, h.id))
        return hits[:limit]

    async def clear_collection(self) -> None:
        with self._lock:
            self._ids = []
            self._payloads = []
            self._matrix = None
            self._model = None

    async def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "backend": self.name,
                "total_vectors": len(self._ids),
                "is_available": self._matrix is not None,
                "model": self._model,
                "dimension": None if self._matrix is None else int(self._matrix.shape[1]),
            }

    def _check_model(self) -> None:
        if self._model is not None and self._model != self.embeddings.model_name:
            raise VectorStoreError(
                f"Index holds '{self._model}' vectors; refusing to mix in '{self.embeddings.model_name}'"
            )

    @staticmethod
    def _validate(vectors: List[List[float]], expected: int) -> np.ndarray:
        if len(vectors) != expected:
            raise VectorStoreError("Embedding count does not match document count.")
        matrix = np.asarray(vectors, dtype=np.float32)
        if matrix.ndim != 2 or matrix.shape[1] == 0:
            raise VectorDimensionError("Embedding vectors must be non-empty and of equal length.")
        return matrix


class QdrantVectorBackend(VectorStoreAdapter):
    """
    Remote vector store backed by a Qdrant collection (REST API via httpx).

    Qdrant reports cosine similarity (``1 - cosine distance``) for collections
    created with ``distance: Cosine``; that value is the returned score.
    Point ids are UUIDv5 of the document id so re-indexing overwrites.

    Each index generation writes to its own collection
    (``<collection>-g<number>``) so a failed rebuild never touches the
    collection the live generation reads from.
    """

    name = "qdrant"

    def __init__(
        self,
        embeddings: EmbeddingProvider,
        url: str = "http://localhost:6333",
        collection: str = "privmx-api",
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(embeddings)
        self.url = url.rstrip("/")
        self.base_collection = collection
        self.collection = collection
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._dimension: Optional[int] = None
        self._initialized = False

    @classmethod
    def from_config(cls, embeddings: EmbeddingProvider, config: VectorConfig) -> "QdrantVectorBackend":
        return cls(
            embeddings,
            url=config.qdrant_url,
            collection=config.qdrant_collection,
            api_key=config.qdrant_api_key,
            timeout=config.request_timeout_s,
        )

    def bind_generation(self, number: int) -> None:
        self.collection = f"{self.base_collection}-g{number}"
        self._dimension = None

    async def initialize(self) -> None:
        info = await self._call("GET", f"/collections/{self.collection}", allow_missing=True)
        if info is not None:
            vectors = info.get("result", {}).get("config", {}).get("params", {}).get("vectors", {})
            if isinstance(vectors, dict) and "size" in vectors:
                self._dimension = int(vectors["size"])
        self._initialized = True
        logger.info("Connected to Qdrant at %s (collection=%s)", self.url, self.collection)

    async def index_documents(self, documents: List[IndexedDocument]) -> None:
        self._ensure_ready()
        if not documents:
            return

        unique: Dict[str, IndexedDocument] = {doc.id: doc for doc in documents}
        docs = list(unique.values())
        vectors = await self.embeddings.embed_documents([doc.text for doc in docs])
        if len(vectors) != len(docs):
            raise VectorStoreError("Embedding count does not match document count.")

        dimension = len(vectors[0])
        if any(len(v) != dimension for v in vectors):
            raise VectorDimensionError("Embedding vectors must be of equal length.")
        if self._dimension is None:
            await self._call(
                "PUT",
                f"/collections/{self.collection}",
                json={"vectors": {"size": dimension, "distance": "Cosine"}},
            )
            self._dimension = dimension
        elif self._dimension != dimension:
            raise VectorDimensionError(
                f"Vector dimension {dimension} does not match collection dimension {self._dimension}"
            )

        points = [
            {
                "id": str(uuid.uuid5(uuid.NAMESPACE_URL, doc.id)),
                "vector": vector,
                "payload": {**_document_payload(doc), "model": self.embeddings.model_name},
            }
            for doc, vector in zip(docs, vectors)
        ]
        await self._call("PUT", f"/collections/{self.collection}/points?wait=true", json={"points": points})

    async def semantic_search(
        self,
        query: str,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 10,
    ) -> List[ScoredId]:
        self._ensure_ready()
        if self._dimension is None:
            return []

        vector = await self.embeddings.embed_query(query)
        must = [{"key": "model", "match": {"value": self.embeddings.model_name}}]
        for key, value in (filters or {}).items():
            must.append({"key": key, "match": {"value": value}})

        body = {"vector": vector, "limit": limit, "with_payload": True, "filter": {"must": must}}
        data = await self._call("POST", f"/collections/{self.collection}/points/search", json=body)

        hits = []
        for point in (data or {}).get("result", []):
            payload = point.get("payload") or {}
            doc_id = payload.get("doc_id")
            if doc_id is None:
                continue
            hits.append(ScoredId(id=doc_id, score=float(point.get("score", 0.0))))
        hits.sort(key=lambda h: (-h.score, h.id))
        return hits[:limit]

    async def clear_collection(self) -> None:
        self._ensure_ready()
        await self._call("DELETE", f"/collections/{self.collection}", allow_missing=True)
        self._dimension = None

    async def get_stats(self) -> Dict[str, Any]:
        total = 0
        available = False
        if self._initialized:
            try:
                info = await self._call("GET", f"/collections/{self.collection}", allow_missing=True)
            except VectorStoreError as exc:
                logger.warning("Qdrant stats unavailable: %s", exc)
                info = None
            else:
                available = True
            if info is not None:
                total = int(info.get("result", {}).get("points_count") or 0)
        return {
            "backend": self.name,
            "collection": self.collection,
            "total_vectors": total,
            "is_available": available,
            "model": self.embeddings.model_name,
            "dimension": self._dimension,
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_ready(self) -> None:
        if not self._initialized:
            raise VectorStoreError("QdrantVectorBackend not initialized")

    async def _call(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        allow_missing: bool = False,
    ) -> Optional[Dict[str, Any]]:
        headers = {"api-key": self.api_key} if self.api_key else {}
        try:
            async with httpx.AsyncClient(
                base_url=self.url, timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.request(method, path, json=json, headers=headers)
            if allow_missing and response.status_code == 404:
                return None
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise VectorStoreError(f"Qdrant {method} {path} failed: {type(exc).__name__}: {exc}") from exc
        return response.json()
