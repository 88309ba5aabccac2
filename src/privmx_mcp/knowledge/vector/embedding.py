"""
Embedding Providers

An EmbeddingProvider turns text into fixed-length vectors. The semantic index
only talks to this interface, so OpenAI can be swapped for any compatible
provider (or a deterministic fake in tests).

- ``initialize()`` must fail fast with EmbeddingUnavailableError when no
  credential is configured; the semantic index treats that as "semantic
  search unavailable", not as a fatal error.
- Network and response failures raise EmbeddingError and are propagated.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import httpx

from privmx_mcp.config import VectorConfig
from privmx_mcp.errors import EmbeddingError, EmbeddingUnavailableError

logger = logging.getLogger("privmx-mcp.embeddings")


class EmbeddingProvider(ABC):
    """Abstraction over embedding back-ends."""

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare credentials / clients. Raise EmbeddingUnavailableError if unconfigured."""

    @abstractmethod
    async def embed_documents(self, texts: Sequence[str]) -> List[List[float]]:
        """Embed a batch of document texts, preserving order."""

    @abstractmethod
    async def embed_query(self, text: str) -> List[float]:
        """Embed a single query."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Name of the embedding model (e.g. "text-embedding-3-small")."""


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """
    Embedding provider for the OpenAI embeddings API (or a compatible endpoint).

    Requests are batched to stay under provider limits; newlines are stripped
    from inputs as the OpenAI guidance recommends.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "text-embedding-3-small",
        base_url: str = "https://api.openai.com/v1/embeddings",
        batch_size: int = 512,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Parameters
        ----------
        api_key : Optional[str]
            OpenAI API key. None or empty means semantic search is unavailable.
        model : str
            Embedding model name.
        base_url : str
            Embeddings endpoint.
        batch_size : int
            Maximum number of inputs per request.
        timeout : float
            HTTP timeout for each request.
        transport : Optional[httpx.AsyncBaseTransport]
            Custom transport (tests use ``httpx.MockTransport``).
        """
        self.api_key = api_key
        self._model = model
        self.base_url = base_url
        self.batch_size = max(1, batch_size)
        self.timeout = timeout
        self._transport = transport
        self._ready = False

    @classmethod
    def from_config(cls, config: VectorConfig) -> "OpenAIEmbeddingProvider":
        return cls(
            api_key=config.openai_api_key,
            model=config.embedding_model,
            base_url=config.embedding_url,
            batch_size=config.batch_size,
            timeout=config.request_timeout_s,
        )

    @property
    def model_name(self) -> str:
        return self._model

    async def initialize(self) -> None:
        if not self.api_key:
            raise EmbeddingUnavailableError("OpenAI API key missing for embeddings provider")
        self._ready = True

    async def embed_documents(self, texts: Sequence[str]) -> List[List[float]]:
        self._ensure_ready()
        if not texts:
            return []

        all_embeddings: List[List[float]] = []
        async with self._client() as client:
            for start in range(0, len(texts), self.batch_size):
                batch = [t.replace("\n", " ") for t in texts[start : start + self.batch_size]]
                all_embeddings.extend(await self._request(client, batch))

        if len(all_embeddings) != len(texts):
            raise EmbeddingError(
                f"Embedding count mismatch: expected {len(texts)}, got {len(all_embeddings)}"
            )
        return all_embeddings

    async def embed_query(self, text: str) -> List[float]:
        self._ensure_ready()
        async with self._client() as client:
            vectors = await self._request(client, [text.replace("\n", " ")])
        if not vectors:
            raise EmbeddingError("Embedding response contained no vectors")
        return vectors[0]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_ready(self) -> None:
        if not self._ready:
            raise EmbeddingError("OpenAIEmbeddingProvider not initialized")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def _request(self, client: httpx.AsyncClient, batch: List[str]) -> List[List[float]]:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        payload = {"model": self._model, "input": batch}
        try:
            response = await client.post(self.base_url, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error(
                "Embedding request failed (%s): batch size=%d, error=%s",
                type(exc).__name__,
                len(batch),
                str(exc),
            )
            raise EmbeddingError(f"Embedding generation failed: {type(exc).__name__}") from exc

        return self._extract_embeddings(response.json())

    @staticmethod
    def _extract_embeddings(data: dict) -> List[List[float]]:
        """
        Parse and validate embedding output format.

        OpenAI returns:
            { "data": [ {"index": 0, "embedding": [...]}, ... ] }
        """
        if not isinstance(data, dict) or "data" not in data:
            raise EmbeddingError("Embedding response missing 'data' field.")

        records = data["data"]
        if not isinstance(records, list):
            raise EmbeddingError("'data' field must be a list.")

        # responses are not guaranteed to be in input order
        records = sorted(records, key=lambda r: r.get("index", 0) if isinstance(r, dict) else 0)

        embeddings: List[List[float]] = []
        for index, record in enumerate(records):
            if not isinstance(record, dict) or "embedding" not in record:
                raise EmbeddingError(f"Malformed embedding record at index {index}: {record!r}")

            emb = record["embedding"]
            if not isinstance(emb, list) or not all(isinstance(x, (float, int)) for x in emb):
                raise EmbeddingError(f"Invalid embedding vector at index {index}: must be float list.")

            embeddings.append([float(x) for x in emb])

        return embeddings
