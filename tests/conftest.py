import json
import zlib
from typing import List, Sequence

import httpx
import numpy as np
import pytest
import pytest_asyncio

from privmx_mcp.config import ServerConfig, VectorConfig
from privmx_mcp.errors import EmbeddingError
from privmx_mcp.knowledge.models import Method, Namespace, Parameter
from privmx_mcp.knowledge.search.preprocessing import TextTokenizer
from privmx_mcp.knowledge.vector import EmbeddingProvider, InMemoryVectorBackend, QdrantVectorBackend, cosine_similarity
from privmx_mcp.service import KnowledgeService


class FakeEmbeddingProvider(EmbeddingProvider):
    """Deterministic bag-of-words embeddings (hashed token buckets)."""

    def __init__(self, dimension: int = 32, model: str = "fake-embedding") -> None:
        self.dimension = dimension
        self._model = model
        self._tokenizer = TextTokenizer()
        self.document_calls = 0
        self.query_calls = 0
        self.fail_documents = False

    @property
    def model_name(self) -> str:
        return self._model

    async def initialize(self) -> None:
        return None

    def _embed(self, text: str) -> List[float]:
        vector = [0.0] * self.dimension
        for token in self._tokenizer.tokenize(text):
            vector[zlib.crc32(token.encode("utf-8")) % self.dimension] += 1.0
        return vector

    async def embed_documents(self, texts: Sequence[str]) -> List[List[float]]:
        if self.fail_documents:
            raise EmbeddingError("Embedding generation failed: ReadTimeout")
        self.document_calls += 1
        return [self._embed(text) for text in texts]

    async def embed_query(self, text: str) -> List[float]:
        self.query_calls += 1
        return self._embed(text)


class FailingEmbeddingProvider(FakeEmbeddingProvider):
    async def embed_documents(self, texts: Sequence[str]) -> List[List[float]]:
        raise EmbeddingError("Embedding generation failed: ConnectError")


class FakeQdrant:
    """Minimal in-process stand-in for the Qdrant REST endpoints the backend uses.

    Set ``online = False`` to make every request fail with a connection error.
    """

    def __init__(self) -> None:
        self.collections: dict[str, dict] = {}
        self.requests: list[tuple[str, str]] = []
        self.online = True

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if not self.online:
            raise httpx.ConnectError("connection refused", request=request)
        self.requests.append((request.method, request.url.path))
        parts = request.url.path.strip("/").split("/")
        name = parts[1]
        body = json.loads(request.content) if request.content else {}

        if len(parts) == 2:
            if request.method == "GET":
                collection = self.collections.get(name)
                if collection is None:
                    return httpx.Response(404, json={"status": {"error": "Not found"}})
                return httpx.Response(
                    200,
                    json={
                        "result": {
                            "points_count": len(collection["points"]),
                            "config": {"params": {"vectors": collection["vectors"]}},
                        }
                    },
                )
            if request.method == "PUT":
                self.collections[name] = {"vectors": body["vectors"], "points": {}}
                return httpx.Response(200, json={"result": True})
            if request.method == "DELETE":
                self.collections.pop(name, None)
                return httpx.Response(200, json={"result": True})

        collection = self.collections.get(name)
        if collection is None:
            return httpx.Response(404, json={"status": {"error": "Not found"}})
        if parts[-1] == "points":
            for point in body["points"]:
                collection["points"][point["id"]] = point
            return httpx.Response(200, json={"result": {"status": "completed"}})

        # points/search
        query = np.asarray(body["vector"], dtype=np.float32)
        must = body["filter"]["must"]
        scored = []
        for point in collection["points"].values():
            if not all(point["payload"].get(c["key"]) == c["match"]["value"] for c in must):
                continue
            score = float(cosine_similarity(np.asarray([point["vector"]], dtype=np.float32), query)[0])
            scored.append({"id": point["id"], "score": score, "payload": point["payload"]})
        scored.sort(key=lambda p: -p["score"])
        return httpx.Response(200, json={"result": scored[: body["limit"]]})


def qdrant_service(qdrant: FakeQdrant, embeddings: EmbeddingProvider) -> KnowledgeService:
    transport = httpx.MockTransport(qdrant)
    service = KnowledgeService(
        ServerConfig(vector=VectorConfig(backend="qdrant")),
        embeddings=embeddings,
        backend_factory=lambda provider: QdrantVectorBackend(provider, transport=transport),
    )
    service.load_api_data()
    return service


def lexical_only_config() -> ServerConfig:
    return ServerConfig(vector=VectorConfig(backend="none"))


def messaging_namespace(language: str = "javascript") -> Namespace:
    return Namespace(
        name="privmx",
        language=language,
        functions=[
            Method(
                name="sendMessage",
                description="Send a message to a thread",
                parameters=[Parameter(name="threadId", type="string")],
            ),
            Method(
                name="createThread",
                description="Create a secure thread",
                parameters=[Parameter(name="contextId", type="string")],
            ),
        ],
    )


@pytest.fixture
def fake_embeddings() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider()


@pytest_asyncio.fixture
async def lexical_service() -> KnowledgeService:
    service = KnowledgeService(lexical_only_config())
    service.load_api_data()
    await service.build()
    return service


@pytest_asyncio.fixture
async def semantic_service(fake_embeddings) -> KnowledgeService:
    service = KnowledgeService(
        ServerConfig(vector=VectorConfig(backend="memory")),
        embeddings=fake_embeddings,
        backend_factory=lambda provider: InMemoryVectorBackend(provider),
    )
    service.load_api_data()
    await service.build()
    return service
