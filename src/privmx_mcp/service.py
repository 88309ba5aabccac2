"""KnowledgeService: the facade behind every MCP tool.

Owns the knowledge store, the current index generation (lexical engine,
optional semantic index, hybrid ranker, workflow matcher) and the session
engine.

Builds are serialised: a ``build()`` issued while an equivalent one (same
``semantic`` flag) is in flight awaits the same task; a build with a different
flag queues behind it. Each build produces a new generation that replaces the
current one in a single assignment, so queries always see a complete index. A
failed build leaves the previous generation, and its vectors, in place; the
previous generation's vectors are dropped only after a successful swap.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from privmx_mcp.codegen import CodeGeneratorRegistry, create_default_registry
from privmx_mcp.config import ServerConfig, get_server_config
from privmx_mcp.errors import EmbeddingError, VectorStoreError
from privmx_mcp.knowledge.adapters import APIDocumentAdapter
from privmx_mcp.knowledge.loader import APISpecLoader
from privmx_mcp.knowledge.models import IndexedDocument, Namespace, SearchResult
from privmx_mcp.knowledge.search.engines import HybridRanker, LexicalSearchEngine, SemanticIndex
from privmx_mcp.knowledge.store import KnowledgeStore
from privmx_mcp.knowledge.vector import (
    EmbeddingProvider,
    InMemoryVectorBackend,
    OpenAIEmbeddingProvider,
    VectorStoreAdapter,
    create_vector_backend,
)
from privmx_mcp.sessions import InteractiveSessionEngine, SessionProgress, SessionStore
from privmx_mcp.workflows import NextStepSuggestion, WorkflowDefinition, WorkflowMatcher, WorkflowSuggestion

logger = logging.getLogger("privmx-mcp.service")

BackendFactory = Callable[[EmbeddingProvider], VectorStoreAdapter | None]


@dataclass
class IndexGeneration:
    """One immutable, fully built set of indices."""

    number: int
    lexical: LexicalSearchEngine
    ranker: HybridRanker
    matcher: WorkflowMatcher
    semantic: SemanticIndex | None = None
    built_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class KnowledgeService:
    """Search, workflow matching and guided sessions over one knowledge store.

    Usage:
        >>> service = KnowledgeService(config)
        >>> service.load_api_data()
        >>> await service.build()
        >>> results = await service.search("send message", language="typescript")
    """

    def __init__(
        self,
        config: ServerConfig | None = None,
        store: KnowledgeStore | None = None,
        embeddings: EmbeddingProvider | None = None,
        backend_factory: BackendFactory | None = None,
        session_store: SessionStore | None = None,
        code_generators: CodeGeneratorRegistry | None = None,
        workflows: list[WorkflowDefinition] | None = None,
    ):
        """
        Args:
            config: Bootstrap configuration, defaults to environment settings
            store: Knowledge store, a new empty one by default
            embeddings: Embedding provider; defaults to OpenAI unless the
                configured vector backend is ``none``
            backend_factory: Builds the vector backend for a generation;
                defaults to the configured registered backend
            session_store: Session persistence, in-memory by default
            code_generators: Code generation collaborator for sessions
            workflows: Workflow catalog, the built-in one by default
        """
        self.config = config or get_server_config()
        self.store = store or KnowledgeStore()
        vector_config = self.config.vector

        if embeddings is None and vector_config.backend != "none":
            embeddings = OpenAIEmbeddingProvider.from_config(vector_config)
        self.embeddings = embeddings
        self._backend_factory = backend_factory or (
            lambda provider: create_vector_backend(vector_config.backend, provider, vector_config)
        )
        self._workflows = workflows

        self._generation: IndexGeneration | None = None
        self._generation_count = 0
        self._build_lock = asyncio.Lock()
        self._build_task: asyncio.Task[IndexGeneration] | None = None
        self._build_semantic = True

        self._matcher = self._new_matcher(semantic=None)
        self.sessions = InteractiveSessionEngine(
            store=session_store,
            code_generators=code_generators or create_default_registry(self.config.code_generators),
            matcher=self._matcher,
            config=self.config.session,
        )

    # ------------------------------------------------------------------
    # Knowledge
    # ------------------------------------------------------------------

    def add_namespace(self, namespace: Namespace, language: str | None = None) -> list[str]:
        """Store a namespace. Call ``build()`` afterwards to make it searchable."""
        return self.store.add_namespace(namespace, language)

    def add_documents(self, documents: list[IndexedDocument]) -> None:
        self.store.add_documents(documents)

    def load_api_data(self, path: str | Path | None = None) -> int:
        """Load JSON API descriptions (default: configured path, else bundled sample)."""
        return APISpecLoader.load_into(self.store, path or self.config.api_data_path)

    def clear(self) -> None:
        """Drop all knowledge. The current generation keeps serving until the next build."""
        self.store.clear()

    # ------------------------------------------------------------------
    # Index build
    # ------------------------------------------------------------------

    @property
    def is_built(self) -> bool:
        return self._generation is not None

    @property
    def generation(self) -> IndexGeneration | None:
        return self._generation

    async def build(self, semantic: bool = True) -> IndexGeneration:
        """Build a new index generation and swap it in.

        Args:
            semantic: Build the semantic index as well (when configured)

        Raises:
            EmbeddingError / VectorStoreError: If semantic indexing fails; the
                previous generation stays active
        """
        async with self._build_lock:
            task = self._build_task
            if task is None or task.done() or self._build_semantic != semantic:
                pending = task if task is not None and not task.done() else None
                task = asyncio.create_task(self._build_after(pending, semantic))
                self._build_task = task
                self._build_semantic = semantic
        return await task

    async def _build_after(self, pending: asyncio.Task | None, semantic: bool) -> IndexGeneration:
        if pending is not None:
            await asyncio.wait([pending])
        return await self._build_generation(semantic)

    async def _build_generation(self, semantic: bool) -> IndexGeneration:
        number = self._generation_count + 1
        search_config = self.config.search
        documents = APIDocumentAdapter(self.store).load_all()

        lexical = LexicalSearchEngine(
            document_loader=lambda: documents,
            algorithm=search_config.text_algo,
            k1=search_config.bm25_k1,
            b=search_config.bm25_b,
        )
        lexical.build()

        semantic_index = None
        workflow_semantic = None
        if semantic and self.embeddings is not None:
            backend = self._backend_factory(self.embeddings)
            if backend is not None:
                backend.bind_generation(number)
                semantic_index = SemanticIndex(self.embeddings, backend)
                try:
                    await semantic_index.initialize(documents)
                except (EmbeddingError, VectorStoreError):
                    await semantic_index.discard()
                    raise
                if semantic_index.is_available:
                    workflow_semantic = SemanticIndex(self.embeddings, InMemoryVectorBackend(self.embeddings))

        matcher = self._new_matcher(semantic=workflow_semantic)
        await matcher.initialize_semantic()

        ranker = HybridRanker(
            lexical,
            semantic_index,
            lexical_weight=search_config.lexical_weight,
            semantic_weight=search_config.semantic_weight,
            max_results=search_config.max_results,
        )
        self._generation_count = number
        generation = IndexGeneration(
            number=number,
            lexical=lexical,
            ranker=ranker,
            matcher=matcher,
            semantic=semantic_index,
        )

        # swap
        previous = self._generation
        self._generation = generation
        self._matcher = matcher
        self.sessions.matcher = matcher
        logger.info(
            "Index generation %d ready: %d documents (algorithm=%s, semantic=%s)",
            generation.number,
            len(documents),
            search_config.text_algo,
            bool(semantic_index and semantic_index.is_available),
        )
        if previous is not None and previous.semantic is not None:
            await previous.semantic.discard()
        return generation

    def _new_matcher(self, semantic: SemanticIndex | None) -> WorkflowMatcher:
        return WorkflowMatcher(
            workflows=self._workflows,
            search_config=self.config.search,
            min_relevance=self.config.workflow.min_relevance,
            semantic=semantic,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str,
        language: str | None = None,
        limit: int | None = None,
        doc_type: str | None = None,
    ) -> list[SearchResult]:
        """Hybrid search over the current generation ([] before the first build)."""
        generation = self._generation
        if generation is None:
            return []
        filters = {"doc_type": doc_type} if doc_type else None
        return await generation.ranker.search(query, language=language, limit=limit, filters=filters)

    async def find_workflows_for_goal(self, goal: str, language: str | None = None) -> list[WorkflowSuggestion]:
        return await self._matcher.find_workflows_for_goal(goal, language)

    def suggest_next_steps(self, current_code: str, language: str | None = None) -> list[NextStepSuggestion]:
        return self._matcher.suggest_next_steps(current_code, language)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def start_session(self, goal: str, context: dict[str, Any] | None = None) -> SessionProgress:
        return await self.sessions.start(goal, context)

    def continue_session(self, session_id: str, response: dict[str, Any] | None = None) -> SessionProgress:
        return self.sessions.continue_session(session_id, response)

    def get_session_status(self, session_id: str) -> dict[str, Any]:
        return self.sessions.get_status(session_id)

    def pause_session(self, session_id: str) -> bool:
        return self.sessions.pause(session_id)

    def resume_session(self, session_id: str) -> bool:
        return self.sessions.resume(session_id)

    def cancel_session(self, session_id: str) -> bool:
        return self.sessions.cancel(session_id)

    def generate_step_code(self, session_id: str, step_index: int) -> dict[str, Any]:
        return self.sessions.generate_step_code(session_id, step_index)

    def list_sessions(self) -> list[dict[str, Any]]:
        return self.sessions.list_sessions()

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    async def get_stats(self) -> dict[str, Any]:
        generation = self._generation
        stats: dict[str, Any] = {
            "knowledge": self.store.get_stats(),
            "workflows": len(self._matcher.workflows),
            "sessions": len(self.sessions.store.list()),
            "code_generators": self.sessions.code_generators.languages(),
        }
        if generation is None:
            stats["index"] = {"is_built": False}
            stats["semantic"] = {"is_available": False, "total_vectors": 0}
            return stats

        stats["index"] = {
            **generation.lexical.get_index_stats(),
            "generation": generation.number,
            "built_at": generation.built_at.isoformat(),
        }
        if generation.semantic is not None:
            stats["semantic"] = await generation.semantic.get_stats()
        else:
            stats["semantic"] = {"is_available": False, "total_vectors": 0}
        return stats


async def bootstrap_service(
    config: ServerConfig | None = None,
    embeddings: EmbeddingProvider | None = None,
) -> KnowledgeService:
    """Create, load and build a service.

    A semantic build failure is logged and the index is rebuilt lexical-only.
    """
    service = KnowledgeService(config, embeddings=embeddings)
    service.load_api_data()
    try:
        await service.build()
    except (EmbeddingError, VectorStoreError) as exc:
        logger.warning("Semantic index build failed, continuing with lexical search only: %s", exc)
        await service.build(semantic=False)
    return service


_service: KnowledgeService | None = None
_service_lock = asyncio.Lock()


async def get_knowledge_service() -> KnowledgeService:
    """Return the global service instance with lazy initialization."""
    global _service
    async with _service_lock:
        if _service is None:
            _service = await bootstrap_service()
        return _service


def set_knowledge_service(service: KnowledgeService | None) -> None:
    """Replace (or with None, reset) the global service instance."""
    global _service
    _service = service
