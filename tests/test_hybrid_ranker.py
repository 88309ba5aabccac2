import pytest

from privmx_mcp.knowledge.adapters import APIDocumentAdapter
from privmx_mcp.knowledge.loader import APISpecLoader
from privmx_mcp.knowledge.models import ScoredId
from privmx_mcp.knowledge.search.engines import HybridRanker, LexicalSearchEngine, SemanticIndex, normalize_scores
from privmx_mcp.knowledge.store import KnowledgeStore
from privmx_mcp.knowledge.vector import InMemoryVectorBackend


def _lexical_engine() -> LexicalSearchEngine:
    store = KnowledgeStore()
    APISpecLoader.load_into(store)
    documents = APIDocumentAdapter(store).load_all()
    engine = LexicalSearchEngine(document_loader=lambda: documents)
    engine.build()
    return engine


def test_normalize_scores_clamps_and_scales() -> None:
    scores = normalize_scores([ScoredId("a", 4.0), ScoredId("b", 1.0), ScoredId("c", -0.2)])
    assert scores == {"a": 1.0, "b": 0.25, "c": 0.0}
    assert normalize_scores([]) == {}
    assert normalize_scores([ScoredId("a", 0.0)]) == {"a": 0.0}


@pytest.mark.asyncio
async def test_without_semantic_order_matches_lexical() -> None:
    engine = _lexical_engine()
    ranker = HybridRanker(engine, semantic=None)

    results = await ranker.search("create thread", limit=5)
    lexical = engine.search("create thread", top_k=5)

    assert [r.id for r in results] == [hit.id for hit in lexical]
    assert [r.rank for r in results] == list(range(1, len(results) + 1))
    assert results[0].score == pytest.approx(1.0)
    assert all(0.0 <= r.score <= 1.0 for r in results)
    assert all(r.semantic_score == 0.0 for r in results)


@pytest.mark.asyncio
async def test_unavailable_semantic_index_falls_back_to_lexical(fake_embeddings) -> None:
    engine = _lexical_engine()
    # never initialized: searches return nothing
    semantic = SemanticIndex(fake_embeddings, InMemoryVectorBackend(fake_embeddings))
    ranker = HybridRanker(engine, semantic)

    results = await ranker.search("upload file", limit=5)
    assert [r.id for r in results] == [hit.id for hit in engine.search("upload file", top_k=5)]
    assert fake_embeddings.query_calls == 0


@pytest.mark.asyncio
async def test_fused_results_with_semantic_hits(fake_embeddings) -> None:
    engine = _lexical_engine()
    semantic = SemanticIndex(fake_embeddings, InMemoryVectorBackend(fake_embeddings))
    await semantic.initialize(engine.documents)
    ranker = HybridRanker(engine, semantic)

    results = await ranker.search("send message", language="typescript", limit=8)

    ids = [r.id for r in results]
    assert len(ids) == len(set(ids))
    assert len(results) <= 8
    assert all(0.0 <= r.score <= 1.0 for r in results)
    assert any("semantic" in r.matched_fields for r in results)
    assert all(r.document is None or r.document.language in ("", "javascript") for r in results)
    assert [r.score for r in results] == sorted((r.score for r in results), reverse=True)
    assert results[0].document.name == "sendMessage"


@pytest.mark.asyncio
async def test_doc_type_filter_applies_to_both_engines(fake_embeddings) -> None:
    engine = _lexical_engine()
    semantic = SemanticIndex(fake_embeddings, InMemoryVectorBackend(fake_embeddings))
    await semantic.initialize(engine.documents)
    ranker = HybridRanker(engine, semantic)

    results = await ranker.search("thread", filters={"doc_type": "class"})
    assert results
    assert {r.source_type for r in results} == {"class"}


@pytest.mark.asyncio
async def test_empty_query_returns_nothing() -> None:
    ranker = HybridRanker(_lexical_engine())
    assert await ranker.search("   ") == []


def test_weights_are_normalised() -> None:
    ranker = HybridRanker(_lexical_engine(), lexical_weight=3.0, semantic_weight=1.0)
    assert ranker._weights(True) == (0.75, 0.25)
    assert ranker._weights(False) == (1.0, 0.0)
