import asyncio

import pytest

from privmx_mcp.config import ServerConfig, VectorConfig
from privmx_mcp.errors import EmbeddingError
from privmx_mcp.knowledge.vector import InMemoryVectorBackend
from privmx_mcp.service import KnowledgeService, bootstrap_service

from conftest import FailingEmbeddingProvider, FakeQdrant, lexical_only_config, messaging_namespace, qdrant_service


def _memory_config() -> ServerConfig:
    return ServerConfig(vector=VectorConfig(backend="memory"))


@pytest.mark.asyncio
async def test_search_before_build_returns_empty() -> None:
    service = KnowledgeService(lexical_only_config())
    service.add_namespace(messaging_namespace())

    assert service.is_built is False
    assert await service.search("send message") == []


@pytest.mark.asyncio
async def test_build_makes_added_namespaces_searchable() -> None:
    service = KnowledgeService(lexical_only_config())
    service.add_namespace(messaging_namespace())
    await service.build()

    results = await service.search("send message")
    assert results[0].id == "javascript.privmx.sendMessage(string)"
    assert results[0].source_type == "method"


@pytest.mark.asyncio
async def test_concurrent_builds_share_one_generation() -> None:
    service = KnowledgeService(lexical_only_config())
    service.load_api_data()

    first, second = await asyncio.gather(service.build(), service.build())
    assert first is second
    assert first.number == 1

    third = await service.build()
    assert third.number == 2
    assert service.generation is third


@pytest.mark.asyncio
async def test_queries_see_previous_generation_until_rebuild() -> None:
    service = KnowledgeService(lexical_only_config())
    service.add_namespace(messaging_namespace())
    await service.build()

    service.clear()
    assert (await service.search("send message"))[0].id == "javascript.privmx.sendMessage(string)"

    await service.build()
    assert await service.search("send message") == []


@pytest.mark.asyncio
async def test_semantic_service_reports_vectors(semantic_service, fake_embeddings) -> None:
    stats = await semantic_service.get_stats()

    assert stats["semantic"]["is_available"] is True
    assert stats["semantic"]["total_vectors"] == stats["index"]["doc_count"]
    assert stats["index"]["generation"] == 1

    results = await semantic_service.search("upload file", language="typescript", limit=3)
    assert len(results) == 3
    assert fake_embeddings.query_calls >= 1


@pytest.mark.asyncio
async def test_failed_semantic_build_keeps_previous_generation() -> None:
    service = KnowledgeService(
        _memory_config(),
        embeddings=FailingEmbeddingProvider(),
        backend_factory=lambda provider: InMemoryVectorBackend(provider),
    )
    service.load_api_data()
    previous = await service.build(semantic=False)

    with pytest.raises(EmbeddingError):
        await service.build()

    assert service.generation is previous
    assert await service.search("send message")


@pytest.mark.asyncio
async def test_search_falls_back_to_lexical_order_when_vector_store_goes_down(fake_embeddings) -> None:
    qdrant = FakeQdrant()
    service = qdrant_service(qdrant, fake_embeddings)
    await service.build()
    assert any("semantic" in r.matched_fields for r in await service.search("send message"))

    qdrant.online = False
    results = await service.search("send message", limit=5)

    lexical = service.generation.lexical.search("send message", top_k=5)
    assert [r.id for r in results] == [hit.id for hit in lexical]
    assert all(r.semantic_score == 0.0 for r in results)


@pytest.mark.asyncio
async def test_failed_rebuild_keeps_live_vector_collection(fake_embeddings) -> None:
    qdrant = FakeQdrant()
    service = qdrant_service(qdrant, fake_embeddings)
    first = await service.build()
    assert set(qdrant.collections) == {"privmx-api-g1"}

    fake_embeddings.fail_documents = True
    with pytest.raises(EmbeddingError):
        await service.build()

    assert service.generation is first
    assert set(qdrant.collections) == {"privmx-api-g1"}
    assert any("semantic" in r.matched_fields for r in await service.search("send message"))

    fake_embeddings.fail_documents = False
    second = await service.build()
    assert second.number == 2
    assert set(qdrant.collections) == {"privmx-api-g2"}
    assert (await service.get_stats())["semantic"]["total_vectors"] == second.lexical.indexer.doc_count


@pytest.mark.asyncio
async def test_build_with_different_semantic_flag_queues_behind_in_flight_build(semantic_service) -> None:
    first, second = await asyncio.gather(semantic_service.build(), semantic_service.build(semantic=False))

    assert (first.number, second.number) == (2, 3)
    assert first.semantic is not None
    assert second.semantic is None
    assert semantic_service.generation is second


@pytest.mark.asyncio
async def test_bootstrap_falls_back_to_lexical_search() -> None:
    service = await bootstrap_service(_memory_config(), embeddings=FailingEmbeddingProvider())

    assert service.is_built
    stats = await service.get_stats()
    assert stats["semantic"]["is_available"] is False
    assert stats["knowledge"]["namespaces"] >= 2


@pytest.mark.asyncio
async def test_bootstrap_without_embedding_key(monkeypatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    config = ServerConfig(vector=VectorConfig(backend="memory", openai_api_key=None))
    service = await bootstrap_service(config)

    assert service.is_built
    assert (await service.get_stats())["semantic"]["is_available"] is False


@pytest.mark.asyncio
async def test_service_sessions_use_current_workflows(lexical_service) -> None:
    progress = await lexical_service.start_session("build a chat app", {"language": "typescript"})
    assert lexical_service.get_session_status(progress.session_id)["current_step"] == 1

    lexical_service.continue_session(progress.session_id, {"template": "secure-chat"})
    code = lexical_service.generate_step_code(progress.session_id, 2)
    assert "createThread(" in code["code"]
    assert lexical_service.list_sessions()[0]["goal"] == "build a chat app"


@pytest.mark.asyncio
async def test_workflow_queries_through_service(lexical_service) -> None:
    suggestions = await lexical_service.find_workflows_for_goal("inbox notifications")
    assert suggestions[0].workflow.id == "inbox-system"

    next_steps = lexical_service.suggest_next_steps("")
    assert next_steps[0].api_method == "Endpoint.setup"
