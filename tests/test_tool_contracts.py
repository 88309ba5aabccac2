"""Contract tests for privmx-mcp tool response structures.

Verifies that each tool returns the expected envelope and field structure,
ensuring the API contract between privmx-mcp and its consumers is stable.
"""

import json

import pytest
import pytest_asyncio

from privmx_mcp.server import mcp
from privmx_mcp.service import KnowledgeService, set_knowledge_service

from conftest import lexical_only_config


def _parse_tool_payload(result) -> dict:
    assert result is not None
    assert len(result.content) > 0
    text = result.content[0].text
    assert text.startswith("{")
    return json.loads(text)


async def _call(name: str, arguments: dict) -> dict:
    result = await mcp._tool_manager.call_tool(name, arguments)
    return _parse_tool_payload(result)


@pytest_asyncio.fixture(autouse=True)
async def knowledge_service():
    service = KnowledgeService(lexical_only_config())
    service.load_api_data()
    await service.build()
    set_knowledge_service(service)
    yield service
    set_knowledge_service(None)


@pytest.mark.asyncio
async def test_all_tools_registered() -> None:
    tools = await mcp._tool_manager.get_tools()
    expected = {
        "privmx_search_api",
        "privmx_find_workflows",
        "privmx_suggest_next_steps",
        "privmx_index_stats",
        "privmx_start_session",
        "privmx_continue_session",
        "privmx_session_status",
        "privmx_pause_session",
        "privmx_resume_session",
        "privmx_cancel_session",
        "privmx_generate_step_code",
        "privmx_list_sessions",
    }
    assert expected == set(tools.keys())


# ── Search ──────────────────────────────────────────────


@pytest.mark.asyncio
async def test_search_api_contract() -> None:
    payload = await _call(
        "privmx_search_api",
        {"query": "send message", "language": "typescript", "doc_type": "method", "limit": 5},
    )
    data = payload["data"]

    assert payload["ok"] is True
    assert payload.get("error") is None
    assert data["source"] == "api"
    assert data["query"] == "send message"
    assert data["summary"]["count"] == len(data["entries"])
    assert data["summary"]["language"] == "typescript"
    assert 1 <= len(data["entries"]) <= 5

    top = data["entries"][0]
    assert top["name"] == "sendMessage"
    assert top["rank"] == 1
    assert top["source_type"] == "method"
    assert 0.0 <= top["score"] <= 1.0
    assert "name" in top["matched_fields"]
    assert top["metadata"]["class_name"] == "ThreadApi"


@pytest.mark.asyncio
async def test_search_api_no_results_is_ok() -> None:
    payload = await _call("privmx_search_api", {"query": "sourdough"})

    assert payload["ok"] is True
    assert payload["data"]["entries"] == []
    assert payload["data"]["summary"]["count"] == 0


@pytest.mark.asyncio
async def test_search_api_blank_query_is_empty_not_error() -> None:
    payload = await _call("privmx_search_api", {"query": "   "})

    assert payload["ok"] is True
    assert payload["data"]["entries"] == []
    assert payload["data"]["summary"]["count"] == 0


@pytest.mark.asyncio
async def test_find_workflows_contract() -> None:
    payload = await _call("privmx_find_workflows", {"goal": "build a chat app"})
    data = payload["data"]

    assert payload["ok"] is True
    assert data["source"] == "workflows"
    top = data["entries"][0]
    assert top["id"] == "secure-messaging"
    assert top["rank"] == 1
    assert 0.0 < top["relevance"] <= 1.0
    assert {"id", "name", "api_method", "prerequisites"} <= set(top["steps"][0])


@pytest.mark.asyncio
async def test_find_workflows_blank_or_unrelated_goal_is_empty() -> None:
    for goal in ("", "   ", "list the planets"):
        payload = await _call("privmx_find_workflows", {"goal": goal})
        assert payload["ok"] is True
        assert payload["data"]["entries"] == []
        assert payload["data"]["summary"]["count"] == 0


@pytest.mark.asyncio
async def test_suggest_next_steps_contract() -> None:
    payload = await _call("privmx_suggest_next_steps", {"current_code": "await Endpoint.setup('/public');"})
    data = payload["data"]

    assert payload["ok"] is True
    assert data["source"] == "next_steps"
    assert data["entries"][0]["api_method"] == "Endpoint.connect"
    assert data["entries"][0]["priority"] == "high"
    assert data["summary"]["high_priority"] >= 1


@pytest.mark.asyncio
async def test_index_stats_contract() -> None:
    payload = await _call("privmx_index_stats", {})
    data = payload["data"]

    assert payload["ok"] is True
    assert data["index"]["is_built"] is True
    assert data["index"]["generation"] == 1
    assert data["knowledge"]["by_type"]["method"] > 0
    assert data["semantic"]["is_available"] is False
    assert data["workflows"] == 4
    assert "typescript" in data["code_generators"]


# ── Sessions ────────────────────────────────────────────


async def _start_session() -> str:
    payload = await _call(
        "privmx_start_session",
        {"goal": "build a chat app", "context": {"language": "typescript"}},
    )
    assert payload["ok"] is True
    return payload["data"]["session_id"]


@pytest.mark.asyncio
async def test_start_and_continue_session_contract() -> None:
    start = await _call("privmx_start_session", {"goal": "build a chat app"})
    data = start["data"]

    assert start["ok"] is True
    assert data["session_id"].startswith("session-")
    assert data["current_step"] == 1
    assert data["total_steps"] == 5
    assert data["is_complete"] is False
    assert data["next_action"]["type"] == "template_selection"
    assert len(data["next_action"]["options"]) >= 3

    step = await _call(
        "privmx_continue_session",
        {"session_id": data["session_id"], "response": {"template": "secure-chat"}},
    )
    assert step["ok"] is True
    assert step["data"]["next_action"]["type"] == "code_generation"
    assert step["data"]["next_action"]["result"] == "Template selected successfully"


@pytest.mark.asyncio
async def test_continue_unknown_session_contract() -> None:
    payload = await _call("privmx_continue_session", {"session_id": "session-missing"})

    assert payload["ok"] is False
    assert payload["error"]["code"] == "session_not_found"
    assert payload["error"]["details"]["session_id"] == "session-missing"


@pytest.mark.asyncio
async def test_continue_cancelled_session_contract() -> None:
    session_id = await _start_session()
    cancel = await _call("privmx_cancel_session", {"session_id": session_id})
    assert cancel["ok"] is True
    assert cancel["data"] == {"session_id": session_id, "accepted": True}

    payload = await _call("privmx_continue_session", {"session_id": session_id})
    assert payload["ok"] is False
    assert payload["error"]["code"] == "invalid_session_state"
    details = payload["error"]["details"]
    assert details["status"] == "cancelled"
    assert details["operation"] == "continue"


@pytest.mark.asyncio
async def test_pause_resume_contract() -> None:
    session_id = await _start_session()

    paused = await _call("privmx_pause_session", {"session_id": session_id})
    assert paused["ok"] is True

    blocked = await _call("privmx_continue_session", {"session_id": session_id})
    assert blocked["error"]["code"] == "invalid_session_state"
    assert blocked["error"]["details"]["action"] == "Resume the session first"

    resumed = await _call("privmx_resume_session", {"session_id": session_id})
    assert resumed["ok"] is True

    status = await _call("privmx_session_status", {"session_id": session_id})
    assert status["data"]["status"] == "active"
    assert status["data"]["progress"] == 20.0


@pytest.mark.asyncio
async def test_rejected_transition_contract() -> None:
    payload = await _call("privmx_pause_session", {"session_id": "session-missing"})

    assert payload["ok"] is False
    assert payload["error"]["code"] == "transition_rejected"
    assert payload["data"] == {"session_id": "session-missing", "accepted": False}


@pytest.mark.asyncio
async def test_generate_step_code_contract() -> None:
    session_id = await _start_session()
    payload = await _call("privmx_generate_step_code", {"session_id": session_id, "step_index": 1})
    data = payload["data"]

    assert payload["ok"] is True
    assert "Endpoint.connect" in data["code"]
    assert data["files"][0]["path"] == "setup.ts"
    assert data["instructions"][-1] == "Step 1 code generated"

    status = await _call("privmx_session_status", {"session_id": session_id})
    assert status["data"]["generated_files"][0]["path"] == "setup.ts"


@pytest.mark.asyncio
async def test_generate_step_code_unsupported_language_contract() -> None:
    start = await _call(
        "privmx_start_session",
        {"goal": "build a chat app", "context": {"language": "kotlin"}},
    )
    session_id = start["data"]["session_id"]
    payload = await _call("privmx_generate_step_code", {"session_id": session_id, "step_index": 1})

    assert payload["ok"] is False
    assert payload["error"]["code"] == "code_generation_failed"


@pytest.mark.asyncio
async def test_list_sessions_contract() -> None:
    session_id = await _start_session()
    payload = await _call("privmx_list_sessions", {})
    data = payload["data"]

    assert payload["ok"] is True
    assert data["source"] == "sessions"
    assert data["summary"]["count"] == 1
    assert data["entries"][0]["session_id"] == session_id
    assert data["entries"][0]["status"] == "active"
