import asyncio
from concurrent.futures import ThreadPoolExecutor

import pytest

from privmx_mcp.config import SessionConfig
from privmx_mcp.errors import CodeGenerationError, InvalidSessionStateError, SessionNotFoundError
from privmx_mcp.sessions import InteractiveSessionEngine, SessionStatus
from privmx_mcp.workflows import WorkflowMatcher


def _engine() -> InteractiveSessionEngine:
    return InteractiveSessionEngine(matcher=WorkflowMatcher())


@pytest.mark.asyncio
async def test_session_walks_from_goal_to_completion() -> None:
    engine = _engine()
    progress = await engine.start("build a chat app", {"language": "typescript"})

    assert progress.current_step == 1
    assert progress.total_steps == 5
    assert progress.is_complete is False
    assert progress.next_action.type.value == "template_selection"
    option_ids = [option["id"] for option in progress.next_action.options]
    assert option_ids[:3] == ["secure-chat", "file-sharing", "feedback-inbox"]
    assert "secure-messaging" in option_ids

    steps = [engine.continue_session(progress.session_id, {"template": "secure-chat"}) for _ in range(4)]

    assert [s.next_action.type.value for s in steps] == ["code_generation", "validation", "completion", "completion"]
    assert [s.is_complete for s in steps] == [False, False, True, True]
    assert [s.current_step for s in steps] == [2, 3, 4, 4]
    assert engine.get_status(progress.session_id)["status"] == "completed"


@pytest.mark.asyncio
async def test_template_selection_sets_workflow_and_features() -> None:
    engine = _engine()
    progress = await engine.start("share files", {})
    engine.continue_session(progress.session_id, {"template": "file-sharing"})

    session = engine.store.get(progress.session_id)
    assert session.context["workflow_id"] == "file-storage"
    assert session.context["features"] == ["stores"]


@pytest.mark.asyncio
async def test_cancel_completed_session_then_continue_fails() -> None:
    engine = _engine()
    progress = await engine.start("build a chat app")
    for _ in range(3):
        engine.continue_session(progress.session_id)

    assert engine.cancel(progress.session_id) is True
    with pytest.raises(InvalidSessionStateError) as exc_info:
        engine.continue_session(progress.session_id)
    assert exc_info.value.status == "cancelled"
    assert "is not active" in str(exc_info.value)


@pytest.mark.asyncio
async def test_pause_blocks_continue_until_resumed() -> None:
    engine = _engine()
    progress = await engine.start("build a chat app")

    assert engine.pause(progress.session_id) is True
    with pytest.raises(InvalidSessionStateError):
        engine.continue_session(progress.session_id)
    assert engine.get_status(progress.session_id)["current_step"] == 1

    assert engine.resume(progress.session_id) is True
    assert engine.continue_session(progress.session_id).current_step == 2


@pytest.mark.asyncio
async def test_transitions_from_terminal_states_are_rejected() -> None:
    engine = _engine()
    progress = await engine.start("build a chat app")
    engine.cancel(progress.session_id)

    assert engine.pause(progress.session_id) is False
    assert engine.resume(progress.session_id) is False
    assert engine.cancel(progress.session_id) is True
    assert engine.get_status(progress.session_id)["status"] == SessionStatus.CANCELLED.value


def test_unknown_session_id() -> None:
    engine = _engine()
    with pytest.raises(SessionNotFoundError):
        engine.continue_session("session-missing")
    with pytest.raises(SessionNotFoundError):
        engine.get_status("session-missing")
    with pytest.raises(SessionNotFoundError):
        engine.generate_step_code("session-missing", 1)
    assert engine.pause("session-missing") is False
    assert engine.resume("session-missing") is False
    assert engine.cancel("session-missing") is False
    assert engine._locks == {}


@pytest.mark.asyncio
async def test_session_lock_created_only_for_known_sessions() -> None:
    engine = _engine()
    progress = await engine.start("build a chat app")
    engine.continue_session(progress.session_id)
    engine.pause(progress.session_id)
    engine.pause("session-missing")

    assert set(engine._locks) == {progress.session_id}


@pytest.mark.asyncio
async def test_status_reports_progress() -> None:
    engine = _engine()
    progress = await engine.start("build a chat app")
    engine.continue_session(progress.session_id)

    status = engine.get_status(progress.session_id)
    assert status == {
        "session_id": progress.session_id,
        "current_step": 2,
        "total_steps": 5,
        "progress": 40.0,
        "status": "active",
        "generated_files": [],
    }


@pytest.mark.asyncio
async def test_total_steps_is_configurable() -> None:
    engine = InteractiveSessionEngine(config=SessionConfig(total_steps=8))
    progress = await engine.start("build a chat app")
    assert progress.total_steps == 8
    assert engine.continue_session(progress.session_id).next_action.type.value == "code_generation"


@pytest.mark.asyncio
async def test_regenerating_step_code_keeps_one_file_record() -> None:
    engine = _engine()
    progress = await engine.start("build a chat app", {"language": "typescript", "features": ["threads"]})

    first = engine.generate_step_code(progress.session_id, 1)
    second = engine.generate_step_code(progress.session_id, 1)

    assert first["code"] == second["code"]
    assert "Endpoint.createThreadApi" in first["code"]
    assert first["instructions"][-1] == "Step 1 code generated"
    files = engine.get_status(progress.session_id)["generated_files"]
    assert files == [{"path": "setup.ts", "description": "PrivMX project setup", "status": "generated"}]


@pytest.mark.asyncio
async def test_unsupported_language_leaves_session_unchanged() -> None:
    engine = _engine()
    progress = await engine.start("build a chat app", {"language": "cobol"})
    before = engine.get_status(progress.session_id)

    with pytest.raises(CodeGenerationError):
        engine.generate_step_code(progress.session_id, 1)
    assert engine.get_status(progress.session_id) == before


@pytest.mark.asyncio
async def test_later_steps_use_the_selected_workflow() -> None:
    engine = _engine()
    progress = await engine.start("build a chat app")
    engine.continue_session(progress.session_id, {"template": "secure-chat"})

    result = engine.generate_step_code(progress.session_id, 2)
    assert result["code"].startswith("// Secure Messaging Application")
    assert "threadApi.sendMessage(" in result["code"]
    assert result["files"] == []


@pytest.mark.asyncio
async def test_concurrent_continue_calls_are_serialised() -> None:
    engine = _engine()
    progress = await engine.start("build a chat app")

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: engine.continue_session(progress.session_id), range(8)))

    steps = sorted(r.current_step for r in results)
    assert steps == [2, 3, 4, 4, 4, 4, 4, 4]
    assert sum(not r.is_complete for r in results) == 2


@pytest.mark.asyncio
async def test_sessions_are_independent() -> None:
    engine = _engine()
    first, second = await asyncio.gather(engine.start("chat"), engine.start("files"))
    assert first.session_id != second.session_id

    engine.cancel(first.session_id)
    assert engine.continue_session(second.session_id).current_step == 2
    assert [s["session_id"] for s in engine.list_sessions()] == [first.session_id, second.session_id]
