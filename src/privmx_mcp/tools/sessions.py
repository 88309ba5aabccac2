"""Guided session tools: start, continue, inspect and control sessions."""

from typing import Any, Optional

from fastmcp import FastMCP
from pydantic import Field

from privmx_mcp.contracts import build_error, build_error_from_exception, build_ok, build_results_data
from privmx_mcp.errors import KnowledgeError
from privmx_mcp.service import get_knowledge_service
from privmx_mcp.utils import SessionGoal, SessionId, StepIndex


def _transition_result(session_id: str, operation: str, accepted: bool) -> dict[str, Any]:
    if not accepted:
        return build_error(
            "transition_rejected",
            f"Cannot {operation} session {session_id}",
            {"session_id": session_id, "operation": operation},
            data={"session_id": session_id, "accepted": False},
        )
    return build_ok({"session_id": session_id, "accepted": True})


def register(mcp: FastMCP) -> None:
    """Register session tools."""

    @mcp.tool()
    async def privmx_start_session(
        goal: SessionGoal,
        context: Optional[dict[str, Any]] = Field(
            default=None,
            description='Caller context, e.g. {"language": "typescript", "features": ["threads"]}',
        ),
    ) -> dict[str, Any]:
        """Start a guided session that walks from a goal to generated code.

        Returns the session id and the first action (template selection).
        Continue with privmx_continue_session.
        """
        service = await get_knowledge_service()
        progress = await service.start_session(goal, context)
        return build_ok(progress.to_dict())

    @mcp.tool()
    async def privmx_continue_session(
        session_id: SessionId,
        response: Optional[dict[str, Any]] = Field(
            default=None,
            description='Answer to the current action, e.g. {"template": "secure-chat"}',
        ),
    ) -> dict[str, Any]:
        """Advance an active session by one step and return the next action."""
        service = await get_knowledge_service()
        try:
            progress = service.continue_session(session_id, response)
        except KnowledgeError as exc:
            return build_error_from_exception(exc)
        return build_ok(progress.to_dict())

    @mcp.tool()
    async def privmx_session_status(session_id: SessionId) -> dict[str, Any]:
        """Current step, progress, status and generated files of a session."""
        service = await get_knowledge_service()
        try:
            return build_ok(service.get_session_status(session_id))
        except KnowledgeError as exc:
            return build_error_from_exception(exc)

    @mcp.tool()
    async def privmx_pause_session(session_id: SessionId) -> dict[str, Any]:
        """Pause an active session. Resume it with privmx_resume_session."""
        service = await get_knowledge_service()
        return _transition_result(session_id, "pause", service.pause_session(session_id))

    @mcp.tool()
    async def privmx_resume_session(session_id: SessionId) -> dict[str, Any]:
        """Resume a paused session."""
        service = await get_knowledge_service()
        return _transition_result(session_id, "resume", service.resume_session(session_id))

    @mcp.tool()
    async def privmx_cancel_session(session_id: SessionId) -> dict[str, Any]:
        """Cancel a session. Cancelled sessions cannot be continued."""
        service = await get_knowledge_service()
        return _transition_result(session_id, "cancel", service.cancel_session(session_id))

    @mcp.tool()
    async def privmx_generate_step_code(session_id: SessionId, step_index: StepIndex) -> dict[str, Any]:
        """Generate code for a session step.

        Step 1 generates project setup code for the session's language and
        features. Regenerating a step replaces its files.
        """
        service = await get_knowledge_service()
        try:
            return build_ok(service.generate_step_code(session_id, step_index))
        except KnowledgeError as exc:
            return build_error_from_exception(exc)

    @mcp.tool()
    async def privmx_list_sessions() -> dict[str, Any]:
        """List all sessions with their goal, step and status."""
        service = await get_knowledge_service()
        entries = service.list_sessions()
        return build_ok(
            build_results_data(source="sessions", query="", entries=entries, summary={"count": len(entries)})
        )
