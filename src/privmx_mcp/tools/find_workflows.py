"""Workflow Matching Tool - goal to ranked multi-step workflows."""

from typing import Any

from fastmcp import FastMCP

from privmx_mcp.contracts import build_ok, build_results_data
from privmx_mcp.service import get_knowledge_service
from privmx_mcp.utils import Goal, Language


def register(mcp: FastMCP) -> None:
    """Register privmx_find_workflows tool."""

    @mcp.tool()
    async def privmx_find_workflows(
        goal: Goal,
        language: Language = None,
    ) -> dict[str, Any]:
        """Find PrivMX workflows that accomplish a goal.

        Each workflow lists its steps in dependency order with the API method
        and prerequisites of every step. An empty list means no workflow is
        relevant enough; it is not an error.

        Example goals: "build a chat app", "secure file upload", "inbox notifications"
        """
        service = await get_knowledge_service()
        suggestions = await service.find_workflows_for_goal(goal, language)
        entries = [suggestion.to_dict() for suggestion in suggestions]
        return build_ok(
            build_results_data(
                source="workflows",
                query=goal,
                entries=entries,
                summary={"count": len(entries)},
            )
        )
