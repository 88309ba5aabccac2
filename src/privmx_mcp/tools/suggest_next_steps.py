"""Next Step Tool - follow-on API calls for code written so far."""

from typing import Any

from fastmcp import FastMCP

from privmx_mcp.contracts import build_ok, build_results_data
from privmx_mcp.service import get_knowledge_service
from privmx_mcp.utils import CurrentCode, Language


def register(mcp: FastMCP) -> None:
    """Register privmx_suggest_next_steps tool."""

    @mcp.tool()
    async def privmx_suggest_next_steps(
        current_code: CurrentCode,
        language: Language = None,
    ) -> dict[str, Any]:
        """Suggest the next PrivMX API calls for the code you already have.

        Detects which workflow steps the code already calls and proposes the
        missing steps whose prerequisites are met, with a priority
        (high/medium/low) and a code example.
        """
        service = await get_knowledge_service()
        suggestions = service.suggest_next_steps(current_code, language)
        entries = [suggestion.to_dict() for suggestion in suggestions]
        return build_ok(
            build_results_data(
                source="next_steps",
                query=language or "",
                entries=entries,
                summary={"count": len(entries), "high_priority": sum(e["priority"] == "high" for e in entries)},
            )
        )
