"""Index statistics tool."""

from typing import Any

from fastmcp import FastMCP

from privmx_mcp.contracts import build_ok
from privmx_mcp.service import get_knowledge_service


def register(mcp: FastMCP) -> None:
    """Register privmx_index_stats tool."""

    @mcp.tool()
    async def privmx_index_stats() -> dict[str, Any]:
        """Knowledge, lexical index and semantic index statistics."""
        service = await get_knowledge_service()
        return build_ok(await service.get_stats())
