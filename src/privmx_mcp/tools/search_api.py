"""PrivMX API Search Tool - hybrid keyword/semantic search over the SDK."""

from typing import Any

from fastmcp import FastMCP

from privmx_mcp.contracts import build_ok, build_results_data
from privmx_mcp.service import get_knowledge_service
from privmx_mcp.utils import APISearchQuery, DocType, Language, SearchLimit


def register(mcp: FastMCP) -> None:
    """Register privmx_search_api tool with the MCP server."""

    @mcp.tool()
    async def privmx_search_api(
        query: APISearchQuery,
        language: Language = None,
        limit: SearchLimit = 10,
        doc_type: DocType = None,
    ) -> dict[str, Any]:
        """Search PrivMX SDK namespaces, classes, methods and guides.

        Results are ranked by a fusion of lexical (BM25 or TF-IDF) and, when
        configured, semantic similarity. Scores are in [0, 1].

        When to use:
        - You need the API for a task: "send message", "upload file"
        - You know a method name and want its signature: "createThread"

        Related tools:
        - privmx_find_workflows: Multi-step recipes for a goal
        """
        service = await get_knowledge_service()
        results = await service.search(query, language=language, limit=limit, doc_type=doc_type)
        entries = [result.to_dict() for result in results]

        summary: dict[str, Any] = {"count": len(entries)}
        if language:
            summary["language"] = language
        if not service.is_built:
            summary["hint"] = "Index not built yet"

        return build_ok(build_results_data(source="api", query=query, entries=entries, summary=summary))
