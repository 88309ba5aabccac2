"""PrivMX MCP tool implementations."""

from . import (
    find_workflows,
    index_stats,
    search_api,
    sessions,
    suggest_next_steps,
)

__all__ = [
    "search_api",
    "find_workflows",
    "suggest_next_steps",
    "sessions",
    "index_stats",
]
