"""PrivMX MCP Server - PrivMX SDK search, workflows and guided sessions over MCP."""

import argparse
import asyncio
import logging

from fastmcp import FastMCP

from privmx_mcp import __version__
from privmx_mcp.service import get_knowledge_service
from privmx_mcp.tools import (
    find_workflows,
    index_stats,
    search_api,
    sessions,
    suggest_next_steps,
)

mcp = FastMCP(
    "PrivMX MCP Server",
    instructions=(
        "PrivMX SDK assistant. "
        "Provides tools for searching the PrivMX API (namespaces, classes, methods), "
        "finding multi-step workflows for a goal, suggesting next API calls for existing code, "
        "and running guided sessions that generate project setup code."
    ),
)

logger = logging.getLogger("privmx-mcp.server")

# Register search tools
search_api.register(mcp)
find_workflows.register(mcp)
suggest_next_steps.register(mcp)
index_stats.register(mcp)

# Register session tools
sessions.register(mcp)


def main():
    """Entry point for the PrivMX MCP server."""
    parser = argparse.ArgumentParser(
        prog="privmx-mcp",
        description="PrivMX MCP Server - PrivMX SDK search, workflows and guided sessions over MCP",
    )
    parser.add_argument("--version", "-v", action="version", version=f"privmx-mcp {__version__}")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http", "sse"],
        default="stdio",
        help="Transport protocol (default: stdio)",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind when using http/sse transport (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind when using http/sse transport (default: 8000)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for privmx-mcp loggers (default: INFO)",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    logging.getLogger("privmx-mcp").setLevel(args.log_level)

    run_kwargs: dict = {"transport": args.transport, "show_banner": False}
    if args.transport in ("http", "sse"):
        run_kwargs["host"] = args.host
        run_kwargs["port"] = args.port

    # Suppress noisy uvicorn shutdown messages (e.g. "Cancel N running task(s)")
    logging.getLogger("uvicorn.error").setLevel(logging.CRITICAL)

    # Build the index before serving so the first query does not pay for it
    asyncio.run(get_knowledge_service())

    try:
        mcp.run(**run_kwargs)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
