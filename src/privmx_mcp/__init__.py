"""PrivMX MCP Server - hybrid API search, workflow matching and guided sessions."""

__version__ = "0.1.0"
