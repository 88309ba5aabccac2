"""Guided interactive sessions."""

from privmx_mcp.sessions.engine import InteractiveSessionEngine
from privmx_mcp.sessions.models import (
    SESSION_TEMPLATES,
    ActionType,
    GeneratedFile,
    NextAction,
    Session,
    SessionProgress,
    SessionStatus,
)
from privmx_mcp.sessions.store import InMemorySessionStore, SessionStore

__all__ = [
    "InteractiveSessionEngine",
    "SESSION_TEMPLATES",
    "ActionType",
    "GeneratedFile",
    "NextAction",
    "Session",
    "SessionProgress",
    "SessionStatus",
    "InMemorySessionStore",
    "SessionStore",
]
