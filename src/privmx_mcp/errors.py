"""Exception hierarchy for the knowledge, search and session core."""

from __future__ import annotations


class KnowledgeError(Exception):
    """Base error for all core failures."""


class KnowledgeValidationError(KnowledgeError, ValueError):
    """Raised when API knowledge input is malformed (missing name/language)."""


class WorkflowDefinitionError(KnowledgeError, ValueError):
    """Raised when a workflow's step prerequisites are unknown or cyclic."""


class SessionNotFoundError(KnowledgeError, LookupError):
    """Raised when a session id is not known to the session store."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session {session_id} not found")
        self.session_id = session_id


class InvalidSessionStateError(KnowledgeError):
    """Raised when an operation is not allowed in the session's current status."""

    def __init__(self, session_id: str, status: str, operation: str = "continue") -> None:
        super().__init__(f"Session {session_id} is not active (status: {status})")
        self.session_id = session_id
        self.status = status
        self.operation = operation


class EmbeddingUnavailableError(KnowledgeError):
    """Raised when no embedding credential is configured."""


class EmbeddingError(KnowledgeError, RuntimeError):
    """Raised when an embedding request fails or returns malformed data."""


class VectorStoreError(KnowledgeError, RuntimeError):
    """Raised when the vector backend rejects or fails a request."""


class VectorDimensionError(VectorStoreError):
    """Raised when vectors of different dimensionality are mixed in one index."""


class CodeGenerationError(KnowledgeError, RuntimeError):
    """Raised by code generators for unsupported languages or features."""
