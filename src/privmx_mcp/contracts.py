"""Unified tool response envelope contracts.

All tool business payloads are wrapped by this module so response shapes stay
consistent across search, workflow and session tools.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from privmx_mcp.errors import (
    CodeGenerationError,
    EmbeddingError,
    InvalidSessionStateError,
    KnowledgeError,
    KnowledgeValidationError,
    SessionNotFoundError,
    VectorStoreError,
)


class ToolError(BaseModel):
    """Structured business error for tool payloads."""

    code: str = Field(description="Stable machine-readable error code")
    message: str = Field(description="Human-readable error summary")
    details: dict[str, Any] | None = Field(
        default=None, description="Optional structured error details"
    )


class ToolEnvelope(BaseModel):
    """Unified response shape for all tool business results."""

    ok: bool = Field(description="Business-level success flag")
    data: Any | None = Field(default=None, description="Tool-specific payload")
    error: ToolError | None = Field(default=None, description="Structured error payload")

    @model_validator(mode="after")
    def _validate_coherence(self) -> "ToolEnvelope":
        if self.ok and self.error is not None:
            raise ValueError("ok=true responses must not include error")
        if not self.ok and self.error is None:
            raise ValueError("ok=false responses must include error")
        return self


class ResultsData(BaseModel):
    """Unified inner `data` schema for ranked-result tools."""

    source: Literal["api", "workflows", "next_steps", "sessions"]
    query: str
    entries: list[dict[str, Any]]
    summary: dict[str, Any] = Field(default_factory=dict)


def build_ok(data: Any) -> dict[str, Any]:
    """Build and validate a success envelope."""
    return ToolEnvelope(ok=True, data=data).model_dump(exclude_none=True)


def build_error(
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    *,
    data: Any | None = None,
) -> dict[str, Any]:
    """Build and validate an error envelope."""
    return ToolEnvelope(
        ok=False,
        data=data,
        error=ToolError(code=code, message=message, details=details),
    ).model_dump(exclude_none=True)


def build_results_data(
    *,
    source: Literal["api", "workflows", "next_steps", "sessions"],
    query: str,
    entries: list[dict[str, Any]],
    summary: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build and validate ranked-result tool `data` payloads."""
    return ResultsData(
        source=source,
        query=query,
        entries=entries,
        summary=summary or {},
    ).model_dump(exclude_none=True)


# Most specific first
_ERROR_CODES: tuple[tuple[type[KnowledgeError], str], ...] = (
    (SessionNotFoundError, "session_not_found"),
    (InvalidSessionStateError, "invalid_session_state"),
    (CodeGenerationError, "code_generation_failed"),
    (EmbeddingError, "embedding_failed"),
    (VectorStoreError, "vector_store_failed"),
    (KnowledgeValidationError, "invalid_input"),
)


def build_error_from_exception(exc: KnowledgeError) -> dict[str, Any]:
    """Adapt a core exception to the unified error envelope."""
    code = next((c for exc_type, c in _ERROR_CODES if isinstance(exc, exc_type)), "operation_error")
    details: dict[str, Any] = {}
    if isinstance(exc, SessionNotFoundError):
        details["session_id"] = exc.session_id
    if isinstance(exc, InvalidSessionStateError):
        details.update(
            session_id=exc.session_id,
            status=exc.status,
            operation=exc.operation,
            action="Resume the session first" if exc.status == "paused" else "Start a new session",
        )
    return build_error(code, str(exc), details or None)
