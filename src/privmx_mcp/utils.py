"""Validation models and utilities for PrivMX MCP tools."""

from typing import Annotated, Optional

from pydantic import Field
from pydantic.functional_validators import AfterValidator


# Search limits
DEFAULT_SEARCH_LIMIT = 10
MAX_SEARCH_LIMIT = 50

# Code snippet constraints
MAX_CODE_LENGTH = 100_000

SUPPORTED_LANGUAGES = ("typescript", "javascript", "java", "kotlin", "swift", "csharp", "dotnet", "cpp")


def normalize_input(value: Optional[str], lowercase: bool = False) -> str:
    """Normalize user input: collapse whitespace, optionally lowercase."""
    if value is None:
        return ""
    normalized = " ".join(value.split())
    return normalized.lower() if lowercase else normalized


def validate_non_empty_string(value: str) -> str:
    """Validate that a string is not empty after stripping whitespace."""
    stripped = value.strip()
    if not stripped:
        raise ValueError("Value cannot be empty or whitespace only")
    return stripped


def validate_language(value: Optional[str]) -> Optional[str]:
    """Validate an optional SDK language name."""
    normalized = normalize_input(value, lowercase=True)
    if not normalized:
        return None
    if normalized not in SUPPORTED_LANGUAGES:
        raise ValueError(f"language must be one of: {', '.join(SUPPORTED_LANGUAGES)}")
    return normalized


# Search query for API docs; a blank query yields no results
APISearchQuery = Annotated[
    str,
    AfterValidator(normalize_input),
    Field(
        ...,
        description=(
            "Search keywords for the PrivMX SDK API. Examples: 'send message', "
            "'ThreadApi createThread', 'upload file'. Case-insensitive."
        ),
    ),
]

# Goal for workflow matching; a blank goal matches nothing
Goal = Annotated[
    str,
    AfterValidator(normalize_input),
    Field(
        ...,
        description="What you want to build. Examples: 'build a chat app', 'secure file upload'.",
    ),
]

# Goal for a guided session
SessionGoal = Annotated[
    str,
    AfterValidator(validate_non_empty_string),
    Field(
        ...,
        min_length=1,
        description="What you want to build. Examples: 'build a chat app', 'secure file upload'.",
    ),
]

Language = Annotated[
    Optional[str],
    AfterValidator(validate_language),
    Field(
        default=None,
        description=f"Target SDK language ({', '.join(SUPPORTED_LANGUAGES)}). Omit for all languages.",
    ),
]

# Search limit
SearchLimit = Annotated[
    int,
    Field(
        default=DEFAULT_SEARCH_LIMIT,
        ge=1,
        le=MAX_SEARCH_LIMIT,
        description=f"Maximum number of results (1-{MAX_SEARCH_LIMIT}).",
    ),
]

DocType = Annotated[
    Optional[str],
    Field(
        default=None,
        pattern="^(namespace|class|method|guide)$",
        description="Restrict results to one document type: namespace, class, method or guide.",
    ),
]

CurrentCode = Annotated[
    str,
    Field(..., max_length=MAX_CODE_LENGTH, description="Source code written so far (may be empty)"),
]

SessionId = Annotated[
    str,
    AfterValidator(validate_non_empty_string),
    Field(..., description="Session ID returned by privmx_start_session"),
]

StepIndex = Annotated[
    int,
    Field(..., ge=1, description="1-based session step to generate code for"),
]
