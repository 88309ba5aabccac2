"""Code generation interface used by guided sessions."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from privmx_mcp.errors import CodeGenerationError

SUPPORTED_FEATURES = ("threads", "stores", "inboxes", "events")


@dataclass
class GeneratedCode:
    """Output of one generator call.

    Attributes:
        code: Main source text
        files: ``{"path", "content", "description"}`` entries, main file first
        instructions: Ordered follow-up instructions for the developer
    """

    code: str
    files: list[dict[str, str]] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "files": list(self.files), "instructions": list(self.instructions)}


def validate_features(features: list[str] | tuple[str, ...]) -> list[str]:
    """Normalise a feature list.

    Raises:
        CodeGenerationError: If the list is empty or names an unknown feature
    """
    normalized = []
    for feature in features:
        name = feature.strip().lower()
        if name not in SUPPORTED_FEATURES:
            raise CodeGenerationError(
                f"Feature '{feature}' is not supported. Supported features: {', '.join(SUPPORTED_FEATURES)}"
            )
        if name not in normalized:
            normalized.append(name)
    if not normalized:
        raise CodeGenerationError("At least one feature is required")
    return normalized


class CodeGenerator(ABC):
    """Generates PrivMX setup code for one language."""

    language: str

    @abstractmethod
    def generate_setup_code(self, features: list[str]) -> GeneratedCode:
        """Generate connection setup plus the APIs for ``features``."""
