"""Code generation collaborators.

Generators are registered explicitly per language; the server bootstrap lists
the enabled languages in ``ServerConfig.code_generators``.
"""

import logging

from privmx_mcp.codegen.base import SUPPORTED_FEATURES, CodeGenerator, GeneratedCode, validate_features
from privmx_mcp.codegen.setup import TEMPLATES, SetupCodeGenerator, SetupTemplate
from privmx_mcp.errors import CodeGenerationError

logger = logging.getLogger("privmx-mcp.codegen")


class CodeGeneratorRegistry:
    """Language → CodeGenerator lookup."""

    def __init__(self) -> None:
        self._generators: dict[str, CodeGenerator] = {}

    def register(self, generator: CodeGenerator) -> None:
        language = generator.language.lower()
        if language in self._generators:
            logger.warning("Code generator for %s already registered, replacing it", language)
        self._generators[language] = generator

    def languages(self) -> list[str]:
        return sorted(self._generators)

    def get(self, language: str) -> CodeGenerator:
        """
        Raises:
            CodeGenerationError: If no generator is registered for ``language``
        """
        generator = self._generators.get(language.lower())
        if generator is None:
            raise CodeGenerationError(
                f"Language '{language}' is not supported. Supported languages: {', '.join(self.languages())}"
            )
        return generator

    def generate_setup_code(self, language: str, features: list[str]) -> GeneratedCode:
        logger.info("Generating %s setup code for features: %s", language, ", ".join(features))
        return self.get(language).generate_setup_code(features)


def create_default_registry(languages: tuple[str, ...] | list[str] | None = None) -> CodeGeneratorRegistry:
    """Registry with the built-in setup generators for ``languages`` (default: all)."""
    registry = CodeGeneratorRegistry()
    for language in languages or TEMPLATES:
        if language not in TEMPLATES:
            raise ValueError(f"No built-in code generator for {language}. Available: {sorted(TEMPLATES)}")
        registry.register(SetupCodeGenerator(TEMPLATES[language]))
    return registry


__all__ = [
    "SUPPORTED_FEATURES",
    "CodeGenerator",
    "CodeGeneratorRegistry",
    "GeneratedCode",
    "SetupCodeGenerator",
    "SetupTemplate",
    "TEMPLATES",
    "create_default_registry",
    "validate_features",
]
