"""Data loading layer for SDK API descriptions.

Reads JSON namespace descriptions into a KnowledgeStore. One file describes
one language:

    {
      "language": "javascript",
      "namespaces": [{"name": "privmx", "classes": [...], "functions": [...]}],
      "guides": [{"id": "guide:...", "name": "...", "description": "..."}]
    }

A small PrivMX sample ships in ``resources/api`` so the server answers
queries without external data.
"""

import json
import logging
from pathlib import Path
from typing import Any, cast

from privmx_mcp.errors import KnowledgeValidationError
from privmx_mcp.knowledge.models.api import Namespace
from privmx_mcp.knowledge.models.document import DocumentType, IndexedDocument
from privmx_mcp.knowledge.store import KnowledgeStore

logger = logging.getLogger("privmx-mcp.knowledge.loader")

# Bundled sample API descriptions (version-controlled JSON)
API_DATA_ROOT = Path(__file__).parent / "resources" / "api"


class APISpecLoader:
    """Loads JSON API descriptions into a KnowledgeStore."""

    @staticmethod
    def read_file(path: Path) -> dict[str, Any]:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise KnowledgeValidationError(f"API description must be a JSON object: {path}")
        return cast(dict[str, Any], data)

    @staticmethod
    def parse(data: dict[str, Any]) -> tuple[list[Namespace], list[IndexedDocument]]:
        """Parse one file's content into namespaces and guide documents.

        Raises:
            KnowledgeValidationError: If the file has no language
        """
        language = str(data.get("language", "")).strip()
        if not language:
            raise KnowledgeValidationError("API description is missing 'language'")

        namespaces = [Namespace.from_dict(ns, language) for ns in data.get("namespaces", []) or []]
        guides = [
            IndexedDocument(
                id=str(g.get("id") or f"guide:{language}:{g.get('name', '')}"),
                name=str(g.get("name", "")),
                doc_type=DocumentType.GUIDE,
                description=str(g.get("description", "")),
                examples=list(g.get("examples", []) or []),
                keywords=list(g.get("keywords", []) or []),
                language=str(g.get("language", language)),
                metadata=dict(g.get("metadata", {}) or {}),
            )
            for g in data.get("guides", []) or []
        ]
        return namespaces, guides

    @classmethod
    def load_into(cls, store: KnowledgeStore, path: str | Path | None = None) -> int:
        """Load a file, or every ``*.json`` in a directory, into ``store``.

        Args:
            store: Target knowledge store
            path: File or directory, defaults to the bundled sample data

        Returns:
            Number of namespaces loaded

        Raises:
            FileNotFoundError: If ``path`` does not exist
            KnowledgeValidationError: If a file is malformed
        """
        root = Path(path) if path is not None else API_DATA_ROOT
        if not root.exists():
            raise FileNotFoundError(f"API data path not found: {root}")

        files = sorted(root.glob("*.json")) if root.is_dir() else [root]
        count = 0
        for file_path in files:
            namespaces, guides = cls.parse(cls.read_file(file_path))
            for namespace in namespaces:
                store.add_namespace(namespace)
            store.add_documents(guides)
            count += len(namespaces)
            logger.info("Loaded %d namespace(s) from %s", len(namespaces), file_path.name)
        return count
