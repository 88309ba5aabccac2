"""In-memory knowledge store for SDK namespaces, classes and methods.

The store owns no search logic. It keeps namespaces keyed by
``(language, name)``, assigns every method a stable key, and hands out
read-only views to the document adapter that feeds the indices.
"""

from __future__ import annotations

import copy
import logging
from threading import RLock
from typing import Iterator

from privmx_mcp.errors import KnowledgeValidationError
from privmx_mcp.knowledge.models.api import Method, Namespace
from privmx_mcp.knowledge.models.document import IndexedDocument

logger = logging.getLogger("privmx-mcp.knowledge.store")


def make_method_key(language: str, namespace: str, method: Method, class_name: str | None = None) -> str:
    """Build the stable identity for a method.

    Example:
        >>> make_method_key("javascript", "privmx", Method(name="sendMessage"), "ThreadApi")
        'javascript.privmx.ThreadApi.sendMessage()'
    """
    owner = f"{class_name}." if class_name else ""
    return f"{language}.{namespace}.{owner}{method.name}({method.param_signature()})"


class KnowledgeStore:
    """Namespaces, classes and methods for one SDK across languages.

    Thread-safe: all mutations and snapshots run under a re-entrant lock.
    """

    def __init__(self) -> None:
        self._namespaces: dict[tuple[str, str], Namespace] = {}
        self._methods: dict[str, Method] = {}
        self._namespace_keys: dict[tuple[str, str], list[str]] = {}
        self._guides: dict[str, IndexedDocument] = {}
        self._lock = RLock()

    def add_namespace(self, namespace: Namespace, language: str | None = None) -> list[str]:
        """Insert or replace a namespace and assign keys to all of its methods.

        Args:
            namespace: Namespace to store (copied, caller's object is untouched)
            language: Language of the namespace, defaults to ``namespace.language``

        Returns:
            Method keys stored for this namespace, in declaration order

        Raises:
            KnowledgeValidationError: If the namespace name or language is missing
        """
        language = (language or namespace.language or "").strip()
        name = (namespace.name or "").strip()
        if not name:
            raise KnowledgeValidationError("Namespace name is required")
        if not language:
            raise KnowledgeValidationError(f"Language is required for namespace '{name}'")

        stored = copy.deepcopy(namespace)
        stored.name = name
        stored.language = language
        ns_key = (language, name)

        keyed: dict[str, Method] = {}
        for method in stored.functions:
            self._assign_key(method, language, name, None)
            keyed[method.key] = method
        for api_class in stored.classes:
            if not api_class.name:
                raise KnowledgeValidationError(f"Class without a name in namespace '{name}'")
            for method in api_class.all_methods():
                method.class_name = api_class.name
                self._assign_key(method, language, name, api_class.name)
                keyed[method.key] = method
        keys = list(keyed)

        with self._lock:
            for old_key in self._namespace_keys.pop(ns_key, []):
                self._methods.pop(old_key, None)
            self._namespaces[ns_key] = stored
            self._methods.update(keyed)
            self._namespace_keys[ns_key] = keys

        logger.debug("Stored namespace %s:%s with %d method(s)", language, name, len(keys))
        return keys

    def add_documents(self, documents: list[IndexedDocument]) -> None:
        """Add free-text documentation records; same id replaces."""
        with self._lock:
            for doc in documents:
                if not doc.id:
                    raise KnowledgeValidationError("Document id is required")
                self._guides[doc.id] = doc

    def clear(self) -> None:
        with self._lock:
            self._namespaces.clear()
            self._methods.clear()
            self._namespace_keys.clear()
            self._guides.clear()

    def get_method(self, key: str) -> Method | None:
        with self._lock:
            return self._methods.get(key)

    def methods(self) -> list[Method]:
        with self._lock:
            return list(self._methods.values())

    def namespaces(self) -> list[Namespace]:
        """Snapshot of stored namespaces ordered by (language, name)."""
        with self._lock:
            return [self._namespaces[k] for k in sorted(self._namespaces)]

    def guides(self) -> list[IndexedDocument]:
        with self._lock:
            return [self._guides[k] for k in sorted(self._guides)]

    def __iter__(self) -> Iterator[Namespace]:
        return iter(self.namespaces())

    def __len__(self) -> int:
        with self._lock:
            return len(self._namespaces)

    def get_stats(self) -> dict[str, object]:
        """Counts of stored entities.

        Example:
            >>> store.get_stats()
            {'namespaces': 2, 'classes': 3, 'methods': 17, 'languages': 2,
             'by_type': {'namespace': 2, 'class': 3, 'method': 17, 'guide': 0}}
        """
        with self._lock:
            class_count = sum(len(ns.classes) for ns in self._namespaces.values())
            languages = {language for language, _ in self._namespaces}
            return {
                "namespaces": len(self._namespaces),
                "classes": class_count,
                "methods": len(self._methods),
                "languages": len(languages),
                "by_type": {
                    "namespace": len(self._namespaces),
                    "class": class_count,
                    "method": len(self._methods),
                    "guide": len(self._guides),
                },
            }

    @staticmethod
    def _assign_key(method: Method, language: str, namespace: str, class_name: str | None) -> None:
        if not method.name:
            raise KnowledgeValidationError(f"Method without a name in namespace '{namespace}'")
        # Keys are immutable once assigned
        if not method.key:
            method.key = make_method_key(language, namespace, method, class_name)
