"""Unified document model for the PrivMX search system.

Every searchable unit (namespace, class, method, workflow, guide page) is
normalised into an IndexedDocument before it reaches the lexical or semantic
index. The ``id`` maps 1:1 to the source entity, so re-indexing the same
entity replaces its document instead of duplicating it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DocumentType(Enum):
    """Document type enumeration.

    - NAMESPACE: API namespace overview (e.g., "javascript:privmx")
    - CLASS: API class (e.g., "ThreadApi")
    - METHOD: Function, method, static method or constructor
    - WORKFLOW: Workflow definition (goal matching corpus)
    - GUIDE: Free-text documentation page
    """

    NAMESPACE = "namespace"
    CLASS = "class"
    METHOD = "method"
    WORKFLOW = "workflow"
    GUIDE = "guide"


@dataclass
class IndexedDocument:
    """Searchable document derived from exactly one source entity.

    Attributes:
        id: Stable identity (method key, ``class:lang:ns:Name``, workflow id, ...)
        name: Short name used for the name-field tie-break
            Examples: "sendMessage", "ThreadApi", "Secure Messaging Application"
        doc_type: Source entity type
        description: Free text description
        examples: Code examples, indexed together with the description
        keywords: Extra curated terms (workflow tags, parameter names)
        language: Target language ("typescript", "java", ...), empty if neutral
        namespace: Owning namespace name, if any
        metadata: Extensible metadata (class_name, signature, method_type, ...)

    Usage:
        >>> doc = IndexedDocument(
        ...     id="javascript.privmx.ThreadApi.sendMessage(string)",
        ...     name="sendMessage",
        ...     doc_type=DocumentType.METHOD,
        ...     description="Send a message to a thread",
        ...     language="javascript",
        ...     namespace="privmx",
        ... )
        >>> doc.text
        'sendMessage\\nSend a message to a thread'
    """

    id: str
    name: str
    doc_type: DocumentType
    description: str = ""
    examples: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    language: str = ""
    namespace: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.metadata is None:
            self.metadata = {}
        if self.examples is None:
            self.examples = []
        self.keywords = [k.lower() for k in (self.keywords or [])]

    @property
    def text(self) -> str:
        """Combined text (name + description + keywords + examples) used for indexing."""
        parts = [self.name, self.description, " ".join(self.keywords), *self.examples]
        return "\n".join(p for p in parts if p)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "doc_type": self.doc_type.value,
            "description": self.description,
            "keywords": self.keywords,
            "language": self.language,
            "namespace": self.namespace,
            "metadata": self.metadata,
        }
