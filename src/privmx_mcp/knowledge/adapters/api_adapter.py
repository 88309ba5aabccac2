"""API knowledge → IndexedDocument adapter.

Converts the contents of a KnowledgeStore into the unified document model
consumed by the lexical and semantic indices:

- one NAMESPACE document per namespace      id: ``namespace:<lang>:<ns>``
- one CLASS document per class              id: ``class:<lang>:<ns>:<Class>``
- one METHOD document per method            id: the method key
- GUIDE documents added to the store as-is
"""

from privmx_mcp.knowledge.models.api import APIClass, Method, Namespace
from privmx_mcp.knowledge.models.document import DocumentType, IndexedDocument
from privmx_mcp.knowledge.store import KnowledgeStore


def namespace_doc_id(language: str, namespace: str) -> str:
    return f"namespace:{language}:{namespace}"


def class_doc_id(language: str, namespace: str, class_name: str) -> str:
    return f"class:{language}:{namespace}:{class_name}"


class APIDocumentAdapter:
    """Builds IndexedDocuments from a KnowledgeStore snapshot.

    The output order is deterministic (namespaces by (language, name), then
    declaration order), so repeated builds over the same store produce the
    same index.

    Usage:
        >>> adapter = APIDocumentAdapter(store)
        >>> docs = adapter.load_all()
        >>> docs[0].doc_type
        <DocumentType.NAMESPACE: 'namespace'>
    """

    def __init__(self, store: KnowledgeStore):
        self.store = store

    def load_all(self) -> list[IndexedDocument]:
        documents: list[IndexedDocument] = []
        for namespace in self.store.namespaces():
            documents.append(self._namespace_to_document(namespace))
            for method in namespace.functions:
                documents.append(self._method_to_document(method, namespace))
            for api_class in namespace.classes:
                documents.append(self._class_to_document(api_class, namespace))
                for method in api_class.all_methods():
                    documents.append(self._method_to_document(method, namespace))
        documents.extend(self.store.guides())
        return documents

    @staticmethod
    def _namespace_to_document(namespace: Namespace) -> IndexedDocument:
        return IndexedDocument(
            id=namespace_doc_id(namespace.language, namespace.name),
            name=namespace.name,
            doc_type=DocumentType.NAMESPACE,
            description=namespace.description,
            keywords=[c.name for c in namespace.classes],
            language=namespace.language,
            namespace=namespace.name,
            metadata={
                "classes": [c.name for c in namespace.classes],
                "functions": [f.name for f in namespace.functions],
                "constants": [c.name for c in namespace.constants],
            },
        )

    @staticmethod
    def _class_to_document(api_class: APIClass, namespace: Namespace) -> IndexedDocument:
        members = api_class.all_methods()
        return IndexedDocument(
            id=class_doc_id(namespace.language, namespace.name, api_class.name),
            name=api_class.name,
            doc_type=DocumentType.CLASS,
            description=api_class.description,
            keywords=[m.name for m in members],
            language=namespace.language,
            namespace=namespace.name,
            metadata={
                "methods": [m.key for m in members],
                "method_count": len(members),
            },
        )

    @staticmethod
    def _method_to_document(method: Method, namespace: Namespace) -> IndexedDocument:
        return IndexedDocument(
            id=method.key or method.name,
            name=method.name,
            doc_type=DocumentType.METHOD,
            description=method.description,
            examples=list(method.examples),
            keywords=[p.name for p in method.parameters if p.name],
            language=namespace.language,
            namespace=namespace.name,
            metadata={
                "class_name": method.class_name,
                "signature": method.signature(),
                "method_type": method.method_type,
                "returns": list(method.returns),
                "prerequisites": list(method.prerequisites),
            },
        )
