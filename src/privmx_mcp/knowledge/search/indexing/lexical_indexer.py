"""Inverted index builder for lexical search.

One index structure serves both scoring algorithms: postings carry raw term
frequencies, and document lengths / document frequencies are kept so BM25 can
apply length normalisation while TF-IDF ignores it.

Pure Python, sized for the API surface of one SDK (a few thousand documents).
"""

from collections import Counter
from typing import Dict, List, Tuple

from privmx_mcp.knowledge.models.document import IndexedDocument
from privmx_mcp.knowledge.search.preprocessing.tokenizer import TextTokenizer


class LexicalIndexer:
    """Inverted index with the term statistics needed by TF-IDF and BM25.

    Structures:
    - postings: term → [(doc_id, frequency), ...] sorted by doc_id
    - doc_lengths: doc_id → number of tokens in the combined text
    - name_terms: doc_id → set of tokens in the name field
    - avg_doc_len: mean document length across the index

    Usage:
        >>> indexer = LexicalIndexer()
        >>> indexer.build(documents)
        >>> indexer.get_postings("message")
        [('javascript.privmx.sendMessage()', 2)]
        >>> indexer.get_doc_freq("message")
        1
    """

    def __init__(self, tokenizer: TextTokenizer | None = None):
        self.tokenizer = tokenizer or TextTokenizer()
        self.documents: Dict[str, IndexedDocument] = {}
        self.postings: Dict[str, List[Tuple[str, int]]] = {}
        self.doc_lengths: Dict[str, int] = {}
        self.name_terms: Dict[str, frozenset] = {}
        self.doc_count: int = 0
        self.avg_doc_len: float = 0.0
        self._is_built = False

    @property
    def is_built(self) -> bool:
        return self._is_built

    def build(self, documents: List[IndexedDocument]) -> None:
        """Build the index from scratch.

        Documents sharing an id replace each other (last one wins), so the
        index never holds duplicates. Calling build() again with the same
        documents yields an identical index.
        """
        self.clear()

        for doc in documents:
            self.documents[doc.id] = doc

        unsorted: Dict[str, List[Tuple[str, int]]] = {}
        for doc_id in sorted(self.documents):
            doc = self.documents[doc_id]
            tokens = self.tokenizer.tokenize(doc.text)
            self.doc_lengths[doc_id] = len(tokens)
            self.name_terms[doc_id] = frozenset(self.tokenizer.tokenize(doc.name))
            for term, freq in Counter(tokens).items():
                unsorted.setdefault(term, []).append((doc_id, freq))

        # doc ids were visited in sorted order, postings are already sorted
        self.postings = unsorted
        self.doc_count = len(self.documents)
        if self.doc_count > 0:
            self.avg_doc_len = sum(self.doc_lengths.values()) / self.doc_count
        self._is_built = True

    def get_postings(self, term: str) -> List[Tuple[str, int]]:
        return self.postings.get(term, [])

    def get_doc_freq(self, term: str) -> int:
        return len(self.postings.get(term, []))

    def get_doc_length(self, doc_id: str) -> int:
        return self.doc_lengths.get(doc_id, 0)

    def get_document(self, doc_id: str) -> IndexedDocument | None:
        return self.documents.get(doc_id)

    def has_name_match(self, doc_id: str, query_terms: set[str]) -> bool:
        return bool(self.name_terms.get(doc_id, frozenset()) & query_terms)

    def clear(self) -> None:
        self.documents.clear()
        self.postings.clear()
        self.doc_lengths.clear()
        self.name_terms.clear()
        self.doc_count = 0
        self.avg_doc_len = 0.0
        self._is_built = False

    def get_stats(self) -> Dict:
        """Index statistics for debugging.

        Example:
            >>> indexer.get_stats()
            {'doc_count': 212, 'avg_doc_len': 14.73, 'vocab_size': 611, 'total_terms': 3123}
        """
        return {
            "doc_count": self.doc_count,
            "avg_doc_len": round(self.avg_doc_len, 2),
            "vocab_size": len(self.postings),
            "total_terms": sum(self.doc_lengths.values()),
        }
