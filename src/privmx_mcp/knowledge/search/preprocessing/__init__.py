"""Text preprocessing for lexical search."""

from privmx_mcp.knowledge.search.preprocessing.stopwords import is_stopword
from privmx_mcp.knowledge.search.preprocessing.tokenizer import TextTokenizer

__all__ = ["TextTokenizer", "is_stopword"]
