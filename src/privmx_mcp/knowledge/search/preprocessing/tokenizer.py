"""Text tokenization for the PrivMX search system.

Produces lowercase alphanumeric terms from API reference text, splitting SDK
identifiers into their parts so that natural-language queries match code
names.
"""

import re

from privmx_mcp.knowledge.search.preprocessing.stopwords import is_stopword


class TextTokenizer:
    """Tokenizer for API documentation and source code.

    Features:
    - Lowercases for consistent matching
    - Splits on any non-alphanumeric character (dots, underscores, hyphens, parens)
    - CamelCase / PascalCase splitting (``createThreadApi`` → create, thread, api)
    - Acronym aware (``HTTPClient`` → http, client)
    - Removes stopwords while preserving SDK verbs (send, get, set, ...)

    Usage:
        >>> tokenizer = TextTokenizer()
        >>> tokenizer.tokenize("Send a message to a thread")
        ['send', 'message', 'thread']

        >>> tokenizer.tokenize("ThreadApi.sendMessage(threadId)")
        ['thread', 'api', 'send', 'message', 'thread', 'id']

        >>> tokenizer.tokenize("set_user_pub_key")
        ['set', 'user', 'pub', 'key']
    """

    # Alphanumeric runs; everything else is a separator
    WORD_PATTERN = re.compile(r"[A-Za-z0-9]+")

    # CamelCase parts: acronym before a capitalised word, capitalised/lower word,
    # trailing acronym, digit run
    CAMEL_PATTERN = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")

    def __init__(self, remove_stopwords: bool = True, min_length: int = 2):
        """Initialize tokenizer.

        Args:
            remove_stopwords: Whether to filter out stopwords
            min_length: Minimum term length to keep (digit runs are always kept)
        """
        self.remove_stopwords = remove_stopwords
        self.min_length = min_length

    def tokenize(self, text: str) -> list[str]:
        """Tokenize text into lowercase terms, preserving order and duplicates."""
        if not text:
            return []

        tokens = []
        for word in self.WORD_PATTERN.findall(text):
            for part in self._split_camel_case(word):
                if self._is_valid_token(part):
                    tokens.append(part)
        return tokens

    def tokenize_to_set(self, text: str) -> set[str]:
        """Tokenize text into a set of unique terms."""
        return set(self.tokenize(text))

    def _split_camel_case(self, word: str) -> list[str]:
        """Split CamelCase word into lowercase components.

        Example:
            >>> self._split_camel_case("createThreadApi")
            ['create', 'thread', 'api']
            >>> self._split_camel_case("UserWithPubKey")
            ['user', 'with', 'pub', 'key']
        """
        parts = self.CAMEL_PATTERN.findall(word)
        if not parts:
            return [word.lower()]
        return [p.lower() for p in parts]

    def _is_valid_token(self, word: str) -> bool:
        if word.isdigit():
            return True
        if len(word) < self.min_length:
            return False
        if self.remove_stopwords and is_stopword(word):
            return False
        return True

    @staticmethod
    def normalize_query(query: str) -> str:
        """Collapse whitespace and lowercase.

        Example:
            >>> TextTokenizer.normalize_query("  Send   Message  ")
            'send message'
        """
        return " ".join(query.split()).lower()
