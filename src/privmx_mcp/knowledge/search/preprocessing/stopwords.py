"""Stopwords list for SDK API documentation.

Curated for API reference text: common English function words are removed,
while verbs that name SDK operations are preserved.
"""

STOPWORDS = {
    # Articles
    'a', 'an', 'the',

    # Pronouns
    'this', 'that', 'these', 'those',
    'it', 'its', 'itself',
    'they', 'them', 'their', 'theirs', 'themselves',
    'what', 'which', 'who', 'whom', 'whose',
    'you', 'your', 'we', 'our',

    # Prepositions
    'with', 'from', 'to', 'for', 'of', 'in', 'on', 'at', 'by', 'as',
    'into', 'through', 'during', 'before', 'after', 'above', 'below',
    'between', 'under', 'again', 'further', 'then', 'once',

    # Conjunctions
    'and', 'or', 'but', 'nor', 'so', 'yet',

    # Common verbs (be/have forms)
    'is', 'are', 'was', 'were', 'be', 'been', 'being',
    'have', 'has', 'had', 'having',
    'do', 'does', 'did', 'doing',

    # Modal verbs
    'will', 'would', 'can', 'could', 'may', 'might',
    'shall', 'should', 'must',

    # Other common words
    'if', 'than', 'because', 'while', 'where', 'when',
    'why', 'how', 'all', 'both', 'each', 'few', 'more',
    'most', 'other', 'some', 'such', 'no', 'not', 'only',
    'own', 'same', 'too', 'very',

    # Common adverbs
    'here', 'there', 'now', 'just', 'also',
    'always', 'never', 'often', 'sometimes',
}

# Terms that look like filler but name SDK operations
TECHNICAL_PRESERVE = {
    'set',
    'get',
    'new',
    'create',
    'delete',
    'update',
    'list',
    'send',
    'connect',
    'disconnect',
    'setup',
    'open',
    'close',
    'read',
    'write',
    'listen',
    'subscribe',
    'unsubscribe',
    'id',
}


def is_stopword(word: str) -> bool:
    """Check if a word is a stopword.

    Example:
        >>> is_stopword('the')
        True
        >>> is_stopword('send')
        False
    """
    word_lower = word.lower()

    if word_lower in TECHNICAL_PRESERVE:
        return False

    return word_lower in STOPWORDS
