"""
Tokenizer shared by document ingestion and search queries.

Pipeline:
1. Lowercase conversion
2. Extract words (letters/digits, hyphens inside words preserved)
3. Apply stemming

No stopwords are removed: every word counts towards a document's distinct
term total, which is the denominator of its term frequencies.
"""

import re
from typing import List

from .stemmer import stem

_WORD = re.compile(r'[^\W_]+(?:-[^\W_]+)*')


def tokenize(text: str) -> List[str]:
    """
    Split text into normalized terms.

    Args:
        text: Raw document or query text

    Returns:
        Stemmed lowercase terms in text order (duplicates kept)

    Examples:
        >>> tokenize("Searching the Archives!")
        ['search', 'the', 'archiv']

        >>> tokenize("   ")
        []
    """
    if not text:
        return []

    return [stem(token) for token in _WORD.findall(text.lower())]
