"""
Text analysis: turns raw text into the normalized terms the index stores.

- tokenizer: lowercase, word extraction, stemming
- stemmer: NLTK Snowball (English)
- term_counts: interning and occurrence counting
"""

from .tokenizer import tokenize
from .stemmer import stem
from .term_counts import count_terms, query_terms

__all__ = [
    "tokenize",
    "stem",
    "count_terms",
    "query_terms",
]
