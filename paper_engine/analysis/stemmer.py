"""
English stemming for index terms (NLTK Snowball).

Documents and queries share this function, so "searching" in a query
matches "searches" in a paper. Every stored term went through Snowball
(Porter2); switching algorithms would orphan the terms in existing snapshots.

Papers repeat the same few thousand words, so stems are memoized.
"""

from functools import lru_cache

from nltk.stem.snowball import SnowballStemmer

_stemmer = SnowballStemmer('english')

STEM_CACHE_SIZE = 65536


@lru_cache(maxsize=STEM_CACHE_SIZE)
def stem(word: str) -> str:
    """
    Stem one lowercase word.

        >>> stem("strategies")
        'strategi'
    """
    return _stemmer.stem(word)
