"""
Turn token streams into interned terms for the index.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List

from ..index import StringPool, Term
from .tokenizer import tokenize

logger = logging.getLogger(__name__)


def count_terms(tokens: Iterable[str], pool: StringPool) -> Dict[Term, int]:
    """
    Intern tokens and count their occurrences.

    Example:
        >>> counts = count_terms(["cat", "cat", "dog"], pool)
        >>> {pool.resolve(t): n for t, n in counts.items()}
        {'cat': 2, 'dog': 1}
    """
    counts = defaultdict(int)
    for token in tokens:
        counts[pool.intern(token)] += 1

    logger.debug(f"Counted {sum(counts.values())} occurrences of {len(counts)} distinct terms")
    return dict(counts)


def query_terms(query: str, pool: StringPool) -> List[Term]:
    """Tokenize a search query into terms, keeping order and duplicates"""
    return [pool.intern(token) for token in tokenize(query)]
