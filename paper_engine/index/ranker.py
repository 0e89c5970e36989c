"""
TF-IDF ranking over a DocumentStore.

Formula:
    idf(t)      = log10((N + 1) / (df(t) + 1))
    contrib(t,d) = floor(scale × idf(t) × tf(t, d))
    score(d)    = Σ contrib(t, d) over query terms  //  len(query terms)

Where:
    N = number of documents in the store
    df(t) = number of documents containing t
    tf(t, d) = stored term frequency (occurrences / distinct terms of d)
    scale = 100000 (scores are integers)

Every query term counts, duplicates included: "cat cat" adds the cat
contribution twice and then divides by 2. Contributions are truncated to
integers before they are summed and the final division is integer division.

Documents containing none of the query terms are left out. Results are sorted
descending by (score, path, title), so ties fall back to path, then title,
both descending.

No document-length normalization is applied.
"""

import logging
import math
from typing import Dict, List, NamedTuple, Sequence

from .intern import Term
from .store import DocumentStore

logger = logging.getLogger(__name__)

SCORE_SCALE = 100000


class RankedDocument(NamedTuple):
    """One search hit; tuple order is the sort order"""
    score: int
    path: str
    title: str


class TfIdfRanker:
    """
    Integer TF-IDF ranker.
    """

    def __init__(self, scale: int = SCORE_SCALE):
        """
        Args:
            scale: Multiplier applied before truncating each contribution
                to an integer. Default: 100000
        """
        self.scale = scale

    @staticmethod
    def idf(df: int, total_documents: int) -> float:
        """
        Smoothed inverse document frequency.

        Example:
            >>> TfIdfRanker.idf(df=1, total_documents=2)
            0.17609125905568124
        """
        return math.log10((total_documents + 1) / (df + 1))

    def rank(self, store: DocumentStore, query_terms: Sequence[Term]) -> List[RankedDocument]:
        """
        Rank the documents of a store against a query.

        Args:
            store: Store to search (held under its shared lock while scoring)
            query_terms: Normalized, interned query terms in query order

        Returns:
            RankedDocument list, best first; empty for an empty query
        """
        if not query_terms:
            return []

        accumulated: Dict[str, int] = {}
        with store.read():
            documents = store.documents
            total = len(documents)

            for term in query_terms:
                containing = [doc for doc in documents.values() if term in doc.term_frequency]
                if not containing:
                    continue

                idf = self.idf(len(containing), total)
                text = store.pool.resolve(term)
                for doc in containing:
                    freq = doc.term_frequency[term]
                    contribution = math.floor(self.scale * idf * freq)
                    accumulated[doc.title] = accumulated.get(doc.title, 0) + contribution
                    logger.debug(f"freq: {freq}, idf: {idf}, title: {doc.title}, term: {text}")

            results = [
                RankedDocument(score // len(query_terms), documents[title].path, title)
                for title, score in accumulated.items()
            ]

        results.sort(reverse=True)
        return results


def rank(store: DocumentStore, query_terms: Sequence[Term]) -> List[RankedDocument]:
    """Rank with the default scale"""
    return TfIdfRanker().rank(store, query_terms)
