"""
Document store - the authoritative state of the index.

Holds one Document per title plus a corpus-wide occurrence counter. All
mutation goes through ingest()/remove(), which hold the store's exclusive
lock for the whole change; readers (ranking, encoding) hold the shared lock.

Term frequency:
    tf(term, doc) = occurrences(term, doc) / distinct_terms(doc)

NOTE: this divides by the number of DISTINCT terms, not by the total number
of occurrences, so frequencies can exceed 1.0 ({"dog": 3} gives tf=3.0).
It is the weighting existing snapshots were built with and ranking scores
depend on it, so it is kept as-is.

global_term_count is maintained and persisted but not used by ranking.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional

from .errors import DuplicateTitle, FieldTooLong
from .intern import StringPool, Term
from .rwlock import ReadWriteLock

logger = logging.getLogger(__name__)

MAX_FIELD_LEN = 0xFFFF  # u16 length prefix of every snapshot string


class DupePolicy(Enum):
    """What ingest() does when the title is already indexed"""
    FAIL = "fail"        # raise DuplicateTitle, store unchanged
    REPLACE = "replace"  # drop the old document, index the new one
    RENAME = "rename"    # index the new one under "<title>-N"
    IGNORE = "ignore"    # keep the old document, do nothing


@dataclass
class Document:
    """A single indexed document"""
    title: str
    path: str
    term_frequency: Dict[Term, float] = field(default_factory=dict)

    @property
    def distinct_terms(self) -> int:
        return len(self.term_frequency)

    def occurrences(self) -> Dict[Term, int]:
        """Recover raw occurrence counts from the stored frequencies"""
        distinct = self.distinct_terms
        return {term: round(freq * distinct) for term, freq in self.term_frequency.items()}


def build_term_frequency(occurrence_counts: Mapping[Term, int]) -> Dict[Term, float]:
    """
    Turn raw occurrence counts into per-document term frequencies.

    Example:
        >>> build_term_frequency({cat: 2, dog: 1})
        {cat: 1.0, dog: 0.5}
    """
    distinct = len(occurrence_counts)
    return {term: count / distinct for term, count in occurrence_counts.items()}


def check_field_length(field_name: str, text: str) -> None:
    """Raise FieldTooLong when text cannot be written as one snapshot string"""
    length = len(text.encode("utf-8"))
    if length > MAX_FIELD_LEN:
        raise FieldTooLong(field_name, length, MAX_FIELD_LEN)


class DocumentStore:
    """
    Per-document term frequencies and corpus-wide term counts.

    The store references an explicit StringPool; every Term it holds was
    issued by that pool. `documents` and `global_term_count` may be read
    directly while holding `read()`.
    """

    def __init__(self, pool: Optional[StringPool] = None):
        self.pool = pool if pool is not None else StringPool()
        self.global_term_count: Dict[Term, int] = {}
        self.documents: Dict[str, Document] = {}
        self._lock = ReadWriteLock("document store")

    def read(self):
        """Shared access for searches and snapshot encoding"""
        return self._lock.read()

    def write(self):
        """Exclusive access for mutations"""
        return self._lock.write()

    def ingest(
        self,
        title: str,
        path: str,
        occurrence_counts: Mapping[Term, int],
        dupe_policy: DupePolicy = DupePolicy.FAIL,
    ) -> Optional[str]:
        """
        Index a document from its term occurrence counts.

        Args:
            title: Document title (unique key within the store)
            path: Where the document came from
            occurrence_counts: {term: number of occurrences in the document}
            dupe_policy: How to resolve an existing document with the same title

        Returns:
            Title the document was stored under (differs from `title` under
            RENAME), or None when IGNORE left the store unchanged

        Raises:
            DuplicateTitle: Title exists and dupe_policy is FAIL
            FieldTooLong: Title, path or a term does not fit in a snapshot record
            ValueError: An occurrence count is not positive
        """
        for term, count in occurrence_counts.items():
            if count <= 0:
                raise ValueError(f"Occurrence count for term {term} must be positive, got {count}")
        check_field_length("document title", title)
        check_field_length("document path", path)
        for term in occurrence_counts:
            check_field_length("document term", self.pool.resolve(term))

        # Build the whole document before taking the lock: readers must never
        # see it half-populated.
        document = Document(title=title, path=path, term_frequency=build_term_frequency(occurrence_counts))

        with self.write():
            existing = self.documents.get(title)
            if existing is not None:
                if dupe_policy is DupePolicy.IGNORE:
                    logger.info(f"Ignoring duplicate title {title!r} ({path})")
                    return None
                if dupe_policy is DupePolicy.REPLACE:
                    logger.info(f"Replacing document {title!r}: {existing.path} -> {path}")
                    self._discount(existing)
                    del self.documents[title]
                elif dupe_policy is DupePolicy.RENAME:
                    renamed = self._free_title(title)
                    check_field_length("document title", renamed)
                    document.title = renamed
                    logger.info(f"Renaming duplicate title {title!r} -> {document.title!r}")
                else:
                    raise DuplicateTitle(title, existing.path, path)

            self.documents[document.title] = document
            for term, count in occurrence_counts.items():
                self.global_term_count[term] = self.global_term_count.get(term, 0) + count

        logger.debug(f"Indexed {document.title!r}: {document.distinct_terms} distinct terms")
        return document.title

    def remove(self, title: str) -> Document:
        """Remove a document and its contribution to the global counts"""
        with self.write():
            document = self.documents.pop(title)
            self._discount(document)
        logger.info(f"Removed document {title!r}")
        return document

    def _free_title(self, title: str) -> str:
        # caller holds the write lock
        suffix = 1
        while f"{title}-{suffix}" in self.documents:
            suffix += 1
        return f"{title}-{suffix}"

    def _discount(self, document: Document) -> None:
        # caller holds the write lock
        for term, count in document.occurrences().items():
            remaining = self.global_term_count.get(term, 0) - count
            if remaining > 0:
                self.global_term_count[term] = remaining
            else:
                self.global_term_count.pop(term, None)

    def get(self, title: str) -> Optional[Document]:
        with self.read():
            return self.documents.get(title)

    def titles(self) -> List[str]:
        with self.read():
            return list(self.documents)

    def global_count(self, term: Term) -> int:
        with self.read():
            return self.global_term_count.get(term, 0)

    def to_text(self) -> dict:
        """
        Text-keyed copy of the store.

        Handles differ between pools, so two stores (e.g. before and after a
        snapshot round-trip) are compared through this view.
        """
        resolve = self.pool.resolve
        with self.read():
            return {
                "global_term_count": {
                    resolve(term): count for term, count in self.global_term_count.items()
                },
                "documents": {
                    title: {
                        "path": doc.path,
                        "term_frequency": {
                            resolve(term): freq for term, freq in doc.term_frequency.items()
                        },
                    }
                    for title, doc in self.documents.items()
                },
            }

    def __len__(self) -> int:
        with self.read():
            return len(self.documents)

    def __contains__(self, title: str) -> bool:
        with self.read():
            return title in self.documents
