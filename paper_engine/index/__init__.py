"""
In-process TF-IDF index engine.

Components (leaves first):
- intern: StringPool mapping normalized words to small integer Term handles
- store: DocumentStore with per-document term frequencies and global counts
- codec: tagged binary snapshot format for a DocumentStore
- ranker: integer TF-IDF ranking with (score, path, title) ordering

The engine performs no I/O; text extraction, tokenization, snapshot files and
HTTP live outside this package and feed it normalized terms.
"""

from .errors import (
    CorruptedStream,
    DuplicateTitle,
    FieldTooLong,
    InternalConsistencyError,
    LockFailure,
    PaperEngineError,
    UnknownRecordTag,
)
from .intern import StringPool, Term
from .store import Document, DocumentStore, DupePolicy
from .codec import decode, encode
from .ranker import RankedDocument, TfIdfRanker, rank

__all__ = [
    "StringPool",
    "Term",
    "Document",
    "DocumentStore",
    "DupePolicy",
    "encode",
    "decode",
    "RankedDocument",
    "TfIdfRanker",
    "rank",
    "PaperEngineError",
    "CorruptedStream",
    "UnknownRecordTag",
    "FieldTooLong",
    "DuplicateTitle",
    "LockFailure",
    "InternalConsistencyError",
]
