"""Unit test fixtures - small in-memory indexes"""

import pytest

from paper_engine.index import DocumentStore, StringPool


@pytest.fixture
def pool():
    """Fresh string pool per test (no shared interning state)"""
    return StringPool()


@pytest.fixture
def store(pool):
    """Empty store bound to the test's pool"""
    return DocumentStore(pool)


@pytest.fixture
def ingest(store, pool):
    """
    Ingest a document from a {word: count} dict.

    Usage: ingest("D1", "/papers/d1.pdf", {"cat": 2, "dog": 1})
    """
    def _ingest(title, path, counts, **kwargs):
        occurrences = {pool.intern(word): n for word, n in counts.items()}
        return store.ingest(title, path, occurrences, **kwargs)

    return _ingest


@pytest.fixture
def worked_store(store, ingest):
    """
    Two-document corpus:
        D1 = {cat: 2, dog: 1}  → tf(cat)=1.0, tf(dog)=0.5
        D2 = {dog: 3}          → tf(dog)=3.0
    """
    ingest("D1", "/papers/d1.pdf", {"cat": 2, "dog": 1})
    ingest("D2", "/papers/d2.pdf", {"dog": 3})
    return store
