"""
String interning for index terms.

Every normalized word is stored once in a StringPool and referred to by a
small integer handle (Term). Handles are bump-allocated: the next handle is
always the current pool size, and the text behind a handle never changes or
goes away. The pool therefore grows with the vocabulary and lives as long as
the stores that reference it.

Handles are only meaningful inside the pool that issued them. Snapshots store
the text, never the number, so handles may differ between restarts.

Example:
    >>> pool = StringPool()
    >>> cat = pool.intern("cat")
    >>> pool.intern("cat") == cat
    True
    >>> pool.resolve(cat)
    'cat'
"""

from typing import Dict, List, NewType, Optional

from .errors import InternalConsistencyError
from .rwlock import ReadWriteLock

Term = NewType("Term", int)


class StringPool:
    """Append-only arena of strings with a text -> handle index"""

    def __init__(self):
        self._lock = ReadWriteLock("string pool")
        self._arena: List[str] = []
        self._index: Dict[str, Term] = {}

    def intern(self, text: str) -> Term:
        """
        Return the handle for text, allocating one on first sight.

        Lookups share the lock; only inserting a brand-new string takes
        exclusive access. The index is checked again after the exclusive lock
        is taken, so two threads racing on the same new string get the same
        handle.
        """
        with self._lock.read():
            term = self._index.get(text)
        if term is not None:
            return term

        with self._lock.write():
            term = self._index.get(text)
            if term is None:
                term = Term(len(self._arena))
                self._arena.append(text)
                self._index[text] = term
        return term

    def lookup(self, text: str) -> Optional[Term]:
        """Return the handle for text without allocating one"""
        with self._lock.read():
            return self._index.get(text)

    def resolve(self, term: Term) -> str:
        """Return the text behind a handle issued by this pool"""
        with self._lock.read():
            if 0 <= term < len(self._arena):
                return self._arena[term]
        raise InternalConsistencyError(f"Term handle {term} was never issued by this pool")

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._arena)

    def __contains__(self, text: str) -> bool:
        return self.lookup(text) is not None
