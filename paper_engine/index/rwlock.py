"""
Reader/writer lock shared by the string pool and the document store.

Any number of threads may hold shared (read) access at once; exclusive
(write) access is held by a single thread with no readers present. Waiting
writers block new readers so a steady stream of searches cannot starve an
ingestion. A thread that already holds shared access may re-enter it.

Misuse that would otherwise deadlock the calling thread raises LockFailure:
- acquiring any access while holding exclusive access
- upgrading shared access to exclusive access
- releasing access that is not held
"""

import threading
from contextlib import contextmanager
from typing import Dict, Optional

from .errors import LockFailure


class ReadWriteLock:
    """Writer-preferring reader/writer lock built on a condition variable"""

    def __init__(self, name: str = "lock"):
        self.name = name
        self._cond = threading.Condition(threading.Lock())
        self._readers: Dict[int, int] = {}  # thread ident -> re-entry depth
        self._writer: Optional[int] = None
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if self._writer == me:
                raise LockFailure(f"{self.name}: shared access requested while holding exclusive access")
            if me in self._readers:
                self._readers[me] += 1
                return
            while self._writer is not None or self._writers_waiting:
                self._cond.wait()
            self._readers[me] = 1

    def release_read(self) -> None:
        me = threading.get_ident()
        with self._cond:
            depth = self._readers.get(me)
            if not depth:
                raise LockFailure(f"{self.name}: released shared access that is not held")
            if depth > 1:
                self._readers[me] = depth - 1
                return
            del self._readers[me]
            if not self._readers:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if self._writer == me:
                raise LockFailure(f"{self.name}: exclusive access is not re-entrant")
            if me in self._readers:
                raise LockFailure(f"{self.name}: cannot upgrade shared access to exclusive access")
            self._writers_waiting += 1
            try:
                while self._writer is not None or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = me

    def release_write(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if self._writer != me:
                raise LockFailure(f"{self.name}: released exclusive access that is not held")
            self._writer = None
            self._cond.notify_all()

    @contextmanager
    def read(self):
        """Hold shared access for the duration of the block"""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write(self):
        """Hold exclusive access for the duration of the block"""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()
