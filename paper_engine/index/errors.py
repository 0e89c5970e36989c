"""
Error taxonomy for the index engine.

Every failure raised by the core derives from PaperEngineError so that the
service boundary can catch the whole family in one place:

- CorruptedStream: snapshot records out of order, truncated or not UTF-8
- UnknownRecordTag: unrecognized tag byte (aborts decode)
- FieldTooLong: string exceeds the 16-bit length field of a record
- DuplicateTitle: ingestion collision under the FAIL policy
- LockFailure: misuse of the store/pool lock that would deadlock
- InternalConsistencyError: a handle that was never issued by the pool
"""


class PaperEngineError(Exception):
    """Base class for all index engine errors"""


class CorruptedStream(PaperEngineError):
    """Snapshot bytes cannot be decoded into a store"""

    def __init__(self, message: str, offset: int = None):
        self.offset = offset
        if offset is not None:
            message = f"{message} (at byte {offset}); potentially corrupted cache file"
        super().__init__(message)


class UnknownRecordTag(CorruptedStream):
    """Record tag byte is not one of the known record types"""

    def __init__(self, tag: int, offset: int):
        self.tag = tag
        super().__init__(f"Unknown record tag 0x{tag:02x}", offset)


class FieldTooLong(PaperEngineError):
    """A string does not fit in a record's u16 length field"""

    def __init__(self, field: str, length: int, limit: int):
        self.field = field
        self.length = length
        self.limit = limit
        super().__init__(
            f"{field} is {length} bytes long; records hold at most {limit} bytes"
        )


class DuplicateTitle(PaperEngineError):
    """A document with the same title is already indexed"""

    def __init__(self, title: str, existing_path: str, offending_path: str):
        self.title = title
        self.existing_path = existing_path
        self.offending_path = offending_path
        super().__init__(
            f"Found document with identical titles: {title!r}: you submitted "
            f"{offending_path!r}, but found {existing_path!r}; use dupe="
            "{replace,rename,ignore} to handle this"
        )


class LockFailure(PaperEngineError):
    """Lock acquisition or release would leave the lock in an invalid state"""


class InternalConsistencyError(PaperEngineError):
    """Internal invariant violated (e.g. resolving a foreign handle)"""
