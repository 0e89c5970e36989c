"""
Binary snapshot codec for a DocumentStore.

A snapshot is a flat sequence of self-describing records with no header and
no overall length; the decoder reads records until the buffer is exhausted.
Each record starts with a one-byte tag. All integers are little-endian and
every string is UTF-8 preceded by its byte length as a u16:

    0x01 GlobalTerm  len:u16  count:u64  text[len]   global_term_count[text] = count
    0x02 DocTitle    len:u16             text[len]   close current document, open a new one
    0x03 DocPath     len:u16             text[len]   path of the open document
    0x04 DocTerm     len:u16  freq:f64   text[len]   term frequency in the open document

Encoding writes every GlobalTerm first, then for each document one DocTitle,
one DocPath and one DocTerm per term. DocPath/DocTerm records always belong
to the closest preceding DocTitle. The last open document is closed when the
stream ends, so snapshots need no trailing marker.

Any decode error aborts the whole load; no partial store is ever returned.
"""

import logging
import math
import struct
from dataclasses import dataclass
from typing import Callable, ClassVar, Dict, Iterable, Iterator, NamedTuple, Optional, Tuple, Union

from .errors import CorruptedStream, FieldTooLong, UnknownRecordTag
from .intern import StringPool
from .store import MAX_FIELD_LEN, Document, DocumentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GlobalTerm:
    tag: ClassVar[int] = 0x01
    text: str
    count: int


@dataclass(frozen=True)
class DocTitle:
    tag: ClassVar[int] = 0x02
    text: str


@dataclass(frozen=True)
class DocPath:
    tag: ClassVar[int] = 0x03
    text: str


@dataclass(frozen=True)
class DocTerm:
    tag: ClassVar[int] = 0x04
    text: str
    freq: float


Record = Union[GlobalTerm, DocTitle, DocPath, DocTerm]


class _Layout(NamedTuple):
    """Fixed-size fields between the tag and the text of one record type"""
    record: Callable[..., Record]
    fields: struct.Struct  # length prefix first, then the value (if any)
    field_name: str


_LAYOUTS: Dict[int, _Layout] = {
    GlobalTerm.tag: _Layout(GlobalTerm, struct.Struct("<HQ"), "global term"),
    DocTitle.tag: _Layout(DocTitle, struct.Struct("<H"), "document title"),
    DocPath.tag: _Layout(DocPath, struct.Struct("<H"), "document path"),
    DocTerm.tag: _Layout(DocTerm, struct.Struct("<Hd"), "document term"),
}


def encode_record(record: Record) -> bytes:
    """
    Encode a single record.

    Raises:
        FieldTooLong: The text does not fit in the u16 length prefix
    """
    layout = _LAYOUTS[record.tag]
    text = record.text.encode("utf-8")
    if len(text) > MAX_FIELD_LEN:
        raise FieldTooLong(layout.field_name, len(text), MAX_FIELD_LEN)

    if isinstance(record, GlobalTerm):
        fields = layout.fields.pack(len(text), record.count)
    elif isinstance(record, DocTerm):
        fields = layout.fields.pack(len(text), record.freq)
    else:
        fields = layout.fields.pack(len(text))
    return bytes((record.tag,)) + fields + text


def encode_records(records: Iterable[Record]) -> bytes:
    out = bytearray()
    for record in records:
        out += encode_record(record)
    return bytes(out)


def iter_records(data: bytes) -> Iterator[Tuple[int, Record]]:
    """
    Parse a snapshot into records.

    Yields:
        (offset, record) where offset is the position of the record's tag byte

    Raises:
        UnknownRecordTag: Tag byte is not a known record type
        CorruptedStream: Record runs past the end of the buffer or its text
            is not valid UTF-8
    """
    size = len(data)
    offset = 0
    while offset < size:
        tag = data[offset]
        layout = _LAYOUTS.get(tag)
        if layout is None:
            raise UnknownRecordTag(tag, offset)

        text_start = offset + 1 + layout.fields.size
        if text_start > size:
            raise CorruptedStream(f"Truncated {layout.field_name} record", offset)
        length, *values = layout.fields.unpack_from(data, offset + 1)
        text_end = text_start + length
        if text_end > size:
            raise CorruptedStream(
                f"{layout.field_name} needs {length} bytes but only {size - text_start} remain",
                offset,
            )
        try:
            text = bytes(data[text_start:text_end]).decode("utf-8")
        except UnicodeDecodeError as e:
            raise CorruptedStream(f"{layout.field_name} is not valid UTF-8: {e}", offset) from e

        yield offset, layout.record(text, *values)
        offset = text_end


def store_records(store: DocumentStore) -> Iterator[Record]:
    """Records describing a store, in snapshot order (caller holds store.read())"""
    resolve = store.pool.resolve
    for term, count in store.global_term_count.items():
        yield GlobalTerm(resolve(term), count)
    for document in store.documents.values():
        yield DocTitle(document.title)
        yield DocPath(document.path)
        for term, freq in document.term_frequency.items():
            yield DocTerm(resolve(term), freq)


def encode(store: DocumentStore) -> bytes:
    """
    Serialize a store into snapshot bytes.

    Raises:
        FieldTooLong: A title, path or term is longer than 65535 bytes
    """
    with store.read():
        data = encode_records(store_records(store))
        logger.debug(
            f"Encoded {len(store.documents)} documents, "
            f"{len(store.global_term_count)} global terms into {len(data)} bytes"
        )
    return data


class _Decoder:
    """Applies records to a fresh store, tracking the open document"""

    def __init__(self, pool: Optional[StringPool]):
        self.store = DocumentStore(pool)
        self.document: Optional[Document] = None
        self.handlers = {
            GlobalTerm: self._global_term,
            DocTitle: self._doc_title,
            DocPath: self._doc_path,
            DocTerm: self._doc_term,
        }

    def apply(self, offset: int, record: Record) -> None:
        self.handlers[type(record)](offset, record)

    def finish(self) -> DocumentStore:
        self._close_document()
        return self.store

    def _close_document(self) -> None:
        if self.document is not None:
            self.store.documents[self.document.title] = self.document
            self.document = None

    def _open_document(self, offset: int, kind: str) -> Document:
        if self.document is None:
            raise CorruptedStream(f"{kind} record before any document title", offset)
        return self.document

    def _global_term(self, offset: int, record: GlobalTerm) -> None:
        self.store.global_term_count[self.store.pool.intern(record.text)] = record.count

    def _doc_title(self, offset: int, record: DocTitle) -> None:
        self._close_document()
        self.document = Document(title=record.text, path="")

    def _doc_path(self, offset: int, record: DocPath) -> None:
        self._open_document(offset, "Document path").path = record.text

    def _doc_term(self, offset: int, record: DocTerm) -> None:
        document = self._open_document(offset, "Document term")
        if not math.isfinite(record.freq) or record.freq < 0:
            raise CorruptedStream(f"Document term {record.text!r} has frequency {record.freq}", offset)
        document.term_frequency[self.store.pool.intern(record.text)] = record.freq


def decode(data: bytes, pool: Optional[StringPool] = None) -> DocumentStore:
    """
    Rebuild a store from snapshot bytes.

    Args:
        data: Complete snapshot (empty bytes give an empty store)
        pool: Pool to intern terms into (a new pool when omitted)

    Raises:
        UnknownRecordTag: Unrecognized tag byte
        CorruptedStream: Out-of-order, truncated or non-UTF-8 records, or a
            term frequency that is negative or not finite
    """
    decoder = _Decoder(pool)
    for offset, record in iter_records(data):
        decoder.apply(offset, record)
    store = decoder.finish()
    logger.debug(
        f"Decoded {len(store.documents)} documents, "
        f"{len(store.global_term_count)} global terms from {len(data)} bytes"
    )
    return store
