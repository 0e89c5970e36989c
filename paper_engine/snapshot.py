"""
Snapshot files: the index is loaded once at startup and written once at
shutdown. There is no incremental persistence; every save rewrites the whole
file.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from .index import DocumentStore, StringPool, decode, encode

logger = logging.getLogger(__name__)


def load_snapshot(path: Union[str, Path], pool: Optional[StringPool] = None) -> DocumentStore:
    """
    Load a store from a snapshot file.

    A missing file is not an error: it yields an empty store. A file that
    cannot be decoded raises (CorruptedStream / UnknownRecordTag) and no
    store is returned.
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"No snapshot at {path}, starting with an empty index")
        return DocumentStore(pool)

    data = path.read_bytes()
    store = decode(data, pool)
    logger.info(f"Loaded snapshot {path}: {len(store)} documents ({len(data)} bytes)")
    return store


def save_snapshot(store: DocumentStore, path: Union[str, Path]) -> int:
    """
    Write a store to a snapshot file, replacing any previous snapshot.

    The bytes go to a temporary file next to the target first, so an
    interrupted save leaves the old snapshot intact.

    Returns:
        Number of bytes written
    """
    path = Path(path)
    data = encode(store)

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        with open(tmp_path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    logger.info(f"Successfully wrote snapshot {path} ({len(data)} bytes)")
    return len(data)
