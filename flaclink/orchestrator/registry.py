#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Persistent album registry.

Remembers every album that has been linked into (or found in) the library,
keyed by a fingerprint of the album directory's immediate contents, so that
an album is never linked twice. Backed by a single-table SQLite file that
is held under an exclusive lock for as long as the registry is open.
"""

import logging
import sqlite3
import struct
from pathlib import Path
from typing import Callable, Generator, List, Optional, Sequence, Tuple

from ..errors import DecodeError, EncodeError, StoreUnavailable, WriteError

logger = logging.getLogger(__name__)

TABLE_NAME = "albums"
DEFAULT_LOCK_TIMEOUT = 0.1

_LENGTH = struct.Struct(">I")


def encode_contents(contents: Sequence[str]) -> bytes:
    """
    Encode an album's content listing into its fingerprint.

    The encoding is an entry count followed by one length-prefixed UTF-8
    string per entry, so it preserves both names and order exactly. Names
    holding undecodable filesystem bytes round-trip through surrogateescape.

    Raises:
        EncodeError: A name isn't a string or can't be encoded.
    """
    parts = [_LENGTH.pack(len(contents))]
    for name in contents:
        if not isinstance(name, str):
            raise EncodeError(f"Album entry name isn't a string: {name!r}")
        try:
            data = name.encode('utf-8', 'surrogateescape')
        except UnicodeEncodeError as e:
            raise EncodeError(f"Can't encode album entry name {name!r}: {e}") from e
        parts.append(_LENGTH.pack(len(data)))
        parts.append(data)
    return b"".join(parts)


def decode_contents(fingerprint: bytes) -> List[str]:
    """
    Decode a fingerprint back into the content listing it was built from.

    Raises:
        DecodeError: The fingerprint is truncated or has trailing bytes.
    """
    view = memoryview(fingerprint)
    try:
        (count,) = _LENGTH.unpack_from(view, 0)
        offset = _LENGTH.size
        contents = []
        for _ in range(count):
            (length,) = _LENGTH.unpack_from(view, offset)
            offset += _LENGTH.size
            if offset + length > len(view):
                raise DecodeError(f"Fingerprint truncated at byte {offset}")
            contents.append(bytes(view[offset:offset + length]).decode('utf-8', 'surrogateescape'))
            offset += length
    except struct.error as e:
        raise DecodeError(f"Malformed fingerprint: {e}") from e

    if offset != len(view):
        raise DecodeError(f"Fingerprint has {len(view) - offset} trailing bytes")
    return contents


class FingerprintRegistry:
    """
    On-disk ledger of known albums.

    Use as a context manager; the SQLite file stays exclusively locked from
    open until close, so a second registry on the same file (in this or any
    other process) fails with StoreUnavailable after `lock_timeout` seconds.

    Args:
        db_path: Registry file, created on first open.
        lock_timeout: Seconds to wait for exclusive access.
    """

    def __init__(self, db_path: Path, lock_timeout: float = DEFAULT_LOCK_TIMEOUT):
        self.db_path = Path(db_path)
        self.lock_timeout = lock_timeout
        self._conn: Optional[sqlite3.Connection] = None

    def __enter__(self) -> "FingerprintRegistry":
        return self.open()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    # ==================== Lifecycle ====================

    def open(self) -> "FingerprintRegistry":
        """
        Open and lock the registry file, creating the albums table if needed.

        Raises:
            StoreUnavailable: Lock not obtained in time, or the file can't be
              opened as a registry.
            RuntimeError: The registry is already open.
        """
        if self._conn is not None:
            raise RuntimeError(f"Registry already open: {self.db_path}")

        is_new = not self.db_path.exists()
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=self.lock_timeout, isolation_level=None)
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Can't open album registry {self.db_path}: {e}") from e

        try:
            conn.execute("PRAGMA locking_mode = EXCLUSIVE")
            # Exclusive locking mode keeps this lock until the connection closes.
            conn.execute("BEGIN EXCLUSIVE")
            conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
                    fingerprint BLOB PRIMARY KEY NOT NULL,
                    name BLOB NOT NULL
                )
            """)
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            conn.close()
            raise StoreUnavailable(f"Can't lock album registry {self.db_path} within "
                                   f"{self.lock_timeout}s: {e}") from e

        self._conn = conn
        if is_new:
            logger.info("Created album database at %s.", self.db_path)
        else:
            logger.debug("Found album database at %s.", self.db_path)
        return self

    def close(self) -> None:
        """Release the lock and close the registry. Safe to call twice."""
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    # ==================== Entries ====================

    def contains(self, album) -> bool:
        """True if an album with identical contents is already registered"""
        fingerprint = encode_contents(album.contents)
        try:
            cur = self._connection().execute(
                f"SELECT 1 FROM {TABLE_NAME} WHERE fingerprint = ?", (fingerprint,))
            return cur.fetchone() is not None
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Can't read album registry {self.db_path}: {e}") from e

    def insert(self, album) -> None:
        """
        Register an album, overwriting the name stored for its fingerprint.

        Raises:
            EncodeError: The album name or contents can't be encoded.
            WriteError: The entry couldn't be written.
        """
        fingerprint = encode_contents(album.contents)
        try:
            name = album.name.encode('utf-8', 'surrogateescape')
        except UnicodeEncodeError as e:
            raise EncodeError(f"Can't encode album name {album.name!r}: {e}") from e

        try:
            self._connection().execute(
                f"INSERT OR REPLACE INTO {TABLE_NAME} (fingerprint, name) VALUES (?, ?)",
                (fingerprint, name))
        except sqlite3.Error as e:
            raise WriteError(f"Can't register album {album.name!r}: {e}") from e

    def entries(self) -> Generator[Tuple[List[str], str], None, None]:
        """Yields (contents, name) for every entry, in fingerprint order."""
        cur = self._connection().execute(
            f"SELECT fingerprint, name FROM {TABLE_NAME} ORDER BY fingerprint")
        for fingerprint, name in cur:
            if isinstance(name, bytes):
                name = name.decode('utf-8', 'surrogateescape')
            yield decode_contents(fingerprint), name

    def for_each(self, fn: Callable[[str, List[str]], None]) -> None:
        """Calls fn(name, contents) for every entry, in fingerprint order."""
        for contents, name in self.entries():
            fn(name, contents)

    def __len__(self) -> int:
        (count,) = self._connection().execute(f"SELECT COUNT(*) FROM {TABLE_NAME}").fetchone()
        return count

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Album registry isn't open.")
        return self._conn

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"FingerprintRegistry({self.db_path}, {state})"
