"""
Readable handles to stored files, used to stream downloads without loading
the whole file into memory.
"""
from __future__ import annotations

import mimetypes
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Iterator

from .config import COPY_CHUNK_SIZE


class FileResource:
    """A file addressed by a ``file://`` URI."""

    def __init__(self, path: str | Path):
        self._path = Path(path)
        if "\x00" in str(self._path):
            raise ValueError(f"path contains a NUL byte: {str(self._path)!r}")
        self._uri = self._path.absolute().as_uri()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def filename(self) -> str:
        return self._path.name

    @property
    def content_type(self) -> str:
        content_type, _ = mimetypes.guess_type(self._path.name)
        return content_type or "application/octet-stream"

    def exists(self) -> bool:
        return self._path.exists()

    def is_readable(self) -> bool:
        return self._path.is_file() and os.access(self._path, os.R_OK)

    def content_length(self) -> int:
        return self._path.stat().st_size

    def last_modified(self) -> datetime:
        return datetime.fromtimestamp(self._path.stat().st_mtime, tz=timezone.utc)

    def open(self) -> BinaryIO:
        return open(self._path, "rb")

    def iter_bytes(self, chunk_size: int = COPY_CHUNK_SIZE) -> Iterator[bytes]:
        """Yields the file content in chunks; the file is closed when iteration ends."""
        with self.open() as handle:
            while True:
                chunk = handle.read(max(1, int(chunk_size)))
                if not chunk:
                    break
                yield chunk

    def read_bytes(self) -> bytes:
        return self._path.read_bytes()

    def __eq__(self, other) -> bool:
        if not isinstance(other, FileResource):
            return NotImplemented
        return self._uri == other._uri

    def __hash__(self) -> int:
        return hash(self._uri)

    def __repr__(self) -> str:
        return f"FileResource({self._uri!r})"
