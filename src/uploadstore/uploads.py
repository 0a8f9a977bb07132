"""
Uploaded-file handles accepted by the storage service.
"""
from __future__ import annotations

import io
import mimetypes
import os
from pathlib import Path
from typing import BinaryIO, Callable, Protocol, runtime_checkable


@runtime_checkable
class UploadedFile(Protocol):
    @property
    def original_filename(self) -> str | None:
        ...

    @property
    def is_empty(self) -> bool:
        ...

    def open_stream(self) -> BinaryIO:
        ...


class FileUpload:
    """A single uploaded file: client-supplied name plus a byte source."""

    def __init__(
        self,
        original_filename: str | None,
        opener: Callable[[], BinaryIO],
        size: int,
        content_type: str | None = None,
    ):
        self._original_filename = original_filename
        self._opener = opener
        self._size = max(0, int(size))
        self._content_type = content_type or _guess_content_type(original_filename)

    @classmethod
    def from_bytes(cls, original_filename: str | None, data: bytes, content_type: str | None = None) -> "FileUpload":
        payload = bytes(data or b"")
        return cls(original_filename, lambda: io.BytesIO(payload), len(payload), content_type)

    @classmethod
    def from_path(cls, source_path: str | Path, original_filename: str | None = None) -> "FileUpload":
        """Wraps a local file; the upload name defaults to the file's own name."""
        path = Path(source_path)
        return cls(
            original_filename if original_filename is not None else path.name,
            lambda: open(path, "rb"),
            path.stat().st_size,
        )

    @classmethod
    def from_stream(
        cls,
        original_filename: str | None,
        stream: BinaryIO,
        size: int | None = None,
        content_type: str | None = None,
    ) -> "FileUpload":
        """Wraps an already-open binary stream. Size is measured when the stream is seekable."""
        if size is None:
            size = _remaining_bytes(stream)
        return cls(original_filename, lambda: stream, size, content_type)

    @property
    def original_filename(self) -> str | None:
        return self._original_filename

    @property
    def size(self) -> int:
        return self._size

    @property
    def content_type(self) -> str | None:
        return self._content_type

    @property
    def is_empty(self) -> bool:
        return self._size == 0

    def open_stream(self) -> BinaryIO:
        return self._opener()

    def __repr__(self) -> str:
        return f"FileUpload(original_filename={self._original_filename!r}, size={self._size})"


def _guess_content_type(filename: str | None) -> str | None:
    if not filename:
        return None
    content_type, _ = mimetypes.guess_type(filename)
    return content_type


def _remaining_bytes(stream: BinaryIO) -> int:
    try:
        position = stream.tell()
        end = stream.seek(0, os.SEEK_END)
        stream.seek(position)
    except (AttributeError, OSError, ValueError):
        raise ValueError("size is required for non-seekable upload streams") from None
    return max(0, end - position)
