"""
File storage service for uploaded files.
Stores files directly beneath one root directory; the directory listing is the
only record of what is stored.
"""
from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Iterator, Protocol

from .config import COPY_CHUNK_SIZE, StorageProperties
from .exceptions import StorageError, StorageErrorReason, StorageFileNotFoundError
from .observability import get_logger
from .resources import FileResource
from .uploads import UploadedFile

logger = get_logger(__name__)


def clean_path(filename: str | None) -> str:
    """
    Normalizes a client-supplied filename: backslashes become slashes, empty and
    ``.`` segments are dropped and ``name/..`` pairs collapse. Leading ``..``
    segments that have nothing to collapse against are kept.
    """
    if not filename:
        return ""
    normalized = str(filename).replace("\\", "/")
    prefix = "/" if normalized.startswith("/") else ""

    segments: list[str] = []
    for segment in normalized.split("/"):
        if segment in ("", "."):
            continue
        if segment == ".." and segments and segments[-1] != "..":
            segments.pop()
            continue
        segments.append(segment)
    return prefix + "/".join(segments)


def escapes_root(clean_filename: str) -> bool:
    """True when a cleaned filename would resolve outside the directory it is joined to."""
    if ".." in clean_filename.split("/"):
        return True
    return bool(Path(clean_filename).anchor)


class StorageService(Protocol):
    @property
    def root_location(self) -> Path:
        ...

    def init(self):
        ...

    def store(self, file: UploadedFile) -> Path:
        ...

    def load_all(self) -> Iterator[Path]:
        ...

    def load(self, filename: str) -> Path:
        ...

    def load_as_resource(self, filename: str) -> FileResource:
        ...

    def delete_all(self) -> bool:
        ...


class FileSystemStorageService:
    def __init__(self, properties: StorageProperties | None = None):
        properties = properties or StorageProperties.from_env()
        self._root = Path(properties.location)
        self.init()

    @property
    def root_location(self) -> Path:
        return self._root

    def init(self):
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(
                "Could not initialize storage",
                reason=StorageErrorReason.INIT,
                cause=exc,
            ) from exc
        logger.info("storage_initialized", root=str(self._root))

    def store(self, file: UploadedFile) -> Path:
        """Copies the upload to ``root/filename``, replacing any existing file of that name."""
        filename = clean_path(file.original_filename)
        if file.is_empty:
            raise StorageError(
                f"Failed to store empty file {filename}",
                reason=StorageErrorReason.EMPTY,
                filename=filename,
            )
        if escapes_root(filename):
            raise StorageError(
                f"Cannot store file with relative path outside current directory {filename}",
                reason=StorageErrorReason.PATH_TRAVERSAL,
                filename=filename,
            )

        destination = self._root / filename
        try:
            with file.open_stream() as source, open(destination, "wb") as target:
                shutil.copyfileobj(source, target, COPY_CHUNK_SIZE)
                written = target.tell()
        except (OSError, ValueError) as exc:
            raise StorageError(
                f"Failed to store file {filename}",
                reason=StorageErrorReason.WRITE,
                filename=filename,
                cause=exc,
            ) from exc

        logger.info("file_stored", filename=filename, bytes=int(written), stored_file=str(destination))
        return destination

    def load_all(self) -> Iterator[Path]:
        """
        Lists the direct children of the root as root-relative paths.
        The directory is opened immediately; entries are produced lazily and the
        handle is closed once iteration finishes. A result that is never iterated
        keeps the handle open until it is garbage collected.
        """
        try:
            entries = os.scandir(self._root)
        except OSError as exc:
            raise StorageError(
                "Failed to read stored files",
                reason=StorageErrorReason.READ,
                cause=exc,
            ) from exc
        return self._iter_entries(entries)

    def _iter_entries(self, entries: Iterator[os.DirEntry[str]]) -> Iterator[Path]:
        with entries:
            try:
                for entry in entries:
                    yield Path(entry.name)
            except OSError as exc:
                raise StorageError(
                    "Failed to read stored files",
                    reason=StorageErrorReason.READ,
                    cause=exc,
                ) from exc

    def load(self, filename: str) -> Path:
        return self._root / filename

    def load_as_resource(self, filename: str) -> FileResource:
        if escapes_root(clean_path(filename)):
            raise StorageFileNotFoundError(f"Could not read file: {filename}", filename=filename)
        try:
            resource = FileResource(self.load(filename))
        except ValueError as exc:
            raise StorageFileNotFoundError(
                f"Could not read file: {filename}",
                filename=filename,
                cause=exc,
            ) from exc

        if resource.exists() and resource.is_readable():
            return resource
        raise StorageFileNotFoundError(f"Could not read file: {filename}", filename=filename)

    def delete_all(self) -> bool:
        """
        Recursively removes the root directory. Best effort: entries that cannot
        be removed are logged, not raised. Returns True when the root existed and
        is gone afterwards.
        """
        root = self._root
        if not root.exists() and not root.is_symlink():
            return False

        failures: list[str] = []

        def _record_failure(_function, path, exc: BaseException):
            failures.append(f"{path}: {exc}")

        shutil.rmtree(root, onexc=_record_failure)
        removed = not root.exists() and not root.is_symlink()
        if failures:
            logger.warning(
                "storage_purge_incomplete",
                root=str(root),
                failed_entries=len(failures),
                first_failure=failures[0],
            )
        else:
            logger.info("storage_purged", root=str(root))
        return removed
