"""Owns the open output archives of a run, keyed by resolved archive path."""

from __future__ import annotations

import os
import threading
import zipfile
from pathlib import Path

from clssaver.archive.handle import ArchiveHandle
from clssaver.archive.manifest import Manifest
from clssaver.fs.file_manager import DirectoryWriter
from clssaver.fs.path_generator import archive_key
from clssaver.source.byte_source import read_zip_entry
from clssaver.utils.exceptions import (
    ArchiveNotOpenError,
    ClsSaverError,
    DuplicateArchiveError,
    EntryNotFoundError,
)
from clssaver.utils.logging import Logger


class ArchiveRegistry:
    """Creates, fills and closes output archives.

    Every operation on an archive holds that archive's lock for its whole
    duration, so calls against one key are strictly serialized while calls
    against different keys run independently.
    """

    def __init__(
        self,
        directories: DirectoryWriter,
        logger: Logger,
        *,
        compression: int = zipfile.ZIP_DEFLATED,
    ) -> None:
        self.directories = directories
        self.logger = logger
        self.compression = compression
        self._handles: dict[str, ArchiveHandle] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def begin(self, directory: Path, name: str, manifest: Manifest | None = None) -> str:
        """Create the archive file and register an open handle for it. Returns the key."""
        key = archive_key(directory, name)
        with self._lock_for(key, create=True):
            if self._get(key) is not None:
                raise DuplicateArchiveError(f"Archive {key} is already open")

            self.directories.ensure_directory(Path(key).parent)
            handle = ArchiveHandle(key, self.compression)
            handle.open(manifest)
            with self._guard:
                self._handles[key] = handle

        kind = "jar" if manifest is not None else "zip"
        self.logger.debug("ARCHIVE", f"Opened {kind} {key}")
        return key

    def write_entry(
        self,
        directory: Path,
        name: str,
        entry_name: str,
        content: str | bytes | None = None,
    ) -> bool:
        """
        Write one entry into an open archive.

        Returns False when the entry name was already written (the first write
        wins and the duplicate is skipped with a warning).
        """
        key = archive_key(directory, name)
        with self._lock_for(key):
            handle = self._require(key)
            if self._is_duplicate(handle, entry_name):
                return False
            handle.write(entry_name, content)
            handle.catalog.reserve(entry_name)

        self.logger.trace("ARCHIVE", f"{entry_name} -> {key}")
        return True

    def copy_entry(self, source: str | os.PathLike, directory: Path, name: str, entry_name: str) -> bool:
        """
        Copy entry_name from the source container into an open archive.

        A source lacking the entry is skipped silently and does not reserve the name.
        """
        key = archive_key(directory, name)
        with self._lock_for(key):
            handle = self._require(key)
            try:
                data = read_zip_entry(source, entry_name)
            except EntryNotFoundError:
                self.logger.debug("ARCHIVE", f"No entry {entry_name} in {source}, skipped")
                return False
            if self._is_duplicate(handle, entry_name):
                return False
            handle.write(entry_name, data)
            handle.catalog.reserve(entry_name)

        self.logger.trace("ARCHIVE", f"{source}!{entry_name} -> {key}")
        return True

    def end(self, directory: Path, name: str) -> None:
        """Close the archive and forget it; the key may be opened again afterwards."""
        key = archive_key(directory, name)
        with self._lock_for(key):
            handle = self._require(key)
            with self._guard:
                del self._handles[key]
            handle.close()

        self.logger.debug("ARCHIVE", f"Closed {key} ({len(handle.catalog)} entries)")

    def is_open(self, directory: Path, name: str) -> bool:
        return self._get(archive_key(directory, name)) is not None

    def open_keys(self) -> list[str]:
        with self._guard:
            return sorted(self._handles)

    def close_all(self) -> int:
        """Close every archive still open. Returns how many were closed."""
        closed = 0
        for key in self.open_keys():
            with self._lock_for(key):
                with self._guard:
                    handle = self._handles.pop(key, None)
                if handle is None:
                    continue
                self.logger.warn("ARCHIVE", f"Archive {key} was left open, closing it")
                try:
                    handle.close()
                    closed += 1
                except ClsSaverError as e:
                    self.logger.error("ARCHIVE", f"Cannot close {key}", e)
        return closed

    def _lock_for(self, key: str, create: bool = False) -> threading.Lock:
        # Only begin() creates locks; keys that were never opened get none
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                if not create:
                    raise ArchiveNotOpenError(f"Archive {key} is not open")
                lock = self._locks[key] = threading.Lock()
            return lock

    def _get(self, key: str) -> ArchiveHandle | None:
        with self._guard:
            return self._handles.get(key)

    def _require(self, key: str) -> ArchiveHandle:
        handle = self._get(key)
        if handle is None or not handle.is_open:
            raise ArchiveNotOpenError(f"Archive {key} is not open")
        return handle

    def _is_duplicate(self, handle: ArchiveHandle, entry_name: str) -> bool:
        if entry_name not in handle.catalog:
            return False
        self.logger.warn("ARCHIVE", f"Zip entry {entry_name} already exists in {handle.key}")
        return True
