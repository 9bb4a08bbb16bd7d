"""A single output archive: its stream, its state and its entry catalog."""

from __future__ import annotations

import time
import zipfile
from enum import Enum
from typing import BinaryIO

from clssaver.archive.catalog import EntryCatalog
from clssaver.archive.manifest import MANIFEST_NAME, Manifest
from clssaver.utils.exceptions import ArchiveNotOpenError, WriteFailureError


class HandleState(Enum):
    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


class ArchiveHandle:
    """Owns the output stream of one archive file exclusively.

    Not thread-safe on its own; ArchiveRegistry serializes access per key.
    """

    def __init__(self, key: str, compression: int = zipfile.ZIP_DEFLATED) -> None:
        self.key = key
        self.compression = compression
        self.catalog = EntryCatalog()
        self.state = HandleState.UNOPENED
        self.manifest: Manifest | None = None
        self._file: BinaryIO | None = None
        self._zip: zipfile.ZipFile | None = None

    @property
    def is_open(self) -> bool:
        return self.state is HandleState.OPEN

    def open(self, manifest: Manifest | None = None) -> None:
        """Create (or truncate) the archive file and start writing it."""
        if self.state is not HandleState.UNOPENED:
            raise ArchiveNotOpenError(f"Archive {self.key} cannot be reopened ({self.state.value})")

        try:
            self._file = open(self.key, "wb")
        except OSError as e:
            raise WriteFailureError(f"Cannot create archive {self.key}: {e}") from e

        try:
            self._zip = zipfile.ZipFile(self._file, "w", compression=self.compression)
            self.state = HandleState.OPEN
            if manifest is not None:
                self.manifest = manifest
                self.catalog.reserve(MANIFEST_NAME)
                self._put(MANIFEST_NAME, manifest.to_bytes())
        except (OSError, ValueError, zipfile.LargeZipFile) as e:
            self._release()
            raise WriteFailureError(f"Cannot create archive {self.key}: {e}") from e

    def write(self, entry_name: str, content: str | bytes | None = None) -> None:
        """Add one entry. None content writes a zero-length entry."""
        if self.state is not HandleState.OPEN:
            raise ArchiveNotOpenError(f"Archive {self.key} is not open")
        try:
            self._put(entry_name, content)
        except (OSError, ValueError, zipfile.LargeZipFile) as e:
            raise WriteFailureError(f"Cannot write entry {entry_name} to {self.key}: {e}") from e

    def close(self) -> None:
        """Finish the central directory and release the file."""
        if self.state is not HandleState.OPEN:
            raise ArchiveNotOpenError(f"Archive {self.key} is not open ({self.state.value})")
        try:
            self._zip.close()
            self._file.close()
        except (OSError, ValueError) as e:
            raise WriteFailureError(f"Cannot close {self.key}: {e}") from e
        finally:
            self._release()

    def _put(self, entry_name: str, content: str | bytes | None) -> None:
        info = zipfile.ZipInfo(entry_name, date_time=time.localtime()[:6])
        if entry_name.endswith("/"):
            info.compress_type = zipfile.ZIP_STORED
            # drwxr-xr-x plus the MS-DOS directory flag
            info.external_attr = (0o40755 << 16) | 0x10
        else:
            info.compress_type = self.compression
            info.external_attr = 0o644 << 16

        if content is None:
            data = b""
        elif isinstance(content, str):
            data = content.encode("utf-8")
        else:
            data = bytes(content)
        self._zip.writestr(info, data)

    def _release(self) -> None:
        # Best effort: the primary error has already been raised or recorded
        if self._zip is not None:
            try:
                self._zip.close()
            except (OSError, ValueError):
                pass
        if self._file is not None and not self._file.closed:
            self._file.close()
        self._zip = None
        self._file = None
        self.state = HandleState.CLOSED
