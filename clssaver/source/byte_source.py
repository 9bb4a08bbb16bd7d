"""Reads raw bytes from plain files or from entries inside zip containers."""

from __future__ import annotations

import os
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path

from clssaver.archive.manifest import MANIFEST_NAME, Manifest
from clssaver.utils.exceptions import ContainerUnreadableError, EntryNotFoundError

LOCATOR_SEPARATOR = "!"


@dataclass(frozen=True)
class BytecodeLocator:
    """A container path plus an optional entry inside it."""

    container: Path
    entry: str | None = None

    @classmethod
    def parse(cls, text: str) -> BytecodeLocator:
        """Parse "lib.jar!a/B.class" or a plain path."""
        container, sep, entry = text.partition(LOCATOR_SEPARATOR)
        if not container:
            raise ValueError(f"Locator has no container path: {text!r}")
        return cls(Path(container), entry if sep and entry else None)

    def __str__(self) -> str:
        if self.entry is None:
            return str(self.container)
        return f"{self.container}{LOCATOR_SEPARATOR}{self.entry}"


def read_zip_entry(container: str | os.PathLike, entry_name: str) -> bytes:
    """
    Return the decompressed bytes of one entry.

    The container is opened and closed within this call.
    """
    try:
        with zipfile.ZipFile(container) as archive:
            try:
                info = archive.getinfo(entry_name)
            except KeyError:
                raise EntryNotFoundError(f"Entry not found: {entry_name} in {container}") from None
            return archive.read(info)
    # zlib.error and EOFError: damaged entry data; RuntimeError: encrypted entry
    except (OSError, zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, RuntimeError) as e:
        raise ContainerUnreadableError(f"Cannot read {entry_name} from {container}: {e}") from e


def read_manifest(container: str | os.PathLike) -> Manifest | None:
    """Return the parsed manifest of a jar, or None if it has none."""
    try:
        data = read_zip_entry(container, MANIFEST_NAME)
    except EntryNotFoundError:
        return None
    try:
        return Manifest.parse(data)
    except (UnicodeDecodeError, ValueError) as e:
        raise ContainerUnreadableError(f"Malformed manifest in {container}: {e}") from e


class ByteSource:
    """Fetches bytecode for a code unit; stateless."""

    def fetch(self, container_path: str | os.PathLike, entry_name: str | None = None) -> bytes:
        if entry_name is None:
            try:
                return Path(container_path).read_bytes()
            except OSError as e:
                raise ContainerUnreadableError(f"Cannot read {container_path}: {e}") from e
        return read_zip_entry(container_path, entry_name)

    def load(self, locator: BytecodeLocator) -> bytes:
        return self.fetch(locator.container, locator.entry)
