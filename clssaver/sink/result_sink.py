"""Facade the decompilation engine writes its results through."""

from __future__ import annotations

import zipfile
from enum import Enum
from pathlib import Path
from typing import Callable, TypeVar

from clssaver.archive.manifest import Manifest
from clssaver.archive.registry import ArchiveRegistry
from clssaver.fs.file_manager import DirectoryWriter
from clssaver.fs.path_generator import resolve_destination
from clssaver.source.byte_source import ByteSource
from clssaver.utils.exceptions import ArchiveStateError, OutputError, SourceError
from clssaver.utils.logging import Logger

T = TypeVar("T")


class Outcome(Enum):
    """What happened to one artifact."""

    WRITTEN = "written"
    SKIPPED = "skipped"
    FAILED = "failed"


class ResultSink:
    """Routes engine output to loose files or to archives under one output root.

    Per-artifact failures are logged and reported as Outcome.FAILED so the run
    continues. Archive lifecycle violations (DuplicateArchiveError,
    ArchiveNotOpenError) are logged and re-raised: they are caller bugs.

    Use as a context manager so archives left open are closed even when the
    run unwinds on an error.
    """

    def __init__(
        self,
        root: Path,
        logger: Logger,
        *,
        compression: int = zipfile.ZIP_DEFLATED,
    ) -> None:
        self.root = Path(root).absolute()
        self.logger = logger
        self.source = ByteSource()
        self.directories = DirectoryWriter(logger)
        self.archives = ArchiveRegistry(self.directories, logger, compression=compression)

    def __enter__(self) -> ResultSink:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> int:
        """Close every archive still open. Returns how many there were."""
        return self.archives.close_all()

    def resolve(self, path: str | None) -> Path:
        """Absolute directory for a root-relative destination path."""
        return resolve_destination(self.root, path)

    # BytecodeProvider

    def get_bytecode(self, external_path: str, internal_path: str | None = None) -> bytes:
        return self.source.fetch(external_path, internal_path)

    # ResultSaver

    def save_folder(self, path: str) -> Outcome:
        return self._guard(
            f"Cannot create directory {path!r}",
            lambda: self.directories.ensure_directory(self.resolve(path)),
        )

    def copy_file(self, source: str, path: str, entry_name: str) -> Outcome:
        return self._guard(
            f"Cannot copy {source} to {entry_name}",
            lambda: self.directories.copy_file(Path(source), self.resolve(path), entry_name),
        )

    def save_class_file(
        self,
        path: str,
        qualified_name: str | None,
        entry_name: str,
        content: str | bytes,
        mapping: list[int] | None = None,
    ) -> Outcome:
        return self._guard(
            f"Cannot write class file {entry_name}",
            lambda: self.directories.write_file(self.resolve(path), entry_name, content),
        )

    def create_archive(self, path: str, archive_name: str, manifest: Manifest | None = None) -> Outcome:
        return self._guard(
            f"Cannot create archive {archive_name}",
            lambda: self.archives.begin(self.resolve(path), archive_name, manifest),
        )

    def save_dir_entry(self, path: str, archive_name: str, entry_name: str) -> Outcome:
        return self.save_class_entry(path, archive_name, None, entry_name, None)

    def copy_entry(self, source: str, path: str, archive_name: str, entry_name: str) -> Outcome:
        return self._guard(
            f"Cannot copy entry {entry_name} from {source} to {archive_name}",
            lambda: self.archives.copy_entry(source, self.resolve(path), archive_name, entry_name),
        )

    def save_class_entry(
        self,
        path: str,
        archive_name: str,
        qualified_name: str | None,
        entry_name: str,
        content: str | bytes | None,
    ) -> Outcome:
        return self._guard(
            f"Cannot write entry {entry_name} to {archive_name}",
            lambda: self.archives.write_entry(self.resolve(path), archive_name, entry_name, content),
        )

    def close_archive(self, path: str, archive_name: str) -> Outcome:
        return self._guard(
            f"Cannot close {archive_name}",
            lambda: self.archives.end(self.resolve(path), archive_name),
            level="WARN",
        )

    # Generic routing

    def save(
        self,
        path: str,
        name: str,
        content: str | bytes | None,
        archive: str | None = None,
    ) -> Outcome:
        """Save content loose as path/name, or as entry name of archive path/archive."""
        if archive is not None:
            return self.save_class_entry(path, archive, None, name, content)
        if content is None:
            return self.save_folder(str(Path(path, name)) if path else name)
        return self.save_class_file(path, None, name, content)

    def copy(self, source: str, path: str, name: str, archive: str | None = None) -> Outcome:
        """Copy a loose file, or an entry of the source container into archive path/archive."""
        if archive is not None:
            return self.copy_entry(source, path, archive, name)
        return self.copy_file(source, path, name)

    def _guard(self, what: str, action: Callable[[], T], level: str = "ERROR") -> Outcome:
        try:
            result = action()
        except ArchiveStateError as e:
            self.logger.error("SINK", what, e)
            raise
        except (OutputError, SourceError) as e:
            self.logger.log(level, "SINK", f"{what}: {e}")
            return Outcome.FAILED
        return Outcome.SKIPPED if result is False else Outcome.WRITTEN
