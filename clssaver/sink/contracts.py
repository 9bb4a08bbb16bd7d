"""Interfaces the decompilation engine uses to read input and save results."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class BytecodeProvider(Protocol):
    def get_bytecode(self, external_path: str, internal_path: str | None = None) -> bytes:
        """Raw bytes of a file, or of an entry inside a zip container."""
        ...


@runtime_checkable
class ResultSaver(Protocol):
    """Receives every artifact of a run.

    ``path`` arguments are destination directories relative to the output
    root; ``archive_name`` names an archive inside that directory.
    """

    def save_folder(self, path: str) -> Any: ...

    def copy_file(self, source: str, path: str, entry_name: str) -> Any: ...

    def save_class_file(
        self,
        path: str,
        qualified_name: str | None,
        entry_name: str,
        content: str | bytes,
        mapping: list[int] | None = None,
    ) -> Any: ...

    def create_archive(self, path: str, archive_name: str, manifest: Any = None) -> Any: ...

    def save_dir_entry(self, path: str, archive_name: str, entry_name: str) -> Any: ...

    def copy_entry(self, source: str, path: str, archive_name: str, entry_name: str) -> Any: ...

    def save_class_entry(
        self,
        path: str,
        archive_name: str,
        qualified_name: str | None,
        entry_name: str,
        content: str | bytes | None,
    ) -> Any: ...

    def close_archive(self, path: str, archive_name: str) -> Any: ...
