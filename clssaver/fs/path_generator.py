"""Destination path validation and archive key resolution."""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath, PureWindowsPath

from clssaver.utils.exceptions import PathConflictError


def destination_parts(path: str | os.PathLike | None) -> tuple[str, ...]:
    """
    Split a root-relative destination path into its components.
    Accepts both forward and back slashes. Empty, "." components are dropped.
    """
    if path is None:
        return ()
    raw = os.fspath(path)
    if "\x00" in raw:
        raise PathConflictError(f"Destination path contains a NUL character: {raw!r}")
    if PurePosixPath(raw).is_absolute() or PureWindowsPath(raw).drive or raw.startswith("\\"):
        raise PathConflictError(f"Destination path must be root-relative: {raw!r}")

    parts: list[str] = []
    for part in raw.replace("\\", "/").split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            if not parts:
                raise PathConflictError(f"Destination path escapes the output root: {raw!r}")
            parts.pop()
            continue
        parts.append(part)
    return tuple(parts)


def resolve_destination(root: Path, path: str | os.PathLike | None) -> Path:
    """Combine the output root with a logical destination path."""
    return Path(root, *destination_parts(path))


def archive_key(directory: Path, name: str) -> str:
    """Return the normalized absolute path identifying an output archive."""
    if not name or "\x00" in name:
        raise PathConflictError(f"Invalid archive name: {name!r}")
    return os.path.normpath(os.path.abspath(os.path.join(directory, name)))
