"""Loose output: directories, files and file copies under the output root."""

from __future__ import annotations

import os
import shutil
import threading
from pathlib import Path

from clssaver.utils.exceptions import PathConflictError, WriteFailureError
from clssaver.utils.logging import Logger


class DirectoryWriter:
    """Materializes directories and loose files on the filesystem."""

    def __init__(self, logger: Logger) -> None:
        self.logger = logger
        self._ensured: set[str] = set()
        self._ensured_lock = threading.Lock()

    def ensure_directory(self, path: Path) -> Path:
        """
        Create the directory and any missing ancestors.

        Succeeds if the directory already exists, including when a concurrent
        caller created it first. Raises PathConflictError if the path or one of
        its ancestors exists as a non-directory.
        """
        path = Path(path)
        key = os.path.abspath(path)
        with self._ensured_lock:
            if key in self._ensured:
                return path

        try:
            path.mkdir(parents=True, exist_ok=True)
        except (FileExistsError, NotADirectoryError) as e:
            raise PathConflictError(f"Cannot create directory {path}: not a directory") from e
        except OSError as e:
            raise WriteFailureError(f"Cannot create directory {path}: {e}") from e

        with self._ensured_lock:
            self._ensured.add(key)
        self.logger.trace("FS", f"Directory ready: {path}")
        return path

    def write_file(self, directory: Path, name: str, content: str | bytes) -> Path:
        """Write text (as UTF-8) or raw bytes to directory/name, replacing any existing file."""
        target = Path(directory) / name
        self.ensure_directory(target.parent)

        data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        try:
            with open(target, "wb") as out:
                out.write(data)
        except OSError as e:
            raise WriteFailureError(f"Cannot write file {target}: {e}") from e

        self.logger.debug("FS", f"Wrote {target} ({len(data)} bytes)")
        return target

    def copy_file(self, source: Path, directory: Path, name: str) -> Path:
        """Copy source byte-for-byte to directory/name."""
        target = Path(directory) / name
        self.ensure_directory(target.parent)

        try:
            shutil.copyfile(source, target)
        except (OSError, shutil.SameFileError) as e:
            raise WriteFailureError(f"Cannot copy {source} to {target}: {e}") from e

        self.logger.debug("FS", f"Copied {source} -> {target}")
        return target
