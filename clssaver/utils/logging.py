"""Colored, tagged logging with progress display for clssaver."""

from __future__ import annotations

import sys
import threading
from datetime import datetime
from typing import TextIO

# ANSI color codes
RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"

RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
MAGENTA = "\033[35m"
CYAN = "\033[36m"
WHITE = "\033[37m"

LEVELS = ["TRACE", "DEBUG", "INFO", "WARN", "ERROR"]

LEVEL_COLORS = {
    "TRACE": DIM,
    "DEBUG": DIM,
    "INFO": GREEN,
    "WARN": YELLOW,
    "ERROR": RED,
}

TAG_COLORS = {
    "CORE": BLUE,
    "SOURCE": CYAN,
    "FS": GREEN,
    "ARCHIVE": MAGENTA,
    "SINK": YELLOW,
}


class Logger:
    """Colored console logger with a minimum severity and progress bar support.

    Components receive the logger from whoever constructs them; there is no
    module-level instance.
    """

    def __init__(
        self,
        verbose: bool = False,
        level: str = "INFO",
        stream: TextIO | None = None,
        color: bool = True,
    ) -> None:
        level = level.upper()
        if level not in LEVELS:
            raise ValueError(f"Unknown log level: {level}")
        if verbose and LEVELS.index(level) > LEVELS.index("DEBUG"):
            level = "DEBUG"
        self.level = level
        self.verbose = verbose
        self.color = color
        self._stream = stream
        self._progress_active = False
        self._write_lock = threading.Lock()

    @property
    def stream(self) -> TextIO:
        # Resolved late so redirected stderr (tests, pagers) is honored
        return self._stream if self._stream is not None else sys.stderr

    def enabled(self, level: str) -> bool:
        return LEVELS.index(level) >= LEVELS.index(self.level)

    def trace(self, tag: str, message: str) -> None:
        self.log("TRACE", tag, message)

    def debug(self, tag: str, message: str) -> None:
        self.log("DEBUG", tag, message)

    def info(self, tag: str, message: str) -> None:
        self.log("INFO", tag, message)

    def warn(self, tag: str, message: str) -> None:
        self.log("WARN", tag, message)

    def error(self, tag: str, message: str, exc: BaseException | None = None) -> None:
        if exc is not None:
            message = f"{message}: {exc}"
        self.log("ERROR", tag, message)

    def log(self, level: str, tag: str, message: str) -> None:
        """Write one record with an explicit severity."""
        level = level.upper()
        if level not in LEVELS:
            raise ValueError(f"Unknown log level: {level}")
        if self.enabled(level):
            self._log(level, tag, message)

    def progress(self, current: int, total: int, label: str = "") -> None:
        """Display a progress bar."""
        if total <= 0:
            return
        pct = min(current / total, 1.0)
        filled = int(32 * pct)
        bar = "█" * filled + "░" * (32 - filled)
        line = f"\r{self._c(DIM)}[{bar}]{self._c(RESET)} {pct:.0%} ({current}/{total})"
        if label:
            line += f" {label}"
        # Clear any leftover characters from a longer previous line
        if self.color:
            line += "\033[K"
        out = self.stream
        out.write(line)
        out.flush()
        self._progress_active = True
        if current >= total:
            out.write("\n")
            self._progress_active = False

    def tree(self, lines: list[str], indent: str = "                     ") -> None:
        """Print tree-formatted output."""
        out = self.stream
        for line in lines:
            out.write(f"{indent}{line}\n")
        out.flush()

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def _log(self, level: str, tag: str, message: str) -> None:
        time_str = datetime.now().strftime("%H:%M:%S")

        level_color = self._c(LEVEL_COLORS.get(level, ""))
        tag_color = self._c(TAG_COLORS.get(tag, WHITE))
        reset = self._c(RESET)

        line = (
            f"{self._c(DIM)}[{time_str}]{reset} "
            f"{level_color}[{level}]{reset} "
            f"{tag_color}[{tag}]{reset} "
            f"{message}"
        )
        with self._write_lock:
            out = self.stream
            if self._progress_active:
                out.write("\n")
                self._progress_active = False
            out.write(line + "\n")
            out.flush()
