"""Drives a ResultSink over a set of class files, directories and archives."""

from __future__ import annotations

import os
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Union

from clssaver.archive.manifest import MANIFEST_NAME
from clssaver.sink.result_sink import Outcome, ResultSink
from clssaver.source.byte_source import read_manifest
from clssaver.utils.exceptions import SourceError
from clssaver.utils.logging import Logger

CLASS_SUFFIX = ".class"
ARCHIVE_SUFFIXES = (".jar", ".zip")

# (entry name, bytecode) -> (output name, content)
Renderer = Callable[[str, bytes], "tuple[str, Union[str, bytes]]"]


@dataclass
class RepackStats:
    """Counters for one run."""

    sources: int = 0
    files: int = 0
    entries: int = 0
    archives: int = 0
    skipped: int = 0
    failed: int = 0
    archive_names: list[str] = field(default_factory=list)

    def record(self, outcome: Outcome, archived: bool) -> None:
        if outcome is Outcome.WRITTEN:
            if archived:
                self.entries += 1
            else:
                self.files += 1
        elif outcome is Outcome.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1


class Repacker:
    """Plays the engine's part for a run: reads every source and saves it through the sink.

    Class files go through ``renderer`` when one is given (a decompiler would
    plug in here) and are passed through unchanged otherwise. Other files and
    archive entries are copied as-is. Each source archive becomes an archive
    of the same name in the destination, keeping its manifest.
    """

    def __init__(
        self,
        sources: list[Path],
        destination: Path,
        logger: Logger,
        *,
        renderer: Renderer | None = None,
        compression: int = zipfile.ZIP_DEFLATED,
    ) -> None:
        self.sources = sources
        self.destination = destination
        self.logger = logger
        self.renderer = renderer
        self.compression = compression
        self.stats = RepackStats()

    def run(self) -> RepackStats:
        """Process every source, then print a summary."""
        total = len(self.sources)
        with ResultSink(self.destination, self.logger, compression=self.compression) as sink:
            for i, source in enumerate(self.sources, 1):
                self.logger.info("CORE", f"Processing {source}")
                self._process_source(sink, source, "")
                self.stats.sources += 1
                self.logger.progress(i, total, source.name)

        self._print_summary()
        return self.stats

    def _process_source(self, sink: ResultSink, source: Path, path: str) -> None:
        if source.is_dir():
            self._process_directory(sink, source)
        elif source.suffix.lower() in ARCHIVE_SUFFIXES:
            self._process_archive(sink, source, path)
        elif source.suffix.lower() == CLASS_SUFFIX:
            self._save_class_file(sink, source, path)
        else:
            self.stats.record(sink.copy_file(str(source), path, source.name), archived=False)

    def _process_directory(self, sink: ResultSink, directory: Path) -> None:
        for current, dirnames, filenames in os.walk(directory):
            dirnames.sort()
            rel = Path(current).relative_to(directory).as_posix()
            path = "" if rel == "." else rel
            if path and sink.save_folder(path) is Outcome.FAILED:
                self.stats.failed += 1
            for name in sorted(filenames):
                self._process_source(sink, Path(current) / name, path)

    def _save_class_file(self, sink: ResultSink, source: Path, path: str) -> None:
        if self.renderer is None:
            self.stats.record(sink.copy_file(str(source), path, source.name), archived=False)
            return

        rendered = self._render(sink, str(source), None, source.name)
        if rendered is None:
            return
        name, content = rendered
        outcome = sink.save_class_file(path, _qualified_name(source.name), name, content)
        self.stats.record(outcome, archived=False)

    def _process_archive(self, sink: ResultSink, source: Path, path: str) -> None:
        try:
            manifest = read_manifest(source)
            with zipfile.ZipFile(source) as archive:
                infos = archive.infolist()
        except (SourceError, OSError, zipfile.BadZipFile) as e:
            self.logger.error("CORE", f"Cannot read archive {source}", e)
            self.stats.failed += 1
            return

        archive_name = source.name
        if sink.create_archive(path, archive_name, manifest) is Outcome.FAILED:
            self.stats.failed += 1
            return

        self.stats.archives += 1
        self.stats.archive_names.append(f"{path}/{archive_name}" if path else archive_name)
        try:
            for info in infos:
                entry = info.filename
                if manifest is not None and entry == MANIFEST_NAME:
                    continue
                if info.is_dir():
                    outcome = sink.save_dir_entry(path, archive_name, entry)
                elif entry.endswith(CLASS_SUFFIX) and self.renderer is not None:
                    rendered = self._render(sink, str(source), entry, entry)
                    if rendered is None:
                        continue
                    name, content = rendered
                    outcome = sink.save_class_entry(
                        path, archive_name, _qualified_name(entry), name, content
                    )
                else:
                    outcome = sink.copy_entry(str(source), path, archive_name, entry)
                self.stats.record(outcome, archived=True)
        finally:
            sink.close_archive(path, archive_name)

    def _render(
        self,
        sink: ResultSink,
        container: str,
        entry: str | None,
        name: str,
    ) -> tuple[str, str | bytes] | None:
        try:
            bytecode = sink.get_bytecode(container, entry)
        except SourceError as e:
            self.logger.error("SOURCE", f"Cannot read {name}", e)
            self.stats.failed += 1
            return None
        try:
            return self.renderer(name, bytecode)
        except Exception as e:
            self.logger.error("CORE", f"Renderer failed on {name}", e)
            self.stats.failed += 1
            return None

    def _print_summary(self) -> None:
        self.logger.info("CORE", "Done!")
        lines = [
            f"Sources:            {self.stats.sources}",
            f"Files written:      {self.stats.files}",
            f"Archive entries:    {self.stats.entries}",
            f"Skipped:            {self.stats.skipped}",
            f"Failed:             {self.stats.failed}",
            f"Output:             {self.destination}",
        ]
        self.logger.tree(lines)

        names = self.stats.archive_names
        if names:
            self.logger.info("ARCHIVE", "Archives:")
            tree_lines = []
            for i, name in enumerate(names):
                prefix = "└──" if i == len(names) - 1 else "├──"
                tree_lines.append(f"{prefix} {name}")
            self.logger.tree(tree_lines)


def _qualified_name(entry_name: str) -> str:
    """a/b/C.class -> a.b.C"""
    if entry_name.endswith(CLASS_SUFFIX):
        entry_name = entry_name[: -len(CLASS_SUFFIX)]
    return entry_name.replace("/", ".")
