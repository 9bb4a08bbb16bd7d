"""Command-line interface for clssaver."""

from __future__ import annotations

import argparse
import io
import sys
import zipfile
from pathlib import Path

# Fix Windows console encoding for Unicode output
if sys.platform == "win32":
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding="utf-8", errors="replace")

from clssaver import __version__
from clssaver.driver.repacker import Repacker
from clssaver.source.byte_source import ByteSource, BytecodeLocator
from clssaver.utils.exceptions import ClsSaverError
from clssaver.utils.logging import LEVELS, Logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clssaver",
        description="Save class files, directories and jar/zip archives into a destination tree",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        metavar="PATH",
        help="One or more sources (.class files, directories, .jar/.zip archives) "
             "followed by the destination directory",
    )
    parser.add_argument(
        "--extract",
        metavar="LOCATOR",
        help="Write the bytes of CONTAINER or CONTAINER!ENTRY to stdout and exit",
    )
    parser.add_argument(
        "--store",
        action="store_true",
        help="Write archive entries without compression",
    )
    parser.add_argument(
        "--log",
        choices=LEVELS,
        default="INFO",
        type=str.upper,
        help="Minimum log level (default: INFO)",
    )
    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Enable debug output",
    )
    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"clssaver {__version__}",
    )
    return parser


def run_cli(args: argparse.Namespace) -> int:
    """Execute the CLI command."""
    logger = Logger(verbose=args.debug, level=args.log)

    if args.extract:
        return _run_extract(args.extract, logger)

    if len(args.paths) < 2:
        logger.error("CORE", "Usage: clssaver [options] <source>+ <destination>")
        return 1

    destination = Path(args.paths[-1])
    if not destination.is_dir():
        logger.error("CORE", f"Destination '{destination}' is not a directory")
        return 1

    sources = []
    for raw in args.paths[:-1]:
        source = Path(raw)
        if source.exists():
            sources.append(source)
        else:
            logger.warn("CORE", f"Missing '{raw}', ignored")

    if not sources:
        logger.error("CORE", "No sources given")
        return 1

    try:
        repacker = Repacker(
            sources,
            destination,
            logger,
            compression=zipfile.ZIP_STORED if args.store else zipfile.ZIP_DEFLATED,
        )
        stats = repacker.run()
        return 0 if stats.failed == 0 else 2
    except ClsSaverError as e:
        logger.error("CORE", str(e))
        return 1
    except Exception as e:
        logger.error("CORE", f"Unexpected error: {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1


def _run_extract(text: str, logger: Logger) -> int:
    """Print the bytes addressed by a locator."""
    try:
        locator = BytecodeLocator.parse(text)
        data = ByteSource().load(locator)
    except (ClsSaverError, ValueError) as e:
        logger.error("SOURCE", str(e))
        return 1

    logger.debug("SOURCE", f"{locator}: {len(data)} bytes")
    sys.stdout.buffer.write(data)
    sys.stdout.buffer.flush()
    return 0
