#!/usr/bin/env python3
"""Feed local files into a media library from the command line.

Two modes are supported:

* one-shot: ``media_inbox.py FILE [FILE ...]`` stages the given files, waits
  for every staging entry to finish and prints the resulting catalog;
* watch: ``media_inbox.py --inbox DIR`` keeps ingesting files dropped into
  ``DIR`` until interrupted, then prints the catalog.
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from app.utils.config import get_settings
from app.utils.helpers import format_bytes
from domains.media_catalog.inbox import InboxWatcher, candidate_from_path
from domains.media_catalog.library import MediaLibrary
from domains.media_catalog.models import OutcomeEvent, OutcomeKind


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""

    parser = argparse.ArgumentParser(
        description="Stage media files into an in-memory library and report the outcome.",
    )
    parser.add_argument(
        "files",
        type=Path,
        nargs="*",
        help="Files to ingest once (ignored when --inbox is given).",
    )
    parser.add_argument(
        "--inbox",
        type=Path,
        default=None,
        help="Directory to watch for new files (default: INBOX_DIR setting).",
    )
    parser.add_argument(
        "--max-size-mb",
        type=int,
        default=None,
        help="Override the per-file size limit in MiB.",
    )
    parser.add_argument(
        "--fast",
        action="store_true",
        help="Skip the simulated transfer delay.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level for the console sink (default: LOG_LEVEL setting).",
    )

    return parser.parse_args(argv)


def log_outcome(event: OutcomeEvent) -> None:
    if event.kind in (OutcomeKind.REJECTED, OutcomeKind.STAGING_FAILED):
        logger.warning(event.message)
    else:
        logger.info(event.message)


def print_catalog(library: MediaLibrary) -> None:
    stats = library.stats()
    print(f"{stats.total_count} file(s), {format_bytes(stats.total_size_bytes)} total")
    for entry in library.list():
        print(
            f"  {entry.id}  {entry.category.value:<8}  "
            f"{format_bytes(entry.size_bytes):>10}  {entry.name}"
        )


async def _instant(_delay: float) -> None:
    await asyncio.sleep(0)


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    if args.max_size_mb is not None:
        settings = settings.model_copy(update={"max_upload_bytes": args.max_size_mb * 1024 * 1024})

    library = MediaLibrary(
        settings,
        on_outcome=log_outcome,
        sleep=_instant if args.fast else None,
    )
    inbox = args.inbox or settings.inbox_dir

    try:
        if inbox is None:
            candidates = []
            for path in args.files:
                candidate = candidate_from_path(path)
                if candidate is None:
                    logger.error(f"Not a readable file: {path}")
                    continue
                candidates.append(candidate)

            library.ingest(candidates)
            await library.pipeline.drain()
        else:
            loop = asyncio.get_running_loop()
            stop_event = asyncio.Event()
            for signum in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(signum, stop_event.set)

            watcher = InboxWatcher(inbox, loop, library.ingest, poll_seconds=settings.inbox_poll_seconds)
            watcher.start()
            try:
                await stop_event.wait()
            finally:
                watcher.stop()
            await library.pipeline.drain()

        print_catalog(library)
    finally:
        await library.close()

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the CLI script."""

    args = parse_args(argv)

    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=(args.log_level or get_settings().log_level).upper(),
    )

    if args.inbox is None and get_settings().inbox_dir is None and not args.files:
        logger.error("Nothing to do: pass files or --inbox.")
        return 1

    return asyncio.run(run(args))


if __name__ == "__main__":  # pragma: no cover - CLI bridge
    sys.exit(main())
