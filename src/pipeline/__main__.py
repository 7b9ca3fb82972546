#!/usr/bin/env python3
"""
CLI interface for the ad ingest pipeline.

Ingests one batch of adland.tv videos into the TwelveLabs index:
    1. Read the feed and select entries matching the batch tag
    2. Skip entries already indexed or already recorded for the batch
    3. Download, index, analyze and tag each remaining entry

Usage:
    uv run -m src.pipeline --tag "2026-super-bowl-lx-commercials"
    uv run -m src.pipeline --tag "2026-super-bowl-lx-commercials" --limit 5
    uv run -m src.pipeline --tag "2026-super-bowl-lx-commercials" --dry-run --verbose

Examples:
    # Resume after an interruption (already processed items are skipped)
    uv run -m src.pipeline --tag "2026-super-bowl-lx-commercials"

    # Retry items that failed in previous runs
    uv run -m src.pipeline --tag "2026-super-bowl-lx-commercials" --reset-failed

    # Start the batch over
    uv run -m src.pipeline --tag "2026-super-bowl-lx-commercials" --reset
"""

import sys
import argparse

from src.config import IngestConfig
from src.errors import IngestError
from src.index import VideoIndexClient
from src.logger import setup_logging
from .orchestrator import IngestPipeline, RunSummary


# Named loggers of the pipeline components, all sent to the same log file
LOGGER_NAMES = (
    "feed_reader",
    "video_download",
    "video_index",
    "indexing",
    "analysis",
    "checkpoint",
)


def parse_arguments() -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Ad Ingest Pipeline - Feed discovery, download, indexing and AI tagging of ad videos",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Progress:
  Progress is saved per tag in .progress/<tag>.json after every video.
  Re-running the same tag resumes where it stopped. Failed videos are
  not retried unless --reset-failed (or --reset) is given.
  A handoff report is written to .progress/<tag>-handoff.md.

Environment:
  TWELVELABS_API_KEY     API key (required)
  TWELVELABS_INDEX_ID    Target index (required)
  FEED_URL               Feed to read (default: https://adland.tv/rss.xml)
  INDEX_BY_URL           Index feed media URLs instead of downloading

Examples:
  uv run -m src.pipeline --tag "2026-super-bowl-lx-commercials"
  uv run -m src.pipeline --tag "2026-super-bowl-lx-commercials" --limit 5
  uv run -m src.pipeline --tag "2026-super-bowl-lx-commercials" --dry-run
  uv run -m src.pipeline --tag "2026-super-bowl-lx-commercials" --reset-failed

Notes:
  - Logs written to logs/ingest.log
  - Exit code 0 even when some videos failed (see the handoff report)
        """,
    )

    parser.add_argument(
        "--tag",
        type=str,
        required=True,
        metavar="TAG",
        help="Batch tag, e.g. '2026-super-bowl-lx-commercials'",
    )
    parser.add_argument(
        "--limit",
        type=int,
        metavar="N",
        help="Process at most N videos in this run",
    )

    progress_group = parser.add_argument_group("progress control")
    reset_exclusive = progress_group.add_mutually_exclusive_group()
    reset_exclusive.add_argument(
        "--reset",
        action="store_true",
        help="Delete saved progress for the tag before running",
    )
    reset_exclusive.add_argument(
        "--reset-failed",
        action="store_true",
        help="Forget failed videos so they are retried",
    )

    options_group = parser.add_argument_group("options")
    options_group.add_argument(
        "--feed-url",
        type=str,
        metavar="URL",
        help="Override the feed URL",
    )
    options_group.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be processed without downloading or indexing",
    )
    options_group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging output",
    )

    args = parser.parse_args()
    if args.limit is not None and args.limit < 1:
        parser.error("--limit must be a positive integer")
    return args


def print_summary(summary: RunSummary) -> None:
    print("\n" + "=" * 80)
    print(f"Batch:      {summary.tag}")
    print(f"Status:     {summary.status}")
    print(f"Feed:       {summary.discovered} entries, {summary.tagged} tagged, {summary.unique} unique")
    print(f"Remaining:  {summary.remaining} (selected {summary.selected})")
    print(f"Completed:  {len(summary.completed)}")
    print(f"Failed:     {len(summary.failed)}")
    if summary.handoff_path:
        print(f"Handoff:    {summary.handoff_path}")
    print("=" * 80)


def main():
    """Main entry point for the ingest CLI."""
    args = parse_arguments()

    try:
        config = IngestConfig.from_env(feed_url=args.feed_url)
        config.validate()
    except ValueError as e:
        print(f"✗ Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    logger = setup_logging(
        logger_name="ingest",
        log_file=config.log_file,
        verbose=args.verbose,
    )
    for name in LOGGER_NAMES:
        setup_logging(logger_name=name, log_file=config.log_file, verbose=args.verbose)

    logger.info("=" * 80)
    logger.info(f"Ingest started for tag '{args.tag}'")
    logger.info(
        f"Options: dry_run={args.dry_run}, limit={args.limit}, "
        f"reset={args.reset}, reset_failed={args.reset_failed}"
    )
    logger.info("=" * 80)

    try:
        with VideoIndexClient(config) as client:
            pipeline = IngestPipeline(config, index_client=client)
            summary = pipeline.run(
                args.tag,
                dry_run=args.dry_run,
                limit=args.limit,
                reset=args.reset,
                reset_failed=args.reset_failed,
            )
    except KeyboardInterrupt:
        logger.warning("Ingest interrupted by user")
        print("\n✗ Interrupted. Progress is saved; re-run the same command to resume.", file=sys.stderr)
        sys.exit(130)
    except IngestError as e:
        logger.error(f"Ingest failed: {e}")
        print(f"\n✗ INGEST FAILED: {e}", file=sys.stderr)
        sys.exit(1)

    print_summary(summary)
    logger.info(f"Ingest finished for tag '{args.tag}': {summary.status}")


if __name__ == "__main__":
    main()
