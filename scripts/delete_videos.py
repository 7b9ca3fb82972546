#!/usr/bin/env python3
"""Delete videos from the index by id or by batch tag.

Deleting a video does not touch the local progress file; run the pipeline
with --reset (or edit .progress/<tag>.json) to ingest it again.

Usage:
    # Specific videos
    uv run scripts/delete_videos.py --video-id 6789abc 6789def

    # Everything ingested under a batch tag
    uv run scripts/delete_videos.py --batch-tag "2026-super-bowl-lx-commercials" --dry-run
"""

import argparse

from src.config import IngestConfig
from src.index import IndexedAssetSummary, IndexServiceError, VideoIndexClient


def select_by_batch_tag(assets: list[IndexedAssetSummary], batch_tag: str) -> list[str]:
    """Ids of videos whose stored batch_tag matches."""
    return [a.asset_id for a in assets if a.user_metadata.get("batch_tag") == batch_tag]


def delete_videos(client, video_ids: list[str], dry_run=False) -> list[str]:
    """
    Delete each video, continuing past failures.

    Returns:
        Ids that could not be deleted
    """
    failed = []
    for video_id in video_ids:
        if dry_run:
            print(f"  [DRY RUN] Would delete {video_id}")
            continue
        try:
            client.delete_video(video_id)
            print(f"  Deleted {video_id}")
        except IndexServiceError as e:
            failed.append(video_id)
            print(f"  Failed to delete {video_id}: {e}")
    return failed


def main():
    parser = argparse.ArgumentParser(description="Delete videos from the index")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--video-id", nargs="+", metavar="ID", help="Video id(s) to delete")
    target.add_argument("--batch-tag", metavar="TAG", help="Delete every video of this batch")
    parser.add_argument(
        "--dry-run", action="store_true", help="Preview without changes"
    )
    args = parser.parse_args()

    config = IngestConfig.from_env()
    try:
        config.validate()
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    with VideoIndexClient(config) as client:
        if args.video_id:
            video_ids = list(args.video_id)
        else:
            try:
                video_ids = select_by_batch_tag(client.list_videos(), args.batch_tag)
            except IndexServiceError as e:
                print(f"Error: could not list videos: {e}")
                return 1

        if not video_ids:
            print("No videos found")
            return 0

        print(f"Found {len(video_ids)} video(s) to delete")
        print("-" * 50)
        failed = delete_videos(client, video_ids, args.dry_run)
        print("-" * 50)

        if args.dry_run:
            print("[DRY RUN] No changes made")
        else:
            print(f"Done! Deleted {len(video_ids) - len(failed)} video(s)")

    return 1 if failed else 0


if __name__ == "__main__":
    exit(main())
