#!/usr/bin/env python3
"""Rewrite one metadata value across every indexed video.

The index only supports whole-map overwrites, so each matching video's full
metadata is read, changed and written back.

Usage:
    # Preview
    uv run scripts/recategorize_videos.py --field product_category --from Alcohol --to "Food & Beverage" --dry-run

    # Apply
    uv run scripts/recategorize_videos.py --field product_category --from Alcohol --to "Food & Beverage"
"""

import argparse

from src.config import IngestConfig
from src.index import AssetMetadata, IndexedAssetSummary, IndexServiceError, VideoIndexClient


def find_matches(
    assets: list[IndexedAssetSummary], field: str, old_value: str
) -> list[IndexedAssetSummary]:
    """Videos whose metadata ``field`` equals ``old_value`` exactly."""
    return [a for a in assets if str(a.user_metadata.get(field, "")) == old_value]


def recategorize(client, asset: IndexedAssetSummary, field: str, new_value: str, dry_run=False):
    """Overwrite one video's metadata with ``field`` set to ``new_value``."""
    label = asset.title or asset.system_title or asset.asset_id
    print(f"  {label[:60]} ({asset.asset_id})")

    meta = dict(asset.user_metadata)
    meta[field] = new_value
    payload = AssetMetadata.from_user_metadata(meta).to_user_metadata()

    if dry_run:
        print(f"    [DRY RUN] Would set {field} = {new_value}")
        return payload

    client.update_video_metadata(asset.asset_id, payload)
    print(f"    Set {field} = {new_value}")
    return payload


def main():
    parser = argparse.ArgumentParser(description="Change a metadata value on indexed videos")
    parser.add_argument("--field", required=True, help="Metadata key, e.g. product_category")
    parser.add_argument("--from", dest="old_value", required=True, help="Current value")
    parser.add_argument("--to", dest="new_value", required=True, help="Replacement value")
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
        try:
            assets = client.list_videos()
        except IndexServiceError as e:
            print(f"Error: could not list videos: {e}")
            return 1

        matches = find_matches(assets, args.field, args.old_value)
        if not matches:
            print(f"No videos with {args.field} = {args.old_value}")
            return 0

        print(f"Found {len(matches)} video(s) with {args.field} = {args.old_value}")
        print("-" * 50)

        failures = 0
        for asset in matches:
            try:
                recategorize(client, asset, args.field, args.new_value, args.dry_run)
            except IndexServiceError as e:
                failures += 1
                print(f"    Failed: {e}")

        print("-" * 50)
        if args.dry_run:
            print("[DRY RUN] No changes made")
        else:
            print(f"Done! Updated {len(matches) - failures} video(s), {failures} failed")

    return 1 if failures else 0


if __name__ == "__main__":
    exit(main())
