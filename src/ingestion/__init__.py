"""
Ingestion package for the ad ingest pipeline.

Discovery and acquisition steps that run before anything touches the
remote index:

1. Feed reading (feed_reader.py):
   - Fetches the adland.tv RSS feed
   - Parses every item into a FeedEntry

2. Selection (selection.py):
   - Filters entries by batch tag
   - Deduplicates within the feed, against the index and the checkpoint

3. Brand hints (brand.py):
   - Extracts the advertiser name from titles
   - Infers canonical batch labels

4. Video download (video_download.py):
   - Runs yt-dlp to fetch source media, reusing cached files
"""

from .feed_reader import FeedEntry, FeedReader, derive_slug, parse_feed
from .selection import (
    IndexKeys,
    Selection,
    build_index_keys,
    dedupe_entries,
    dedupe_slugs,
    exclude_checkpointed,
    exclude_indexed,
    filter_by_tag,
    normalize_title,
    select_candidates,
)
from .brand import extract_brand, infer_batch_tags, is_known_brand
from .video_download import VideoDownloader, sanitize_filename

__all__ = [
    "FeedEntry",
    "FeedReader",
    "derive_slug",
    "parse_feed",
    "IndexKeys",
    "Selection",
    "build_index_keys",
    "dedupe_entries",
    "dedupe_slugs",
    "exclude_checkpointed",
    "exclude_indexed",
    "filter_by_tag",
    "normalize_title",
    "select_candidates",
    "extract_brand",
    "infer_batch_tags",
    "is_known_brand",
    "VideoDownloader",
    "sanitize_filename",
]
