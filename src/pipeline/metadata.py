"""
Provenance, metadata merge and persistence.

The index only supports whole-map overwrites of a video's user metadata, so
the final record is assembled locally (provenance + analysis tags) and sent
in one update.
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from src.errors import PersistError
from src.index import AssetMetadata, IndexServiceError, VideoIndexClient
from src.ingestion import FeedEntry, extract_brand, infer_batch_tags, is_known_brand
from .analysis import AnalysisResult


# Fields the feed is authoritative for; analysis tags never replace them
PROVENANCE_OWNED = ("title", "source_url", "batch_tag", "author")


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_provenance(entry: FeedEntry, tag: str, collection: str) -> AssetMetadata:
    """Metadata known from the feed before any remote processing."""
    return AssetMetadata(
        title=entry.title,
        brand=extract_brand(entry.title),
        collection=collection or None,
        source_url=entry.link,
        author=entry.author or None,
        batch_tag=tag,
        adland_tags=sorted(infer_batch_tags(entry.title, tag)) or None,
    )


def submission_metadata(provenance: AssetMetadata) -> dict[str, str]:
    """Minimal metadata attached when the indexing task is created."""
    meta = provenance.to_user_metadata()
    return {k: meta[k] for k in ("title", "collection", "brand", "source_url") if k in meta}


def merge_metadata(
    provenance: AssetMetadata,
    analysis: AnalysisResult,
    now: Optional[str] = None,
) -> AssetMetadata:
    """
    Combine provenance and analysis tags into the final record.

    Analysis fields override provenance on collision, except the fields the
    feed owns (title, source URL, batch tag, author) and the brand when the
    feed title already yielded a known one. ``analyzed_at`` is stamped with
    ``now`` (current UTC time by default).
    """
    merged = replace(provenance, extra=dict(provenance.extra))

    for name, value in analysis.as_dict().items():
        if name in PROVENANCE_OWNED and getattr(provenance, name):
            continue
        if name == "brand" and is_known_brand(provenance.brand or ""):
            continue
        setattr(merged, name, value)

    merged.analyzed_at = now or utc_now()
    return merged


def persist_metadata(
    client: VideoIndexClient, asset_id: str, metadata: AssetMetadata
) -> dict[str, str]:
    """
    Overwrite a video's metadata with the merged record.

    Returns:
        The flat map that was sent

    Raises:
        PersistError: If the record cannot be serialized or the index rejects it
    """
    logger = logging.getLogger("ingest")
    try:
        payload = metadata.to_user_metadata()
        client.update_video_metadata(asset_id, payload)
    except (IndexServiceError, ValueError) as e:
        raise PersistError(asset_id, str(e)) from e
    logger.info(f"Metadata updated for {asset_id}: {sorted(payload)}")
    print("  Metadata updated")
    return payload
