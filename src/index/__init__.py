"""
Remote video index package.

Structure:
- models.py: task, asset and metadata models
- client.py: HTTP client for the TwelveLabs index API

Usage:
    from src.index import VideoIndexClient, AssetMetadata

    with VideoIndexClient(config) as client:
        videos = client.list_videos()
"""

from .models import (
    AssetMetadata,
    IndexedAssetSummary,
    MediaHandle,
    TaskInfo,
    TaskStatus,
)
from .client import IndexServiceError, VideoIndexClient

__all__ = [
    # Models
    "AssetMetadata",
    "IndexedAssetSummary",
    "MediaHandle",
    "TaskInfo",
    "TaskStatus",
    # Client
    "IndexServiceError",
    "VideoIndexClient",
]
