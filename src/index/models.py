"""
Data models for the remote video index (TwelveLabs).

Models:
    IndexedAssetSummary: Read-only projection of an indexed video, used for dedup
    AssetMetadata: Typed view of a video's flat user_metadata map
    MediaHandle: Local file or reference URL submitted for indexing
    TaskInfo: Snapshot of an indexing task

Enums:
    TaskStatus: Indexing task lifecycle states
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class TaskStatus(str, Enum):
    """
    Lifecycle of a remote indexing task.

    Tasks move through the intermediate states in order and end in either
    READY (video indexed, asset id assigned) or FAILED.
    """

    VALIDATING = "validating"
    PENDING = "pending"
    QUEUED = "queued"
    INDEXING = "indexing"
    READY = "ready"
    FAILED = "failed"


TERMINAL_STATUSES = {TaskStatus.READY.value, TaskStatus.FAILED.value}


@dataclass(frozen=True)
class TaskInfo:
    """Snapshot of an indexing task as returned by the tasks endpoint."""

    task_id: str
    status: str
    video_id: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "TaskInfo":
        return cls(
            task_id=payload.get("_id") or payload.get("id") or "",
            status=str(payload.get("status") or TaskStatus.PENDING.value),
            video_id=payload.get("video_id"),
        )


@dataclass(frozen=True)
class IndexedAssetSummary:
    """Fields of an already indexed video used for dedup and maintenance."""

    asset_id: str
    source_url: str = ""
    title: str = ""
    system_title: str = ""
    user_metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "IndexedAssetSummary":
        meta = item.get("user_metadata") or {}
        system = item.get("system_metadata") or {}
        return cls(
            asset_id=item.get("_id") or item.get("id") or "",
            source_url=str(meta.get("source_url") or ""),
            title=str(meta.get("title") or ""),
            system_title=str(system.get("video_title") or system.get("filename") or ""),
            user_metadata=dict(meta),
        )


@dataclass(frozen=True)
class MediaHandle:
    """Media submitted for indexing: an uploaded local file or a reference URL."""

    path: Optional[Path] = None
    url: Optional[str] = None

    def __post_init__(self):
        if (self.path is None) == (self.url is None):
            raise ValueError("MediaHandle needs exactly one of path or url")

    def describe(self) -> str:
        return str(self.path) if self.path is not None else str(self.url)


def _flatten(value: Any) -> Optional[str]:
    """Render one metadata value as the string the index stores."""
    if value is None:
        return None
    if isinstance(value, (list, tuple, set, frozenset)):
        items = sorted(value) if isinstance(value, (set, frozenset)) else value
        return ", ".join(str(item) for item in items if item is not None and str(item))
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass
class AssetMetadata:
    """
    Typed record of a video's user metadata.

    The remote index stores a flat string-keyed map without array support.
    Known fields are typed attributes; any other key is kept in ``extra`` so
    a read-modify-write cycle never loses data written by other tools.
    """

    title: Optional[str] = None
    brand: Optional[str] = None
    collection: Optional[str] = None
    source_url: Optional[str] = None
    author: Optional[str] = None
    batch_tag: Optional[str] = None
    adland_tags: Optional[Any] = None
    theme: Optional[str] = None
    emotion: Optional[str] = None
    visual_style: Optional[str] = None
    sentiment: Optional[str] = None
    product_category: Optional[str] = None
    era_decade: Optional[str] = None
    celebrities: Optional[str] = None
    analyzed_at: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def known_fields(cls) -> list[str]:
        return [f.name for f in fields(cls) if f.name != "extra"]

    @classmethod
    def from_user_metadata(cls, meta: dict[str, Any]) -> "AssetMetadata":
        known = set(cls.known_fields())
        typed = {k: v for k, v in meta.items() if k in known}
        extra = {k: v for k, v in meta.items() if k not in known}
        return cls(**typed, extra=extra)

    def to_user_metadata(self) -> dict[str, str]:
        """
        Serialize to the flat map sent to the index.

        Lists and sets are joined with ", ", None values are dropped and
        everything else is converted to str. Typed fields win over ``extra``
        on key collision.

        Raises:
            ValueError: If an extra key is empty or not a string
        """
        result: dict[str, str] = {}
        for key, value in self.extra.items():
            if not isinstance(key, str) or not key:
                raise ValueError(f"Invalid metadata key: {key!r}")
            rendered = _flatten(value)
            if rendered is not None:
                result[key] = rendered
        for name in self.known_fields():
            rendered = _flatten(getattr(self, name))
            if rendered is not None:
                result[name] = rendered
        return result
