"""
Per-batch checkpoint store.

One JSON document per batch tag under the progress directory:

    {
      "startedAt": "2026-02-09T10:00:00+00:00",
      "completed": [{"title": ..., "slug": ..., "assetId": ..., "completedAt": ...}],
      "failed":    [{"title": ..., "slug": ..., "reason": ...}]
    }

The file is rewritten (atomically) after every item so a crash loses at
most the item in flight. A slug is recorded at most once across both lists;
failed items stay failed until an operator resets them.
"""

import json
import logging
import os
import re
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from src.errors import CheckpointError


@dataclass(frozen=True)
class CompletedItem:
    title: str
    slug: str
    asset_id: str
    completed_at: str

    def to_json(self) -> dict[str, str]:
        return {
            "title": self.title,
            "slug": self.slug,
            "assetId": self.asset_id,
            "completedAt": self.completed_at,
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "CompletedItem":
        return cls(
            title=data.get("title", ""),
            slug=data.get("slug", ""),
            # Older progress files used "videoId"
            asset_id=data.get("assetId") or data.get("videoId") or "",
            completed_at=data.get("completedAt", ""),
        )


@dataclass(frozen=True)
class FailedItem:
    title: str
    slug: str
    reason: str

    def to_json(self) -> dict[str, str]:
        return {"title": self.title, "slug": self.slug, "reason": self.reason}

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "FailedItem":
        return cls(
            title=data.get("title", ""),
            slug=data.get("slug", ""),
            reason=data.get("reason", ""),
        )


@dataclass
class ProgressRecord:
    """Durable record of a batch's outcomes."""

    tag: str
    started_at: Optional[str] = None
    completed: list[CompletedItem] = field(default_factory=list)
    failed: list[FailedItem] = field(default_factory=list)

    def completed_slugs(self) -> set[str]:
        return {item.slug for item in self.completed}

    def failed_slugs(self) -> set[str]:
        return {item.slug for item in self.failed}

    def recorded_slugs(self) -> set[str]:
        return self.completed_slugs() | self.failed_slugs()

    def mark_started(self, now: str) -> None:
        """Set started_at on the first processing run; later calls keep it."""
        if not self.started_at:
            self.started_at = now

    def _ensure_unrecorded(self, slug: str) -> None:
        if slug in self.recorded_slugs():
            raise ValueError(f"Slug '{slug}' is already recorded for batch '{self.tag}'")

    def record_completed(self, title: str, slug: str, asset_id: str, now: str) -> CompletedItem:
        self._ensure_unrecorded(slug)
        item = CompletedItem(title=title, slug=slug, asset_id=asset_id, completed_at=now)
        self.completed.append(item)
        return item

    def record_failed(self, title: str, slug: str, reason: str) -> FailedItem:
        self._ensure_unrecorded(slug)
        item = FailedItem(title=title, slug=slug, reason=reason)
        self.failed.append(item)
        return item

    def to_json(self) -> dict[str, Any]:
        return {
            "startedAt": self.started_at,
            "completed": [item.to_json() for item in self.completed],
            "failed": [item.to_json() for item in self.failed],
        }

    @classmethod
    def from_json(cls, tag: str, data: dict[str, Any]) -> "ProgressRecord":
        return cls(
            tag=tag,
            started_at=data.get("startedAt"),
            completed=[CompletedItem.from_json(d) for d in data.get("completed") or []],
            failed=[FailedItem.from_json(d) for d in data.get("failed") or []],
        )


def _safe_tag(tag: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]", "_", tag)


class CheckpointStore:
    """Reads and writes ProgressRecords under a directory."""

    def __init__(self, progress_dir: Path):
        self.progress_dir = Path(progress_dir)
        self.logger = logging.getLogger("checkpoint")

    def path_for(self, tag: str) -> Path:
        return self.progress_dir / f"{_safe_tag(tag)}.json"

    def handoff_path(self, tag: str) -> Path:
        return self.progress_dir / f"{_safe_tag(tag)}-handoff.md"

    def load(self, tag: str) -> ProgressRecord:
        """
        Load the record for a tag, or an empty one when none exists.

        Raises:
            CheckpointError: If the file exists but cannot be read or parsed
        """
        path = self.path_for(tag)
        if not path.exists():
            return ProgressRecord(tag=tag)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CheckpointError(str(path), str(e)) from e
        if not isinstance(data, dict):
            raise CheckpointError(str(path), "expected a JSON object")
        record = ProgressRecord.from_json(tag, data)
        self.logger.info(
            f"Loaded progress for '{tag}': {len(record.completed)} completed, "
            f"{len(record.failed)} failed"
        )
        return record

    def save(self, record: ProgressRecord) -> Path:
        """
        Write a record atomically (temporary file then rename).

        Raises:
            CheckpointError: If the directory or file cannot be written
        """
        path = self.path_for(record.tag)
        tmp_name = None
        try:
            self.progress_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.progress_dir, prefix=f".{path.stem}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(record.to_json(), f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise CheckpointError(str(path), str(e)) from e
        return path

    def reset(self, tag: str) -> bool:
        """Delete the record of a tag. Returns True if a file was removed."""
        path = self.path_for(tag)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise CheckpointError(str(path), str(e)) from e
        self.logger.info(f"Progress reset for '{tag}'")
        return True

    def reset_failed(self, tag: str) -> int:
        """Forget failed items so the next run retries them. Returns how many."""
        record = self.load(tag)
        cleared = len(record.failed)
        if cleared:
            record.failed = []
            self.save(record)
            self.logger.info(f"Cleared {cleared} failed items for '{tag}'")
        return cleared
