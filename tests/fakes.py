"""Fake collaborators and builders shared by the unit tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from src.errors import AcquisitionError
from src.index import IndexedAssetSummary, IndexServiceError, MediaHandle, TaskInfo
from src.ingestion import FeedEntry

BASE_URL = "https://adland.tv/"
FIXED_NOW = "2026-02-09T12:00:00+00:00"


def make_entry(title: str, slug: Optional[str] = None, **kwargs: Any) -> FeedEntry:
    slug = slug if slug is not None else title.lower().replace(" ", "-").replace(":", "")
    return FeedEntry(title=title, link=f"{BASE_URL}{slug}" if slug else "", slug=slug, **kwargs)


class FakeFeedReader:
    def __init__(self, entries: list[FeedEntry], error: Optional[Exception] = None) -> None:
        self.entries = entries
        self.error = error
        self.calls = 0

    def fetch_entries(self) -> list[FeedEntry]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.entries)


class FakeIndexClient:
    """In-memory stand-in for VideoIndexClient."""

    def __init__(
        self,
        assets: Optional[list[IndexedAssetSummary]] = None,
        task_statuses: Optional[list[str]] = None,
        analysis: Any = None,
    ) -> None:
        self.assets = list(assets or [])
        self.task_statuses = list(task_statuses or ["ready"])
        self.analysis = analysis
        self.list_error: Optional[Exception] = None
        self.create_error: Optional[Exception] = None
        self.analyze_error: Optional[Exception] = None
        self.update_error: Optional[Exception] = None
        self.created: list[tuple[MediaHandle, dict[str, str]]] = []
        self.updates: dict[str, dict[str, str]] = {}
        self.deleted: list[str] = []
        self.retrieve_calls = 0

    def __enter__(self) -> "FakeIndexClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        return None

    def list_videos(self) -> list[IndexedAssetSummary]:
        if self.list_error is not None:
            raise self.list_error
        return list(self.assets)

    def create_task(self, handle: MediaHandle, user_metadata: dict[str, str]) -> TaskInfo:
        if self.create_error is not None:
            raise self.create_error
        self.created.append((handle, user_metadata))
        number = len(self.created)
        return TaskInfo(task_id=f"task-{number}", status="pending")

    def retrieve_task(self, task_id: str) -> TaskInfo:
        self.retrieve_calls += 1
        status = self.task_statuses.pop(0) if len(self.task_statuses) > 1 else self.task_statuses[0]
        video_id = f"video-{task_id.split('-')[-1]}" if status == "ready" else None
        return TaskInfo(task_id=task_id, status=status, video_id=video_id)

    def update_video_metadata(self, video_id: str, user_metadata: dict[str, str]) -> None:
        if self.update_error is not None:
            raise self.update_error
        self.updates[video_id] = dict(user_metadata)

    def delete_video(self, video_id: str) -> None:
        if video_id == "missing":
            raise IndexServiceError("video not found", status_code=404)
        self.deleted.append(video_id)

    def analyze(self, video_id: str, prompt: str, response_format: dict, **kwargs: Any) -> Any:
        if self.analyze_error is not None:
            raise self.analyze_error
        return self.analysis


class FakeDownloader:
    """Returns a path handle per entry; slugs in ``failing`` raise AcquisitionError."""

    def __init__(self, failing: Optional[set[str]] = None) -> None:
        self.failing = failing or set()
        self.acquired: list[str] = []

    def acquire(self, entry: FeedEntry) -> MediaHandle:
        self.acquired.append(entry.slug)
        if entry.slug in self.failing:
            raise AcquisitionError(entry.title, "yt-dlp exited with 1")
        return MediaHandle(path=Path(f"/tmp/{entry.slug}.mp4"))
