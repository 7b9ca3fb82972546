"""
HTTP client for the TwelveLabs video index (API v1.3).

Wraps the handful of endpoints the ingest pipeline consumes:
    - list indexed videos (paginated)
    - create an indexing task from an uploaded file or a video URL
    - retrieve task status
    - overwrite a video's user metadata
    - delete a video
    - request structured analysis of a video

Every failure (network error or non-2xx response) surfaces as
IndexServiceError; callers translate it into their own error type.
"""

import json
import logging
from typing import Any, Optional

import requests

from src.config import IngestConfig
from .models import IndexedAssetSummary, MediaHandle, TaskInfo


class IndexServiceError(Exception):
    """Raised when the remote index returns an error or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.message = message
        self.status_code = status_code
        prefix = f"HTTP {status_code}: " if status_code is not None else ""
        super().__init__(f"{prefix}{message}")


class VideoIndexClient:
    """A client for one TwelveLabs index."""

    def __init__(self, config: IngestConfig, session: Optional[requests.Session] = None):
        if not config.api_key or not config.index_id:
            raise ValueError("VideoIndexClient requires api_key and index_id")
        self.index_id = config.index_id
        self.base_url = config.api_base_url.rstrip("/")
        self.timeout = config.request_timeout
        self.page_size = config.list_page_size
        self.logger = logging.getLogger("video_index")

        self.session = session or requests.Session()
        self.session.headers.update({"x-api-key": config.api_key})

    def __enter__(self) -> "VideoIndexClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def _request(
        self, method: str, path: str, timeout: Optional[float] = None, **kwargs
    ) -> Any:
        """Send a request and return the decoded JSON body (None when empty)."""
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method, url, timeout=timeout or self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise IndexServiceError(f"{method} {path} failed: {e}") from e

        if not response.ok:
            try:
                body = response.json()
                message = body.get("message") or body.get("code") or response.text
            except ValueError:
                message = response.text or response.reason
            raise IndexServiceError(
                f"{method} {path}: {message}", status_code=response.status_code
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise IndexServiceError(f"{method} {path}: invalid JSON response") from e

    def list_videos(self) -> list[IndexedAssetSummary]:
        """
        Fetch every video in the index, following pagination.

        Returns:
            Summaries of all indexed videos, in the order the API returns them
        """
        videos: list[IndexedAssetSummary] = []
        page = 1
        total_pages = 1
        while page <= total_pages:
            body = self._request(
                "GET",
                f"/indexes/{self.index_id}/videos",
                params={"page": page, "page_limit": self.page_size},
            ) or {}
            videos.extend(IndexedAssetSummary.from_api(item) for item in body.get("data") or [])
            total_pages = (body.get("page_info") or {}).get("total_page") or 1
            self.logger.debug(f"Listed page {page}/{total_pages}")
            page += 1
        self.logger.info(f"Listed {len(videos)} videos in index {self.index_id}")
        return videos

    def create_task(self, handle: MediaHandle, user_metadata: dict[str, str]) -> TaskInfo:
        """
        Submit a video for indexing.

        Args:
            handle: Local file to upload, or URL the service downloads itself
            user_metadata: Provenance metadata attached at creation time

        Returns:
            The created task (status is usually "pending" or "validating")
        """
        form: dict[str, Any] = {
            "index_id": (None, self.index_id),
            "enable_video_stream": (None, "true"),
            "user_metadata": (None, json.dumps(user_metadata)),
        }
        if handle.url is not None:
            form["video_url"] = (None, handle.url)
            body = self._request("POST", "/tasks", files=form)
        else:
            with open(handle.path, "rb") as video_file:
                form["video_file"] = (handle.path.name, video_file, "video/mp4")
                body = self._request("POST", "/tasks", files=form, timeout=max(self.timeout, 600))
        task = TaskInfo.from_api(body or {})
        if not task.task_id:
            raise IndexServiceError("task creation returned no task id")
        return task

    def retrieve_task(self, task_id: str) -> TaskInfo:
        body = self._request("GET", f"/tasks/{task_id}") or {}
        return TaskInfo.from_api({"_id": task_id, **body})

    def update_video_metadata(self, video_id: str, user_metadata: dict[str, str]) -> None:
        """Replace the whole user metadata map of a video."""
        self._request(
            "PUT",
            f"/indexes/{self.index_id}/videos/{video_id}",
            json={"user_metadata": user_metadata},
        )

    def delete_video(self, video_id: str) -> None:
        self._request("DELETE", f"/indexes/{self.index_id}/videos/{video_id}")

    def analyze(
        self,
        video_id: str,
        prompt: str,
        response_format: dict[str, Any],
        temperature: float = 0.2,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Request open-ended analysis constrained by a JSON schema.

        Returns:
            The ``data`` field of the response: a JSON string or an already
            decoded object, depending on the service
        """
        body = self._request(
            "POST",
            "/analyze",
            timeout=timeout,
            json={
                "video_id": video_id,
                "prompt": prompt,
                "temperature": temperature,
                "response_format": response_format,
                "stream": False,
            },
        ) or {}
        return body.get("data")
