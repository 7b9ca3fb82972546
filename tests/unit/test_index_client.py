from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import Any

import pytest
import requests

from src.index import AssetMetadata, IndexServiceError, MediaHandle, VideoIndexClient


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None) -> None:
        self.status_code = status_code
        self.ok = status_code < 400
        self.reason = "Error" if not self.ok else "OK"
        self._body = body
        self.content = b"" if body is None else json.dumps(body).encode()
        self.text = self.content.decode()

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("no body")
        return self._body


class FakeSession:
    def __init__(self, responses: list[FakeResponse]) -> None:
        self.responses = list(responses)
        self.requests: list[tuple[str, str, dict]] = []
        self.headers: dict[str, str] = {}
        self.closed = False

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


def test_client_requires_credentials(config) -> None:
    with pytest.raises(ValueError):
        VideoIndexClient(replace(config, api_key=None), session=FakeSession([]))


def test_client_sets_api_key_header(config) -> None:
    session = FakeSession([])
    with VideoIndexClient(config, session=session):
        pass

    assert session.headers["x-api-key"] == "test-key"
    assert session.closed


def test_list_videos_follows_pagination(config) -> None:
    page1 = {
        "data": [
            {
                "_id": "v1",
                "user_metadata": {"source_url": "https://adland.tv/nike", "title": "Nike"},
                "system_metadata": {"filename": "nike.mp4"},
            }
        ],
        "page_info": {"page": 1, "total_page": 2},
    }
    page2 = {
        "data": [{"_id": "v2", "system_metadata": {"video_title": "Pepsi"}}],
        "page_info": {"page": 2, "total_page": 2},
    }
    session = FakeSession([FakeResponse(body=page1), FakeResponse(body=page2)])

    videos = VideoIndexClient(config, session=session).list_videos()

    assert [v.asset_id for v in videos] == ["v1", "v2"]
    assert videos[0].source_url == "https://adland.tv/nike"
    assert videos[0].system_title == "nike.mp4"
    assert videos[1].system_title == "Pepsi"
    assert [r[2]["params"]["page"] for r in session.requests] == [1, 2]
    assert session.requests[0][1].endswith("/indexes/test-index/videos")


def test_error_status_raises_index_service_error(config) -> None:
    session = FakeSession([FakeResponse(status_code=404, body={"message": "index not found"})])

    with pytest.raises(IndexServiceError) as excinfo:
        VideoIndexClient(config, session=session).list_videos()

    assert excinfo.value.status_code == 404
    assert "index not found" in str(excinfo.value)


def test_network_error_raises_index_service_error(config) -> None:
    session = FakeSession([requests.ConnectionError("reset")])

    with pytest.raises(IndexServiceError, match="reset"):
        VideoIndexClient(config, session=session).retrieve_task("t1")


def test_create_task_by_url_sends_form_fields(config) -> None:
    session = FakeSession([FakeResponse(body={"_id": "task-1", "status": "pending"})])

    task = VideoIndexClient(config, session=session).create_task(
        MediaHandle(url="https://cdn.adland.tv/nike.mp4"), {"title": "Nike"}
    )

    assert task.task_id == "task-1"
    method, url, kwargs = session.requests[0]
    assert (method, url.rsplit("/", 1)[-1]) == ("POST", "tasks")
    files = kwargs["files"]
    assert files["index_id"] == (None, "test-index")
    assert files["video_url"] == (None, "https://cdn.adland.tv/nike.mp4")
    assert json.loads(files["user_metadata"][1]) == {"title": "Nike"}


def test_create_task_uploads_file(config, tmp_path: Path) -> None:
    video = tmp_path / "nike.mp4"
    video.write_bytes(b"data")
    session = FakeSession([FakeResponse(body={"_id": "task-2"})])

    VideoIndexClient(config, session=session).create_task(MediaHandle(path=video), {})

    kwargs = session.requests[0][2]
    assert kwargs["files"]["video_file"][0] == "nike.mp4"
    assert kwargs["timeout"] >= 600


def test_retrieve_task_reads_video_id(config) -> None:
    session = FakeSession([FakeResponse(body={"status": "ready", "video_id": "vid-7"})])

    task = VideoIndexClient(config, session=session).retrieve_task("task-7")

    assert task.task_id == "task-7"
    assert task.is_terminal
    assert task.video_id == "vid-7"


def test_update_video_metadata_overwrites_whole_map(config) -> None:
    session = FakeSession([FakeResponse()])
    meta = AssetMetadata(title="Nike", adland_tags=["b", "a"], extra={"custom": True})

    VideoIndexClient(config, session=session).update_video_metadata("vid-1", meta.to_user_metadata())

    method, url, kwargs = session.requests[0]
    assert method == "PUT"
    assert url.endswith("/indexes/test-index/videos/vid-1")
    assert kwargs["json"] == {"user_metadata": {"custom": "true", "title": "Nike", "adland_tags": "b, a"}}


def test_analyze_returns_data_field(config) -> None:
    session = FakeSession([FakeResponse(body={"data": '{"theme": "Humor"}'})])

    data = VideoIndexClient(config, session=session).analyze(
        "vid-1", prompt="p", response_format={"type": "json_schema"}
    )

    assert data == '{"theme": "Humor"}'
    payload = session.requests[0][2]["json"]
    assert payload["stream"] is False
    assert payload["video_id"] == "vid-1"
