from __future__ import annotations

from pathlib import Path

import pytest

from src.config import IngestConfig


@pytest.fixture
def config(tmp_path: Path) -> IngestConfig:
    return IngestConfig(
        api_key="test-key",
        index_id="test-index",
        downloads_dir=tmp_path / "downloads",
        progress_dir=tmp_path / ".progress",
        log_file=str(tmp_path / "logs" / "ingest.log"),
        poll_interval=0.01,
        max_poll_attempts=5,
    )


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep log files and a stray .env out of the working tree."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
