"""
Configuration for the ad ingest pipeline.

All tunables live on the IngestConfig dataclass. Components receive the
config through their constructor; nothing reads the environment at import
time. Use IngestConfig.from_env() to build one from the process environment
(a .env file in the working directory is loaded first).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_ANALYSIS_PROMPT = (
    "Analyze this advertisement and generate structured metadata tags. "
    "Use the predefined options when possible."
)


def _env_bool(value: Optional[str], default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_number(name: str, default, cast):
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return cast(value.strip())
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{value}'") from None


@dataclass
class IngestConfig:
    """Configuration for one ingest run"""

    # Remote index (TwelveLabs)
    api_key: Optional[str] = None
    index_id: Optional[str] = None
    api_base_url: str = "https://api.twelvelabs.io/v1.3"
    request_timeout: float = 30.0
    list_page_size: int = 50

    # Feed
    feed_url: str = "https://adland.tv/rss.xml"
    feed_base_url: str = "https://adland.tv/"
    feed_timeout: float = 30.0

    # Local storage
    downloads_dir: Path = Path("downloads")
    progress_dir: Path = Path(".progress")
    log_file: str = "logs/ingest.log"

    # Acquisition (yt-dlp)
    downloader_binary: str = "yt-dlp"
    download_format: str = "best[ext=mp4]/best"
    download_timeout: float = 120.0
    filename_max_length: int = 100
    index_by_url: bool = False

    # Indexing task polling
    poll_interval: float = 5.0
    max_poll_attempts: int = 360  # 30 minutes at the default interval

    # Analysis
    analysis_prompt: str = DEFAULT_ANALYSIS_PROMPT
    analysis_temperature: float = 0.2
    analysis_timeout: float = 120.0

    # Provenance
    collection: str = "superbowl"

    @classmethod
    def from_env(cls, **overrides) -> "IngestConfig":
        """
        Build a config from environment variables (after loading .env).

        Keyword overrides win over the environment, e.g. a --feed-url given
        on the command line.
        """
        load_dotenv()
        defaults = cls()
        values = {
            "api_key": os.getenv("TWELVELABS_API_KEY"),
            "index_id": os.getenv("TWELVELABS_INDEX_ID"),
            "api_base_url": os.getenv("TWELVELABS_API_URL", defaults.api_base_url),
            "feed_url": os.getenv("FEED_URL", defaults.feed_url),
            "feed_base_url": os.getenv("FEED_BASE_URL", defaults.feed_base_url),
            "downloads_dir": Path(os.getenv("DOWNLOADS_DIR", str(defaults.downloads_dir))),
            "progress_dir": Path(os.getenv("PROGRESS_DIR", str(defaults.progress_dir))),
            "collection": os.getenv("INGEST_COLLECTION", defaults.collection),
            "poll_interval": _env_number("POLL_INTERVAL_SECONDS", defaults.poll_interval, float),
            "max_poll_attempts": _env_number("MAX_POLL_ATTEMPTS", defaults.max_poll_attempts, int),
            "download_timeout": _env_number("DOWNLOAD_TIMEOUT_SECONDS", defaults.download_timeout, float),
            "index_by_url": _env_bool(os.getenv("INDEX_BY_URL"), defaults.index_by_url),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def validate(self) -> None:
        """
        Check that the remote index credentials and limits are usable.

        Raises:
            ValueError: If a required setting is missing or out of range
        """
        missing = []
        if not self.api_key:
            missing.append("TWELVELABS_API_KEY")
        if not self.index_id:
            missing.append("TWELVELABS_INDEX_ID")
        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}"
            )
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if self.max_poll_attempts < 1:
            raise ValueError("max_poll_attempts must be at least 1")
