"""
Source video acquisition through yt-dlp.

Each feed entry maps to a deterministic file under the downloads directory.
An existing file is reused as is; otherwise yt-dlp is run as a subprocess
(argument vector, no shell) with a bounded timeout. When the feed carries a
direct video URL it is downloaded, otherwise the title is searched on
YouTube and the first hit is taken.

Usage:
    downloader = VideoDownloader(config)
    handle = downloader.acquire(entry)   # raises AcquisitionError
"""

import logging
import re
import subprocess
from pathlib import Path

from src.config import IngestConfig
from src.errors import AcquisitionError
from src.index.models import MediaHandle
from src.logger import log_function
from .feed_reader import FeedEntry


VIDEO_EXTENSION = ".mp4"


def sanitize_filename(title: str, max_length: int = 100) -> str:
    """
    Filesystem-safe name derived from a title.

    Lowercases, keeps only letters, digits, hyphens, underscores and spaces,
    turns whitespace runs into single hyphens and caps the length. The result
    only contains [a-z0-9_-].

    Args:
        title: Entry title
        max_length: Maximum length of the returned name

    Returns:
        Sanitized name, "untitled" when nothing usable is left
    """
    safe = re.sub(r"[^a-z0-9\-_\s]", "", (title or "").lower())
    safe = re.sub(r"\s+", "-", safe).strip("-")
    safe = safe[:max_length].rstrip("-")
    return safe or "untitled"


def _last_line(text: str) -> str:
    lines = [line for line in (text or "").strip().splitlines() if line.strip()]
    return lines[-1] if lines else ""


class VideoDownloader:
    """Acquires source media for feed entries with a local file cache."""

    def __init__(self, config: IngestConfig):
        self.downloads_dir = Path(config.downloads_dir)
        self.binary = config.downloader_binary
        self.format = config.download_format
        self.timeout = config.download_timeout
        self.max_length = config.filename_max_length
        self.index_by_url = config.index_by_url
        self.logger = logging.getLogger("video_download")

    def target_path(self, entry: FeedEntry) -> Path:
        return self.downloads_dir / f"{sanitize_filename(entry.title, self.max_length)}{VIDEO_EXTENSION}"

    def build_command(self, entry: FeedEntry, output_path: Path) -> list[str]:
        """yt-dlp argument vector for an entry."""
        source = entry.media_url or f"ytsearch1:{entry.title}"
        return [
            self.binary,
            "-f",
            self.format,
            "--no-playlist",
            "-o",
            str(output_path),
            source,
        ]

    @log_function(logger_name="video_download", log_execution_time=True)
    def acquire(self, entry: FeedEntry) -> MediaHandle:
        """
        Obtain media for an entry.

        Returns:
            A URL handle when indexing by URL is enabled and the feed gave a
            video URL, otherwise a handle on the local file

        Raises:
            AcquisitionError: If the tool is missing, times out, exits with an
                error or does not produce the expected file
        """
        if self.index_by_url and entry.media_url:
            self.logger.info(f"Indexing '{entry.title[:40]}' by URL, no download")
            return MediaHandle(url=entry.media_url)

        output_path = self.target_path(entry)
        if output_path.exists():
            self.logger.info(f"Video for '{entry.title[:40]}...' already downloaded")
            print(f"  Already downloaded: {output_path.name}")
            return MediaHandle(path=output_path)

        try:
            self.downloads_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise AcquisitionError(entry.title, f"cannot create {self.downloads_dir}: {e}") from e

        command = self.build_command(entry, output_path)
        if entry.media_url:
            print(f"  Downloading: {entry.media_url[:60]}")
        else:
            print(f"  Searching YouTube for: {entry.title}")
        self.logger.info(f"Running {' '.join(command[:-1])} {command[-1]!r}")

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise AcquisitionError(entry.title, f"{self.binary} not found") from e
        except subprocess.TimeoutExpired as e:
            raise AcquisitionError(
                entry.title, f"{self.binary} timed out after {self.timeout:.0f}s"
            ) from e

        if result.returncode != 0:
            detail = _last_line(result.stderr) or f"exit code {result.returncode}"
            self.logger.warning(f"{self.binary} failed for '{entry.title}': {result.stderr}")
            raise AcquisitionError(entry.title, detail)

        if not output_path.exists():
            raise AcquisitionError(entry.title, f"no output file at {output_path}")

        size_mb = output_path.stat().st_size / 1024 / 1024
        self.logger.info(f"Downloaded {output_path.name} ({size_mb:.1f}MB)")
        print(f"  Downloaded: {size_mb:.1f}MB")
        return MediaHandle(path=output_path)
