"""
Handoff report written at the end of every run.

The report is a small markdown file next to the checkpoint that tells the
next operator where the batch stands and which command resumes it.
"""

import logging
from pathlib import Path
from typing import Iterable

from src.errors import CheckpointError
from src.ingestion import FeedEntry
from .checkpoint import ProgressRecord


RESUME_COMMAND = 'uv run -m src.pipeline --tag "{tag}"'


def _bullets(lines: list[str]) -> list[str]:
    return [f"- {line}" for line in lines] if lines else ["- (none)"]


def render_handoff(
    tag: str,
    progress: ProgressRecord,
    pending: Iterable[FeedEntry],
    status: str,
    now: str,
) -> str:
    """Build the markdown body of a handoff report."""
    pending = list(pending)
    resume = RESUME_COMMAND.format(tag=tag)

    lines = [
        f"# Ingest handoff: {tag}",
        "",
        f"**Status:** {status}",
        f"**Started:** {progress.started_at or 'not started'}",
        f"**Last updated:** {now}",
        "",
        "## Counts",
        "",
        f"- Completed: {len(progress.completed)}",
        f"- Failed: {len(progress.failed)}",
        f"- Pending: {len(pending)}",
        "",
        "## Next steps",
        "",
        "Resume the batch:",
        "",
        "```bash",
        resume,
        "```",
    ]
    if progress.failed:
        lines += [
            "",
            "Retry failed items:",
            "",
            "```bash",
            f"{resume} --reset-failed",
            "```",
        ]

    lines += ["", "## Completed", ""]
    lines += _bullets([f"{item.title} (`{item.asset_id}`)" for item in progress.completed])
    lines += ["", "## Failed", ""]
    lines += _bullets([f"{item.title}: {item.reason}" for item in progress.failed])
    lines += ["", "## Pending", ""]
    lines += _bullets([entry.title for entry in pending])
    lines.append("")
    return "\n".join(lines)


def write_handoff(
    path: Path,
    tag: str,
    progress: ProgressRecord,
    pending: Iterable[FeedEntry],
    status: str,
    now: str,
) -> Path:
    """
    Write (overwrite) the handoff report for a batch.

    Args:
        path: Destination file, usually CheckpointStore.handoff_path(tag)
        tag: Batch tag
        progress: Current progress record
        pending: Entries still waiting to be processed
        status: One-line run status ("completed", "dry run", "aborted: ...")
        now: Timestamp shown as last update

    Raises:
        CheckpointError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_handoff(tag, progress, pending, status, now), encoding="utf-8")
    except OSError as e:
        raise CheckpointError(str(path), str(e)) from e
    logging.getLogger("ingest").info(f"Handoff written to {path} ({status})")
    return path
