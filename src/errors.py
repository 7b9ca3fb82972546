"""
Error taxonomy of the ingest pipeline.

Fatal (abort the run): FetchError, CheckpointError.
Per-item (recorded in the checkpoint, batch continues): AcquisitionError,
IndexingError, TimedOutError, PersistError.
Degraded (logged, never leaves the analysis stage): AnalysisError.
"""

from typing import Optional


class IngestError(Exception):
    """Base exception for ingest pipeline errors."""


class FetchError(IngestError):
    """Raised when the feed or the remote index listing cannot be retrieved."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Could not fetch {source}: {reason}")


class CheckpointError(IngestError):
    """Raised when the progress file cannot be read or written."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Checkpoint error for {path}: {reason}")


class AcquisitionError(IngestError):
    """Raised when source media for an entry cannot be obtained."""

    def __init__(self, title: str, reason: str) -> None:
        self.title = title
        self.reason = reason
        super().__init__(f"Download failed: {reason}")


class IndexingError(IngestError):
    """Raised when the remote indexing task cannot be submitted or failed."""

    def __init__(self, reason: str, task_id: Optional[str] = None) -> None:
        self.reason = reason
        self.task_id = task_id
        super().__init__(f"Indexing failed: {reason}")


class TimedOutError(IndexingError):
    """Raised when an indexing task does not reach a terminal state in time."""

    def __init__(self, task_id: str, attempts: int, last_status: str) -> None:
        self.attempts = attempts
        self.last_status = last_status
        super().__init__(
            f"task {task_id} still '{last_status}' after {attempts} polls",
            task_id=task_id,
        )


class AnalysisError(IngestError):
    """Raised internally when an analysis response cannot be used."""


class PersistError(IngestError):
    """Raised when the remote index rejects a metadata update."""

    def __init__(self, asset_id: str, reason: str) -> None:
        self.asset_id = asset_id
        self.reason = reason
        super().__init__(f"Metadata update failed for {asset_id}: {reason}")
