import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from src.config import IngestConfig
from src.errors import CheckpointError, FetchError
from src.index import IndexServiceError, VideoIndexClient
from src.ingestion import (
    FeedEntry,
    FeedReader,
    IndexKeys,
    VideoDownloader,
    build_index_keys,
    select_candidates,
)
from src.logger import log_function
from .analysis import AnalysisStage
from .checkpoint import CheckpointStore, ProgressRecord
from .indexing import IndexingOrchestrator
from .metadata import (
    build_provenance,
    merge_metadata,
    persist_metadata,
    submission_metadata,
    utc_now,
)
from .report import write_handoff


STATUS_COMPLETED = "completed"
STATUS_NOTHING_TO_DO = "nothing to do"
STATUS_DRY_RUN = "dry run"
STATUS_INTERRUPTED = "interrupted"


@dataclass
class RunSummary:
    """Counts and outcomes of one pipeline run."""

    tag: str
    status: str = ""
    discovered: int = 0
    tagged: int = 0
    unique: int = 0
    new: int = 0
    remaining: int = 0
    selected: int = 0
    completed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    handoff_path: Optional[Path] = None


class IngestPipeline:
    """
    Sequential ingest of one batch: discovery, then per item acquisition,
    indexing, analysis and metadata persistence.

    Collaborators default to real implementations built from the config and
    can be injected for tests.
    """

    def __init__(
        self,
        config: IngestConfig,
        feed_reader: Optional[FeedReader] = None,
        index_client: Optional[VideoIndexClient] = None,
        downloader: Optional[VideoDownloader] = None,
        indexer: Optional[IndexingOrchestrator] = None,
        analyzer: Optional[AnalysisStage] = None,
        store: Optional[CheckpointStore] = None,
        now: Optional[Callable[[], str]] = None,
    ):
        self.config = config
        self.feed_reader = feed_reader or FeedReader(config)
        self.index_client = index_client or VideoIndexClient(config)
        self.downloader = downloader or VideoDownloader(config)
        self.indexer = indexer or IndexingOrchestrator(self.index_client, config)
        self.analyzer = analyzer or AnalysisStage(self.index_client, config)
        self.store = store or CheckpointStore(config.progress_dir)
        self.now = now or utc_now
        self.logger = logging.getLogger("ingest")

    def fetch_index_keys(self) -> IndexKeys:
        """Dedup keys of the remote index. A listing failure aborts the run."""
        try:
            assets = self.index_client.list_videos()
        except IndexServiceError as e:
            raise FetchError("remote index listing", str(e)) from e
        self.logger.info(f"Remote index holds {len(assets)} videos")
        print(f"Found {len(assets)} videos already in index")
        return build_index_keys(assets, self.config.feed_base_url)

    def process_entry(self, entry: FeedEntry, tag: str) -> str:
        """
        Run every per-item stage for one entry.

        Returns:
            The asset id of the indexed video

        Raises:
            IngestError: Any per-item failure (acquisition, indexing, persist)
        """
        provenance = build_provenance(entry, tag, self.config.collection)
        handle = self.downloader.acquire(entry)
        asset_id = self.indexer.index_and_wait(handle, submission_metadata(provenance))
        analysis = self.analyzer.analyze(asset_id)
        merged = merge_metadata(provenance, analysis, self.now())
        persist_metadata(self.index_client, asset_id, merged)
        return asset_id

    @log_function(logger_name="ingest", log_execution_time=True)
    def run(
        self,
        tag: str,
        dry_run: bool = False,
        limit: Optional[int] = None,
        reset: bool = False,
        reset_failed: bool = False,
    ) -> RunSummary:
        """
        Ingest the batch identified by ``tag``.

        Any per-item exception is recorded as failed and the batch continues
        (an interrupt still stops the run). The checkpoint is saved after
        every item. The handoff report is written on every exit path,
        including dry runs and aborted runs.

        Raises:
            FetchError: If the feed or the index listing cannot be retrieved
            CheckpointError: If the progress file cannot be read or written
        """
        summary = RunSummary(tag=tag)
        progress = ProgressRecord(tag=tag)
        remaining: list[FeedEntry] = []
        status = STATUS_INTERRUPTED

        try:
            if dry_run:
                # Resets are previewed in memory only
                progress = self.store.load(tag)
                if reset:
                    progress = ProgressRecord(tag=tag)
                    print(f"DRY RUN - progress for '{tag}' would be reset")
                elif reset_failed:
                    print(f"DRY RUN - {len(progress.failed)} failed items would be cleared")
                    progress.failed = []
            else:
                if reset:
                    self.store.reset(tag)
                    print(f"Progress reset for '{tag}'")
                elif reset_failed:
                    cleared = self.store.reset_failed(tag)
                    print(f"Cleared {cleared} failed items for '{tag}'")
                progress = self.store.load(tag)

            entries = self.feed_reader.fetch_entries()
            print(f"Feed returned {len(entries)} entries")
            index_keys = self.fetch_index_keys()

            selection = select_candidates(
                entries,
                tag,
                index_keys,
                progress.recorded_slugs(),
                limit=limit,
            )
            remaining = selection.remaining
            summary.discovered = selection.total
            summary.tagged = selection.tagged
            summary.unique = selection.unique
            summary.new = selection.new
            summary.remaining = len(selection.remaining)
            summary.selected = len(selection.to_process)

            print(
                f"{selection.tagged} match '{tag}', {selection.unique} unique, "
                f"{selection.new} not yet indexed, {len(selection.remaining)} to process"
            )

            if not selection.to_process:
                status = STATUS_NOTHING_TO_DO
                print("Nothing to process.")
            elif dry_run:
                status = STATUS_DRY_RUN
                print("\nDRY RUN - would process:")
                for entry in selection.to_process:
                    print(f"  - {entry.title}")
            else:
                progress.mark_started(self.now())
                self.store.save(progress)
                self._process_all(selection.to_process, tag, progress, summary)
                status = STATUS_COMPLETED

        except (FetchError, CheckpointError) as e:
            status = f"aborted: {e}"
            self.logger.error(f"Run for '{tag}' aborted: {e}")
            raise

        finally:
            summary.status = status
            recorded = progress.recorded_slugs()
            pending = [entry for entry in remaining if entry.slug not in recorded]
            handoff = self.store.handoff_path(tag)
            try:
                summary.handoff_path = write_handoff(
                    handoff, tag, progress, pending, status, self.now()
                )
            except CheckpointError as e:
                self.logger.error(f"Could not write handoff report: {e}")

        return summary

    def _process_all(
        self,
        entries: list[FeedEntry],
        tag: str,
        progress: ProgressRecord,
        summary: RunSummary,
    ) -> None:
        total = len(entries)
        for position, entry in enumerate(entries, start=1):
            print(f"\n[{position}/{total}] {entry.title}")
            try:
                asset_id = self.process_entry(entry, tag)
            except Exception as e:
                self.logger.error(f"Failed '{entry.title}' ({entry.slug}): {e}")
                print(f"  FAILED: {e}")
                progress.record_failed(entry.title, entry.slug, str(e))
                summary.failed.append(entry.slug)
            else:
                progress.record_completed(entry.title, entry.slug, asset_id, self.now())
                summary.completed.append(asset_id)
                print(f"  Done: {asset_id}")
            self.store.save(progress)
