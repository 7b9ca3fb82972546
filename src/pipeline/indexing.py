"""
Remote indexing orchestration.

Submits media to the index and polls the resulting task until it is READY
(returns the asset id) or FAILED (raises IndexingError). Polling stops after
max_poll_attempts and raises TimedOutError rather than blocking forever.
"""

import logging
import time
from typing import Callable

from src.config import IngestConfig
from src.errors import IndexingError, TimedOutError
from src.index import IndexServiceError, MediaHandle, TaskStatus, VideoIndexClient
from src.logger import log_function


class IndexingOrchestrator:
    """Drives one indexing task to a terminal state."""

    def __init__(
        self,
        client: VideoIndexClient,
        config: IngestConfig,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.poll_interval = config.poll_interval
        self.max_poll_attempts = config.max_poll_attempts
        self.sleep = sleep
        self.logger = logging.getLogger("indexing")

    @log_function(logger_name="indexing", log_execution_time=True)
    def index_and_wait(self, handle: MediaHandle, provenance: dict[str, str]) -> str:
        """
        Submit media and wait for indexing to finish.

        Args:
            handle: Local file or URL to index
            provenance: Minimal metadata attached at submission

        Returns:
            The id of the indexed video

        Raises:
            IndexingError: If submission or polling fails, or the task failed
            TimedOutError: If the task is not terminal after max_poll_attempts
        """
        print("  Uploading to TwelveLabs...")
        try:
            task = self.client.create_task(handle, provenance)
        except (IndexServiceError, OSError) as e:
            raise IndexingError(f"submission of {handle.describe()} failed: {e}") from e

        self.logger.info(f"Submitted {handle.describe()} as task {task.task_id} ({task.status})")
        print(f"  Indexing (task: {task.task_id})", end="", flush=True)

        attempts = 0
        while not task.is_terminal:
            if attempts >= self.max_poll_attempts:
                print("")
                raise TimedOutError(task.task_id, attempts, task.status)
            self.sleep(self.poll_interval)
            attempts += 1
            try:
                task = self.client.retrieve_task(task.task_id)
            except IndexServiceError as e:
                print("")
                raise IndexingError(f"polling failed: {e}", task_id=task.task_id) from e
            self.logger.debug(f"Task {task.task_id} status after {attempts} polls: {task.status}")
            print(".", end="", flush=True)
        print("")

        if task.status == TaskStatus.FAILED.value:
            raise IndexingError(f"task ended in state '{task.status}'", task_id=task.task_id)
        if not task.video_id:
            raise IndexingError("task is ready but has no video id", task_id=task.task_id)

        self.logger.info(f"Task {task.task_id} ready: video {task.video_id}")
        print(f"  Video ID: {task.video_id}")
        return task.video_id
