"""
Folder watcher and job queue adapters around PhotoPipeline.

The watcher polls the capture directory and hands every new qualifying
file to the JobQueue, which runs the orchestrator once per submission on a
worker thread. Duplicate submissions for a path that is still queued or
running are dropped here; the orchestrator itself does no locking.
"""

import logging
import os
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable

from .config import PipelineConfig
from .pipeline import PhotoPipeline, ProcessingReport

logger = logging.getLogger(__name__)

CREATED = "created"
MOVED_IN = "moved_in"


class JobQueue:
    """Runs one orchestrator job per submitted path on a thread pool."""

    def __init__(
        self,
        pipeline: PhotoPipeline,
        max_workers: int = 1,
        on_report: Callable[[ProcessingReport], None] | None = None,
    ):
        self.pipeline = pipeline
        self.on_report = on_report
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="alienshot-job"
        )
        self._lock = threading.Lock()
        self._in_flight: set[Path] = set()

    def submit(self, path: str | Path) -> Future | None:
        """
        Queue a job for `path`.

        Returns:
            The job's Future, or None if the path is already queued or running
        """
        key = Path(path).absolute()
        with self._lock:
            if key in self._in_flight:
                logger.info(f"Job already pending for {key}, skipping")
                return None
            self._in_flight.add(key)

        logger.info(f"Queued processing job for {key}")
        return self._executor.submit(self._run, key)

    def _run(self, path: Path) -> ProcessingReport:
        try:
            report = self.pipeline.process(path)
        except Exception:
            logger.exception(f"Job for {path} crashed")
            raise
        finally:
            with self._lock:
                self._in_flight.discard(path)

        if self.on_report is not None:
            self.on_report(report)
        return report

    def pending(self) -> int:
        with self._lock:
            return len(self._in_flight)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


class FolderWatcher:
    """
    Polling watcher for the capture directory.

    Files present at start-up are submitted once; afterwards every name that
    appears between two polls (created or moved in) is submitted after
    `settle_delay` seconds.
    """

    def __init__(self, config: PipelineConfig, submit: Callable[[Path], object]):
        self.config = config
        self.submit = submit
        self._known: set[str] = set()
        self._last_poll = time.time()
        self._stop = threading.Event()

    def is_candidate(self, name: str) -> bool:
        return self.config.is_image_name(name)

    @staticmethod
    def _event_kind(path: Path, previous_poll: float) -> str:
        # A move keeps the original mtime, so anything older than the last poll was moved in.
        try:
            modified = path.stat().st_mtime
        except OSError:
            return CREATED
        return MOVED_IN if modified < previous_poll else CREATED

    def _list_names(self) -> set[str]:
        try:
            with os.scandir(self.config.watch_dir) as entries:
                return {entry.name for entry in entries if entry.is_file()}
        except OSError as e:
            logger.error(f"Cannot read {self.config.watch_dir}: {e}")
            return set()

    def scan_existing(self) -> list[Path]:
        """Submit every qualifying file already in the directory."""
        watch_dir = self.config.watch_dir
        if not watch_dir.is_dir():
            logger.error(f"Watch directory does not exist or is not accessible: {watch_dir}")
            return []

        names = self._list_names()
        self._known = set(names)
        self._last_poll = time.time()
        submitted = []
        for name in sorted(names):
            path = watch_dir / name
            if not self.is_candidate(name):
                logger.debug(f"Ignored (not an image): {name}")
                continue
            try:
                empty = path.stat().st_size == 0
            except OSError:
                continue
            if empty:
                logger.debug(f"Ignored (empty file): {name}")
                continue
            self.submit(path)
            submitted.append(path)

        logger.info(f"Initial scan of {watch_dir}: {len(submitted)} image(s) submitted")
        return submitted

    def poll_once(self) -> list[tuple[Path, str]]:
        """
        Detect names that appeared since the last poll and submit the qualifying ones.

        Returns:
            (absolute path, event kind) for every submitted file
        """
        names = self._list_names()
        new_names = sorted(names - self._known)
        self._known = names
        previous_poll, self._last_poll = self._last_poll, time.time()

        events = []
        for name in new_names:
            if not self.is_candidate(name):
                logger.debug(f"Event ignored (not an image): {name}")
                continue
            path = (self.config.watch_dir / name).absolute()
            events.append((path, self._event_kind(path, previous_poll)))

        if events and self.config.settle_delay > 0:
            # Give the writer a moment to finish the file.
            time.sleep(self.config.settle_delay)

        for path, kind in events:
            logger.info(f"New image detected ({kind}): {path}")
            self.submit(path)
        return events

    def run(self, max_polls: int | None = None) -> None:
        """Scan, then poll until stop() is called or `max_polls` is reached."""
        logger.info(f"Watching {self.config.watch_dir}")
        self.scan_existing()

        polls = 0
        while not self._stop.is_set():
            if max_polls is not None and polls >= max_polls:
                break
            self._stop.wait(self.config.poll_interval)
            if self._stop.is_set():
                break
            self.poll_once()
            polls += 1

        logger.info("Watcher stopped")

    def stop(self) -> None:
        self._stop.set()
