"""Recurring jobs for the ingestion pipeline.

Two named jobs are registered on a `schedule.Scheduler`:

  - content_fetch: a batch run over all active companies every
    `fetch_interval_minutes`, capped at `fetch_max_posts` per platform
  - cleanup: daily at `cleanup_at`; purges processed records older than
    `retention_days` (a no-op while retention is 0)

A daemon thread calls `run_pending()` once a second. Manual triggers run
in the caller's thread and may overlap a scheduled run; the content
store's uniqueness constraints keep that safe.
"""

from __future__ import annotations

import logging
import threading
from datetime import timedelta
from typing import Optional

import schedule

from content_ingest.config import PipelineConfig
from content_ingest.ingestion import IngestionPipeline
from content_ingest.models import IngestionRecord, utcnow

logger = logging.getLogger(__name__)

CONTENT_FETCH_JOB = "content_fetch"
CLEANUP_JOB = "cleanup"


class IngestionScheduler:
    def __init__(
        self,
        config: PipelineConfig,
        pipeline: IngestionPipeline,
        scheduler: Optional[schedule.Scheduler] = None,
        poll_seconds: float = 1.0,
    ):
        self.config = config
        self.pipeline = pipeline
        self.poll_seconds = poll_seconds
        self._scheduler = scheduler or schedule.Scheduler()
        self.jobs: dict[str, schedule.Job] = {}
        self._initialized = False
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, start_runner: bool = True) -> None:
        """Register both jobs. Calling it again while initialized does nothing."""
        if not self.config.schedule.enabled:
            logger.info("Scheduler disabled in config, no jobs registered")
            return

        with self._lock:
            if self._initialized:
                return
            self._schedule_content_fetch()
            self._schedule_cleanup()
            self._initialized = True
        logger.info("Scheduler initialized with jobs: %s", ", ".join(self.jobs))

        if start_runner:
            self._start_runner()

    def stop_all(self) -> None:
        """Cancel every registered job and clear the registry."""
        with self._lock:
            for name, job in self.jobs.items():
                self._scheduler.cancel_job(job)
                logger.info("Stopped job: %s", name)
            self.jobs.clear()
            self._initialized = False

    def restart_all(self) -> None:
        self.stop_all()
        self.initialize()

    def shutdown(self) -> None:
        """Stop jobs, stop the runner thread and close the pipeline.

        Blocks until an in-flight scheduled run has finished.
        """
        self.stop_all()
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None
        self.pipeline.close()
        logger.info("Scheduler shutdown completed")

    def status(self) -> dict[str, bool]:
        """Per job name, whether the underlying scheduler still holds the job."""
        live = list(self._scheduler.jobs)
        return {name: job in live for name, job in self.jobs.items()}

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def trigger_now(self, max_posts: Optional[int] = None) -> list[IngestionRecord]:
        """Run a batch immediately, outside the schedule."""
        logger.info("Manually triggering content fetching...")
        saved = self.pipeline.run_all(
            max_posts if max_posts is not None else self.config.default_max_posts
        )
        logger.info("Manual content fetching completed. Saved %d new posts.", len(saved))
        return saved

    def run_pending(self) -> None:
        self._scheduler.run_pending()

    def run_forever(self) -> None:
        """Block the calling thread until interrupted."""
        self.initialize(start_runner=False)
        try:
            while not self._stop_event.wait(self.poll_seconds):
                self.run_pending()
        except KeyboardInterrupt:
            logger.info("Interrupted, shutting down")
        finally:
            self.shutdown()

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    def _schedule_content_fetch(self) -> None:
        minutes = self.config.schedule.fetch_interval_minutes
        job = self._scheduler.every(minutes).minutes.do(self._run_content_fetch).tag(CONTENT_FETCH_JOB)
        self.jobs[CONTENT_FETCH_JOB] = job
        logger.info("Content fetching job scheduled to run every %d minutes", minutes)

    def _schedule_cleanup(self) -> None:
        at = self.config.schedule.cleanup_at
        job = self._scheduler.every().day.at(at).do(self._run_cleanup).tag(CLEANUP_JOB)
        self.jobs[CLEANUP_JOB] = job
        logger.info("Cleanup job scheduled to run daily at %s", at)

    def _run_content_fetch(self) -> None:
        logger.info("Starting scheduled content fetching...")
        try:
            saved = self.pipeline.run_all(self.config.schedule.fetch_max_posts)
        except Exception:
            logger.exception("Error in scheduled content fetching")
            return
        logger.info("Scheduled content fetching completed. Saved %d new posts.", len(saved))

    def _run_cleanup(self) -> None:
        days = self.config.schedule.retention_days
        if days <= 0:
            logger.info("Cleanup skipped (retention_days=%d)", days)
            return
        try:
            removed = self.pipeline.db.records.purge_processed(utcnow() - timedelta(days=days))
        except Exception:
            logger.exception("Error in scheduled cleanup")
            return
        logger.info("Cleanup completed: removed %d processed records older than %d days", removed, days)

    def _start_runner(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name="ingestion-scheduler", daemon=True)
        self._thread.start()

    def _run_loop(self) -> None:
        while not self._stop_event.wait(self.poll_seconds):
            try:
                self.run_pending()
            except Exception:
                logger.exception("Scheduled job raised")
