"""Polling scheduler: stuck-job recovery and single-flight dispatch."""

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
import logging
import threading

from mediarelay.domain.job_fsm import is_terminal
from mediarelay.errors import StoreUnavailableError
from mediarelay.repositories.base import JobRecord, JobStore
from mediarelay.schemas.job import JobStatus
from mediarelay.services.handlers.registry import HandlerRegistry
from mediarelay.services.reporting import JobReporter

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = timedelta(seconds=10)
DEFAULT_STUCK_THRESHOLD = timedelta(hours=1)
NO_TERMINAL_STATUS = "Handler finished without a terminal status"
STUCK_LIMIT_EXCEEDED = "Job exceeded the stuck-job reset limit"

CompletionHook = Callable[[JobRecord], None]


class JobScheduler:
    """Runs one job at a time on the calling thread.

    Each tick first returns abandoned IN_PROGRESS jobs to the queue, then
    dispatches the oldest PENDING job to its handler. Ticks run back to back
    with a fixed delay between them and never overlap.
    """

    def __init__(
        self,
        store: JobStore,
        registry: HandlerRegistry,
        reporter: JobReporter,
        *,
        poll_interval: timedelta = DEFAULT_POLL_INTERVAL,
        stuck_threshold: timedelta = DEFAULT_STUCK_THRESHOLD,
        stuck_reset_limit: int | None = 3,
        completion_hook: CompletionHook | None = None,
    ) -> None:
        self._store = store
        self._registry = registry
        self._reporter = reporter
        self._poll_interval = poll_interval
        self._stuck_threshold = stuck_threshold
        self._stuck_reset_limit = stuck_reset_limit
        self._completion_hook = completion_hook if completion_hook is not None else self._announce_completion

    def run_forever(self, stop_event: threading.Event | None = None) -> None:
        stop = stop_event or threading.Event()
        logger.info(
            "scheduler.started poll_interval_seconds=%s stuck_threshold_seconds=%s",
            self._poll_interval.total_seconds(),
            self._stuck_threshold.total_seconds(),
        )
        while not stop.is_set():
            self.tick()
            stop.wait(self._poll_interval.total_seconds())
        logger.info("scheduler.stopped")

    def tick(self) -> JobRecord | None:
        """Run one poll cycle; return the dispatched job, if any."""
        try:
            self.reset_stuck_jobs()
            job = self._store.next_pending()
            if job is None:
                return None

            self._store.transition_job_status(job=job, new_status=JobStatus.IN_PROGRESS)
            logger.info("scheduler.dispatch job_id=%s type=%s media_id=%s", job.id, job.type.value, job.media_id)
            self._dispatch(job)
            return job
        except StoreUnavailableError as exc:
            logger.warning("scheduler.store_unavailable reason=%s", exc)
            return None

    def reset_stuck_jobs(self) -> list[JobRecord]:
        stuck = self._store.find_stuck(self._stuck_threshold)
        for job in stuck:
            logger.warning(
                "scheduler.stuck_job job_id=%s media_id=%s last_update=%s resets=%s",
                job.id,
                job.media_id,
                job.updated_at.isoformat(),
                job.stuck_resets,
            )
            if self._stuck_reset_limit is not None and job.stuck_resets >= self._stuck_reset_limit:
                self._reporter.fail_job(job, STUCK_LIMIT_EXCEEDED)
                continue

            job.stuck_resets += 1
            self._store.transition_job_status(job=job, new_status=JobStatus.PENDING)
        return stuck

    def _dispatch(self, job: JobRecord) -> None:
        handler = self._registry.resolve(job.type)
        try:
            handler.handle(job)
        except StoreUnavailableError:
            raise
        except Exception as exc:
            logger.exception("scheduler.handler_error job_id=%s type=%s", job.id, job.type.value)
            if is_terminal(job.status):
                return
            self._reporter.fail_job(job, str(exc) or exc.__class__.__name__)
            return

        if job.status == JobStatus.IN_PROGRESS:
            self._reporter.fail_job(job, NO_TERMINAL_STATUS)
            return
        if job.status == JobStatus.COMPLETED:
            self._run_completion_hook(job)

    def _run_completion_hook(self, job: JobRecord) -> None:
        try:
            self._completion_hook(job)
        except Exception:
            logger.exception("scheduler.completion_hook_failed job_id=%s", job.id)

    def _announce_completion(self, job: JobRecord) -> None:
        self._reporter.progress(job, "task.completed")
