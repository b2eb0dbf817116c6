"""FETCH_VIDEO and FETCH_AUDIO handling."""

from __future__ import annotations

import logging
from pathlib import Path

from mediarelay.adapters.tools.base import FailureKind, MediaFetcher, MediaKind
from mediarelay.repositories.base import JobRecord
from mediarelay.schemas.job import JobType
from mediarelay.services.handlers.base import AUDIO_NOT_FOUND, VIDEO_NOT_FOUND, JobHandler
from mediarelay.services.reporting import JobReporter

logger = logging.getLogger(__name__)

_KINDS = {JobType.FETCH_VIDEO: MediaKind.VIDEO, JobType.FETCH_AUDIO: MediaKind.AUDIO}
_MISSING = {MediaKind.VIDEO: VIDEO_NOT_FOUND, MediaKind.AUDIO: AUDIO_NOT_FOUND}
_CAPTIONS = {MediaKind.VIDEO: "task.completed.video", MediaKind.AUDIO: "task.completed.audio"}


class FetchMediaHandler(JobHandler):
    job_types = frozenset(_KINDS)

    def __init__(self, reporter: JobReporter, fetcher: MediaFetcher, *, work_dir: Path) -> None:
        super().__init__(reporter)
        self._fetcher = fetcher
        self._work_dir = work_dir

    def handle(self, job: JobRecord) -> None:
        kind = _KINDS[job.type]
        basename = f"{kind.value}_{job.media_id}_{job.id}"
        self._work_dir.mkdir(parents=True, exist_ok=True)
        try:
            result = self._fetcher.fetch(job.media_id, kind, self._work_dir, basename)
            if not result.succeeded and result.failure.kind != FailureKind.NOT_FOUND:
                result.unwrap()

            path = result.value
            if path is None or not path.is_file() or path.stat().st_size == 0:
                self._reporter.fail_job(job, _MISSING[kind])
                return

            self._reporter.send_file(job, path, _CAPTIONS[kind])
            self._reporter.complete_job(job)
        finally:
            for leftover in self._work_dir.glob(f"{basename}.*"):
                leftover.unlink(missing_ok=True)
                logger.debug("media.file_removed job_id=%s file=%s", job.id, leftover.name)
