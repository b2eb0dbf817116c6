"""NORMALIZE handling."""

from __future__ import annotations

import logging

from mediarelay.adapters.tools.base import FailureKind, Normalizer
from mediarelay.repositories.base import JobRecord, MediaResultStore
from mediarelay.schemas.job import JobType
from mediarelay.services.handlers.base import EMPTY_NORMALIZATION, JobHandler
from mediarelay.services.reporting import JobReporter
from mediarelay.services.transcription import TranscriptionService

logger = logging.getLogger(__name__)


class NormalizeHandler(JobHandler):
    job_types = frozenset({JobType.NORMALIZE})

    def __init__(
        self,
        reporter: JobReporter,
        media_store: MediaResultStore,
        transcription: TranscriptionService,
        normalizer: Normalizer,
    ) -> None:
        super().__init__(reporter)
        self._media_store = media_store
        self._transcription = transcription
        self._normalizer = normalizer

    def handle(self, job: JobRecord) -> None:
        record = self._media_store.get_media_result(job.media_id)
        if record is not None and record.has_normalized_text:
            logger.info("normalize.cache_hit job_id=%s media_id=%s", job.id, job.media_id)
            self._reporter.deliver_normalized(job, record.normalized_text)
            self._reporter.complete_job(job)
            return

        if record is None or not record.has_transcript:
            self._reporter.progress(job, "common.transcribing")
            record = self.transcript_or_fail(job, self._transcription.perform_transcription(job))
            if record is None:
                return

        result = self._normalizer.normalize(record.transcript_text, record.detected_language)
        if not result.succeeded and result.failure.kind == FailureKind.EMPTY_RESULT:
            self._reporter.fail_job(job, EMPTY_NORMALIZATION)
            return

        normalized = result.unwrap()
        self._transcription.save_normalized(record, normalized)
        self._reporter.deliver_normalized(job, normalized)
        self._reporter.complete_job(job)
