"""TRANSCRIBE handling."""

from __future__ import annotations

import logging

from mediarelay.repositories.base import JobRecord, MediaResultStore
from mediarelay.schemas.job import JobType
from mediarelay.services.handlers.base import JobHandler
from mediarelay.services.reporting import JobReporter
from mediarelay.services.transcription import TranscriptionService

logger = logging.getLogger(__name__)


class TranscribeHandler(JobHandler):
    job_types = frozenset({JobType.TRANSCRIBE})

    def __init__(self, reporter: JobReporter, media_store: MediaResultStore, transcription: TranscriptionService) -> None:
        super().__init__(reporter)
        self._media_store = media_store
        self._transcription = transcription

    def handle(self, job: JobRecord) -> None:
        cached = self._media_store.get_media_result(job.media_id)
        if cached is not None and cached.has_transcript:
            logger.info("transcribe.cache_hit job_id=%s media_id=%s", job.id, job.media_id)
            self._reporter.deliver_transcript(job, cached.transcript_text)
            self._reporter.complete_job(job)
            return

        record = self.transcript_or_fail(job, self._transcription.perform_transcription(job))
        if record is None:
            return

        self._reporter.deliver_transcript(job, record.transcript_text)
        self._reporter.complete_job(job)
