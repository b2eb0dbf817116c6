"""Job intake service layer."""

from __future__ import annotations

import logging

from mediarelay.core.logging_safety import conversation_token
from mediarelay.errors import ApiError
from mediarelay.repositories.base import JobRecord, MediaResultRecord, RelayStore
from mediarelay.schemas.job import EnqueueJobRequest, Job, JobStatus
from mediarelay.schemas.media import MediaResult

logger = logging.getLogger(__name__)


def _not_found() -> ApiError:
    return ApiError(status_code=404, code="RESOURCE_NOT_FOUND", message="Resource not found")


class JobService:
    def __init__(self, store: RelayStore) -> None:
        self._store = store

    def enqueue_job(self, request: EnqueueJobRequest) -> Job:
        record = self._store.enqueue(
            conversation_id=request.conversation_id,
            media_id=request.media_id,
            job_type=request.type,
            locale=request.locale,
        )
        logger.info(
            "intake.job_enqueued job_id=%s type=%s media_id=%s conversation=%s",
            record.id,
            record.type.value,
            record.media_id,
            conversation_token(record.conversation_id),
        )
        return self._to_job(record)

    def get_job(self, job_id: int) -> Job:
        record = self._store.get_job(job_id)
        if record is None:
            raise _not_found()
        return self._to_job(record)

    def list_jobs(self, *, conversation_id: int | None = None, status: JobStatus | None = None) -> list[Job]:
        return [self._to_job(record) for record in self._store.list_jobs(conversation_id=conversation_id, status=status)]

    def get_media_result(self, media_id: str) -> MediaResult:
        record = self._store.get_media_result(media_id)
        if record is None:
            raise _not_found()
        return self._to_media_result(record)

    @staticmethod
    def _to_job(record: JobRecord) -> Job:
        return Job(
            id=record.id,
            conversation_id=record.conversation_id,
            media_id=record.media_id,
            type=record.type,
            status=record.status,
            locale=record.locale,
            error_message=record.error_message,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

    @staticmethod
    def _to_media_result(record: MediaResultRecord) -> MediaResult:
        return MediaResult(
            media_id=record.media_id,
            transcript_text=record.transcript_text,
            detected_language=record.detected_language,
            normalized_text=record.normalized_text,
            word_count=record.word_count,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
