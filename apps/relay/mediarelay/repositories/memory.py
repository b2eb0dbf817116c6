"""In-memory repositories used by tests and local runs without a database."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from mediarelay.errors import DuplicateJobError, StoreUnavailableError
from mediarelay.repositories.base import (
    ACTIVE_STATUSES,
    JobRecord,
    MediaResultRecord,
    RelayStore,
)
from mediarelay.schemas.job import JobStatus, JobType


@dataclass(slots=True)
class InMemoryStore(RelayStore):
    """Simple, deterministic persistence layer for scaffolding and tests."""

    jobs: dict[int, JobRecord] = field(default_factory=dict)
    media_results: dict[str, MediaResultRecord] = field(default_factory=dict)
    job_write_count: int = 0
    media_result_write_count: int = 0
    next_job_id: int = 1
    unavailable_message: str | None = None

    def enqueue(self, *, conversation_id: int, media_id: str, job_type: JobType, locale: str = "en") -> JobRecord:
        self._maybe_raise_unavailable()
        existing = self._find_active(media_id=media_id, job_type=job_type)
        if existing is not None:
            raise DuplicateJobError(
                media_id=media_id,
                job_type=job_type.value,
                existing_job_id=existing.id,
                existing_status=existing.status.value,
            )

        now = datetime.now(UTC)
        job = JobRecord(
            id=self.next_job_id,
            conversation_id=conversation_id,
            media_id=media_id,
            type=job_type,
            status=JobStatus.PENDING,
            created_at=now,
            updated_at=now,
            locale=locale,
        )
        self.next_job_id += 1
        self.jobs[job.id] = job
        self.job_write_count += 1
        return job

    def next_pending(self) -> JobRecord | None:
        self._maybe_raise_unavailable()
        pending = [record for record in self.jobs.values() if record.status == JobStatus.PENDING]
        if not pending:
            return None
        return min(pending, key=lambda record: (record.created_at, record.id))

    def save(self, job: JobRecord) -> None:
        self._maybe_raise_unavailable()
        self.jobs[job.id] = job
        self.next_job_id = max(self.next_job_id, job.id + 1)
        self.job_write_count += 1

    def get_job(self, job_id: int) -> JobRecord | None:
        self._maybe_raise_unavailable()
        return self.jobs.get(job_id)

    def list_jobs(self, *, conversation_id: int | None = None, status: JobStatus | None = None) -> list[JobRecord]:
        self._maybe_raise_unavailable()
        records = [
            record
            for record in self.jobs.values()
            if (conversation_id is None or record.conversation_id == conversation_id)
            and (status is None or record.status == status)
        ]
        records.sort(key=lambda record: (record.created_at, record.id))
        return records

    def find_stuck(self, older_than: timedelta) -> list[JobRecord]:
        self._maybe_raise_unavailable()
        cutoff = datetime.now(UTC) - older_than
        stuck = [
            record
            for record in self.jobs.values()
            if record.status == JobStatus.IN_PROGRESS and record.updated_at < cutoff
        ]
        stuck.sort(key=lambda record: (record.updated_at, record.id))
        return stuck

    def get_media_result(self, media_id: str) -> MediaResultRecord | None:
        self._maybe_raise_unavailable()
        return self.media_results.get(media_id)

    def save_media_result(self, record: MediaResultRecord) -> None:
        self._maybe_raise_unavailable()
        self.media_results[record.media_id] = record
        self.media_result_write_count += 1

    def _find_active(self, *, media_id: str, job_type: JobType) -> JobRecord | None:
        for record in self.jobs.values():
            if record.media_id == media_id and record.type == job_type and record.status in ACTIVE_STATUSES:
                return record
        return None

    def _maybe_raise_unavailable(self) -> None:
        if self.unavailable_message is None:
            return

        message = self.unavailable_message
        self.unavailable_message = None
        raise StoreUnavailableError(message)
