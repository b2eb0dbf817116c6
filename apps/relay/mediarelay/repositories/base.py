"""Persistence records and store interfaces shared by the memory and SQL backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from mediarelay.domain.job_fsm import ensure_transition
from mediarelay.schemas.job import JobStatus, JobType

ACTIVE_STATUSES: frozenset[JobStatus] = frozenset({JobStatus.PENDING, JobStatus.IN_PROGRESS})


@dataclass(slots=True)
class JobRecord:
    id: int
    conversation_id: int
    media_id: str
    type: JobType
    status: JobStatus
    created_at: datetime
    updated_at: datetime
    locale: str = "en"
    error_message: str | None = None
    stuck_resets: int = 0


@dataclass(slots=True)
class MediaResultRecord:
    media_id: str
    created_at: datetime
    updated_at: datetime
    transcript_text: str | None = None
    detected_language: str | None = None
    normalized_text: str | None = None
    word_count: int = 0

    @classmethod
    def new(cls, media_id: str) -> MediaResultRecord:
        now = datetime.now(UTC)
        return cls(media_id=media_id, created_at=now, updated_at=now)

    @property
    def has_transcript(self) -> bool:
        return bool(self.transcript_text)

    @property
    def has_normalized_text(self) -> bool:
        return bool(self.normalized_text)

    def replace_transcript(self, text: str, language: str | None) -> None:
        """Store a fresh transcript; normalized text derived from an older one is dropped."""
        if text != self.transcript_text:
            self.normalized_text = None
        self.transcript_text = text
        self.detected_language = language
        self.word_count = len(text.split())
        self.updated_at = datetime.now(UTC)

    def replace_normalized_text(self, text: str) -> None:
        self.normalized_text = text
        self.updated_at = datetime.now(UTC)


class JobStore(ABC):
    """Durable job queue. Single writer: only the worker mutates job status."""

    @abstractmethod
    def enqueue(self, *, conversation_id: int, media_id: str, job_type: JobType, locale: str = "en") -> JobRecord:
        """Create a PENDING job; raise ``DuplicateJobError`` if an equivalent one is active."""

    @abstractmethod
    def next_pending(self) -> JobRecord | None:
        """Return the oldest PENDING job, or ``None`` when the queue is idle."""

    @abstractmethod
    def save(self, job: JobRecord) -> None:
        """Upsert the job exactly as given."""

    @abstractmethod
    def get_job(self, job_id: int) -> JobRecord | None: ...

    @abstractmethod
    def list_jobs(self, *, conversation_id: int | None = None, status: JobStatus | None = None) -> list[JobRecord]: ...

    @abstractmethod
    def find_stuck(self, older_than: timedelta) -> list[JobRecord]:
        """Return IN_PROGRESS jobs whose last update predates ``now - older_than``."""

    def transition_job_status(
        self,
        *,
        job: JobRecord,
        new_status: JobStatus,
        error_message: str | None = None,
    ) -> None:
        """Apply an FSM-validated status mutation and persist it."""
        ensure_transition(job.status, new_status)
        job.status = new_status
        job.error_message = error_message if new_status == JobStatus.FAILED else None
        job.updated_at = datetime.now(UTC)
        self.save(job)


class MediaResultStore(ABC):
    """Cache of derived artifacts keyed by media identity."""

    @abstractmethod
    def get_media_result(self, media_id: str) -> MediaResultRecord | None: ...

    @abstractmethod
    def save_media_result(self, record: MediaResultRecord) -> None:
        """Upsert by ``media_id``."""


class RelayStore(JobStore, MediaResultStore, ABC):
    """Both stores behind one backend, as wired by the worker and the API."""


__all__ = [
    "ACTIVE_STATUSES",
    "JobRecord",
    "JobStore",
    "MediaResultRecord",
    "MediaResultStore",
    "RelayStore",
]
