"""Job handler contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from mediarelay.adapters.tools.base import FailureKind, ToolResult
from mediarelay.repositories.base import JobRecord, MediaResultRecord
from mediarelay.schemas.job import JobType
from mediarelay.services.reporting import JobReporter

AUDIO_NOT_FOUND = "Audio file not found after download"
VIDEO_NOT_FOUND = "Video file not found after download"
EMPTY_TRANSCRIPT = "Transcription failed or returned empty result"
EMPTY_NORMALIZATION = "Normalization returned empty result"


class JobHandler(ABC):
    """Executes one job type end to end.

    A handler leaves the job COMPLETED or FAILED. Expected tool failures
    (missing output, empty result) become a FAILED job with a specific
    diagnostic; anything else is raised for the scheduler to record.
    """

    job_types: ClassVar[frozenset[JobType]] = frozenset()

    def __init__(self, reporter: JobReporter) -> None:
        self._reporter = reporter

    def can_handle(self, job_type: JobType) -> bool:
        return job_type in self.job_types

    @abstractmethod
    def handle(self, job: JobRecord) -> None: ...

    def transcript_or_fail(self, job: JobRecord, result: ToolResult[MediaResultRecord]) -> MediaResultRecord | None:
        """Return the transcribed record, or fail the job for NOT_FOUND/EMPTY_RESULT and return ``None``."""
        if result.succeeded:
            return result.unwrap()

        if result.failure.kind == FailureKind.NOT_FOUND:
            self._reporter.fail_job(job, AUDIO_NOT_FOUND)
            return None
        if result.failure.kind == FailureKind.EMPTY_RESULT:
            self._reporter.fail_job(job, EMPTY_TRANSCRIPT)
            return None
        return result.unwrap()
