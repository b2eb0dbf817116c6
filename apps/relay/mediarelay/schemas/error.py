"""API error response schemas."""

from typing import Any
from typing import Literal

from pydantic import BaseModel

from mediarelay.schemas.job import JobStatus, JobType


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class DuplicateJobErrorDetails(BaseModel):
    media_id: str
    type: JobType
    existing_job_id: int
    existing_status: JobStatus


class DuplicateJobErrorPayload(BaseModel):
    code: Literal["DUPLICATE_JOB"]
    message: str
    details: DuplicateJobErrorDetails


class NoLeakNotFoundError(BaseModel):
    code: Literal["RESOURCE_NOT_FOUND"]
    message: str
