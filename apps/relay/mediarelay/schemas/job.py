"""Job schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

MEDIA_ID_PATTERN = r"^[A-Za-z0-9_-]{11}$"


class JobStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class JobType(str, Enum):
    FETCH_VIDEO = "FETCH_VIDEO"
    FETCH_AUDIO = "FETCH_AUDIO"
    TRANSCRIBE = "TRANSCRIBE"
    NORMALIZE = "NORMALIZE"
    FULL_BUNDLE = "FULL_BUNDLE"


class Job(BaseModel):
    id: int
    conversation_id: int
    media_id: str
    type: JobType
    status: JobStatus
    locale: str
    error_message: str | None = None
    created_at: datetime
    updated_at: datetime


class EnqueueJobRequest(BaseModel):
    conversation_id: int
    media_id: str = Field(pattern=MEDIA_ID_PATTERN)
    type: JobType
    locale: str = Field(default="en", min_length=2, max_length=8)
