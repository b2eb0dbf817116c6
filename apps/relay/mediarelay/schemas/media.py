"""Media result schemas."""

from datetime import datetime

from pydantic import BaseModel


class MediaResult(BaseModel):
    media_id: str
    transcript_text: str | None = None
    detected_language: str | None = None
    normalized_text: str | None = None
    word_count: int = 0
    created_at: datetime
    updated_at: datetime
