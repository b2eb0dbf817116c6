"""Job outcome recording and user-facing delivery."""

from __future__ import annotations

from collections.abc import Callable
import logging
from pathlib import Path
import time

from mediarelay.adapters.notify.base import Notifier
from mediarelay.core.logging_safety import conversation_token
from mediarelay.domain.chunking import split_text
from mediarelay.domain.diagnostics import ERROR_MESSAGE_LIMIT, truncate_error_message
from mediarelay.repositories.base import JobRecord, JobStore
from mediarelay.schemas.job import JobStatus
from mediarelay.services.messages import MessageCatalog

logger = logging.getLogger(__name__)

TRANSCRIPT_ICONS = ("🎙️", "📄")
NORMALIZED_ICONS = ("✨", "📝")


class JobReporter:
    """Applies terminal statuses and talks to the job's conversation."""

    def __init__(
        self,
        store: JobStore,
        notifier: Notifier,
        messages: MessageCatalog | None = None,
        *,
        chunk_max_length: int = 4000,
        chunk_delay_seconds: float = 1.0,
        error_message_limit: int = ERROR_MESSAGE_LIMIT,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._messages = messages or MessageCatalog()
        self._chunk_max_length = chunk_max_length
        self._chunk_delay_seconds = chunk_delay_seconds
        self._error_message_limit = error_message_limit
        self._sleep = sleep

    def text(self, key: str, job: JobRecord) -> str:
        return self._messages.get(key, job.locale)

    def progress(self, job: JobRecord, key: str) -> None:
        self._notifier.send_text(job.conversation_id, self.text(key, job))

    def send_file(self, job: JobRecord, path: Path, caption_key: str) -> bool:
        return self._notifier.send_file(job.conversation_id, path, self.text(caption_key, job))

    def complete_job(self, job: JobRecord) -> None:
        self._store.transition_job_status(job=job, new_status=JobStatus.COMPLETED)
        logger.info("job.completed job_id=%s type=%s media_id=%s", job.id, job.type.value, job.media_id)

    def fail_job(self, job: JobRecord, message: str | None) -> str:
        """Mark the job FAILED and send exactly one error notice; return the stored diagnostic."""
        diagnostic = truncate_error_message(message, self._error_message_limit)
        logger.error(
            "job.failed job_id=%s type=%s media_id=%s conversation=%s error=%s",
            job.id,
            job.type.value,
            job.media_id,
            conversation_token(job.conversation_id),
            diagnostic,
        )
        self._store.transition_job_status(job=job, new_status=JobStatus.FAILED, error_message=diagnostic)
        self._notifier.send_text(job.conversation_id, f"{self.text('common.error', job)} {diagnostic}")
        return diagnostic

    def deliver_transcript(self, job: JobRecord, text: str) -> None:
        self.deliver_text(job, text, label_key="label.transcript", icons=TRANSCRIPT_ICONS)

    def deliver_normalized(self, job: JobRecord, text: str) -> None:
        self.deliver_text(job, text, label_key="label.normalized", icons=NORMALIZED_ICONS)

    def deliver_text(self, job: JobRecord, text: str, *, label_key: str, icons: tuple[str, str]) -> None:
        """Send ``text`` whole, or as labelled ``(i/n)`` chunks with a pause between sends."""
        label = self.text(label_key, job)
        single_icon, chunk_icon = icons
        if len(text) <= self._chunk_max_length:
            self._notifier.send_text(job.conversation_id, f"{single_icon} {label} {job.media_id}:\n\n{text}")
            return

        parts = split_text(text, self._chunk_max_length)
        total = len(parts)
        for index, part in enumerate(parts, start=1):
            if index > 1:
                self._sleep(self._chunk_delay_seconds)
            self._notifier.send_text(job.conversation_id, f"{chunk_icon} {label} ({index}/{total}):\n\n{part}")
        logger.info("job.text_delivered job_id=%s chunks=%s chars=%s", job.id, total, len(text))
