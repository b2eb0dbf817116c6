"""Notifier that records and logs messages instead of sending them."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path

from mediarelay.adapters.notify.base import Notifier
from mediarelay.core.logging_safety import conversation_token

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SentMessage:
    conversation_id: int
    text: str | None = None
    file_name: str | None = None
    caption: str | None = None
    file_bytes: bytes | None = None


class RecordingNotifier(Notifier):
    """Keeps every outbound message in memory; used by tests and log-only runs."""

    def __init__(self, *, fail_all: bool = False) -> None:
        self.sent: list[SentMessage] = []
        self.fail_all = fail_all

    @property
    def texts(self) -> list[str]:
        return [message.text for message in self.sent if message.text is not None]

    @property
    def files(self) -> list[SentMessage]:
        return [message for message in self.sent if message.file_name is not None]

    def send_text(self, conversation_id: int, text: str) -> bool:
        if self.fail_all:
            logger.error("notify.recording_failed conversation=%s", conversation_token(conversation_id))
            return False
        self.sent.append(SentMessage(conversation_id=conversation_id, text=text))
        logger.info("notify.text conversation=%s chars=%s", conversation_token(conversation_id), len(text))
        return True

    def send_file(self, conversation_id: int, path: Path, caption: str | None = None) -> bool:
        if self.fail_all:
            logger.error("notify.recording_failed conversation=%s", conversation_token(conversation_id))
            return False
        # The caller deletes the file right after sending, so keep the content.
        content = path.read_bytes() if path.is_file() else None
        self.sent.append(
            SentMessage(conversation_id=conversation_id, file_name=path.name, caption=caption, file_bytes=content)
        )
        logger.info("notify.file conversation=%s file=%s", conversation_token(conversation_id), path.name)
        return True
