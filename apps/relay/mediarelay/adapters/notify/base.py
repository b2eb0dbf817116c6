"""Outbound notification interface."""

from abc import ABC, abstractmethod
from pathlib import Path


class Notifier(ABC):
    """Delivers text and files to a conversation.

    Delivery is best effort: implementations log failures and return
    ``False`` instead of raising, so a lost message never fails a job.
    """

    @abstractmethod
    def send_text(self, conversation_id: int, text: str) -> bool: ...

    @abstractmethod
    def send_file(self, conversation_id: int, path: Path, caption: str | None = None) -> bool: ...


__all__ = ["Notifier"]
