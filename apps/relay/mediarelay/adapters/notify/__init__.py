"""Notifier adapters."""

from .base import Notifier
from .recording import RecordingNotifier, SentMessage
from .telegram import TelegramNotifier

__all__ = [
    "Notifier",
    "RecordingNotifier",
    "SentMessage",
    "TelegramNotifier",
]
