"""Job handlers and their registry."""

from .base import JobHandler
from .bundle import FullBundleHandler
from .media import FetchMediaHandler
from .normalize import NormalizeHandler
from .registry import HandlerRegistry, build_default_registry
from .transcribe import TranscribeHandler

__all__ = [
    "FetchMediaHandler",
    "FullBundleHandler",
    "HandlerRegistry",
    "JobHandler",
    "NormalizeHandler",
    "TranscribeHandler",
    "build_default_registry",
]
