"""External media tool interfaces and the typed results they return."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
import logging
from pathlib import Path
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FailureKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    TOOL_FAILURE = "TOOL_FAILURE"
    TIMEOUT = "TIMEOUT"
    EMPTY_RESULT = "EMPTY_RESULT"


class MediaKind(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"


@dataclass(frozen=True, slots=True)
class ToolFailure:
    kind: FailureKind
    message: str


class ToolError(Exception):
    """Raised when a failed tool result is unwrapped."""

    def __init__(self, kind: FailureKind, message: str) -> None:
        self.kind = kind
        super().__init__(message)


class ToolsNotReadyError(Exception):
    """Raised at startup when an external tool cannot be used."""


@dataclass(frozen=True, slots=True)
class ToolResult(Generic[T]):
    """Either a value or a typed failure; never both."""

    value: T | None = None
    failure: ToolFailure | None = None

    @classmethod
    def success(cls, value: T) -> ToolResult[T]:
        return cls(value=value)

    @classmethod
    def failed(cls, kind: FailureKind, message: str) -> ToolResult[T]:
        return cls(failure=ToolFailure(kind=kind, message=message))

    @property
    def succeeded(self) -> bool:
        return self.failure is None

    def unwrap(self) -> T:
        if self.failure is not None:
            raise ToolError(self.failure.kind, self.failure.message)
        return self.value  # type: ignore[return-value]


@dataclass(frozen=True, slots=True)
class TranscriptionResult:
    text: str
    language: str | None = None


class ExternalTool(ABC):
    """Readiness contract shared by every adapter backed by an external program or service."""

    name: str = "tool"

    def ensure_available(self) -> None:
        """Raise ``ToolsNotReadyError`` when the tool cannot be used."""


class MediaFetcher(ExternalTool):
    @abstractmethod
    def fetch(self, media_id: str, kind: MediaKind, output_dir: Path, basename: str) -> ToolResult[Path]:
        """Download one stream of ``media_id`` into ``output_dir``; return the produced file."""


class Transcriber(ExternalTool):
    @abstractmethod
    def transcribe(self, audio_path: Path) -> ToolResult[TranscriptionResult]:
        """Recognize speech in ``audio_path``."""


class Normalizer(ExternalTool):
    @abstractmethod
    def normalize(self, text: str, language_hint: str | None) -> ToolResult[str]:
        """Return grammar/punctuation-corrected ``text`` in the same language."""


class Archiver(ABC):
    @abstractmethod
    def package(self, files: Sequence[Path], destination: Path) -> Path:
        """Bundle ``files`` into a single archive at ``destination``."""


def check_tools_ready(tools: Iterable[ExternalTool]) -> None:
    """Run every readiness check once; report all failures together."""
    problems: list[str] = []
    for tool in tools:
        try:
            tool.ensure_available()
        except ToolsNotReadyError as exc:
            logger.error("tools.not_ready tool=%s reason=%s", tool.name, exc)
            problems.append(f"{tool.name}: {exc}")
        else:
            logger.info("tools.ready tool=%s", tool.name)

    if problems:
        raise ToolsNotReadyError("; ".join(problems))


__all__ = [
    "Archiver",
    "ExternalTool",
    "FailureKind",
    "MediaFetcher",
    "MediaKind",
    "Normalizer",
    "ToolError",
    "ToolFailure",
    "ToolResult",
    "ToolsNotReadyError",
    "Transcriber",
    "TranscriptionResult",
    "check_tools_ready",
]
