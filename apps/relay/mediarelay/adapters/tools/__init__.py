"""External media tool adapters."""

from .archive import ZipArchiver
from .base import (
    Archiver,
    ExternalTool,
    FailureKind,
    MediaFetcher,
    MediaKind,
    Normalizer,
    ToolError,
    ToolFailure,
    ToolResult,
    ToolsNotReadyError,
    Transcriber,
    TranscriptionResult,
    check_tools_ready,
)
from .ffmpeg import FfmpegConverter
from .llama_server import LlamaServerNormalizer
from .scripted import ScriptedFetcher, ScriptedNormalizer, ScriptedTranscriber
from .whisper_cli import WhisperCliTranscriber
from .ytdlp import YtDlpFetcher

__all__ = [
    "Archiver",
    "ExternalTool",
    "FailureKind",
    "FfmpegConverter",
    "LlamaServerNormalizer",
    "MediaFetcher",
    "MediaKind",
    "Normalizer",
    "ScriptedFetcher",
    "ScriptedNormalizer",
    "ScriptedTranscriber",
    "ToolError",
    "ToolFailure",
    "ToolResult",
    "ToolsNotReadyError",
    "Transcriber",
    "TranscriptionResult",
    "WhisperCliTranscriber",
    "YtDlpFetcher",
    "check_tools_ready",
    "ZipArchiver",
]
