"""Speech recognition through the whisper.cpp command line tool.

whisper.cpp writes its results next to the input (``<base>.json`` and
``<base>.txt``). The JSON file is the primary source; the plain-text file
and the ``auto-detected language:`` console line are the fallback when the
JSON is missing or does not validate. Both parsers are pure functions.
"""

from __future__ import annotations

import logging
from pathlib import Path
import re
import shutil
import subprocess

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mediarelay.adapters.tools.base import (
    FailureKind,
    ToolResult,
    ToolsNotReadyError,
    Transcriber,
    TranscriptionResult,
)
from mediarelay.adapters.tools.ffmpeg import FfmpegConverter, stderr_tail

logger = logging.getLogger(__name__)

_DETECTED_LANGUAGE = re.compile(r"auto-detected language:\s*([A-Za-z]{2,8})")


class WhisperSegment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str = ""


class WhisperRunResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    language: str | None = None


class WhisperJsonOutput(BaseModel):
    """Accepts both the whisper.cpp layout (``result`` + ``transcription``) and the ``segments`` layout."""

    model_config = ConfigDict(extra="ignore")

    result: WhisperRunResult | None = None
    transcription: list[WhisperSegment] = Field(default_factory=list)
    language: str | None = None
    segments: list[WhisperSegment] = Field(default_factory=list)


def collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


def parse_whisper_json(payload: str) -> TranscriptionResult:
    """Parse whisper JSON output; raise ``ValueError`` when it carries no segments."""
    output = WhisperJsonOutput.model_validate_json(payload)
    segments = output.transcription or output.segments
    if not segments:
        raise ValueError("whisper JSON output has no segments")

    language = output.result.language if output.result and output.result.language else output.language
    text = collapse_whitespace(" ".join(segment.text for segment in segments))
    return TranscriptionResult(text=text, language=language)


def parse_whisper_text(text: str, console_output: str = "") -> TranscriptionResult:
    """Parse the plain-text transcript; the language comes from the console log when present."""
    match = _DETECTED_LANGUAGE.search(console_output) or _DETECTED_LANGUAGE.search(text)
    body = _DETECTED_LANGUAGE.sub("", text)
    return TranscriptionResult(text=collapse_whitespace(body), language=match.group(1) if match else None)


class WhisperCliTranscriber(Transcriber):
    name = "whisper-cli"

    def __init__(
        self,
        *,
        whisper_path: str,
        model_path: Path,
        converter: FfmpegConverter,
        threads: int = 4,
        use_gpu: bool = False,
        timeout_seconds: float = 3600.0,
    ) -> None:
        self._whisper_path = whisper_path
        self._model_path = model_path
        self._converter = converter
        self._threads = threads
        self._use_gpu = use_gpu
        self._timeout_seconds = timeout_seconds

    def ensure_available(self) -> None:
        if shutil.which(self._whisper_path) is None:
            raise ToolsNotReadyError(f"whisper executable not found: {self._whisper_path}")
        if not self._model_path.is_file():
            raise ToolsNotReadyError(f"whisper model not found: {self._model_path}")
        self._converter.ensure_available()

    def build_command(self, wav_path: Path, output_base: Path) -> list[str]:
        command = [
            self._whisper_path,
            "-m",
            str(self._model_path),
            "-f",
            str(wav_path),
            "-of",
            str(output_base),
            "--output-txt",
            "-oj",
            "--threads",
            str(self._threads),
        ]
        if not self._use_gpu:
            command.append("-ng")
        command.extend(["--language", "auto", "--word-thold", "0.01"])
        return command

    def transcribe(self, audio_path: Path) -> ToolResult[TranscriptionResult]:
        converted = self._converter.convert_to_wav(audio_path)
        if not converted.succeeded:
            return ToolResult.failed(converted.failure.kind, converted.failure.message)

        wav_path = converted.unwrap()
        output_base = wav_path.with_suffix("")
        json_path = Path(f"{output_base}.json")
        txt_path = Path(f"{output_base}.txt")
        try:
            return self._run(wav_path, output_base, json_path, txt_path)
        finally:
            for leftover in (wav_path, json_path, txt_path):
                if leftover != audio_path:
                    leftover.unlink(missing_ok=True)

    def _run(self, wav_path: Path, output_base: Path, json_path: Path, txt_path: Path) -> ToolResult[TranscriptionResult]:
        logger.info("tools.whisper_started input=%s threads=%s gpu=%s", wav_path.name, self._threads, self._use_gpu)
        try:
            completed = subprocess.run(
                self.build_command(wav_path, output_base),
                capture_output=True,
                text=True,
                timeout=self._timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.warning("tools.whisper_timeout input=%s timeout_seconds=%s", wav_path.name, self._timeout_seconds)
            return ToolResult.failed(FailureKind.TIMEOUT, f"whisper timed out after {self._timeout_seconds:g}s")
        except OSError as exc:
            return ToolResult.failed(FailureKind.TOOL_FAILURE, f"whisper could not start: {exc}")

        if completed.returncode != 0:
            logger.warning("tools.whisper_failed input=%s returncode=%s", wav_path.name, completed.returncode)
            return ToolResult.failed(
                FailureKind.TOOL_FAILURE,
                f"whisper exited with code {completed.returncode}: {stderr_tail(completed.stderr)}",
            )

        result = self._read_outputs(json_path, txt_path, console_output=f"{completed.stdout}\n{completed.stderr}")
        if result is None:
            return ToolResult.failed(FailureKind.TOOL_FAILURE, "whisper produced no output files")
        if not result.text:
            return ToolResult.failed(FailureKind.EMPTY_RESULT, "whisper returned an empty transcript")

        logger.info("tools.whisper_completed language=%s chars=%s", result.language, len(result.text))
        return ToolResult.success(result)

    @staticmethod
    def _read_outputs(json_path: Path, txt_path: Path, *, console_output: str) -> TranscriptionResult | None:
        if json_path.is_file():
            try:
                return parse_whisper_json(json_path.read_text(encoding="utf-8"))
            except (ValidationError, ValueError) as exc:
                logger.warning("tools.whisper_json_unusable reason=%s", exc.__class__.__name__)

        if txt_path.is_file():
            return parse_whisper_text(txt_path.read_text(encoding="utf-8"), console_output)
        return None
