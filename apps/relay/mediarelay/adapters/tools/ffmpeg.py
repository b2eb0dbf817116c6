"""Audio conversion through the ffmpeg command line."""

from __future__ import annotations

import logging
from pathlib import Path
import re
import shutil
import subprocess

from mediarelay.adapters.tools.base import ExternalTool, FailureKind, ToolResult, ToolsNotReadyError

logger = logging.getLogger(__name__)

_NOISE_PREFIXES = re.compile(
    r"^(ffmpeg version|built with|configuration:|libav\w+|libsw\w+|libpostproc|Input #|Output #|Stream mapping:)",
    re.IGNORECASE,
)


def stderr_tail(stderr: str, max_lines: int = 10) -> str:
    """Keep the last meaningful stderr lines; the real reason is usually at the end."""
    lines = [line.strip() for line in stderr.replace("\r", "\n").split("\n") if line.strip()]
    useful = [line for line in lines if not _NOISE_PREFIXES.match(line)]
    tail = useful[-max_lines:]
    return "\n".join(tail) if tail else "no diagnostic output"


class FfmpegConverter(ExternalTool):
    """Converts any audio input into the 16 kHz mono PCM WAV expected by whisper.cpp."""

    name = "ffmpeg"

    def __init__(self, *, ffmpeg_path: str = "ffmpeg", timeout_seconds: float = 300.0) -> None:
        self._ffmpeg_path = ffmpeg_path
        self._timeout_seconds = timeout_seconds

    def ensure_available(self) -> None:
        if shutil.which(self._ffmpeg_path) is None:
            raise ToolsNotReadyError(f"ffmpeg executable not found: {self._ffmpeg_path}")

    def convert_to_wav(self, source: Path, destination: Path | None = None) -> ToolResult[Path]:
        if not source.is_file():
            return ToolResult.failed(FailureKind.NOT_FOUND, f"Audio input not found: {source.name}")

        target = destination or source.with_name(f"{source.stem}_16k.wav")
        command = [
            self._ffmpeg_path,
            "-nostdin",
            "-y",
            "-i",
            str(source),
            "-ar",
            "16000",
            "-ac",
            "1",
            "-c:a",
            "pcm_s16le",
            str(target),
        ]
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self._timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired:
            target.unlink(missing_ok=True)
            logger.warning("tools.ffmpeg_timeout source=%s timeout_seconds=%s", source.name, self._timeout_seconds)
            return ToolResult.failed(FailureKind.TIMEOUT, f"ffmpeg timed out after {self._timeout_seconds:g}s")
        except OSError as exc:
            return ToolResult.failed(FailureKind.TOOL_FAILURE, f"ffmpeg could not start: {exc}")

        if completed.returncode != 0:
            target.unlink(missing_ok=True)
            logger.warning("tools.ffmpeg_failed source=%s returncode=%s", source.name, completed.returncode)
            return ToolResult.failed(
                FailureKind.TOOL_FAILURE,
                f"ffmpeg exited with code {completed.returncode}: {stderr_tail(completed.stderr)}",
            )
        if not target.is_file() or target.stat().st_size == 0:
            return ToolResult.failed(FailureKind.EMPTY_RESULT, "ffmpeg produced no audio")

        return ToolResult.success(target)
