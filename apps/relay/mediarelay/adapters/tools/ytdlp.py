"""Media download through the yt-dlp library."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yt_dlp
from yt_dlp.utils import DownloadError, PostProcessingError
from yt_dlp.version import __version__ as ytdlp_version

from mediarelay.adapters.tools.base import (
    FailureKind,
    MediaFetcher,
    MediaKind,
    ToolResult,
    ToolsNotReadyError,
)

logger = logging.getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={media_id}"
VIDEO_FORMAT = "bestvideo[ext=mp4]+bestaudio[ext=m4a]/mp4"
AUDIO_CODEC = "mp3"
_UNAVAILABLE_MARKERS = ("video unavailable", "private video", "not available", "has been removed")
_TIMEOUT_MARKERS = ("timed out", "timeout")


class YtDlpFetcher(MediaFetcher):
    name = "yt-dlp"

    def __init__(self, *, player_client: str | None = "android", socket_timeout: float = 600.0) -> None:
        self._player_client = player_client
        self._socket_timeout = socket_timeout

    def ensure_available(self) -> None:
        if not ytdlp_version:
            raise ToolsNotReadyError("yt-dlp version information unavailable")
        logger.info("tools.ytdlp_version version=%s", ytdlp_version)

    def build_options(self, kind: MediaKind, output_dir: Path, basename: str) -> dict[str, Any]:
        options: dict[str, Any] = {
            "outtmpl": str(output_dir / f"{basename}.%(ext)s"),
            "quiet": True,
            "no_warnings": True,
            "noprogress": True,
            "noplaylist": True,
            "socket_timeout": self._socket_timeout,
        }
        if self._player_client:
            options["extractor_args"] = {"youtube": {"player_client": [self._player_client]}}
        if kind == MediaKind.VIDEO:
            options["format"] = VIDEO_FORMAT
            options["merge_output_format"] = "mp4"
        else:
            options["format"] = "bestaudio/best"
            options["postprocessors"] = [{"key": "FFmpegExtractAudio", "preferredcodec": AUDIO_CODEC}]
        return options

    def fetch(self, media_id: str, kind: MediaKind, output_dir: Path, basename: str) -> ToolResult[Path]:
        output_dir.mkdir(parents=True, exist_ok=True)
        url = WATCH_URL.format(media_id=media_id)
        logger.info("tools.ytdlp_fetch_started media_id=%s kind=%s", media_id, kind.value)

        try:
            with yt_dlp.YoutubeDL(self.build_options(kind, output_dir, basename)) as ydl:
                info = ydl.extract_info(url, download=True)
                if not info:
                    return ToolResult.failed(FailureKind.NOT_FOUND, f"yt-dlp returned no info for {media_id}")
                downloaded = self._resolve_output(ydl, info, kind, output_dir, basename)
        except (DownloadError, PostProcessingError) as exc:
            message = str(exc)
            lowered = message.lower()
            if any(marker in lowered for marker in _TIMEOUT_MARKERS):
                kind_of_failure = FailureKind.TIMEOUT
            elif any(marker in lowered for marker in _UNAVAILABLE_MARKERS):
                kind_of_failure = FailureKind.NOT_FOUND
            else:
                kind_of_failure = FailureKind.TOOL_FAILURE
            logger.warning(
                "tools.ytdlp_fetch_failed media_id=%s kind=%s failure=%s",
                media_id,
                kind.value,
                kind_of_failure.value,
            )
            return ToolResult.failed(kind_of_failure, message)

        if downloaded is None or not downloaded.is_file() or downloaded.stat().st_size == 0:
            return ToolResult.failed(FailureKind.NOT_FOUND, f"No {kind.value} file produced for {media_id}")

        logger.info(
            "tools.ytdlp_fetch_completed media_id=%s kind=%s bytes=%s",
            media_id,
            kind.value,
            downloaded.stat().st_size,
        )
        return ToolResult.success(downloaded)

    @staticmethod
    def _resolve_output(
        ydl: yt_dlp.YoutubeDL,
        info: dict[str, Any],
        kind: MediaKind,
        output_dir: Path,
        basename: str,
    ) -> Path | None:
        if kind == MediaKind.AUDIO:
            expected = output_dir / f"{basename}.{AUDIO_CODEC}"
            if expected.exists():
                return expected

        requested = info.get("requested_downloads") or []
        if requested:
            candidate = requested[0].get("filepath") or requested[0].get("_filename")
            if candidate:
                return Path(candidate)

        prepared = Path(ydl.prepare_filename(info))
        if prepared.exists():
            return prepared

        # Merged or post-processed output can change the extension.
        matches = sorted(output_dir.glob(f"{basename}.*"))
        return matches[0] if matches else None
