"""Transcript production and caching."""

from __future__ import annotations

import logging
from pathlib import Path

from mediarelay.adapters.tools.base import (
    FailureKind,
    MediaFetcher,
    MediaKind,
    ToolResult,
    Transcriber,
)
from mediarelay.repositories.base import JobRecord, MediaResultRecord, MediaResultStore

logger = logging.getLogger(__name__)


class TranscriptionService:
    def __init__(
        self,
        store: MediaResultStore,
        fetcher: MediaFetcher,
        transcriber: Transcriber,
        *,
        work_dir: Path,
        export_dir: Path | None = None,
    ) -> None:
        self._store = store
        self._fetcher = fetcher
        self._transcriber = transcriber
        self._work_dir = work_dir
        self._export_dir = export_dir

    def perform_transcription(self, job: JobRecord) -> ToolResult[MediaResultRecord]:
        """Fetch audio into a temporary file, transcribe it, and always remove the temporary audio."""
        self._work_dir.mkdir(parents=True, exist_ok=True)
        basename = f"temp_{job.media_id}_{job.id}"
        try:
            fetched = self._fetcher.fetch(job.media_id, MediaKind.AUDIO, self._work_dir, basename)
            if not fetched.succeeded:
                return ToolResult.failed(fetched.failure.kind, fetched.failure.message)
            return self.transcribe_file(job.media_id, fetched.unwrap())
        finally:
            for leftover in self._work_dir.glob(f"{basename}.*"):
                leftover.unlink(missing_ok=True)
                logger.debug("transcription.temp_removed file=%s", leftover.name)

    def transcribe_file(self, media_id: str, audio_path: Path) -> ToolResult[MediaResultRecord]:
        """Transcribe an audio file the caller owns and persist the transcript for ``media_id``."""
        if not audio_path.is_file() or audio_path.stat().st_size == 0:
            return ToolResult.failed(FailureKind.NOT_FOUND, "Audio file not found after download")

        logger.info("transcription.started media_id=%s", media_id)
        result = self._transcriber.transcribe(audio_path)
        if not result.succeeded:
            return ToolResult.failed(result.failure.kind, result.failure.message)

        transcript = result.unwrap()
        text = " ".join(transcript.text.split())
        if not text:
            return ToolResult.failed(FailureKind.EMPTY_RESULT, "Transcription failed or returned empty result")

        record = self._store.get_media_result(media_id) or MediaResultRecord.new(media_id)
        record.replace_transcript(text, transcript.language)
        self._store.save_media_result(record)
        logger.info(
            "transcription.saved media_id=%s language=%s word_count=%s",
            media_id,
            record.detected_language,
            record.word_count,
        )
        self._export(f"transcription_{media_id}.txt", text)
        return ToolResult.success(record)

    def save_normalized(self, record: MediaResultRecord, text: str) -> MediaResultRecord:
        record.replace_normalized_text(text)
        self._store.save_media_result(record)
        logger.info("transcription.normalized_saved media_id=%s chars=%s", record.media_id, len(text))
        self._export(f"normalized_{record.media_id}.txt", text)
        return record

    def _export(self, file_name: str, text: str) -> None:
        if self._export_dir is None:
            return
        try:
            self._export_dir.mkdir(parents=True, exist_ok=True)
            (self._export_dir / file_name).write_text(text, encoding="utf-8")
        except OSError as exc:
            logger.warning("transcription.export_failed file=%s reason=%s", file_name, exc)
