"""FULL_BUNDLE handling: video, audio, transcript and normalized text in one archive."""

from __future__ import annotations

import logging
from pathlib import Path
import shutil
import tempfile

from mediarelay.adapters.tools.base import Archiver, FailureKind, MediaFetcher, MediaKind, Normalizer, ToolResult
from mediarelay.repositories.base import JobRecord, MediaResultStore
from mediarelay.schemas.job import JobType
from mediarelay.services.handlers.base import EMPTY_NORMALIZATION, JobHandler
from mediarelay.services.reporting import JobReporter
from mediarelay.services.transcription import TranscriptionService

logger = logging.getLogger(__name__)

DOWNLOAD_FAILED = "Failed to download media files"
ARCHIVE_NAME = "content.zip"


class FullBundleHandler(JobHandler):
    job_types = frozenset({JobType.FULL_BUNDLE})

    def __init__(
        self,
        reporter: JobReporter,
        media_store: MediaResultStore,
        transcription: TranscriptionService,
        fetcher: MediaFetcher,
        normalizer: Normalizer,
        archiver: Archiver,
        *,
        work_dir: Path,
    ) -> None:
        super().__init__(reporter)
        self._media_store = media_store
        self._transcription = transcription
        self._fetcher = fetcher
        self._normalizer = normalizer
        self._archiver = archiver
        self._work_dir = work_dir

    def handle(self, job: JobRecord) -> None:
        self._work_dir.mkdir(parents=True, exist_ok=True)
        bundle_dir = Path(tempfile.mkdtemp(prefix=f"zip_{job.media_id}_", dir=self._work_dir))
        logger.info("bundle.started job_id=%s media_id=%s", job.id, job.media_id)
        try:
            self._build_and_send(job, bundle_dir)
        finally:
            try:
                shutil.rmtree(bundle_dir)
            except OSError as exc:
                logger.warning("bundle.cleanup_failed job_id=%s reason=%s", job.id, exc)

    def _build_and_send(self, job: JobRecord, bundle_dir: Path) -> None:
        self._reporter.progress(job, "common.downloading")
        video = self._download(job, MediaKind.VIDEO, bundle_dir)
        audio = self._download(job, MediaKind.AUDIO, bundle_dir)
        if video is None or audio is None:
            self._reporter.fail_job(job, DOWNLOAD_FAILED)
            return

        record = self._media_store.get_media_result(job.media_id)
        if record is None or not record.has_transcript:
            self._reporter.progress(job, "common.transcribing")
            record = self.transcript_or_fail(job, self._transcription.transcribe_file(job.media_id, audio))
            if record is None:
                return
        else:
            logger.info("bundle.transcript_cache_hit job_id=%s media_id=%s", job.id, job.media_id)

        self._reporter.progress(job, "common.normalizing")
        if record.has_normalized_text:
            normalized = record.normalized_text
        else:
            result = self._normalizer.normalize(record.transcript_text, record.detected_language)
            if not result.succeeded and result.failure.kind == FailureKind.EMPTY_RESULT:
                self._reporter.fail_job(job, EMPTY_NORMALIZATION)
                return
            normalized = result.unwrap()
            self._transcription.save_normalized(record, normalized)

        transcript_file = bundle_dir / "transcription.txt"
        transcript_file.write_text(record.transcript_text, encoding="utf-8")
        normalized_file = bundle_dir / "normalized.txt"
        normalized_file.write_text(normalized, encoding="utf-8")

        self._reporter.progress(job, "common.packing")
        archive = self._archiver.package([video, audio, transcript_file, normalized_file], bundle_dir / ARCHIVE_NAME)

        self._reporter.progress(job, "common.sending")
        self._reporter.send_file(job, archive, "task.completed.full_processing_caption")
        self._reporter.complete_job(job)

    def _download(self, job: JobRecord, kind: MediaKind, bundle_dir: Path) -> Path | None:
        result: ToolResult[Path] = self._fetcher.fetch(job.media_id, kind, bundle_dir, kind.value)
        if not result.succeeded and result.failure.kind != FailureKind.NOT_FOUND:
            result.unwrap()

        path = result.value
        if path is None or not path.is_file() or path.stat().st_size == 0:
            logger.warning("bundle.download_missing job_id=%s kind=%s", job.id, kind.value)
            return None
        return path
