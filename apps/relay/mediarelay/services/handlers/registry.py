"""Job type to handler binding."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path

from mediarelay.adapters.tools.base import Archiver, MediaFetcher, Normalizer
from mediarelay.errors import HandlerNotRegisteredError
from mediarelay.repositories.base import MediaResultStore
from mediarelay.schemas.job import JobType
from mediarelay.services.handlers.base import JobHandler
from mediarelay.services.handlers.bundle import FullBundleHandler
from mediarelay.services.handlers.media import FetchMediaHandler
from mediarelay.services.handlers.normalize import NormalizeHandler
from mediarelay.services.handlers.transcribe import TranscribeHandler
from mediarelay.services.reporting import JobReporter
from mediarelay.services.transcription import TranscriptionService


class HandlerRegistry:
    """Fixed mapping from job type to handler, built once at startup."""

    def __init__(self, handlers: Iterable[JobHandler]) -> None:
        bindings: dict[JobType, JobHandler] = {}
        for handler in handlers:
            for job_type in sorted(handler.job_types, key=lambda t: t.value):
                if job_type in bindings:
                    raise ValueError(f"More than one handler registered for {job_type.value}")
                bindings[job_type] = handler
        self._bindings: Mapping[JobType, JobHandler] = bindings

    @property
    def job_types(self) -> frozenset[JobType]:
        return frozenset(self._bindings)

    def resolve(self, job_type: JobType) -> JobHandler:
        try:
            return self._bindings[job_type]
        except KeyError:
            raise HandlerNotRegisteredError(f"No handler registered for job type {job_type.value}") from None


def build_default_registry(
    *,
    reporter: JobReporter,
    media_store: MediaResultStore,
    transcription: TranscriptionService,
    fetcher: MediaFetcher,
    normalizer: Normalizer,
    archiver: Archiver,
    work_dir: Path,
) -> HandlerRegistry:
    return HandlerRegistry(
        [
            FetchMediaHandler(reporter, fetcher, work_dir=work_dir),
            TranscribeHandler(reporter, media_store, transcription),
            NormalizeHandler(reporter, media_store, transcription, normalizer),
            FullBundleHandler(
                reporter,
                media_store,
                transcription,
                fetcher,
                normalizer,
                archiver,
                work_dir=work_dir,
            ),
        ]
    )
