"""Shared wiring for worker tests: in-memory store, recording notifier, scripted tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

from mediarelay.adapters.notify.recording import RecordingNotifier
from mediarelay.adapters.tools.archive import ZipArchiver
from mediarelay.adapters.tools.scripted import ScriptedFetcher, ScriptedNormalizer, ScriptedTranscriber
from mediarelay.repositories.memory import InMemoryStore
from mediarelay.services.handlers.registry import HandlerRegistry, build_default_registry
from mediarelay.services.reporting import JobReporter
from mediarelay.services.scheduler import CompletionHook, JobScheduler
from mediarelay.services.transcription import TranscriptionService


@dataclass
class Harness:
    work_dir: Path
    store: InMemoryStore
    notifier: RecordingNotifier
    fetcher: ScriptedFetcher
    transcriber: ScriptedTranscriber
    normalizer: ScriptedNormalizer
    reporter: JobReporter
    transcription: TranscriptionService
    registry: HandlerRegistry
    scheduler: JobScheduler
    sleeps: list[float] = field(default_factory=list)

    def leftover_files(self) -> list[Path]:
        return sorted(path for path in self.work_dir.rglob("*") if path.is_file())


def build_harness(
    work_dir: Path,
    *,
    fetcher: ScriptedFetcher | None = None,
    transcriber: ScriptedTranscriber | None = None,
    normalizer: ScriptedNormalizer | None = None,
    chunk_max_length: int = 4000,
    stuck_reset_limit: int | None = 3,
    completion_hook: CompletionHook | None = None,
    export_dir: Path | None = None,
) -> Harness:
    store = InMemoryStore()
    notifier = RecordingNotifier()
    fetcher = fetcher or ScriptedFetcher()
    transcriber = transcriber or ScriptedTranscriber()
    normalizer = normalizer or ScriptedNormalizer()
    sleeps: list[float] = []
    reporter = JobReporter(
        store,
        notifier,
        chunk_max_length=chunk_max_length,
        chunk_delay_seconds=1.0,
        sleep=sleeps.append,
    )
    transcription = TranscriptionService(
        store,
        fetcher,
        transcriber,
        work_dir=work_dir,
        export_dir=export_dir,
    )
    registry = build_default_registry(
        reporter=reporter,
        media_store=store,
        transcription=transcription,
        fetcher=fetcher,
        normalizer=normalizer,
        archiver=ZipArchiver(),
        work_dir=work_dir,
    )
    scheduler = JobScheduler(
        store,
        registry,
        reporter,
        poll_interval=timedelta(seconds=10),
        stuck_threshold=timedelta(hours=1),
        stuck_reset_limit=stuck_reset_limit,
        completion_hook=completion_hook,
    )
    return Harness(
        work_dir=work_dir,
        store=store,
        notifier=notifier,
        fetcher=fetcher,
        transcriber=transcriber,
        normalizer=normalizer,
        reporter=reporter,
        transcription=transcription,
        registry=registry,
        scheduler=scheduler,
        sleeps=sleeps,
    )
