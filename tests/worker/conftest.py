from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

import pytest

from mediarelay.adapters.notify.recording import RecordingNotifier
from mediarelay.adapters.tools.archive import ZipArchiver
from mediarelay.adapters.tools.scripted import ScriptedFetcher, ScriptedNormalizer, ScriptedTranscriber
from mediarelay.repositories.memory import InMemoryStore
from mediarelay.services.handlers.registry import build_default_registry
from mediarelay.services.reporting import JobReporter
from mediarelay.services.scheduler import JobScheduler
from mediarelay.services.transcription import TranscriptionService


@dataclass
class Relay:
    work_dir: Path
    store: InMemoryStore
    notifier: RecordingNotifier
    fetcher: ScriptedFetcher
    transcriber: ScriptedTranscriber
    normalizer: ScriptedNormalizer
    scheduler: JobScheduler
    sleeps: list[float] = field(default_factory=list)


@pytest.fixture
def make_relay(tmp_path: Path):
    def _make(
        *,
        transcriber: ScriptedTranscriber | None = None,
        normalizer: ScriptedNormalizer | None = None,
    ) -> Relay:
        store = InMemoryStore()
        notifier = RecordingNotifier()
        fetcher = ScriptedFetcher()
        transcriber_ = transcriber or ScriptedTranscriber()
        normalizer_ = normalizer or ScriptedNormalizer()
        sleeps: list[float] = []
        work_dir = tmp_path / "work"
        reporter = JobReporter(store, notifier, sleep=sleeps.append)
        transcription = TranscriptionService(store, fetcher, transcriber_, work_dir=work_dir)
        registry = build_default_registry(
            reporter=reporter,
            media_store=store,
            transcription=transcription,
            fetcher=fetcher,
            normalizer=normalizer_,
            archiver=ZipArchiver(),
            work_dir=work_dir,
        )
        scheduler = JobScheduler(store, registry, reporter, stuck_threshold=timedelta(hours=1))
        return Relay(
            work_dir=work_dir,
            store=store,
            notifier=notifier,
            fetcher=fetcher,
            transcriber=transcriber_,
            normalizer=normalizer_,
            scheduler=scheduler,
            sleeps=sleeps,
        )

    return _make


@pytest.fixture
def relay(make_relay) -> Relay:
    return make_relay()
