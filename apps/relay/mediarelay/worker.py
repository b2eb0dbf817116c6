"""Worker process: readiness checks, then the polling loop."""

from __future__ import annotations

from datetime import timedelta
import logging
import signal
import threading

from mediarelay.adapters.tools import ZipArchiver, check_tools_ready
from mediarelay.bootstrap import build_notifier, build_store, build_tools, external_tools
from mediarelay.core.config import Settings, get_settings
from mediarelay.services.handlers import build_default_registry
from mediarelay.services.messages import MessageCatalog
from mediarelay.services.reporting import JobReporter
from mediarelay.services.scheduler import JobScheduler
from mediarelay.services.transcription import TranscriptionService

logger = logging.getLogger(__name__)


def build_scheduler(settings: Settings) -> JobScheduler:
    """Wire the scheduler; raises ``ToolsNotReadyError`` if a tool fails its readiness check."""
    store = build_store(settings)
    notifier = build_notifier(settings)
    fetcher, transcriber, normalizer = build_tools(settings)
    check_tools_ready(external_tools(fetcher, transcriber, normalizer))

    reporter = JobReporter(
        store,
        notifier,
        MessageCatalog(),
        chunk_max_length=settings.chunk_max_length,
        chunk_delay_seconds=settings.chunk_delay_seconds,
        error_message_limit=settings.error_message_limit,
    )
    transcription = TranscriptionService(
        store,
        fetcher,
        transcriber,
        work_dir=settings.work_dir,
        export_dir=settings.export_dir,
    )
    registry = build_default_registry(
        reporter=reporter,
        media_store=store,
        transcription=transcription,
        fetcher=fetcher,
        normalizer=normalizer,
        archiver=ZipArchiver(),
        work_dir=settings.work_dir,
    )
    return JobScheduler(
        store,
        registry,
        reporter,
        poll_interval=timedelta(seconds=settings.poll_interval_seconds),
        stuck_threshold=timedelta(minutes=settings.stuck_threshold_minutes),
        stuck_reset_limit=settings.stuck_reset_limit,
    )


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    settings = get_settings()
    scheduler = build_scheduler(settings)

    stop_event = threading.Event()

    def _request_stop(signum: int, _frame: object) -> None:
        logger.info("worker.stop_requested signal=%s", signum)
        stop_event.set()

    signal.signal(signal.SIGINT, _request_stop)
    signal.signal(signal.SIGTERM, _request_stop)
    scheduler.run_forever(stop_event)


if __name__ == "__main__":
    main()
