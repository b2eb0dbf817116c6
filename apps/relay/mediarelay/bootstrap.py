"""Builds stores and adapters from configuration."""

from __future__ import annotations

import logging

from mediarelay.adapters.notify import Notifier, RecordingNotifier, TelegramNotifier
from mediarelay.adapters.tools import (
    ExternalTool,
    FfmpegConverter,
    LlamaServerNormalizer,
    MediaFetcher,
    Normalizer,
    ScriptedFetcher,
    ScriptedNormalizer,
    ScriptedTranscriber,
    Transcriber,
    WhisperCliTranscriber,
    YtDlpFetcher,
)
from mediarelay.core.config import Settings
from mediarelay.repositories.base import RelayStore
from mediarelay.repositories.memory import InMemoryStore
from mediarelay.repositories.sql import SqlStore

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> RelayStore:
    if settings.store_backend == "memory":
        return InMemoryStore()

    store = SqlStore.from_url(settings.database_url)
    store.create_schema()
    return store


def build_notifier(settings: Settings) -> Notifier:
    """Resolve notifier adapter from configuration."""
    if settings.notifier_provider == "telegram":
        if not settings.telegram_bot_token:
            raise ValueError("MEDIARELAY_TELEGRAM_BOT_TOKEN is required for the telegram notifier")
        return TelegramNotifier(
            bot_token=settings.telegram_bot_token,
            api_base=settings.telegram_api_base,
            timeout_seconds=settings.telegram_timeout_seconds,
        )
    return RecordingNotifier()


def build_tools(settings: Settings) -> tuple[MediaFetcher, Transcriber, Normalizer]:
    """Resolve tool adapters from configuration."""
    if settings.tool_provider == "scripted":
        logger.warning("tools.scripted_provider_enabled")
        return ScriptedFetcher(), ScriptedTranscriber(), ScriptedNormalizer()

    converter = FfmpegConverter(
        ffmpeg_path=settings.ffmpeg_path,
        timeout_seconds=settings.ffmpeg_timeout_seconds,
    )
    fetcher = YtDlpFetcher(
        player_client=settings.ytdlp_player_client,
        socket_timeout=settings.ytdlp_timeout_seconds,
    )
    transcriber = WhisperCliTranscriber(
        whisper_path=settings.whisper_path,
        model_path=settings.whisper_model_path,
        converter=converter,
        threads=settings.whisper_threads,
        use_gpu=settings.whisper_use_gpu,
        timeout_seconds=settings.whisper_timeout_seconds,
    )
    normalizer = LlamaServerNormalizer(
        base_url=settings.llama_base_url,
        model=settings.llama_model,
        timeout_seconds=settings.llama_timeout_seconds,
    )
    return fetcher, transcriber, normalizer


def external_tools(*adapters: object) -> list[ExternalTool]:
    return [adapter for adapter in adapters if isinstance(adapter, ExternalTool)]
