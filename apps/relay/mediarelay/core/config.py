"""Application configuration."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    intake_secret: str | None = None
    store_backend: Literal["sql", "memory"] = "sql"
    database_url: str = "sqlite:///mediarelay.db"

    notifier_provider: Literal["telegram", "log"] = "telegram"
    telegram_bot_token: str | None = None
    telegram_api_base: str = "https://api.telegram.org"
    telegram_timeout_seconds: float = 30.0

    tool_provider: Literal["local", "scripted"] = "local"
    ytdlp_player_client: str | None = "android"
    ytdlp_timeout_seconds: float = 600.0
    ffmpeg_path: str = "ffmpeg"
    ffmpeg_timeout_seconds: float = 300.0
    whisper_path: str = "whisper-cli"
    whisper_model_path: Path = Path("models/ggml-base.bin")
    whisper_threads: int = 4
    whisper_use_gpu: bool = False
    whisper_timeout_seconds: float = 3600.0
    llama_base_url: str = "http://127.0.0.1:8081"
    llama_model: str = "qwen2.5"
    llama_timeout_seconds: float = 300.0
    work_dir: Path = Path("temp")
    export_dir: Path | None = None

    poll_interval_seconds: float = 10.0
    stuck_threshold_minutes: int = 60
    stuck_reset_limit: int | None = 3
    chunk_max_length: int = 4000
    chunk_delay_seconds: float = 1.0
    error_message_limit: int = 500

    model_config = SettingsConfigDict(env_prefix="MEDIARELAY_", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
