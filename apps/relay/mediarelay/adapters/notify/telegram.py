"""Telegram Bot API notifier."""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from mediarelay.adapters.notify.base import Notifier
from mediarelay.core.logging_safety import conversation_token

logger = logging.getLogger(__name__)

_CAPTION_LIMIT = 1024


class TelegramNotifier(Notifier):
    def __init__(
        self,
        *,
        bot_token: str,
        api_base: str = "https://api.telegram.org",
        timeout_seconds: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=f"{api_base.rstrip('/')}/bot{bot_token}",
            timeout=timeout_seconds,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def send_text(self, conversation_id: int, text: str) -> bool:
        return self._call(
            "sendMessage",
            conversation_id,
            data={"chat_id": str(conversation_id), "text": text},
        )

    def send_file(self, conversation_id: int, path: Path, caption: str | None = None) -> bool:
        data = {"chat_id": str(conversation_id)}
        if caption:
            data["caption"] = caption[:_CAPTION_LIMIT]
        try:
            with path.open("rb") as handle:
                return self._call(
                    "sendDocument",
                    conversation_id,
                    data=data,
                    files={"document": (path.name, handle)},
                )
        except OSError as exc:
            logger.error(
                "notify.file_unreadable conversation=%s file=%s reason=%s",
                conversation_token(conversation_id),
                path.name,
                exc,
            )
            return False

    def _call(self, method: str, conversation_id: int, *, data: dict, files: dict | None = None) -> bool:
        try:
            response = self._client.post(f"/{method}", data=data, files=files)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "notify.telegram_rejected method=%s conversation=%s status=%s",
                method,
                conversation_token(conversation_id),
                exc.response.status_code,
            )
            return False
        except httpx.HTTPError as exc:
            logger.error(
                "notify.telegram_failed method=%s conversation=%s reason=%s",
                method,
                conversation_token(conversation_id),
                exc.__class__.__name__,
            )
            return False

        logger.debug("notify.telegram_sent method=%s conversation=%s", method, conversation_token(conversation_id))
        return True
