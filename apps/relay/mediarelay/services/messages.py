"""Localized user-facing message catalog."""

from __future__ import annotations

from collections.abc import Mapping

DEFAULT_LOCALE = "en"

_CATALOG: dict[str, dict[str, str]] = {
    "en": {
        "common.error": "❌ Error:",
        "common.downloading": "⏬ Downloading media...",
        "common.transcribing": "🎙️ Transcribing audio, this may take a while...",
        "common.normalizing": "✨ Normalizing text...",
        "label.normalized": "Normalized text",
        "common.packing": "📦 Packing files...",
        "common.sending": "📤 Sending archive...",
        "label.transcript": "Transcript",
        "task.completed": "✅ Done! Send another link whenever you like.",
        "task.completed.video": "🎬 Your video",
        "task.completed.audio": "🎧 Your audio",
        "task.completed.full_processing_caption": "🗂 Video, audio, transcript and normalized text",
    },
    "ru": {
        "common.error": "❌ Ошибка:",
        "common.downloading": "⏬ Скачиваю медиа...",
        "common.transcribing": "🎙️ Распознаю речь, это может занять время...",
        "common.normalizing": "✨ Нормализую текст...",
        "label.normalized": "Нормализованный текст",
        "common.packing": "📦 Упаковываю файлы...",
        "common.sending": "📤 Отправляю архив...",
        "label.transcript": "Текст",
        "task.completed": "✅ Готово! Присылайте следующую ссылку.",
        "task.completed.video": "🎬 Ваше видео",
        "task.completed.audio": "🎧 Ваше аудио",
        "task.completed.full_processing_caption": "🗂 Видео, аудио, расшифровка и нормализованный текст",
    },
}


class MessageCatalog:
    """Resolves message keys per locale, falling back to English, then to the key itself."""

    def __init__(self, catalog: Mapping[str, Mapping[str, str]] | None = None) -> None:
        self._catalog = catalog if catalog is not None else _CATALOG

    def get(self, key: str, locale: str | None = None) -> str:
        language = (locale or DEFAULT_LOCALE).split("-")[0].lower()
        localized = self._catalog.get(language, {})
        if key in localized:
            return localized[key]
        return self._catalog.get(DEFAULT_LOCALE, {}).get(key, key)
