"""Scripted tool adapters for local development and tests.

Each adapter returns deterministic results, records every call and can be
told to fail with a given ``FailureKind``.
"""

from __future__ import annotations

from pathlib import Path

from mediarelay.adapters.tools.base import (
    FailureKind,
    MediaFetcher,
    MediaKind,
    Normalizer,
    ToolFailure,
    ToolResult,
    Transcriber,
    TranscriptionResult,
)

_EXTENSIONS = {MediaKind.VIDEO: "mp4", MediaKind.AUDIO: "mp3"}


class ScriptedFetcher(MediaFetcher):
    name = "scripted-fetcher"

    def __init__(
        self,
        *,
        failures: dict[MediaKind, ToolFailure] | None = None,
        empty_kinds: set[MediaKind] | None = None,
    ) -> None:
        self.failures = dict(failures or {})
        self.empty_kinds = set(empty_kinds or set())
        self.calls: list[tuple[str, MediaKind]] = []
        self.produced: list[Path] = []

    def fetch(self, media_id: str, kind: MediaKind, output_dir: Path, basename: str) -> ToolResult[Path]:
        self.calls.append((media_id, kind))
        failure = self.failures.get(kind)
        if failure is not None:
            return ToolResult.failed(failure.kind, failure.message)

        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / f"{basename}.{_EXTENSIONS[kind]}"
        payload = b"" if kind in self.empty_kinds else f"scripted {kind.value} for {media_id}".encode("utf-8")
        path.write_bytes(payload)
        self.produced.append(path)
        return ToolResult.success(path)


class ScriptedTranscriber(Transcriber):
    name = "scripted-transcriber"

    def __init__(
        self,
        *,
        text: str = "Scripted transcript. It has two sentences.",
        language: str | None = "en",
        failure: ToolFailure | None = None,
    ) -> None:
        self.text = text
        self.language = language
        self.failure = failure
        self.calls: list[Path] = []

    def transcribe(self, audio_path: Path) -> ToolResult[TranscriptionResult]:
        self.calls.append(audio_path)
        if self.failure is not None:
            return ToolResult.failed(self.failure.kind, self.failure.message)
        if not audio_path.is_file():
            return ToolResult.failed(FailureKind.NOT_FOUND, f"Audio input not found: {audio_path.name}")
        if not self.text.strip():
            return ToolResult.failed(FailureKind.EMPTY_RESULT, "whisper returned an empty transcript")
        return ToolResult.success(TranscriptionResult(text=self.text, language=self.language))


class ScriptedNormalizer(Normalizer):
    name = "scripted-normalizer"

    def __init__(self, *, result: str | None = None, failure: ToolFailure | None = None) -> None:
        self.result = result
        self.failure = failure
        self.calls: list[tuple[str, str | None]] = []

    def normalize(self, text: str, language_hint: str | None) -> ToolResult[str]:
        self.calls.append((text, language_hint))
        if self.failure is not None:
            return ToolResult.failed(self.failure.kind, self.failure.message)

        normalized = (self.result if self.result is not None else text).strip()
        if not normalized:
            return ToolResult.failed(FailureKind.EMPTY_RESULT, "Normalization returned empty result")
        return ToolResult.success(normalized)


__all__ = ["ScriptedFetcher", "ScriptedNormalizer", "ScriptedTranscriber"]
