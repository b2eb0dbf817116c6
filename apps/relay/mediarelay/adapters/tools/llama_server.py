"""Transcript normalization through a local llama.cpp server (OpenAI-compatible API)."""

from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mediarelay.adapters.tools.base import FailureKind, Normalizer, ToolResult, ToolsNotReadyError

logger = logging.getLogger(__name__)

NORMALIZATION_PROMPT = """You are a text corrector. Normalize and correct the input text.

Rules:
1. Do NOT change the language of the text{language_clause}.
2. Fix ONLY grammar mistakes, spelling mistakes, punctuation, word cases and word agreement.
3. Keep the text as close to the original as possible; do not paraphrase or rewrite.
4. Output ONLY the corrected text, without explanations or comments.
5. Preserve the original meaning exactly.

Input text:
{text}

Corrected text:
"""


class ChatMessage(BaseModel):
    role: str
    content: str | None = None


class ChatCompletionRequest(BaseModel):
    model: str
    messages: list[ChatMessage]
    temperature: float = 0.1
    max_tokens: int = 1024
    stream: bool = False


class ChatChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: ChatMessage


class ChatCompletionResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    choices: list[ChatChoice] = Field(default_factory=list)


def build_prompt(text: str, language_hint: str | None) -> str:
    language_clause = f" (it is '{language_hint}')" if language_hint else ""
    return NORMALIZATION_PROMPT.format(text=text, language_clause=language_clause)


class LlamaServerNormalizer(Normalizer):
    name = "llama-server"

    def __init__(
        self,
        *,
        base_url: str,
        model: str = "qwen2.5",
        timeout_seconds: float = 300.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._model = model
        self._client = httpx.Client(base_url=base_url, timeout=timeout_seconds, transport=transport)

    def close(self) -> None:
        self._client.close()

    def ensure_available(self) -> None:
        try:
            response = self._client.get("/health")
        except httpx.HTTPError as exc:
            raise ToolsNotReadyError(f"llama-server unreachable: {exc}") from exc
        if response.status_code != 200:
            raise ToolsNotReadyError(f"llama-server health check returned {response.status_code}")

    def normalize(self, text: str, language_hint: str | None) -> ToolResult[str]:
        request = ChatCompletionRequest(
            model=self._model,
            messages=[ChatMessage(role="user", content=build_prompt(text, language_hint))],
        )
        logger.info("tools.llama_normalize_started chars=%s language=%s", len(text), language_hint)
        try:
            response = self._client.post("/v1/chat/completions", json=request.model_dump())
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.warning("tools.llama_normalize_timeout reason=%s", exc.__class__.__name__)
            return ToolResult.failed(FailureKind.TIMEOUT, "llama-server request timed out")
        except httpx.HTTPStatusError as exc:
            return ToolResult.failed(
                FailureKind.TOOL_FAILURE,
                f"llama-server returned {exc.response.status_code}: {exc.response.text}",
            )
        except httpx.HTTPError as exc:
            return ToolResult.failed(FailureKind.TOOL_FAILURE, f"llama-server request failed: {exc}")

        try:
            completion = ChatCompletionResponse.model_validate_json(response.content)
        except ValidationError:
            return ToolResult.failed(FailureKind.TOOL_FAILURE, "llama-server returned an unexpected payload")

        content = completion.choices[0].message.content if completion.choices else None
        normalized = (content or "").strip()
        if not normalized:
            logger.warning("tools.llama_normalize_empty")
            return ToolResult.failed(FailureKind.EMPTY_RESULT, "Normalization returned empty result")

        logger.info("tools.llama_normalize_completed chars=%s", len(normalized))
        return ToolResult.success(normalized)
