"""llama-server normalizer and Telegram notifier over mocked HTTP transports."""

from __future__ import annotations

import json
from pathlib import Path
import tempfile
import unittest

import httpx

from mediarelay.adapters.notify.telegram import TelegramNotifier
from mediarelay.adapters.tools.base import FailureKind, ToolsNotReadyError
from mediarelay.adapters.tools.llama_server import LlamaServerNormalizer, build_prompt


def _completion(content: str | None) -> dict:
    return {"id": "cmpl-1", "object": "chat.completion", "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


class LlamaServerNormalizerTests(unittest.TestCase):
    def _normalizer(self, handler) -> LlamaServerNormalizer:
        return LlamaServerNormalizer(
            base_url="http://llama.test",
            model="qwen2.5",
            timeout_seconds=5,
            transport=httpx.MockTransport(handler),
        )

    def test_prompt_mentions_language_hint_only_when_known(self) -> None:
        self.assertIn("(it is 'ru')", build_prompt("текст", "ru"))
        self.assertNotIn("(it is", build_prompt("text", None))
        self.assertIn("Input text:\ntext\n", build_prompt("text", None))

    def test_normalize_posts_chat_completion_and_strips_reply(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_completion("  Hello, world.\n"))

        result = self._normalizer(handler).normalize("hello world", "en")

        self.assertEqual(result.unwrap(), "Hello, world.")
        [request] = seen
        self.assertEqual(request.method, "POST")
        self.assertEqual(request.url.path, "/v1/chat/completions")
        body = json.loads(request.content)
        self.assertEqual(body["model"], "qwen2.5")
        self.assertEqual(body["temperature"], 0.1)
        self.assertFalse(body["stream"])
        self.assertIn("hello world", body["messages"][0]["content"])

    def test_empty_reply_is_empty_result(self) -> None:
        for payload in (_completion("   "), _completion(None), {"choices": []}):
            with self.subTest(payload=payload):
                result = self._normalizer(lambda request, p=payload: httpx.Response(200, json=p)).normalize("x", None)
                self.assertEqual(result.failure.kind, FailureKind.EMPTY_RESULT)

    def test_server_error_is_tool_failure(self) -> None:
        result = self._normalizer(lambda request: httpx.Response(503, text="loading model")).normalize("x", None)

        self.assertEqual(result.failure.kind, FailureKind.TOOL_FAILURE)
        self.assertIn("503", result.failure.message)

    def test_timeout_is_reported(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        result = self._normalizer(handler).normalize("x", None)

        self.assertEqual(result.failure.kind, FailureKind.TIMEOUT)

    def test_unexpected_payload_is_tool_failure(self) -> None:
        result = self._normalizer(lambda request: httpx.Response(200, text="<html>")).normalize("x", None)

        self.assertEqual(result.failure.kind, FailureKind.TOOL_FAILURE)

    def test_health_check(self) -> None:
        self._normalizer(lambda request: httpx.Response(200, json={"status": "ok"})).ensure_available()

        with self.assertRaises(ToolsNotReadyError):
            self._normalizer(lambda request: httpx.Response(503)).ensure_available()

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with self.assertRaises(ToolsNotReadyError):
            self._normalizer(refuse).ensure_available()


class TelegramNotifierTests(unittest.TestCase):
    def setUp(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status = 200

    def _handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, json={"ok": self.status == 200})

    def _notifier(self) -> TelegramNotifier:
        return TelegramNotifier(
            bot_token="123:abc",
            api_base="https://telegram.test/",
            transport=httpx.MockTransport(self._handler),
        )

    def test_send_text_posts_to_bot_endpoint(self) -> None:
        self.assertTrue(self._notifier().send_text(777, "hello"))

        [request] = self.requests
        self.assertEqual(request.url.host, "telegram.test")
        self.assertEqual(request.url.path, "/bot123:abc/sendMessage")
        form = dict(item.split("=", 1) for item in request.content.decode("utf-8").split("&"))
        self.assertEqual(form["chat_id"], "777")
        self.assertEqual(form["text"], "hello")

    def test_send_file_uploads_document_with_truncated_caption(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "content.zip"
            path.write_bytes(b"PK\x03\x04zip")

            self.assertTrue(self._notifier().send_file(777, path, "c" * 2000))

        [request] = self.requests
        self.assertTrue(request.url.path.endswith("/sendDocument"))
        body = request.content
        self.assertIn(b'filename="content.zip"', body)
        self.assertIn(b"PK\x03\x04zip", body)
        self.assertIn(b"c" * 1024, body)
        self.assertNotIn(b"c" * 1025, body)

    def test_rejected_request_returns_false(self) -> None:
        self.status = 400

        with self.assertLogs("mediarelay.adapters.notify.telegram", level="ERROR") as logs:
            self.assertFalse(self._notifier().send_text(777, "hello"))

        self.assertIn("status=400", logs.output[0])

    def test_missing_file_returns_false(self) -> None:
        self.assertFalse(self._notifier().send_file(777, Path("/nonexistent/content.zip")))
        self.assertEqual(self.requests, [])


if __name__ == "__main__":
    unittest.main()
