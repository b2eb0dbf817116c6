"""yt-dlp fetcher option building and failure mapping."""

from __future__ import annotations

from pathlib import Path
import tempfile
import unittest
from unittest.mock import MagicMock, patch

from yt_dlp.utils import DownloadError

from mediarelay.adapters.tools.base import FailureKind, MediaKind
from mediarelay.adapters.tools.ytdlp import YtDlpFetcher


def _fake_youtube_dl(*, writes: dict[str, bytes] | None = None, info: dict | None = None, error: Exception | None = None):
    """Build a stand-in for ``yt_dlp.YoutubeDL`` that writes files into the template directory."""
    created: list[dict] = []

    def factory(options: dict):
        created.append(options)
        instance = MagicMock()
        instance.__enter__.return_value = instance
        instance.__exit__.return_value = False
        output_dir = Path(options["outtmpl"]).parent

        def extract_info(url: str, download: bool = False):
            if error is not None:
                raise error
            for name, payload in (writes or {}).items():
                (output_dir / name).write_bytes(payload)
            return info if info is not None else {"id": url.rsplit("=", 1)[-1]}

        instance.extract_info.side_effect = extract_info
        instance.prepare_filename.side_effect = lambda data: str(output_dir / "unexpected.webm")
        return instance

    return factory, created


class YtDlpFetcherTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.out = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_build_options_for_video_and_audio(self) -> None:
        fetcher = YtDlpFetcher(player_client="android", socket_timeout=30)

        video = fetcher.build_options(MediaKind.VIDEO, self.out, "video")
        audio = fetcher.build_options(MediaKind.AUDIO, self.out, "audio")

        self.assertEqual(video["outtmpl"], str(self.out / "video.%(ext)s"))
        self.assertEqual(video["format"], "bestvideo[ext=mp4]+bestaudio[ext=m4a]/mp4")
        self.assertEqual(video["merge_output_format"], "mp4")
        self.assertTrue(video["noplaylist"])
        self.assertEqual(video["extractor_args"], {"youtube": {"player_client": ["android"]}})
        self.assertEqual(audio["format"], "bestaudio/best")
        self.assertEqual(audio["postprocessors"][0]["key"], "FFmpegExtractAudio")
        self.assertEqual(audio["postprocessors"][0]["preferredcodec"], "mp3")
        self.assertNotIn("extractor_args", YtDlpFetcher(player_client=None).build_options(MediaKind.AUDIO, self.out, "a"))

    def test_audio_fetch_returns_extracted_mp3(self) -> None:
        factory, created = _fake_youtube_dl(writes={"temp_x.mp3": b"ID3"})

        with patch("mediarelay.adapters.tools.ytdlp.yt_dlp.YoutubeDL", side_effect=factory):
            result = YtDlpFetcher().fetch("dQw4w9WgXcQ", MediaKind.AUDIO, self.out, "temp_x")

        self.assertEqual(result.unwrap(), self.out / "temp_x.mp3")
        self.assertEqual(len(created), 1)

    def test_video_fetch_uses_requested_downloads_path(self) -> None:
        target = self.out / "video.mp4"
        factory, _ = _fake_youtube_dl(
            writes={"video.mp4": b"\x00\x00\x00\x18ftyp"},
            info={"id": "dQw4w9WgXcQ", "requested_downloads": [{"filepath": str(target)}]},
        )

        with patch("mediarelay.adapters.tools.ytdlp.yt_dlp.YoutubeDL", side_effect=factory):
            result = YtDlpFetcher().fetch("dQw4w9WgXcQ", MediaKind.VIDEO, self.out, "video")

        self.assertEqual(result.unwrap(), target)

    def test_output_is_found_by_basename_when_extension_changes(self) -> None:
        factory, _ = _fake_youtube_dl(writes={"video.mkv": b"matroska"})

        with patch("mediarelay.adapters.tools.ytdlp.yt_dlp.YoutubeDL", side_effect=factory):
            result = YtDlpFetcher().fetch("dQw4w9WgXcQ", MediaKind.VIDEO, self.out, "video")

        self.assertEqual(result.unwrap(), self.out / "video.mkv")

    def test_empty_output_is_not_found(self) -> None:
        factory, _ = _fake_youtube_dl(writes={"audio.mp3": b""})

        with patch("mediarelay.adapters.tools.ytdlp.yt_dlp.YoutubeDL", side_effect=factory):
            result = YtDlpFetcher().fetch("dQw4w9WgXcQ", MediaKind.AUDIO, self.out, "audio")

        self.assertEqual(result.failure.kind, FailureKind.NOT_FOUND)

    def test_download_errors_are_classified(self) -> None:
        cases = (
            ("ERROR: [youtube] dQw4w9WgXcQ: Video unavailable", FailureKind.NOT_FOUND),
            ("ERROR: [youtube] dQw4w9WgXcQ: Private video", FailureKind.NOT_FOUND),
            ("ERROR: Read timed out.", FailureKind.TIMEOUT),
            ("ERROR: Requested format is not available", FailureKind.NOT_FOUND),
            ("ERROR: Sign in to confirm your age", FailureKind.TOOL_FAILURE),
        )
        for message, expected in cases:
            with self.subTest(message=message):
                factory, _ = _fake_youtube_dl(error=DownloadError(message))
                with patch("mediarelay.adapters.tools.ytdlp.yt_dlp.YoutubeDL", side_effect=factory):
                    result = YtDlpFetcher().fetch("dQw4w9WgXcQ", MediaKind.VIDEO, self.out, "video")

                self.assertEqual(result.failure.kind, expected)
                self.assertIn(message, result.failure.message)

    def test_missing_info_is_not_found(self) -> None:
        instance = MagicMock()
        instance.__enter__.return_value = instance
        instance.extract_info.return_value = None

        with patch("mediarelay.adapters.tools.ytdlp.yt_dlp.YoutubeDL", return_value=instance):
            result = YtDlpFetcher().fetch("dQw4w9WgXcQ", MediaKind.VIDEO, self.out, "video")

        self.assertEqual(result.failure.kind, FailureKind.NOT_FOUND)


if __name__ == "__main__":
    unittest.main()
