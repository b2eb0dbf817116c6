"""In-memory job queue and media cache tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
import unittest

from mediarelay.errors import DuplicateJobError, StoreUnavailableError
from mediarelay.repositories.base import MediaResultRecord
from mediarelay.repositories.memory import InMemoryStore
from mediarelay.schemas.job import JobStatus, JobType


class InMemoryJobStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemoryStore()

    def test_enqueue_assigns_increasing_ids_and_pending_status(self) -> None:
        first = self.store.enqueue(conversation_id=10, media_id="aaaaaaaaaaa", job_type=JobType.FETCH_VIDEO, locale="ru")
        second = self.store.enqueue(conversation_id=10, media_id="bbbbbbbbbbb", job_type=JobType.FETCH_VIDEO)

        self.assertEqual((first.id, second.id), (1, 2))
        self.assertEqual(first.status, JobStatus.PENDING)
        self.assertEqual(first.locale, "ru")
        self.assertEqual(first.created_at, first.updated_at)
        self.assertEqual(first.stuck_resets, 0)
        self.assertIsNone(first.error_message)

    def test_duplicate_active_job_is_rejected(self) -> None:
        existing = self.store.enqueue(conversation_id=1, media_id="abc12345678", job_type=JobType.TRANSCRIBE)

        with self.assertRaises(DuplicateJobError) as context:
            self.store.enqueue(conversation_id=2, media_id="abc12345678", job_type=JobType.TRANSCRIBE)

        self.assertEqual(context.exception.status_code, 409)
        self.assertEqual(context.exception.payload.code, "DUPLICATE_JOB")
        self.assertEqual(context.exception.payload.details["existing_job_id"], existing.id)
        self.assertEqual(len(self.store.jobs), 1)

    def test_same_media_different_type_and_finished_jobs_do_not_block(self) -> None:
        job = self.store.enqueue(conversation_id=1, media_id="abc12345678", job_type=JobType.TRANSCRIBE)
        self.store.enqueue(conversation_id=1, media_id="abc12345678", job_type=JobType.NORMALIZE)

        self.store.transition_job_status(job=job, new_status=JobStatus.IN_PROGRESS)
        self.store.transition_job_status(job=job, new_status=JobStatus.COMPLETED)
        again = self.store.enqueue(conversation_id=1, media_id="abc12345678", job_type=JobType.TRANSCRIBE)

        self.assertEqual(again.status, JobStatus.PENDING)
        self.assertEqual(len(self.store.jobs), 3)

    def test_next_pending_returns_oldest_pending_only(self) -> None:
        self.assertIsNone(self.store.next_pending())
        first = self.store.enqueue(conversation_id=1, media_id="aaaaaaaaaaa", job_type=JobType.FETCH_AUDIO)
        second = self.store.enqueue(conversation_id=1, media_id="bbbbbbbbbbb", job_type=JobType.FETCH_AUDIO)
        second.created_at = first.created_at - timedelta(seconds=5)

        self.assertIs(self.store.next_pending(), second)
        self.store.transition_job_status(job=second, new_status=JobStatus.IN_PROGRESS)
        self.assertIs(self.store.next_pending(), first)
        self.store.transition_job_status(job=first, new_status=JobStatus.IN_PROGRESS)
        self.assertIsNone(self.store.next_pending())

    def test_find_stuck_uses_updated_at_threshold(self) -> None:
        now = datetime.now(UTC)
        old = self.store.enqueue(conversation_id=1, media_id="aaaaaaaaaaa", job_type=JobType.TRANSCRIBE)
        recent = self.store.enqueue(conversation_id=1, media_id="bbbbbbbbbbb", job_type=JobType.TRANSCRIBE)
        waiting = self.store.enqueue(conversation_id=1, media_id="ccccccccccc", job_type=JobType.TRANSCRIBE)
        for job in (old, recent):
            self.store.transition_job_status(job=job, new_status=JobStatus.IN_PROGRESS)
        old.updated_at = now - timedelta(minutes=61)
        recent.updated_at = now - timedelta(minutes=30)
        waiting.updated_at = now - timedelta(hours=5)

        self.assertEqual(self.store.find_stuck(timedelta(hours=1)), [old])

    def test_list_jobs_filters(self) -> None:
        a = self.store.enqueue(conversation_id=1, media_id="aaaaaaaaaaa", job_type=JobType.TRANSCRIBE)
        self.store.enqueue(conversation_id=2, media_id="bbbbbbbbbbb", job_type=JobType.TRANSCRIBE)
        self.store.transition_job_status(job=a, new_status=JobStatus.IN_PROGRESS)

        self.assertEqual([job.id for job in self.store.list_jobs(conversation_id=1)], [a.id])
        self.assertEqual([job.id for job in self.store.list_jobs(status=JobStatus.PENDING)], [2])
        self.assertEqual(len(self.store.list_jobs()), 2)

    def test_unavailable_failpoint_raises_once(self) -> None:
        self.store.unavailable_message = "no such table: jobs"

        with self.assertRaises(StoreUnavailableError):
            self.store.next_pending()
        self.assertIsNone(self.store.next_pending())


class InMemoryMediaResultTests(unittest.TestCase):
    def test_save_and_get_media_result(self) -> None:
        store = InMemoryStore()
        self.assertIsNone(store.get_media_result("abc12345678"))

        record = MediaResultRecord.new("abc12345678")
        record.replace_transcript("hello   there world", "en")
        store.save_media_result(record)

        stored = store.get_media_result("abc12345678")
        self.assertEqual(stored.word_count, 3)
        self.assertEqual(stored.detected_language, "en")
        self.assertEqual(store.media_result_write_count, 1)

    def test_new_transcript_clears_stale_normalized_text(self) -> None:
        record = MediaResultRecord.new("abc12345678")
        record.replace_transcript("first version", "en")
        record.replace_normalized_text("First version.")

        record.replace_transcript("first version", "en")
        self.assertEqual(record.normalized_text, "First version.")

        record.replace_transcript("second version", "en")
        self.assertIsNone(record.normalized_text)
        self.assertFalse(record.has_normalized_text)


if __name__ == "__main__":
    unittest.main()
