"""SQLAlchemy-backed job queue and media result cache."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta
import logging

from sqlalchemy import BigInteger, DateTime, Engine, Integer, String, Text, create_engine, select
from sqlalchemy.exc import InterfaceError, OperationalError, ProgrammingError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from mediarelay.errors import DuplicateJobError, StoreUnavailableError
from mediarelay.repositories.base import (
    ACTIVE_STATUSES,
    JobRecord,
    MediaResultRecord,
    RelayStore,
)
from mediarelay.schemas.job import JobStatus, JobType

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class JobRow(Base):
    """Queued or finished unit of work for one conversation and media item."""

    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    conversation_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    media_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    locale: Mapped[str] = mapped_column(String(8), default="en", nullable=False)
    error_message: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    stuck_resets: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)


class MediaResultRow(Base):
    """Transcript and normalized text cached per media item."""

    __tablename__ = "media_results"

    media_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    transcript_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    detected_language: Mapped[str | None] = mapped_column(String(16), nullable=True)
    normalized_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    word_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)


def build_engine(database_url: str) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across threads."""
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    connect_args = {"check_same_thread": False}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(database_url, connect_args=connect_args, poolclass=StaticPool)
    return create_engine(database_url, connect_args=connect_args)


def _to_db_time(value: datetime) -> datetime:
    return value.astimezone(UTC).replace(tzinfo=None)


def _from_db_time(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _job_from_row(row: JobRow) -> JobRecord:
    return JobRecord(
        id=row.id,
        conversation_id=row.conversation_id,
        media_id=row.media_id,
        type=JobType(row.type),
        status=JobStatus(row.status),
        created_at=_from_db_time(row.created_at),
        updated_at=_from_db_time(row.updated_at),
        locale=row.locale,
        error_message=row.error_message,
        stuck_resets=row.stuck_resets,
    )


def _job_to_row(job: JobRecord) -> JobRow:
    return JobRow(
        id=job.id,
        conversation_id=job.conversation_id,
        media_id=job.media_id,
        type=job.type.value,
        status=job.status.value,
        locale=job.locale,
        error_message=job.error_message,
        stuck_resets=job.stuck_resets,
        created_at=_to_db_time(job.created_at),
        updated_at=_to_db_time(job.updated_at),
    )


def _media_result_from_row(row: MediaResultRow) -> MediaResultRecord:
    return MediaResultRecord(
        media_id=row.media_id,
        created_at=_from_db_time(row.created_at),
        updated_at=_from_db_time(row.updated_at),
        transcript_text=row.transcript_text,
        detected_language=row.detected_language,
        normalized_text=row.normalized_text,
        word_count=row.word_count,
    )


def _media_result_to_row(record: MediaResultRecord) -> MediaResultRow:
    return MediaResultRow(
        media_id=record.media_id,
        transcript_text=record.transcript_text,
        detected_language=record.detected_language,
        normalized_text=record.normalized_text,
        word_count=record.word_count,
        created_at=_to_db_time(record.created_at),
        updated_at=_to_db_time(record.updated_at),
    )


class SqlStore(RelayStore):
    """Job queue and media cache persisted through SQLAlchemy.

    Records cross the boundary as detached dataclasses; every call runs in its
    own short transaction. Operational failures (missing tables, unreachable
    database) surface as ``StoreUnavailableError``.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._sessions = sessionmaker(engine, expire_on_commit=False)

    @classmethod
    def from_url(cls, database_url: str) -> SqlStore:
        return cls(build_engine(database_url))

    def create_schema(self) -> None:
        Base.metadata.create_all(self._engine)
        logger.info("store.schema_ready dialect=%s", self._engine.dialect.name)

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        try:
            with self._sessions.begin() as session:
                yield session
        except (OperationalError, ProgrammingError, InterfaceError) as exc:
            raise StoreUnavailableError(str(exc.orig or exc)) from exc

    def enqueue(self, *, conversation_id: int, media_id: str, job_type: JobType, locale: str = "en") -> JobRecord:
        with self._transaction() as session:
            existing = session.scalars(
                select(JobRow)
                .where(
                    JobRow.media_id == media_id,
                    JobRow.type == job_type.value,
                    JobRow.status.in_([status.value for status in ACTIVE_STATUSES]),
                )
                .limit(1)
            ).first()
            if existing is not None:
                raise DuplicateJobError(
                    media_id=media_id,
                    job_type=job_type.value,
                    existing_job_id=existing.id,
                    existing_status=existing.status,
                )

            now = _to_db_time(datetime.now(UTC))
            row = JobRow(
                conversation_id=conversation_id,
                media_id=media_id,
                type=job_type.value,
                status=JobStatus.PENDING.value,
                locale=locale,
                stuck_resets=0,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            session.flush()
            return _job_from_row(row)

    def next_pending(self) -> JobRecord | None:
        with self._transaction() as session:
            row = session.scalars(
                select(JobRow)
                .where(JobRow.status == JobStatus.PENDING.value)
                .order_by(JobRow.created_at, JobRow.id)
                .limit(1)
            ).first()
            return _job_from_row(row) if row is not None else None

    def save(self, job: JobRecord) -> None:
        with self._transaction() as session:
            session.merge(_job_to_row(job))

    def get_job(self, job_id: int) -> JobRecord | None:
        with self._transaction() as session:
            row = session.get(JobRow, job_id)
            return _job_from_row(row) if row is not None else None

    def list_jobs(self, *, conversation_id: int | None = None, status: JobStatus | None = None) -> list[JobRecord]:
        statement = select(JobRow).order_by(JobRow.created_at, JobRow.id)
        if conversation_id is not None:
            statement = statement.where(JobRow.conversation_id == conversation_id)
        if status is not None:
            statement = statement.where(JobRow.status == status.value)
        with self._transaction() as session:
            return [_job_from_row(row) for row in session.scalars(statement)]

    def find_stuck(self, older_than: timedelta) -> list[JobRecord]:
        cutoff = _to_db_time(datetime.now(UTC) - older_than)
        with self._transaction() as session:
            rows = session.scalars(
                select(JobRow)
                .where(JobRow.status == JobStatus.IN_PROGRESS.value, JobRow.updated_at < cutoff)
                .order_by(JobRow.updated_at, JobRow.id)
            )
            return [_job_from_row(row) for row in rows]

    def get_media_result(self, media_id: str) -> MediaResultRecord | None:
        with self._transaction() as session:
            row = session.get(MediaResultRow, media_id)
            return _media_result_from_row(row) if row is not None else None

    def save_media_result(self, record: MediaResultRecord) -> None:
        with self._transaction() as session:
            session.merge(_media_result_to_row(record))


__all__ = ["Base", "JobRow", "MediaResultRow", "SqlStore", "build_engine"]
