"""Dependency wiring for routes."""

from __future__ import annotations

import logging
from secrets import compare_digest
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, Request, Security
from fastapi.security import APIKeyHeader

from mediarelay.core.config import Settings, get_settings
from mediarelay.core.logging_safety import safe_log_identifier
from mediarelay.errors import ApiError
from mediarelay.repositories.base import RelayStore
from mediarelay.services.jobs import JobService

intake_secret_scheme = APIKeyHeader(
    name="X-Intake-Secret",
    auto_error=False,
    scheme_name="intakeSecret",
)
logger = logging.getLogger(__name__)


def _request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id") or f"req-{uuid4()}"
    request.state.correlation_id = correlation_id
    return correlation_id


async def require_intake_secret(
    request: Request,
    intake_secret: Annotated[str | None, Security(intake_secret_scheme)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """Validate the shared secret presented by the chat front end."""
    safe_correlation_id = safe_log_identifier(_request_correlation_id(request), prefix="cid")
    expected = settings.intake_secret
    if expected is None or intake_secret is None or not compare_digest(intake_secret, expected):
        logger.warning(
            "intake.auth_rejected correlation_id=%s method=%s path=%s reason=invalid_intake_secret",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise ApiError(status_code=401, code="UNAUTHORIZED", message="Invalid intake authentication")


def get_store(request: Request) -> RelayStore:
    return request.app.state.store


def get_job_service(store: Annotated[RelayStore, Depends(get_store)]) -> JobService:
    return JobService(store)
