"""Application exception types."""

from mediarelay.schemas.error import ErrorResponse


class ApiError(Exception):
    """Structured API error that maps directly to contract error payloads."""

    def __init__(self, status_code: int, code: str, message: str, details: dict | None = None) -> None:
        self.status_code = status_code
        self.payload = ErrorResponse(code=code, message=message, details=details)
        super().__init__(message)


class JobTransitionError(ApiError):
    """Raised when a job status change violates the lifecycle rules."""


class DuplicateJobError(ApiError):
    """Raised when an equivalent job is already waiting or running."""

    def __init__(self, *, media_id: str, job_type: str, existing_job_id: int, existing_status: str) -> None:
        super().__init__(
            status_code=409,
            code="DUPLICATE_JOB",
            message="An equivalent job is already queued or running",
            details={
                "media_id": media_id,
                "type": job_type,
                "existing_job_id": existing_job_id,
                "existing_status": existing_status,
            },
        )


class StoreUnavailableError(Exception):
    """Persistence is not ready (schema missing, database unreachable).

    Transient: the scheduler logs it and retries on the next tick.
    """


class HandlerNotRegisteredError(Exception):
    """No handler is registered for a job type. Configuration bug, never retried."""


__all__ = [
    "ApiError",
    "DuplicateJobError",
    "HandlerNotRegisteredError",
    "JobTransitionError",
    "StoreUnavailableError",
]
