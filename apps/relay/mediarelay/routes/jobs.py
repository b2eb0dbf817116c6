"""Job intake routes used by the chat front end."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from mediarelay.routes.dependencies import get_job_service, require_intake_secret
from mediarelay.schemas.error import DuplicateJobErrorPayload, ErrorResponse, NoLeakNotFoundError
from mediarelay.schemas.job import EnqueueJobRequest, Job, JobStatus
from mediarelay.schemas.media import MediaResult
from mediarelay.services.jobs import JobService

router = APIRouter(
    prefix="/internal",
    tags=["Intake"],
    dependencies=[Depends(require_intake_secret)],
    responses={401: {"model": ErrorResponse}},
)


@router.post(
    "/jobs",
    response_model=Job,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": DuplicateJobErrorPayload}},
)
def enqueue_job(
    payload: EnqueueJobRequest,
    service: Annotated[JobService, Depends(get_job_service)],
) -> Job:
    return service.enqueue_job(payload)


@router.get("/jobs", response_model=list[Job])
def list_jobs(
    service: Annotated[JobService, Depends(get_job_service)],
    conversation_id: Annotated[int | None, Query()] = None,
    job_status: Annotated[JobStatus | None, Query(alias="status")] = None,
) -> list[Job]:
    return service.list_jobs(conversation_id=conversation_id, status=job_status)


@router.get(
    "/jobs/{jobId}",
    response_model=Job,
    responses={404: {"model": NoLeakNotFoundError}},
)
def get_job(
    job_id: Annotated[int, Path(alias="jobId")],
    service: Annotated[JobService, Depends(get_job_service)],
) -> Job:
    return service.get_job(job_id)


@router.get(
    "/media/{mediaId}",
    response_model=MediaResult,
    responses={404: {"model": NoLeakNotFoundError}},
)
def get_media_result(
    media_id: Annotated[str, Path(alias="mediaId")],
    service: Annotated[JobService, Depends(get_job_service)],
) -> MediaResult:
    return service.get_media_result(media_id)
