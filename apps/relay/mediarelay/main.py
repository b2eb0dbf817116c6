"""FastAPI application entrypoint for the job intake API.

Serve with ``uvicorn mediarelay.main:create_app --factory``.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from mediarelay.bootstrap import build_store
from mediarelay.core.config import get_settings
from mediarelay.errors import ApiError, StoreUnavailableError
from mediarelay.repositories.base import RelayStore
from mediarelay.routes import jobs_router
from mediarelay.schemas.error import ErrorResponse, NoLeakNotFoundError

API_PREFIX = "/api/v1"

# Keyed by route name; APIRoute.path may omit the include_router prefix.
PAYLOAD_VALIDATION_ROUTES: frozenset[str] = frozenset({"enqueue_job", "list_jobs"})
NOT_FOUND_VALIDATION_ROUTES: frozenset[str] = frozenset({"get_job"})


def create_app(store: RelayStore | None = None) -> FastAPI:
    app = FastAPI(title="Media Relay Intake API", version="0.1.0")
    app.state.store = store if store is not None else build_store(get_settings())

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    @app.exception_handler(StoreUnavailableError)
    async def handle_store_unavailable(_, exc: StoreUnavailableError) -> JSONResponse:
        payload = ErrorResponse(code="STORE_UNAVAILABLE", message="Job store is not available")
        return JSONResponse(status_code=503, content=payload.model_dump(exclude_none=True))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        route_name = getattr(request.scope.get("route"), "name", None)
        if route_name in PAYLOAD_VALIDATION_ROUTES:
            payload = ErrorResponse(code="VALIDATION_ERROR", message="Invalid job request")
            return JSONResponse(status_code=409, content=payload.model_dump(exclude_none=True))
        if route_name in NOT_FOUND_VALIDATION_ROUTES:
            payload = NoLeakNotFoundError(code="RESOURCE_NOT_FOUND", message="Resource not found")
            return JSONResponse(status_code=404, content=payload.model_dump())

        return await request_validation_exception_handler(request, exc)

    @app.get("/healthz", tags=["Health"])
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(jobs_router, prefix=API_PREFIX)

    return app
