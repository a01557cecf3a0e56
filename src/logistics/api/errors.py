"""Map lifecycle errors onto HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from logistics.errors import (
    Conflict,
    Forbidden,
    InvalidTransition,
    LifecycleError,
    NotFound,
    PreconditionFailed,
    Unavailable,
)

STATUS_CODES: dict[type[LifecycleError], int] = {
    NotFound: 404,
    Forbidden: 403,
    InvalidTransition: 409,
    PreconditionFailed: 412,
    Conflict: 409,
    Unavailable: 503,
}


def status_code_for(exc: LifecycleError) -> int:
    return STATUS_CODES.get(type(exc), 400)


async def _lifecycle_error_handler(_request: Request, exc: LifecycleError) -> JSONResponse:
    return JSONResponse(status_code=status_code_for(exc), content={"error": exc.to_dict()})


def register_error_handlers(app: FastAPI) -> None:
    """Install the lifecycle error mapping on ``app``."""
    app.add_exception_handler(LifecycleError, _lifecycle_error_handler)
