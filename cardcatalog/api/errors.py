"""
Global exception handlers.

- KnownError -> its own status code with a classified failure envelope
- RequestValidationError -> 422 invalid_input with field-level detail
- SQLAlchemyError and any other exception -> 500 unknown failure, never
  leaking internal details
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from cardcatalog.models.failure import ApiResponse, FailureKind, KnownError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    app.add_exception_handler(KnownError, known_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)


async def known_error_handler(request: Request, exc: KnownError) -> JSONResponse:
    """Report a classified failure raised by a store operation."""
    logger.warning(
        "%s on %s %s: %s", exc.kind.value, request.method, request.url.path, exc.message
    )
    response = exc.to_response(path=request.url.path)
    return JSONResponse(status_code=exc.status_code, content=response.model_dump(mode="json"))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report request bodies / query parameters rejected by pydantic."""
    fields = "; ".join(
        f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    logger.warning("Validation error on %s: %s", request.url.path, fields)
    response = ApiResponse.known_failure(
        kind=FailureKind.INVALID_INPUT,
        message="Invalid request data",
        detail=fields,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=422,
        content=response.model_dump(mode="json"),
    )


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Unexpected storage failure: log it, answer with a generic message."""
    logger.error("Storage error on %s", request.url.path, exc_info=exc)
    response = ApiResponse.unknown_failure(path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=response.model_dump(mode="json"),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort for anything no other handler claimed."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    response = ApiResponse.unknown_failure(path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=response.model_dump(mode="json"),
    )
