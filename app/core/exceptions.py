"""Domain errors raised by the classification engine and their HTTP mapping."""

from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

log = structlog.get_logger()


class EngineError(Exception):
    """Base class for recoverable engine errors."""

    code = "engine_error"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class InvalidInputError(EngineError):
    """A value reached the engine that violates the caller contract (non-finite, malformed)."""

    code = "invalid_input"


class InvalidTransitionError(EngineError):
    """An alert status change was requested from a non-active status."""

    code = "invalid_transition"


async def _invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    log.info("invalid input rejected", error=exc.message, **exc.context)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.message, "error": exc.code},
    )


async def _invalid_transition_handler(
    request: Request, exc: InvalidTransitionError
) -> JSONResponse:
    log.warning("alert transition rejected", error=exc.message, **exc.context)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": exc.message, "error": exc.code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidInputError, _invalid_input_handler)
    app.add_exception_handler(InvalidTransitionError, _invalid_transition_handler)
