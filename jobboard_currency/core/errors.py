from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

logger = logging.getLogger("jobboard_currency.errors")


class CurrencyServiceError(Exception):
    """Base for recoverable currency service failures.

    None of these reach UI consumers: the service catches them and degrades
    to a fallback value.
    """

    error: str = "currency service error"

    def __init__(self, details: Optional[Any] = None):
        message = self.error
        if details:
            message += f": {details}"
        super().__init__(message)
        self.details = details


class DetectionFailure(CurrencyServiceError):
    error = "currency detection failed"


class RateFetchFailure(CurrencyServiceError):
    error = "exchange rate fetch failed"


def not_found_handler(request: Request, exc: StarletteHTTPException):  # type: ignore
    if exc.status_code != status.HTTP_404_NOT_FOUND:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "http_error", "detail": exc.detail},
        )
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "not_found",
            "detail": f"No route for {request.method} {request.url.path}",
        },
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "detail": jsonable_errors(exc),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may carry exception instances that json can't encode
    return [
        {k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()
    ]


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )
