"""
Service error handling utilities.

Provides a decorator that maps the service exception taxonomy onto HTTP
responses with an ErrorResponse body, so routers stay free of try/except.
"""

import functools
import inspect
import logging
from typing import Any, Callable, TypeVar

from fastapi import status
from fastapi.responses import JSONResponse

from vector_service.core.exceptions import (
    InputError,
    ProviderError,
    ReadOnlyModeError,
    VectorServiceException,
)
from vector_service.models.common import ErrorResponse

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _error_response(status_code: int, message: str, details: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message, details=details or None).model_dump(),
    )


def _to_response(exc: Exception, operation: str) -> JSONResponse:
    if isinstance(exc, InputError):
        logger.warning(
            f"{__name__}:{operation} - Invalid request",
            extra={"error": exc.message, "details": exc.details},
        )
        return _error_response(status.HTTP_400_BAD_REQUEST, exc.message, exc.details)

    if isinstance(exc, ReadOnlyModeError):
        logger.warning(f"{__name__}:{operation} - Write refused in read-only mode")
        return _error_response(status.HTTP_403_FORBIDDEN, exc.message, exc.details)

    if isinstance(exc, ProviderError):
        logger.error(
            f"{__name__}:{operation} - Upstream provider failure",
            extra={"error": exc.message, "details": exc.details},
        )
        return _error_response(status.HTTP_502_BAD_GATEWAY, exc.message, exc.details)

    if isinstance(exc, VectorServiceException):
        logger.exception(f"{__name__}:{operation} - Service failure", extra={"error": exc.message})
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message, exc.details)

    logger.exception(f"{__name__}:{operation} - Unexpected failure", extra={"error": str(exc)})
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Internal server error")


def handle_service_errors(func: F) -> F:
    """
    Decorator to turn service exceptions into HTTP error responses.

    InputError -> 400, ReadOnlyModeError -> 403, ProviderError -> 502,
    anything else -> 500. Works on sync and async endpoints.
    """
    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                return _to_response(e, func.__name__)

        return async_wrapper  # type: ignore

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except Exception as e:
            return _to_response(e, func.__name__)

    return wrapper  # type: ignore
