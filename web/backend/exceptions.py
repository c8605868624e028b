#!/usr/bin/env python3
"""
Custom exceptions and error handlers for the web application.
"""

import logging
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

from core.quality.exceptions import (
    QualityError,
    AnswerNotFoundError,
    QuestionNotFoundError,
    QAPermissionError,
    QAValidationError,
)

logger = logging.getLogger(__name__)


class ServiceException(Exception):
    """Base exception for service layer errors."""
    pass


class UnauthorizedException(ServiceException):
    """Raised when a request carries missing or wrong credentials."""
    pass


class CronNotConfiguredException(ServiceException):
    """Raised when the cron endpoint is called but no cron token is configured."""
    pass


def _error_body(exc: Exception, message: str = None) -> dict:
    return {
        "success": False,
        "error": message or str(exc),
        "type": exc.__class__.__name__
    }


async def service_exception_handler(
    request: Request,
    exc: ServiceException
) -> JSONResponse:
    """
    Handle service layer exceptions.

    Args:
        request: The FastAPI request.
        exc: The service exception.

    Returns:
        JSONResponse with error details.
    """
    status_code = 500
    if isinstance(exc, UnauthorizedException):
        status_code = 401

    if status_code >= 500:
        logger.error(f"Service error in {request.url.path}: {exc}", exc_info=True)
    else:
        logger.warning(f"Rejected request to {request.url.path}: {exc}")

    return JSONResponse(status_code=status_code, content=_error_body(exc))


async def quality_exception_handler(
    request: Request,
    exc: QualityError
) -> JSONResponse:
    """
    Map quality engine errors onto HTTP status codes.

    Not-found -> 404, validation -> 400, permission -> 403, anything else
    (persistence failures) -> 500.
    """
    status_code = 500
    if isinstance(exc, (AnswerNotFoundError, QuestionNotFoundError)):
        status_code = 404
    elif isinstance(exc, QAValidationError):
        status_code = 400
    elif isinstance(exc, QAPermissionError):
        status_code = 403

    if status_code >= 500:
        logger.error(f"Quality engine error in {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(status_code=status_code, content=_error_body(exc, "Failed to update answer quality"))

    return JSONResponse(status_code=status_code, content=_error_body(exc))


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """
    Handle FastAPI HTTP exceptions with consistent format.

    Args:
        request: The FastAPI request.
        exc: The HTTP exception.

    Returns:
        JSONResponse with error details.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "type": "HTTPException"
        }
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Args:
        request: The FastAPI request.
        exc: The exception.

    Returns:
        JSONResponse with error details.
    """
    logger.exception(f"Unexpected error in {request.url.path}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "type": "InternalError"
        }
    )


def register_exception_handlers(app) -> None:
    app.add_exception_handler(ServiceException, service_exception_handler)
    app.add_exception_handler(QualityError, quality_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
