#!/usr/bin/env python3
"""
Error handlers for the web application.

Match engine errors are translated to JSON responses carrying the error
type and whether the caller may safely retry.
"""

import logging
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

from core.match_engine.exceptions import (
    MatchEngineError,
    InvalidInput,
    InvalidTransition,
    NotFound,
    ConflictNotResolved,
    StorageTimeout,
    ReconciliationAborted,
)

logger = logging.getLogger(__name__)

# Most specific class first; JobNotPublished resolves through InvalidInput
STATUS_CODES = [
    (NotFound, 404),
    (InvalidInput, 422),
    (InvalidTransition, 409),
    (ConflictNotResolved, 503),
    (StorageTimeout, 503),
    (ReconciliationAborted, 500),
]


def status_code_for(exc: MatchEngineError) -> int:
    for exc_type, status_code in STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def match_engine_exception_handler(
    request: Request,
    exc: MatchEngineError
) -> JSONResponse:
    """
    Handle match engine exceptions.

    Args:
        request: The FastAPI request.
        exc: The match engine exception.

    Returns:
        JSONResponse with error details.
    """
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"Match engine error in {request.url.path}: {exc}", exc_info=True)
    else:
        logger.info(f"Rejected request {request.url.path}: {exc}")

    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": str(exc),
            "type": exc.__class__.__name__,
            "retryable": exc.retryable
        }
    )


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """Handle FastAPI HTTP exceptions with consistent format."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "type": "HTTPException",
            "retryable": False
        }
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error in {request.url.path}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "type": "InternalError",
            "retryable": False
        }
    )
