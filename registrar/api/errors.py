# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Translation of domain failures into HTTP responses."""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from registrar.domains.exceptions import (
    AcademicsError,
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from registrar.infrastructure.database.connection import DatabaseError

logger = logging.getLogger(__name__)

# Checked in order; NotFound comes first so a closed enrollment reads as 404.
ERROR_STATUS_CODES: tuple[tuple[type[AcademicsError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_409_CONFLICT),
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
)


def status_code_for(exc: AcademicsError) -> int:
    """HTTP status for a domain failure."""
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


async def academics_error_handler(request: Request, exc: AcademicsError) -> JSONResponse:
    """Render a domain failure as a JSON error response."""
    status_code = status_code_for(exc)
    logger.info(
        "Request rejected: path=%s, code=%s, status=%d, message=%s",
        request.url.path,
        exc.code,
        status_code,
        exc.message,
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code, "details": exc.details},
    )


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    """Render an unexpected store failure as 500."""
    logger.error("Database error: path=%s, error=%s", request.url.path, str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database operation failed", "code": "database_error"},
    )
