# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions
- Resolve the acting user from the X-Actor-Id header
- Build history filters from query parameters

Authentication happens upstream; this service trusts the actor id it is
handed and only checks course ownership against it.

Example:
    @router.get("/courses/{course_id}")
    async def list_course_enrollments(
        course_id: str,
        db: AsyncSession = Depends(get_db),
    ):
        ...
"""

import logging
from datetime import date
from typing import AsyncGenerator

from fastapi import Header, HTTPException, Query, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.core.config import get_settings
from registrar.infrastructure.database.connection import (
    close_database,
    create_schema,
    get_session,
    init_database,
)
from registrar.models.common import HistoryFilter

logger = logging.getLogger(__name__)


async def init_db() -> None:
    """Initialize the database connection pool and make sure tables exist."""
    settings = get_settings()
    await init_database(settings)
    await create_schema()


async def close_db() -> None:
    """Close the database connection pool."""
    await close_database()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session.

    Yields:
        AsyncSession for the entity store.
    """
    async with get_session() as session:
        yield session


def get_actor_id(
    x_actor_id: str | None = Header(None, description="ID of the acting user"),
) -> str | None:
    """Get the acting user's id, if the caller supplied one."""
    return x_actor_id


def require_actor(
    x_actor_id: str | None = Header(None, description="ID of the acting user"),
) -> str:
    """Require the acting user's id.

    Raises:
        HTTPException: 401 if the X-Actor-Id header is missing.
    """
    if not x_actor_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Actor-Id header is required",
        )
    return x_actor_id


def get_history_filter(
    start_date: date | None = Query(None, description="Inclusive start date"),
    end_date: date | None = Query(None, description="Inclusive end date"),
    statuses: list[str] | None = Query(None, alias="status", description="Status filter"),
) -> HistoryFilter:
    """Build a HistoryFilter from query parameters.

    Raises:
        HTTPException: 400 if the date range is inverted.
    """
    try:
        return HistoryFilter(
            start_date=start_date,
            end_date=end_date,
            statuses=statuses or [],
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date must not be after end_date",
        ) from e
