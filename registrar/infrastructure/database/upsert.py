# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Dialect-aware INSERT ... ON CONFLICT construction."""

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def build_upsert(session: AsyncSession, model: type[Any]):
    """Return an ``insert`` construct that supports ``on_conflict_do_update``.

    Both PostgreSQL and SQLite expose the same ON CONFLICT API through their
    dialect-specific ``insert``; the generic one does not.

    Args:
        session: Session whose bind decides the dialect.
        model: Mapped class or table to insert into.

    Returns:
        Dialect-specific Insert statement.

    Raises:
        NotImplementedError: If the bound dialect has no ON CONFLICT support.
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"Upsert is not supported for dialect '{dialect}'")
