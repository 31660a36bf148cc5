# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models for the registrar entity store."""

from registrar.infrastructure.database.models.academics import (
    AttendanceRecord,
    Course,
    Enrollment,
    Faculty,
    Grade,
    Student,
)
from registrar.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "Student",
    "Faculty",
    "Course",
    "Enrollment",
    "Grade",
    "AttendanceRecord",
]
