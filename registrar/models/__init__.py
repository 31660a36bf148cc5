# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic DTOs and enums exchanged with the domain services."""

from registrar.models.common import (
    AssessmentType,
    AttendanceAlertLevel,
    AttendanceStatus,
    BulkItemOutcome,
    BulkOperationResult,
    CourseStatus,
    EnrollmentStatus,
    FeeStatus,
    HistoryFilter,
    StudentStatus,
)

__all__ = [
    "AssessmentType",
    "AttendanceAlertLevel",
    "AttendanceStatus",
    "BulkItemOutcome",
    "BulkOperationResult",
    "CourseStatus",
    "EnrollmentStatus",
    "FeeStatus",
    "HistoryFilter",
    "StudentStatus",
]
