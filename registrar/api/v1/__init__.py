# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    enrollments: Enrollment, drop, final grade and listing endpoints.
    grades: Grade entry, correction and grade analytics endpoints.
    attendance: Attendance marking, summaries and alerts.
"""

from fastapi import APIRouter

from registrar.api.v1 import attendance, enrollments, grades

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(enrollments.router, prefix="/enrollments", tags=["Enrollments"])
router.include_router(grades.router, prefix="/grades", tags=["Grades"])
router.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])

__all__ = ["router"]
