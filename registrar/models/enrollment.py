# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment request and response DTOs."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class EnrollRequest(BaseModel):
    """Request to enroll a student in a course."""

    student_id: str = Field(..., description="Student to enroll")
    course_id: str = Field(..., description="Course to enroll into")


class DropRequest(BaseModel):
    """Request to drop a student's active enrollment."""

    student_id: str = Field(..., description="Enrolled student")
    course_id: str = Field(..., description="Course to drop")


class BulkEnrollRequest(BaseModel):
    """Request to enroll several students into one course."""

    student_ids: list[str] = Field(..., min_length=1, description="Students to enroll")


class FinalGradeRequest(BaseModel):
    """Request to close an enrollment with a final letter grade."""

    letter_grade: str = Field(..., min_length=1, max_length=2, description="Final letter grade")


class EnrollmentResponse(BaseModel):
    """Enrollment details."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    course_id: str
    status: str
    enrollment_date: datetime
    final_grade: str | None = None
    grade_points: float | None = None
    academic_year: str | None = None
    semester: int | None = None
    dropped_at: datetime | None = None
    completed_at: datetime | None = None


class EnrollmentListResponse(BaseModel):
    """List of enrollments."""

    items: list[EnrollmentResponse]
    total: int


class EnrollmentCountResponse(BaseModel):
    """Active enrollment count against course capacity."""

    course_id: str
    enrolled: int
    capacity: int
    available: int


class CreditTotalResponse(BaseModel):
    """Credits a student carries in one term."""

    student_id: str
    academic_year: str
    semester: int
    total_credits: int
