# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared enums and DTOs used across the academic domains."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field, model_validator


class StudentStatus(str, Enum):
    """Lifecycle status of a student record."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    GRADUATED = "GRADUATED"
    SUSPENDED = "SUSPENDED"


class FeeStatus(str, Enum):
    """Fee payment status of a student."""

    PAID = "PAID"
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    OVERDUE = "OVERDUE"


class CourseStatus(str, Enum):
    """Publication status of a course offering."""

    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class EnrollmentStatus(str, Enum):
    """Enrollment state. DROPPED and COMPLETED are terminal."""

    ENROLLED = "ENROLLED"
    DROPPED = "DROPPED"
    COMPLETED = "COMPLETED"


class AssessmentType(str, Enum):
    """Category of graded work within a course."""

    INTERNAL_ASSESSMENT_1 = "INTERNAL_ASSESSMENT_1"
    INTERNAL_ASSESSMENT_2 = "INTERNAL_ASSESSMENT_2"
    INTERNAL_ASSESSMENT_3 = "INTERNAL_ASSESSMENT_3"
    MID_TERM = "MID_TERM"
    FINAL_EXAM = "FINAL_EXAM"
    ASSIGNMENT = "ASSIGNMENT"
    PROJECT = "PROJECT"
    LAB_WORK = "LAB_WORK"
    PRESENTATION = "PRESENTATION"
    QUIZ = "QUIZ"
    VIVA = "VIVA"


class AttendanceStatus(str, Enum):
    """Presence status for one session."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"


class AttendanceAlertLevel(str, Enum):
    """Advisory level raised for low attendance."""

    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class HistoryFilter(BaseModel):
    """Date-range and status filter shared by all historical listings.

    Both bounds are inclusive. An empty ``statuses`` list means no status
    filtering.
    """

    start_date: date | None = Field(None, description="Inclusive lower bound")
    end_date: date | None = Field(None, description="Inclusive upper bound")
    statuses: list[str] = Field(default_factory=list, description="Accepted status values")

    @model_validator(mode="after")
    def check_range(self) -> "HistoryFilter":
        """Reject inverted ranges."""
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class BulkItemOutcome(BaseModel):
    """Result of one item within a bulk operation."""

    index: int = Field(..., description="Position of the item in the request")
    student_id: str = Field(..., description="Student the item refers to")
    success: bool = Field(..., description="Whether the item was applied")
    record_id: str | None = Field(None, description="Created or updated record id")
    error_code: str | None = Field(None, description="Failure category when unsuccessful")
    message: str | None = Field(None, description="Failure detail when unsuccessful")


class BulkOperationResult(BaseModel):
    """Aggregate result of a bulk operation with partial-failure semantics."""

    items: list[BulkItemOutcome] = Field(default_factory=list)
    total: int = Field(0, description="Items processed")
    succeeded: int = Field(0, description="Items applied")
    failed: int = Field(0, description="Items rejected")
