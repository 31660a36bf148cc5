# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade request and response DTOs.

Score bounds and letter validity are checked by the grade engine rather than
here, so bulk entries can fail one at a time instead of rejecting the batch.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class GradeEntryRequest(BaseModel):
    """One assessment result for one student."""

    assessment_type: str = Field(..., description="Assessment category, e.g. MID_TERM")
    assessment_name: str | None = Field(None, max_length=100, description="Display name")
    numeric_grade: float | None = Field(None, description="Score on a 0-100 scale")
    letter_grade: str | None = Field(None, description="Letter grade; derived when omitted")
    max_points: float | None = Field(None, description="Maximum attainable points")
    points_earned: float | None = Field(None, description="Points obtained")
    comments: str | None = Field(None, description="Grader comments")


class BulkGradeEntry(GradeEntryRequest):
    """Grade entry addressed to a specific student."""

    student_id: str = Field(..., description="Graded student")


class BulkGradeRequest(BaseModel):
    """Batch of grade entries for one course."""

    entries: list[BulkGradeEntry] = Field(..., min_length=1)


class GradeUpdateRequest(BaseModel):
    """Correction to an existing grade row. Omitted fields are unchanged."""

    assessment_name: str | None = None
    numeric_grade: float | None = None
    letter_grade: str | None = None
    max_points: float | None = None
    points_earned: float | None = None
    comments: str | None = None


class GradeResponse(BaseModel):
    """Stored grade row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    enrollment_id: str
    student_id: str
    course_id: str
    assessment_type: str
    assessment_name: str | None = None
    numeric_grade: float | None = None
    letter_grade: str | None = None
    grade_points: float | None = None
    max_points: float | None = None
    points_earned: float | None = None
    percentage: float | None = None
    comments: str | None = None
    grade_date: datetime
    graded_by: str | None = None


class GradeListResponse(BaseModel):
    """List of grade rows."""

    items: list[GradeResponse]
    total: int


class CourseGradeStatistics(BaseModel):
    """Aggregate grade figures for a course."""

    course_id: str
    total_grades: int = 0
    average: float = 0.0
    highest: float | None = None
    lowest: float | None = None
    pass_rate: float = 0.0
    letter_distribution: dict[str, int] = Field(default_factory=dict)
    assessment_distribution: dict[str, int] = Field(default_factory=dict)


class GradePointAverageResponse(BaseModel):
    """GPA or CGPA figure for a student."""

    student_id: str
    value: float
    scope: str = Field(..., description="'gpa' or 'cgpa'")
    academic_year: str | None = None
    semester: int | None = None


class CourseMetricResponse(BaseModel):
    """Single numeric course metric (average or pass rate)."""

    course_id: str
    metric: str
    value: float
