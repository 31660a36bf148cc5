# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade API endpoints.

This module provides endpoints for grading:
- POST /courses/{course_id}/students/{student_id} - Enter a grade (instructor)
- POST /courses/{course_id}/bulk - Bulk grade entry (instructor)
- PATCH /{grade_id} - Correct a grade (instructor)
- GET /{grade_id} - Get a grade row
- GET /courses/{course_id}/average - Course average
- GET /courses/{course_id}/pass-rate - Course pass rate
- GET /courses/{course_id}/statistics - Course grade statistics
- GET /students/{student_id} - List a student's grades
- GET /students/{student_id}/gpa - Student GPA
- GET /students/{student_id}/cgpa - Student CGPA
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.api.dependencies import get_db, get_history_filter, require_actor
from registrar.domains.grading.service import GradeService
from registrar.domains.validation import AcademicValidator
from registrar.models.common import BulkOperationResult, HistoryFilter
from registrar.models.grade import (
    BulkGradeRequest,
    CourseGradeStatistics,
    CourseMetricResponse,
    GradeEntryRequest,
    GradeListResponse,
    GradePointAverageResponse,
    GradeResponse,
    GradeUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_grade_service(db: AsyncSession) -> GradeService:
    """Get grade service instance.

    Args:
        db: Database session.

    Returns:
        Configured GradeService instance.
    """
    return GradeService(db=db)


def _get_validator(db: AsyncSession) -> AcademicValidator:
    """Get validator instance for ownership checks."""
    return AcademicValidator(db=db)


@router.post(
    "/courses/{course_id}/students/{student_id}",
    response_model=GradeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enter grade",
    description="Record an assessment grade. Only the course instructor may do this.",
)
async def enter_grade(
    course_id: str,
    student_id: str,
    data: GradeEntryRequest,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
) -> GradeResponse:
    """Record an assessment grade for an enrolled student.

    Args:
        course_id: Course identifier.
        student_id: Student identifier.
        data: Assessment result.
        actor_id: Acting faculty member.
        db: Database session.

    Returns:
        The stored grade row.
    """
    logger.info(
        "Entering grade: student=%s, course=%s, type=%s, by=%s",
        student_id,
        course_id,
        data.assessment_type,
        actor_id,
    )

    await _get_validator(db).require_course_owned_by(course_id, actor_id)
    service = _get_grade_service(db)
    return await service.enter_grade(course_id, student_id, data, entered_by=actor_id)


@router.post(
    "/courses/{course_id}/bulk",
    response_model=BulkOperationResult,
    summary="Bulk grade entry",
    description="Record several grades; each entry succeeds or fails on its own.",
)
async def bulk_enter_grades(
    course_id: str,
    data: BulkGradeRequest,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
) -> BulkOperationResult:
    """Record grades for several students in one course."""
    logger.info(
        "Bulk entering grades: course=%s, count=%d, by=%s",
        course_id,
        len(data.entries),
        actor_id,
    )

    await _get_validator(db).require_course_owned_by(course_id, actor_id)
    service = _get_grade_service(db)
    return await service.bulk_enter_grades(course_id, data.entries, entered_by=actor_id)


@router.patch(
    "/{grade_id}",
    response_model=GradeResponse,
    summary="Correct grade",
    description="Correct an existing grade row. Only the course instructor may do this.",
)
async def update_grade(
    grade_id: str,
    data: GradeUpdateRequest,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
) -> GradeResponse:
    """Correct an existing grade row."""
    service = _get_grade_service(db)
    grade = await service.get_grade(grade_id)
    await _get_validator(db).require_course_owned_by(grade.course_id, actor_id)

    return await service.update_grade(grade_id, data, updated_by=actor_id)


@router.get(
    "/courses/{course_id}/average",
    response_model=CourseMetricResponse,
    summary="Course average",
)
async def get_course_average(
    course_id: str,
    db: AsyncSession = Depends(get_db),
) -> CourseMetricResponse:
    """Mean numeric grade for a course."""
    service = _get_grade_service(db)
    value = await service.course_average(course_id)
    return CourseMetricResponse(course_id=course_id, metric="average", value=value)


@router.get(
    "/courses/{course_id}/pass-rate",
    response_model=CourseMetricResponse,
    summary="Course pass rate",
)
async def get_pass_rate(
    course_id: str,
    db: AsyncSession = Depends(get_db),
) -> CourseMetricResponse:
    """Percentage of scored grades at or above the pass mark."""
    service = _get_grade_service(db)
    value = await service.pass_rate(course_id)
    return CourseMetricResponse(course_id=course_id, metric="pass_rate", value=value)


@router.get(
    "/courses/{course_id}/statistics",
    response_model=CourseGradeStatistics,
    summary="Course grade statistics",
)
async def get_course_statistics(
    course_id: str,
    db: AsyncSession = Depends(get_db),
) -> CourseGradeStatistics:
    """Aggregate grade figures for a course."""
    service = _get_grade_service(db)
    return await service.course_statistics(course_id)


@router.get(
    "/students/{student_id}",
    response_model=GradeListResponse,
    summary="List student grades",
)
async def list_student_grades(
    student_id: str,
    course_id: str | None = Query(None, description="Restrict to one course"),
    filters: HistoryFilter = Depends(get_history_filter),
    db: AsyncSession = Depends(get_db),
) -> GradeListResponse:
    """List a student's grade rows, newest first."""
    service = _get_grade_service(db)
    items = await service.list_student_grades(student_id, course_id, filters)
    return GradeListResponse(items=items, total=len(items))


@router.get(
    "/students/{student_id}/gpa",
    response_model=GradePointAverageResponse,
    summary="Student GPA",
)
async def get_student_gpa(
    student_id: str,
    academic_year: str | None = Query(None, description="Restrict to an academic year"),
    semester: int | None = Query(None, ge=1, description="Restrict to a semester"),
    db: AsyncSession = Depends(get_db),
) -> GradePointAverageResponse:
    """Mean grade points over the student's grades."""
    service = _get_grade_service(db)
    value = await service.student_gpa(student_id, academic_year, semester)
    return GradePointAverageResponse(
        student_id=student_id,
        value=value,
        scope="gpa",
        academic_year=academic_year,
        semester=semester,
    )


@router.get(
    "/students/{student_id}/cgpa",
    response_model=GradePointAverageResponse,
    summary="Student CGPA",
)
async def get_student_cgpa(
    student_id: str,
    db: AsyncSession = Depends(get_db),
) -> GradePointAverageResponse:
    """Mean grade points over grades of completed enrollments."""
    service = _get_grade_service(db)
    value = await service.student_cgpa(student_id)
    return GradePointAverageResponse(student_id=student_id, value=value, scope="cgpa")


@router.get(
    "/{grade_id}",
    response_model=GradeResponse,
    summary="Get grade",
)
async def get_grade(
    grade_id: str,
    db: AsyncSession = Depends(get_db),
) -> GradeResponse:
    """Get a grade row."""
    service = _get_grade_service(db)
    return await service.get_grade(grade_id)
