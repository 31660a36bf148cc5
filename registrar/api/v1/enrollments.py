# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment API endpoints.

This module provides endpoints for course enrollment:
- POST / - Enroll a student in a course
- POST /drop - Drop an active enrollment
- POST /courses/{course_id}/bulk - Bulk enroll students
- GET /{enrollment_id} - Get enrollment details
- POST /{enrollment_id}/final-grade - Assign final grade (course instructor)
- GET /courses/{course_id} - List course enrollments
- GET /courses/{course_id}/count - Active enrollment count
- GET /courses/{course_id}/pending-grades - Enrollments awaiting a final grade
- GET /students/{student_id} - List a student's enrollments
- GET /students/{student_id}/credits - Credits carried in a term

Domain failures are translated to HTTP statuses by the app's exception
handler.
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.api.dependencies import get_actor_id, get_db, get_history_filter, require_actor
from registrar.domains.enrollment.service import EnrollmentService
from registrar.domains.validation import AcademicValidator
from registrar.models.common import BulkOperationResult, HistoryFilter
from registrar.models.enrollment import (
    BulkEnrollRequest,
    CreditTotalResponse,
    DropRequest,
    EnrollmentCountResponse,
    EnrollmentListResponse,
    EnrollmentResponse,
    EnrollRequest,
    FinalGradeRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_enrollment_service(db: AsyncSession) -> EnrollmentService:
    """Get enrollment service instance.

    Args:
        db: Database session.

    Returns:
        Configured EnrollmentService instance.
    """
    return EnrollmentService(db=db)


def _get_validator(db: AsyncSession) -> AcademicValidator:
    """Get validator instance for ownership checks."""
    return AcademicValidator(db=db)


@router.post(
    "",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll student",
    description="Enroll a student in an active course with free seats.",
)
async def enroll_student(
    data: EnrollRequest,
    actor_id: str | None = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
) -> EnrollmentResponse:
    """Enroll a student in a course.

    Args:
        data: Enrollment request.
        actor_id: Acting user, if known.
        db: Database session.

    Returns:
        The new enrollment.
    """
    logger.info(
        "Enrolling student: student=%s, course=%s, by=%s",
        data.student_id,
        data.course_id,
        actor_id,
    )

    service = _get_enrollment_service(db)
    return await service.enroll(data.student_id, data.course_id, enrolled_by=actor_id)


@router.post(
    "/drop",
    response_model=EnrollmentResponse,
    summary="Drop enrollment",
    description="Drop a student's active enrollment in a course.",
)
async def drop_enrollment(
    data: DropRequest,
    actor_id: str | None = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
) -> EnrollmentResponse:
    """Drop a student's active enrollment."""
    service = _get_enrollment_service(db)
    return await service.drop(data.student_id, data.course_id, dropped_by=actor_id)


@router.post(
    "/courses/{course_id}/bulk",
    response_model=BulkOperationResult,
    summary="Bulk enroll students",
    description="Enroll several students; each succeeds or fails on its own.",
)
async def bulk_enroll_students(
    course_id: str,
    data: BulkEnrollRequest,
    actor_id: str | None = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
) -> BulkOperationResult:
    """Bulk enroll students in a course.

    Args:
        course_id: Course identifier.
        data: Students to enroll.
        actor_id: Acting user, if known.
        db: Database session.

    Returns:
        Per-student outcomes.
    """
    logger.info(
        "Bulk enrolling students: course=%s, count=%d, by=%s",
        course_id,
        len(data.student_ids),
        actor_id,
    )

    service = _get_enrollment_service(db)
    return await service.bulk_enroll(course_id, data.student_ids, enrolled_by=actor_id)


@router.get(
    "/courses/{course_id}",
    response_model=EnrollmentListResponse,
    summary="List course enrollments",
)
async def list_course_enrollments(
    course_id: str,
    filters: HistoryFilter = Depends(get_history_filter),
    db: AsyncSession = Depends(get_db),
) -> EnrollmentListResponse:
    """List enrollments of a course, newest first."""
    service = _get_enrollment_service(db)
    items = await service.list_course_enrollments(course_id, filters)
    return EnrollmentListResponse(items=items, total=len(items))


@router.get(
    "/courses/{course_id}/count",
    response_model=EnrollmentCountResponse,
    summary="Active enrollment count",
)
async def get_enrollment_count(
    course_id: str,
    db: AsyncSession = Depends(get_db),
) -> EnrollmentCountResponse:
    """Count active enrollments against course capacity."""
    service = _get_enrollment_service(db)
    course = await _get_validator(db).get_course(course_id)
    enrolled = await service.current_enrollment_count(course_id)

    return EnrollmentCountResponse(
        course_id=course_id,
        enrolled=enrolled,
        capacity=course.capacity,
        available=max(course.capacity - enrolled, 0),
    )


@router.get(
    "/courses/{course_id}/pending-grades",
    response_model=EnrollmentListResponse,
    summary="Enrollments awaiting a final grade",
)
async def list_pending_grades(
    course_id: str,
    db: AsyncSession = Depends(get_db),
) -> EnrollmentListResponse:
    """List active enrollments without a final grade."""
    service = _get_enrollment_service(db)
    items = await service.list_pending_grades(course_id)
    return EnrollmentListResponse(items=items, total=len(items))


@router.get(
    "/students/{student_id}",
    response_model=EnrollmentListResponse,
    summary="List student enrollments",
)
async def list_student_enrollments(
    student_id: str,
    filters: HistoryFilter = Depends(get_history_filter),
    db: AsyncSession = Depends(get_db),
) -> EnrollmentListResponse:
    """List a student's enrollments, newest first."""
    service = _get_enrollment_service(db)
    items = await service.list_student_enrollments(student_id, filters)
    return EnrollmentListResponse(items=items, total=len(items))


@router.get(
    "/students/{student_id}/credits",
    response_model=CreditTotalResponse,
    summary="Term credit total",
)
async def get_student_credits(
    student_id: str,
    academic_year: str = Query(..., description="Academic year, e.g. 2025-2026"),
    semester: int = Query(..., ge=1, description="Semester number"),
    db: AsyncSession = Depends(get_db),
) -> CreditTotalResponse:
    """Sum credits over a student's active enrollments in a term."""
    service = _get_enrollment_service(db)
    total = await service.student_total_credits(student_id, academic_year, semester)
    return CreditTotalResponse(
        student_id=student_id,
        academic_year=academic_year,
        semester=semester,
        total_credits=total,
    )


@router.get(
    "/{enrollment_id}",
    response_model=EnrollmentResponse,
    summary="Get enrollment",
)
async def get_enrollment(
    enrollment_id: str,
    db: AsyncSession = Depends(get_db),
) -> EnrollmentResponse:
    """Get enrollment details."""
    service = _get_enrollment_service(db)
    return await service.get_enrollment(enrollment_id)


@router.post(
    "/{enrollment_id}/final-grade",
    response_model=EnrollmentResponse,
    summary="Assign final grade",
    description="Complete an enrollment with a final letter grade. "
    "Only the course instructor may do this.",
)
async def assign_final_grade(
    enrollment_id: str,
    data: FinalGradeRequest,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
) -> EnrollmentResponse:
    """Assign a final grade to an enrollment.

    Args:
        enrollment_id: Enrollment identifier.
        data: Final letter grade.
        actor_id: Acting faculty member.
        db: Database session.

    Returns:
        The completed enrollment.
    """
    logger.info(
        "Assigning final grade: enrollment=%s, grade=%s, by=%s",
        enrollment_id,
        data.letter_grade,
        actor_id,
    )

    service = _get_enrollment_service(db)
    enrollment = await service.get_enrollment(enrollment_id)
    await _get_validator(db).require_course_owned_by(enrollment.course_id, actor_id)

    return await service.assign_final_grade(enrollment_id, data.letter_grade, graded_by=actor_id)
