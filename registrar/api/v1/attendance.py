# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance API endpoints.

This module provides endpoints for attendance:
- POST /courses/{course_id} - Mark one student (instructor)
- POST /courses/{course_id}/session - Mark a session roll call (instructor)
- GET /courses/{course_id}/session/{attendance_date} - Session roster (instructor)
- GET /courses/{course_id}/alerts - Students below the attendance threshold
- GET /courses/{course_id}/students/{student_id} - Attendance history
- GET /courses/{course_id}/students/{student_id}/summary - Attendance summary
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.api.dependencies import get_db, get_history_filter, require_actor
from registrar.domains.attendance.service import AttendanceService
from registrar.domains.validation import AcademicValidator
from registrar.models.attendance import (
    AttendanceAlert,
    AttendanceListResponse,
    AttendanceRecordResponse,
    AttendanceSummary,
    MarkAttendanceRequest,
    SessionAttendanceReport,
    SessionAttendanceRequest,
)
from registrar.models.common import BulkOperationResult, HistoryFilter

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_attendance_service(db: AsyncSession) -> AttendanceService:
    """Get attendance service instance.

    Args:
        db: Database session.

    Returns:
        Configured AttendanceService instance.
    """
    return AttendanceService(db=db)


def _get_validator(db: AsyncSession) -> AcademicValidator:
    """Get validator instance for ownership checks."""
    return AcademicValidator(db=db)


@router.post(
    "/courses/{course_id}",
    response_model=AttendanceRecordResponse,
    summary="Mark attendance",
    description="Insert or overwrite one student's attendance for a session date.",
)
async def mark_attendance(
    course_id: str,
    data: MarkAttendanceRequest,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
) -> AttendanceRecordResponse:
    """Mark one student's attendance.

    Args:
        course_id: Course identifier.
        data: Student, date and status.
        actor_id: Acting faculty member.
        db: Database session.

    Returns:
        The stored attendance record.
    """
    await _get_validator(db).require_course_owned_by(course_id, actor_id)
    service = _get_attendance_service(db)
    return await service.mark_attendance(
        data.student_id,
        course_id,
        data.attendance_date,
        data.status,
        remarks=data.remarks,
        marked_by=actor_id,
    )


@router.post(
    "/courses/{course_id}/session",
    response_model=BulkOperationResult,
    summary="Mark session attendance",
    description="Mark a whole roll call; each line succeeds or fails on its own.",
)
async def mark_session_attendance(
    course_id: str,
    data: SessionAttendanceRequest,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
) -> BulkOperationResult:
    """Mark attendance for a course session."""
    logger.info(
        "Marking session attendance: course=%s, date=%s, count=%d, by=%s",
        course_id,
        data.attendance_date,
        len(data.entries),
        actor_id,
    )

    await _get_validator(db).require_course_owned_by(course_id, actor_id)
    service = _get_attendance_service(db)
    return await service.mark_session_attendance(
        course_id, data.attendance_date, data.entries, marked_by=actor_id
    )


@router.get(
    "/courses/{course_id}/session/{attendance_date}",
    response_model=SessionAttendanceReport,
    summary="Session roster",
    description="Every enrolled student with the status recorded for the date, or UNMARKED.",
)
async def get_session_attendance(
    course_id: str,
    attendance_date: date,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
) -> SessionAttendanceReport:
    """Roster of one course session for its instructor."""
    await _get_validator(db).require_course_owned_by(course_id, actor_id)
    service = _get_attendance_service(db)
    return await service.get_session_attendance(course_id, attendance_date)


@router.get(
    "/courses/{course_id}/alerts",
    response_model=list[AttendanceAlert],
    summary="Attendance alerts",
)
async def list_attendance_alerts(
    course_id: str,
    db: AsyncSession = Depends(get_db),
) -> list[AttendanceAlert]:
    """Students of the course below the attendance warning line."""
    service = _get_attendance_service(db)
    return await service.course_attendance_alerts(course_id)


@router.get(
    "/courses/{course_id}/students/{student_id}",
    response_model=AttendanceListResponse,
    summary="Attendance history",
)
async def list_attendance(
    course_id: str,
    student_id: str,
    filters: HistoryFilter = Depends(get_history_filter),
    db: AsyncSession = Depends(get_db),
) -> AttendanceListResponse:
    """List a student's attendance in a course, latest first."""
    service = _get_attendance_service(db)
    items = await service.list_attendance(student_id, course_id, filters)
    return AttendanceListResponse(items=items, total=len(items))


@router.get(
    "/courses/{course_id}/students/{student_id}/summary",
    response_model=AttendanceSummary,
    summary="Attendance summary",
)
async def get_attendance_summary(
    course_id: str,
    student_id: str,
    db: AsyncSession = Depends(get_db),
) -> AttendanceSummary:
    """Attendance counts, percentage and alert level."""
    service = _get_attendance_service(db)
    return await service.attendance_summary(student_id, course_id)
