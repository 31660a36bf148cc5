# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance service for session attendance and attendance thresholds.

This module provides the AttendanceService class for:
- Marking one student's attendance for a session date
- Marking a whole session roll call
- Attendance percentage, summary and threshold alerts
- Session rosters with roll-call counts
- Attendance history listings

There is at most one record per student, course and date. Marking the same
session again overwrites the previous status in a single upsert statement.
"""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.domains.exceptions import AcademicsError, ValidationError
from registrar.domains.validation import AcademicValidator, apply_history_filter
from registrar.infrastructure.database.models import AttendanceRecord, Enrollment, Student
from registrar.infrastructure.database.models.academics import ATTENDANCE_KEY_COLUMNS
from registrar.infrastructure.database.models.base import new_id
from registrar.infrastructure.database.upsert import build_upsert
from registrar.models.attendance import (
    AttendanceAlert,
    AttendanceRecordResponse,
    AttendanceSummary,
    SessionAttendanceEntry,
    SessionAttendanceReport,
    SessionRosterEntry,
)
from registrar.models.common import (
    AttendanceAlertLevel,
    AttendanceStatus,
    BulkItemOutcome,
    BulkOperationResult,
    EnrollmentStatus,
    HistoryFilter,
)
from registrar.utils.datetime import utc_now

logger = logging.getLogger(__name__)

CRITICAL_THRESHOLD = 50.0
WARNING_THRESHOLD = 75.0

# Roster status for enrolled students without a record on the session date.
UNMARKED = "UNMARKED"


def percentage_present(present: int, total: int) -> float:
    """PRESENT sessions as a percentage of all sessions, two decimals."""
    if total == 0:
        return 0.0
    return round(present / total * 100, 2)


def alert_level(percentage: float, total: int) -> AttendanceAlertLevel | None:
    """Advisory level for an attendance percentage; None without records."""
    if total == 0:
        return None
    if percentage < CRITICAL_THRESHOLD:
        return AttendanceAlertLevel.CRITICAL
    if percentage < WARNING_THRESHOLD:
        return AttendanceAlertLevel.WARNING
    return None


def _parse_status(status: AttendanceStatus | str) -> AttendanceStatus:
    if isinstance(status, AttendanceStatus):
        return status
    try:
        return AttendanceStatus(status.strip().upper())
    except ValueError as e:
        raise ValidationError(
            f"Unknown attendance status '{status}'", {"status": status}
        ) from e


class AttendanceService:
    """Service for recording and analysing attendance.

    Attributes:
        db: Async database session.
        validator: Shared lookups and guards.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize attendance service.

        Args:
            db: Async database session.
        """
        self.db = db
        self.validator = AcademicValidator(db)

    async def mark_attendance(
        self,
        student_id: str,
        course_id: str,
        attendance_date: date,
        status: AttendanceStatus | str,
        remarks: str | None = None,
        marked_by: str | None = None,
    ) -> AttendanceRecordResponse:
        """Insert or overwrite a student's attendance for a session date.

        Any enrollment, including a dropped or completed one, allows marking
        so that history can still be corrected.

        Args:
            student_id: Student identifier.
            course_id: Course identifier.
            attendance_date: Session date.
            status: PRESENT, ABSENT or LATE.
            remarks: Optional note.
            marked_by: ID of user marking attendance.

        Returns:
            The stored attendance record.

        Raises:
            ValidationError: If the status is unknown.
            NotEnrolledError: If the student was never enrolled in the course.
        """
        attendance_status = _parse_status(status)
        enrollment = await self.validator.require_enrollment_exists(student_id, course_id)

        now = utc_now()
        stmt = build_upsert(self.db, AttendanceRecord).values(
            id=new_id(),
            enrollment_id=enrollment.id,
            student_id=student_id,
            course_id=course_id,
            attendance_date=attendance_date,
            status=attendance_status.value,
            remarks=remarks,
            marked_by=marked_by,
            marked_at=now,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=list(ATTENDANCE_KEY_COLUMNS),
            set_={
                "enrollment_id": stmt.excluded.enrollment_id,
                "status": stmt.excluded.status,
                "remarks": stmt.excluded.remarks,
                "marked_by": stmt.excluded.marked_by,
                "marked_at": stmt.excluded.marked_at,
                "updated_at": stmt.excluded.updated_at,
            },
        )

        await self.db.execute(stmt)
        await self.db.commit()

        record = await self._get_record(student_id, course_id, attendance_date)

        logger.info(
            "Marked attendance: student=%s, course=%s, date=%s, status=%s, by=%s",
            student_id,
            course_id,
            attendance_date,
            attendance_status.value,
            marked_by,
        )

        return self._to_response(record)

    async def mark_session_attendance(
        self,
        course_id: str,
        attendance_date: date,
        entries: list[SessionAttendanceEntry],
        marked_by: str | None = None,
    ) -> BulkOperationResult:
        """Mark attendance for a whole session.

        Args:
            course_id: Course identifier.
            attendance_date: Session date.
            entries: One line per student.
            marked_by: ID of user marking attendance.

        Returns:
            Per-student outcomes with success and failure counts.

        Raises:
            CourseNotFoundError: If course not found.
        """
        await self.validator.get_course(course_id)

        result = BulkOperationResult(total=len(entries))

        for index, entry in enumerate(entries):
            try:
                record = await self.mark_attendance(
                    entry.student_id,
                    course_id,
                    attendance_date,
                    entry.status,
                    entry.remarks,
                    marked_by,
                )
                result.items.append(
                    BulkItemOutcome(
                        index=index,
                        student_id=entry.student_id,
                        success=True,
                        record_id=record.id,
                    )
                )
                result.succeeded += 1
            except AcademicsError as e:
                result.items.append(
                    BulkItemOutcome(
                        index=index,
                        student_id=entry.student_id,
                        success=False,
                        error_code=e.code,
                        message=e.message,
                    )
                )
                result.failed += 1

        logger.info(
            "Session attendance: course=%s, date=%s, marked=%d, failed=%d, by=%s",
            course_id,
            attendance_date,
            result.succeeded,
            result.failed,
            marked_by,
        )

        return result

    async def attendance_percentage(self, student_id: str, course_id: str) -> float:
        """PRESENT sessions over all recorded sessions, as a percentage.

        LATE and ABSENT both count against the percentage.

        Returns:
            Percentage with two decimals; 0.0 with no records.
        """
        counts = await self._status_counts(student_id, course_id)
        total = sum(counts.values())
        return percentage_present(counts.get(AttendanceStatus.PRESENT.value, 0), total)

    async def threshold_alert(
        self, student_id: str, course_id: str
    ) -> AttendanceAlertLevel | None:
        """Advisory alert level for a student's attendance in a course.

        Returns:
            CRITICAL below 50%, WARNING below 75%, otherwise None. None when
            nothing has been recorded yet.
        """
        counts = await self._status_counts(student_id, course_id)
        total = sum(counts.values())
        percentage = percentage_present(counts.get(AttendanceStatus.PRESENT.value, 0), total)
        return alert_level(percentage, total)

    async def attendance_summary(self, student_id: str, course_id: str) -> AttendanceSummary:
        """Attendance counts, percentage and alert for one student in one course."""
        counts = await self._status_counts(student_id, course_id)
        total = sum(counts.values())
        present = counts.get(AttendanceStatus.PRESENT.value, 0)
        percentage = percentage_present(present, total)

        return AttendanceSummary(
            student_id=student_id,
            course_id=course_id,
            total_sessions=total,
            present=present,
            absent=counts.get(AttendanceStatus.ABSENT.value, 0),
            late=counts.get(AttendanceStatus.LATE.value, 0),
            percentage=percentage,
            alert=alert_level(percentage, total),
        )

    async def course_attendance_alerts(self, course_id: str) -> list[AttendanceAlert]:
        """Students of a course whose attendance is below the warning line.

        Returns:
            Alerts ordered from lowest attendance upwards.

        Raises:
            CourseNotFoundError: If course not found.
        """
        await self.validator.get_course(course_id)

        query = (
            select(AttendanceRecord.student_id, AttendanceRecord.status, func.count())
            .where(AttendanceRecord.course_id == course_id)
            .group_by(AttendanceRecord.student_id, AttendanceRecord.status)
        )
        result = await self.db.execute(query)

        per_student: dict[str, dict[str, int]] = {}
        for student_id, status, count in result.all():
            per_student.setdefault(student_id, {})[status] = count

        alerts = []
        for student_id, counts in per_student.items():
            total = sum(counts.values())
            present = counts.get(AttendanceStatus.PRESENT.value, 0)
            percentage = percentage_present(present, total)
            level = alert_level(percentage, total)
            if level is None:
                continue
            alerts.append(
                AttendanceAlert(
                    student_id=student_id,
                    course_id=course_id,
                    level=level,
                    percentage=percentage,
                    total_sessions=total,
                    present=present,
                )
            )

        alerts.sort(key=lambda a: (a.percentage, a.student_id))
        return alerts

    async def get_session_attendance(
        self, course_id: str, attendance_date: date
    ) -> SessionAttendanceReport:
        """Roster of one course session.

        Every currently ENROLLED student appears once, with the status
        recorded for the date or UNMARKED when none was taken. Records of
        students who have since left the course are not listed.

        Args:
            course_id: Course identifier.
            attendance_date: Session date.

        Returns:
            Roster ordered by student name, with per-status counts.

        Raises:
            CourseNotFoundError: If course not found.
        """
        course = await self.validator.get_course(course_id)

        query = (
            select(Student, AttendanceRecord)
            .select_from(Enrollment)
            .join(Student, Student.id == Enrollment.student_id)
            .outerjoin(
                AttendanceRecord,
                and_(
                    AttendanceRecord.student_id == Enrollment.student_id,
                    AttendanceRecord.course_id == Enrollment.course_id,
                    AttendanceRecord.attendance_date == attendance_date,
                ),
            )
            .where(
                Enrollment.course_id == course_id,
                Enrollment.status == EnrollmentStatus.ENROLLED.value,
            )
            .order_by(Student.last_name, Student.first_name, Student.student_number)
        )
        result = await self.db.execute(query)

        report = SessionAttendanceReport(
            course_id=course.id,
            course_code=course.code,
            course_name=course.name,
            attendance_date=attendance_date,
        )
        for student, record in result.all():
            entry = SessionRosterEntry(
                student_id=student.id,
                student_number=student.student_number,
                student_name=student.full_name,
                email=student.email,
                status=record.status if record else UNMARKED,
                remarks=record.remarks if record else None,
                marked_by=record.marked_by if record else None,
                marked_at=record.marked_at if record else None,
                is_marked=record is not None,
            )
            report.entries.append(entry)

            if entry.status == AttendanceStatus.PRESENT.value:
                report.present += 1
            elif entry.status == AttendanceStatus.ABSENT.value:
                report.absent += 1
            elif entry.status == AttendanceStatus.LATE.value:
                report.late += 1
            else:
                report.unmarked += 1

        report.total_students = len(report.entries)
        return report

    async def list_attendance(
        self,
        student_id: str,
        course_id: str,
        filters: HistoryFilter | None = None,
    ) -> list[AttendanceRecordResponse]:
        """List a student's attendance in a course, latest session first.

        Args:
            student_id: Student identifier.
            course_id: Course identifier.
            filters: Optional session date range and status filter.

        Returns:
            Matching attendance records.
        """
        query = select(AttendanceRecord).where(
            AttendanceRecord.student_id == student_id,
            AttendanceRecord.course_id == course_id,
        )
        query = apply_history_filter(
            query, AttendanceRecord.attendance_date, AttendanceRecord.status, filters
        )
        query = query.order_by(AttendanceRecord.attendance_date.desc())

        result = await self.db.execute(query)
        return [self._to_response(r) for r in result.scalars().all()]

    async def _status_counts(self, student_id: str, course_id: str) -> dict[str, int]:
        """Count records per status for a student in a course."""
        query = (
            select(AttendanceRecord.status, func.count())
            .where(
                AttendanceRecord.student_id == student_id,
                AttendanceRecord.course_id == course_id,
            )
            .group_by(AttendanceRecord.status)
        )
        result = await self.db.execute(query)
        return {status: count for status, count in result.all()}

    async def _get_record(
        self, student_id: str, course_id: str, attendance_date: date
    ) -> AttendanceRecord:
        """Load a record by its natural key, bypassing the identity map."""
        query = (
            select(AttendanceRecord)
            .where(
                AttendanceRecord.student_id == student_id,
                AttendanceRecord.course_id == course_id,
                AttendanceRecord.attendance_date == attendance_date,
            )
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one()

    def _to_response(self, record: AttendanceRecord) -> AttendanceRecordResponse:
        """Convert attendance record to response."""
        return AttendanceRecordResponse.model_validate(record)
