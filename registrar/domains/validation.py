# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared lookups and guards used by every academic service.

Each domain service consults these before mutating anything, so "does it
exist", "is it enrolled" and "who owns it" are answered the same way
everywhere.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import DateTime, Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.domains.exceptions import (
    CourseAccessDeniedError,
    CourseNotFoundError,
    EnrollmentClosedError,
    EnrollmentNotFoundError,
    FacultyNotFoundError,
    NotEnrolledError,
    StudentNotFoundError,
)
from registrar.infrastructure.database.models import Course, Enrollment, Faculty, Student
from registrar.models.common import EnrollmentStatus, HistoryFilter
from registrar.utils.datetime import end_of_day, start_of_day

logger = logging.getLogger(__name__)

__all__ = ["AcademicValidator", "HistoryFilter", "apply_history_filter"]


def apply_history_filter(
    query: Select,
    date_column: Any,
    status_column: Any | None,
    filters: HistoryFilter | None,
) -> Select:
    """Restrict a listing query by inclusive date range and status.

    Timestamp columns are compared against whole UTC days so a filter on
    ``end_date`` includes everything recorded on that day.

    Args:
        query: Select statement to narrow.
        date_column: Column holding the record date or timestamp.
        status_column: Column holding the status, or None if the listing
            has no status.
        filters: Filter to apply. None leaves the query unchanged.

    Returns:
        The narrowed select statement.
    """
    if filters is None:
        return query

    is_timestamp = isinstance(date_column.type, DateTime)

    if filters.start_date is not None:
        lower = start_of_day(filters.start_date) if is_timestamp else filters.start_date
        query = query.where(date_column >= lower)

    if filters.end_date is not None:
        upper = end_of_day(filters.end_date) if is_timestamp else filters.end_date
        query = query.where(date_column <= upper)

    if filters.statuses and status_column is not None:
        query = query.where(status_column.in_([s.upper() for s in filters.statuses]))

    return query


class AcademicValidator:
    """Point lookups and precondition checks over the entity store.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize validator.

        Args:
            db: Async database session.
        """
        self.db = db

    async def get_student(self, student_id: str) -> Student:
        """Get student by ID.

        Raises:
            StudentNotFoundError: If not found.
        """
        student = await self.db.get(Student, student_id)
        if not student:
            raise StudentNotFoundError(student_id)
        return student

    async def get_course(self, course_id: str) -> Course:
        """Get course by ID.

        Raises:
            CourseNotFoundError: If not found.
        """
        course = await self.db.get(Course, course_id)
        if not course:
            raise CourseNotFoundError(course_id)
        return course

    async def get_faculty(self, faculty_id: str) -> Faculty:
        """Get faculty member by ID.

        Raises:
            FacultyNotFoundError: If not found.
        """
        faculty = await self.db.get(Faculty, faculty_id)
        if not faculty:
            raise FacultyNotFoundError(faculty_id)
        return faculty

    async def get_enrollment(self, enrollment_id: str) -> Enrollment:
        """Get enrollment by ID.

        Raises:
            EnrollmentNotFoundError: If not found.
        """
        enrollment = await self.db.get(Enrollment, enrollment_id)
        if not enrollment:
            raise EnrollmentNotFoundError(enrollment_id)
        return enrollment

    async def require_course_owned_by(self, course_id: str, faculty_id: str) -> Course:
        """Ensure the faculty member is the course's instructor of record.

        Args:
            course_id: Course identifier.
            faculty_id: Acting faculty identifier.

        Returns:
            The course.

        Raises:
            CourseNotFoundError: If the course does not exist.
            CourseAccessDeniedError: If the instructor differs or is unset.
        """
        course = await self.get_course(course_id)
        if course.instructor_id is None or course.instructor_id != faculty_id:
            logger.warning(
                "Course access denied: course=%s, faculty=%s, instructor=%s",
                course_id,
                faculty_id,
                course.instructor_id,
            )
            raise CourseAccessDeniedError(course_id, faculty_id)
        return course

    async def require_enrollment_exists(
        self,
        student_id: str,
        course_id: str,
        allowed_statuses: Iterable[EnrollmentStatus | str] | None = None,
    ) -> Enrollment:
        """Return the most recent enrollment for the pair in an allowed status.

        Args:
            student_id: Student identifier.
            course_id: Course identifier.
            allowed_statuses: Accepted statuses. None accepts any status.

        Returns:
            The newest matching enrollment.

        Raises:
            EnrollmentClosedError: If enrollments exist but none is in an
                allowed status.
            NotEnrolledError: If the pair has never been enrolled.
        """
        query = (
            select(Enrollment)
            .where(
                Enrollment.student_id == student_id,
                Enrollment.course_id == course_id,
            )
            .order_by(Enrollment.enrollment_date.desc())
        )
        result = await self.db.execute(query)
        enrollments = list(result.scalars().all())

        if not enrollments:
            raise NotEnrolledError(student_id, course_id)

        if allowed_statuses is None:
            return enrollments[0]

        allowed = {EnrollmentStatus(s).value for s in allowed_statuses}
        for enrollment in enrollments:
            if enrollment.status in allowed:
                return enrollment

        raise EnrollmentClosedError(student_id, course_id, enrollments[0].status)
