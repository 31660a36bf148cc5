# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment service for managing student course enrollments.

This module provides the EnrollmentService class for:
- Capacity-checked student enrollment in courses
- Dropping active enrollments
- Final grade assignment and CGPA refresh
- Bulk enrollment operations
- Enrollment listings and term credit totals

An enrollment moves ENROLLED -> DROPPED or ENROLLED -> COMPLETED and never
leaves either terminal state. Re-enrolling after a drop creates a new row.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.domains.exceptions import (
    AcademicsError,
    CapacityExceededError,
    CourseInactiveError,
    CourseNotFoundError,
    DuplicateEnrollmentError,
    EnrollmentStateError,
    InvalidCourseConfigurationError,
    StudentInactiveError,
)
from registrar.domains.grading.scale import normalize_letter, points_for_letter
from registrar.domains.grading.service import GradeService
from registrar.domains.validation import AcademicValidator, apply_history_filter
from registrar.infrastructure.database.models import Course, Enrollment
from registrar.models.common import (
    BulkItemOutcome,
    BulkOperationResult,
    CourseStatus,
    EnrollmentStatus,
    HistoryFilter,
    StudentStatus,
)
from registrar.models.enrollment import EnrollmentResponse
from registrar.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Service for managing student enrollments.

    This service handles all enrollment operations including enrolling,
    dropping, completing with a final grade, and bulk enrollment.

    Attributes:
        db: Async database session.
        validator: Shared lookups and guards.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize enrollment service.

        Args:
            db: Async database session.
        """
        self.db = db
        self.validator = AcademicValidator(db)

    async def enroll(
        self,
        student_id: str,
        course_id: str,
        enrolled_by: str | None = None,
    ) -> EnrollmentResponse:
        """Enroll a student in a course.

        The course row is locked for the count-and-insert (on SQLite the
        engine opens every transaction with ``BEGIN IMMEDIATE`` instead), and
        the partial unique index on active enrollments backs up the duplicate
        check.
        Nothing is written unless every precondition holds.

        Args:
            student_id: Student identifier.
            course_id: Course identifier.
            enrolled_by: ID of user performing enrollment.

        Returns:
            The new ENROLLED enrollment.

        Raises:
            StudentNotFoundError: If student not found.
            CourseNotFoundError: If course not found.
            CourseInactiveError: If course is not ACTIVE.
            StudentInactiveError: If student is not ACTIVE.
            InvalidCourseConfigurationError: If course capacity is not positive.
            DuplicateEnrollmentError: If student already enrolled.
            CapacityExceededError: If the course is full.
            IntegrityError: If the insert breaks any other store constraint.
        """
        try:
            student = await self.validator.get_student(student_id)
            course = await self._lock_course(course_id)

            if course.status != CourseStatus.ACTIVE.value:
                raise CourseInactiveError(course_id, course.status)

            if student.status != StudentStatus.ACTIVE.value:
                raise StudentInactiveError(student_id, student.status)

            if course.capacity is None or course.capacity <= 0:
                raise InvalidCourseConfigurationError(
                    "Course capacity must be positive",
                    {"course_id": course_id, "capacity": course.capacity},
                )

            existing = await self._get_active_enrollment(student_id, course_id)
            if existing:
                raise DuplicateEnrollmentError(student_id, course_id)

            enrolled = await self._count_active(course_id)
            if enrolled >= course.capacity:
                raise CapacityExceededError(course_id, course.capacity)

            enrollment = Enrollment(
                student_id=student_id,
                course_id=course_id,
                status=EnrollmentStatus.ENROLLED.value,
                enrollment_date=utc_now(),
                academic_year=course.academic_year,
                semester=course.semester,
                enrolled_by=enrolled_by,
            )
            self.db.add(enrollment)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            # Only a concurrent enrollment of the same pair is a duplicate;
            # any other constraint violation propagates unchanged.
            if await self._get_active_enrollment(student_id, course_id) is None:
                raise
            raise DuplicateEnrollmentError(student_id, course_id) from e
        except AcademicsError:
            await self.db.rollback()
            raise

        await self.db.refresh(enrollment)

        logger.info(
            "Enrolled student: student=%s, course=%s, seats=%d/%d, by=%s",
            student_id,
            course_id,
            enrolled + 1,
            course.capacity,
            enrolled_by,
        )

        return self._to_response(enrollment)

    async def bulk_enroll(
        self,
        course_id: str,
        student_ids: list[str],
        enrolled_by: str | None = None,
    ) -> BulkOperationResult:
        """Enroll several students in a course.

        Each student is enrolled in its own transaction; a failure is
        recorded against that student and does not affect the others.

        Args:
            course_id: Course identifier.
            student_ids: Students to enroll, in order.
            enrolled_by: ID of user performing enrollment.

        Returns:
            Per-student outcomes with success and failure counts.

        Raises:
            CourseNotFoundError: If course not found.
        """
        await self.validator.get_course(course_id)

        result = BulkOperationResult(total=len(student_ids))

        for index, student_id in enumerate(student_ids):
            try:
                enrollment = await self.enroll(student_id, course_id, enrolled_by)
                result.items.append(
                    BulkItemOutcome(
                        index=index,
                        student_id=student_id,
                        success=True,
                        record_id=enrollment.id,
                    )
                )
                result.succeeded += 1
            except AcademicsError as e:
                result.items.append(
                    BulkItemOutcome(
                        index=index,
                        student_id=student_id,
                        success=False,
                        error_code=e.code,
                        message=e.message,
                    )
                )
                result.failed += 1

        logger.info(
            "Bulk enrollment: course=%s, enrolled=%d, failed=%d, by=%s",
            course_id,
            result.succeeded,
            result.failed,
            enrolled_by,
        )

        return result

    async def drop(
        self,
        student_id: str,
        course_id: str,
        dropped_by: str | None = None,
    ) -> EnrollmentResponse:
        """Drop a student's active enrollment.

        Grades and attendance recorded under the enrollment are kept.

        Args:
            student_id: Student identifier.
            course_id: Course identifier.
            dropped_by: ID of user performing the drop.

        Returns:
            The DROPPED enrollment.

        Raises:
            NotEnrolledError: If there is no ENROLLED record for the pair.
        """
        enrollment = await self.validator.require_enrollment_exists(
            student_id, course_id, [EnrollmentStatus.ENROLLED]
        )

        enrollment.status = EnrollmentStatus.DROPPED.value
        enrollment.dropped_at = utc_now()
        enrollment.dropped_by = dropped_by

        await self.db.commit()
        await self.db.refresh(enrollment)

        logger.info(
            "Dropped enrollment: student=%s, course=%s, by=%s",
            student_id,
            course_id,
            dropped_by,
        )

        return self._to_response(enrollment)

    async def assign_final_grade(
        self,
        enrollment_id: str,
        letter_grade: str,
        graded_by: str | None = None,
    ) -> EnrollmentResponse:
        """Close an enrollment with a final letter grade.

        Sets the final grade and its points, moves the enrollment to
        COMPLETED and refreshes the student's CGPA in the same transaction.

        Args:
            enrollment_id: Enrollment identifier.
            letter_grade: Final letter grade, e.g. "A-".
            graded_by: ID of user assigning the grade.

        Returns:
            The COMPLETED enrollment.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
            EnrollmentStateError: If the enrollment is not ENROLLED.
            InvalidGradeError: If the letter is not on the scale.
        """
        enrollment = await self.validator.get_enrollment(enrollment_id)

        if enrollment.status != EnrollmentStatus.ENROLLED.value:
            raise EnrollmentStateError(
                f"Cannot assign a final grade to a {enrollment.status} enrollment",
                {"enrollment_id": enrollment_id, "status": enrollment.status},
            )

        letter = normalize_letter(letter_grade)

        try:
            enrollment.final_grade = letter
            enrollment.grade_points = points_for_letter(letter)
            enrollment.status = EnrollmentStatus.COMPLETED.value
            enrollment.completed_at = utc_now()
            enrollment.graded_by = graded_by
            await self.db.flush()

            student = await self.validator.get_student(enrollment.student_id)
            student.cgpa = await GradeService(self.db).student_cgpa(enrollment.student_id)

            await self.db.commit()
        except AcademicsError:
            await self.db.rollback()
            raise

        await self.db.refresh(enrollment)

        logger.info(
            "Assigned final grade: enrollment=%s, grade=%s, cgpa=%s, by=%s",
            enrollment_id,
            letter,
            student.cgpa,
            graded_by,
        )

        return self._to_response(enrollment)

    async def current_enrollment_count(self, course_id: str) -> int:
        """Count ENROLLED records for a course.

        Raises:
            CourseNotFoundError: If course not found.
        """
        await self.validator.get_course(course_id)
        return await self._count_active(course_id)

    async def get_enrollment(self, enrollment_id: str) -> EnrollmentResponse:
        """Get enrollment details.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
        """
        enrollment = await self.validator.get_enrollment(enrollment_id)
        return self._to_response(enrollment)

    async def list_course_enrollments(
        self,
        course_id: str,
        filters: HistoryFilter | None = None,
    ) -> list[EnrollmentResponse]:
        """List enrollments of a course, newest first.

        Args:
            course_id: Course identifier.
            filters: Optional enrollment date range and status filter.

        Returns:
            Matching enrollments.

        Raises:
            CourseNotFoundError: If course not found.
        """
        await self.validator.get_course(course_id)

        query = select(Enrollment).where(Enrollment.course_id == course_id)
        query = apply_history_filter(
            query, Enrollment.enrollment_date, Enrollment.status, filters
        )
        query = query.order_by(Enrollment.enrollment_date.desc())

        result = await self.db.execute(query)
        return [self._to_response(e) for e in result.scalars().all()]

    async def list_student_enrollments(
        self,
        student_id: str,
        filters: HistoryFilter | None = None,
    ) -> list[EnrollmentResponse]:
        """List a student's enrollments, newest first.

        Raises:
            StudentNotFoundError: If student not found.
        """
        await self.validator.get_student(student_id)

        query = select(Enrollment).where(Enrollment.student_id == student_id)
        query = apply_history_filter(
            query, Enrollment.enrollment_date, Enrollment.status, filters
        )
        query = query.order_by(Enrollment.enrollment_date.desc())

        result = await self.db.execute(query)
        return [self._to_response(e) for e in result.scalars().all()]

    async def list_pending_grades(self, course_id: str) -> list[EnrollmentResponse]:
        """List active enrollments of a course still waiting for a final grade.

        Raises:
            CourseNotFoundError: If course not found.
        """
        await self.validator.get_course(course_id)

        query = (
            select(Enrollment)
            .where(
                Enrollment.course_id == course_id,
                Enrollment.status == EnrollmentStatus.ENROLLED.value,
                Enrollment.final_grade.is_(None),
            )
            .order_by(Enrollment.enrollment_date)
        )
        result = await self.db.execute(query)
        return [self._to_response(e) for e in result.scalars().all()]

    async def student_total_credits(
        self,
        student_id: str,
        academic_year: str,
        semester: int,
    ) -> int:
        """Sum course credits over a student's active enrollments in a term.

        Raises:
            StudentNotFoundError: If student not found.
        """
        await self.validator.get_student(student_id)

        query = (
            select(func.coalesce(func.sum(Course.credits), 0))
            .select_from(Enrollment)
            .join(Course, Course.id == Enrollment.course_id)
            .where(
                Enrollment.student_id == student_id,
                Enrollment.status == EnrollmentStatus.ENROLLED.value,
                Enrollment.academic_year == academic_year,
                Enrollment.semester == semester,
            )
        )
        result = await self.db.execute(query)
        return int(result.scalar_one())

    async def _lock_course(self, course_id: str) -> Course:
        """Load a course with a row lock held until the transaction ends.

        Raises:
            CourseNotFoundError: If not found.
        """
        query = (
            select(Course)
            .where(Course.id == course_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        course = result.scalar_one_or_none()

        if not course:
            raise CourseNotFoundError(course_id)

        return course

    async def _get_active_enrollment(
        self,
        student_id: str,
        course_id: str,
    ) -> Enrollment | None:
        """Get the ENROLLED record for a student and course, if any."""
        query = select(Enrollment).where(
            Enrollment.student_id == student_id,
            Enrollment.course_id == course_id,
            Enrollment.status == EnrollmentStatus.ENROLLED.value,
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _count_active(self, course_id: str) -> int:
        """Count ENROLLED records for a course."""
        query = select(func.count(Enrollment.id)).where(
            Enrollment.course_id == course_id,
            Enrollment.status == EnrollmentStatus.ENROLLED.value,
        )
        result = await self.db.execute(query)
        return result.scalar() or 0

    def _to_response(self, enrollment: Enrollment) -> EnrollmentResponse:
        """Convert enrollment to response.

        Args:
            enrollment: Enrollment model.

        Returns:
            Enrollment response.
        """
        return EnrollmentResponse.model_validate(enrollment)
