# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade service for recording assessments and computing grade aggregates.

This module provides the GradeService class for:
- Recording assessment grades against active enrollments
- Bulk grade entry for a course
- Correcting an existing grade row
- Course average, pass rate and statistics
- Student GPA and CGPA

Grade entry appends: a second result for the same assessment type adds a
row and both count towards every average. Corrections go through
update_grade().
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.domains.exceptions import (
    AcademicsError,
    GradeNotFoundError,
    InvalidGradeError,
)
from registrar.domains.grading.scale import (
    GRADE_POINTS,
    PASS_THRESHOLD,
    letter_for_score,
    normalize_letter,
    parse_assessment_type,
    percentage_of,
    validate_score,
)
from registrar.domains.validation import AcademicValidator, apply_history_filter
from registrar.infrastructure.database.models import Enrollment, Grade
from registrar.models.common import (
    BulkItemOutcome,
    BulkOperationResult,
    EnrollmentStatus,
    HistoryFilter,
)
from registrar.models.grade import (
    BulkGradeEntry,
    CourseGradeStatistics,
    GradeEntryRequest,
    GradeResponse,
    GradeUpdateRequest,
)
from registrar.utils.datetime import utc_now

logger = logging.getLogger(__name__)


def _validate_points(points_earned: float | None, max_points: float | None) -> None:
    if max_points is not None and max_points <= 0:
        raise InvalidGradeError("max_points must be positive", {"max_points": max_points})
    if points_earned is not None and points_earned < 0:
        raise InvalidGradeError(
            "points_earned must not be negative", {"points_earned": points_earned}
        )
    if points_earned is not None and max_points is not None and points_earned > max_points:
        raise InvalidGradeError(
            "points_earned cannot exceed max_points",
            {"points_earned": points_earned, "max_points": max_points},
        )


def _resolve_letter(numeric_grade: float | None, letter_grade: str | None) -> str:
    """Pick the letter for a grade row from its score and optional letter.

    Raises:
        InvalidGradeError: If neither is given, the score is out of range
            or the letter is unknown.
    """
    if numeric_grade is None and not letter_grade:
        raise InvalidGradeError("Either numeric_grade or letter_grade is required")
    if numeric_grade is not None:
        validate_score(numeric_grade)
    if letter_grade:
        return normalize_letter(letter_grade)
    return letter_for_score(numeric_grade)


class GradeService:
    """Service for grade entry and grade analytics.

    Attributes:
        db: Async database session.
        validator: Shared lookups and guards.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize grade service.

        Args:
            db: Async database session.
        """
        self.db = db
        self.validator = AcademicValidator(db)

    async def enter_grade(
        self,
        course_id: str,
        student_id: str,
        request: GradeEntryRequest,
        entered_by: str | None = None,
    ) -> GradeResponse:
        """Record an assessment grade for an enrolled student.

        The letter grade is derived from the score when not supplied, and
        grade points always come from the letter.

        Args:
            course_id: Course identifier.
            student_id: Student identifier.
            request: Assessment result.
            entered_by: ID of user entering the grade.

        Returns:
            The stored grade row.

        Raises:
            NotEnrolledError: If the student has no ENROLLED record in the course.
            InvalidAssessmentTypeError: If the assessment type is unknown.
            InvalidGradeError: If the score or letter is invalid or both are missing.
        """
        enrollment = await self.validator.require_enrollment_exists(
            student_id, course_id, [EnrollmentStatus.ENROLLED]
        )

        assessment_type = parse_assessment_type(request.assessment_type)
        letter = _resolve_letter(request.numeric_grade, request.letter_grade)
        _validate_points(request.points_earned, request.max_points)

        grade = Grade(
            enrollment_id=enrollment.id,
            student_id=student_id,
            course_id=course_id,
            assessment_type=assessment_type.value,
            assessment_name=request.assessment_name,
            numeric_grade=request.numeric_grade,
            letter_grade=letter,
            grade_points=GRADE_POINTS[letter],
            max_points=request.max_points,
            points_earned=request.points_earned,
            percentage=percentage_of(request.points_earned, request.max_points),
            comments=request.comments,
            grade_date=utc_now(),
            graded_by=entered_by,
        )

        self.db.add(grade)
        await self.db.commit()
        await self.db.refresh(grade)

        logger.info(
            "Entered grade: student=%s, course=%s, type=%s, letter=%s, by=%s",
            student_id,
            course_id,
            assessment_type.value,
            letter,
            entered_by,
        )

        return self._to_response(grade)

    async def bulk_enter_grades(
        self,
        course_id: str,
        entries: list[BulkGradeEntry],
        entered_by: str | None = None,
    ) -> BulkOperationResult:
        """Record grades for several students in one course.

        Each entry is stored on its own; a rejected entry is reported and
        the remaining entries are still processed.

        Args:
            course_id: Course identifier.
            entries: Grade entries, each naming its student.
            entered_by: ID of user entering the grades.

        Returns:
            Per-entry outcomes with success and failure counts.

        Raises:
            CourseNotFoundError: If course not found.
        """
        await self.validator.get_course(course_id)

        result = BulkOperationResult(total=len(entries))

        for index, entry in enumerate(entries):
            try:
                grade = await self.enter_grade(course_id, entry.student_id, entry, entered_by)
                result.items.append(
                    BulkItemOutcome(
                        index=index,
                        student_id=entry.student_id,
                        success=True,
                        record_id=grade.id,
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
            "Bulk grade entry: course=%s, stored=%d, failed=%d, by=%s",
            course_id,
            result.succeeded,
            result.failed,
            entered_by,
        )

        return result

    async def update_grade(
        self,
        grade_id: str,
        request: GradeUpdateRequest,
        updated_by: str | None = None,
    ) -> GradeResponse:
        """Correct an existing grade row.

        Only fields present in the request change. A new score without a new
        letter re-derives the letter; points and percentage are recomputed.
        Correcting a row of a COMPLETED enrollment refreshes the student's
        stored CGPA in the same transaction.

        Args:
            grade_id: Grade identifier.
            request: Fields to change.
            updated_by: ID of user making the correction.

        Returns:
            The updated grade row.

        Raises:
            GradeNotFoundError: If grade not found.
            InvalidGradeError: If the new values are invalid.
        """
        grade = await self._get_grade(grade_id)
        changes = request.model_dump(exclude_unset=True)

        numeric_grade = changes.get("numeric_grade", grade.numeric_grade)
        if "letter_grade" in changes:
            letter_grade = changes["letter_grade"]
        elif "numeric_grade" in changes:
            letter_grade = None
        else:
            letter_grade = grade.letter_grade
        letter = _resolve_letter(numeric_grade, letter_grade)

        max_points = changes.get("max_points", grade.max_points)
        points_earned = changes.get("points_earned", grade.points_earned)
        _validate_points(points_earned, max_points)

        grade.numeric_grade = numeric_grade
        grade.letter_grade = letter
        grade.grade_points = GRADE_POINTS[letter]
        grade.max_points = max_points
        grade.points_earned = points_earned
        grade.percentage = percentage_of(points_earned, max_points)
        if "assessment_name" in changes:
            grade.assessment_name = changes["assessment_name"]
        if "comments" in changes:
            grade.comments = changes["comments"]
        if updated_by:
            grade.graded_by = updated_by

        try:
            enrollment = await self.validator.get_enrollment(grade.enrollment_id)
            if enrollment.status == EnrollmentStatus.COMPLETED.value:
                # Completed rows feed the stored CGPA.
                await self.db.flush()
                student = await self.validator.get_student(grade.student_id)
                student.cgpa = await self.student_cgpa(grade.student_id)

            await self.db.commit()
        except AcademicsError:
            await self.db.rollback()
            raise

        await self.db.refresh(grade)

        logger.info(
            "Updated grade: grade=%s, fields=%s, enrollment_status=%s, by=%s",
            grade_id,
            sorted(changes),
            enrollment.status,
            updated_by,
        )

        return self._to_response(grade)

    async def get_grade(self, grade_id: str) -> GradeResponse:
        """Get a grade row.

        Raises:
            GradeNotFoundError: If grade not found.
        """
        return self._to_response(await self._get_grade(grade_id))

    async def course_average(self, course_id: str) -> float:
        """Mean numeric grade of a course, two decimals; 0.0 with no scores.

        Raises:
            CourseNotFoundError: If course not found.
        """
        await self.validator.get_course(course_id)

        query = select(func.avg(Grade.numeric_grade)).where(
            Grade.course_id == course_id,
            Grade.numeric_grade.is_not(None),
        )
        result = await self.db.execute(query)
        average = result.scalar()
        return round(float(average), 2) if average is not None else 0.0

    async def student_gpa(
        self,
        student_id: str,
        academic_year: str | None = None,
        semester: int | None = None,
    ) -> float:
        """Mean grade points over a student's grade rows.

        Args:
            student_id: Student identifier.
            academic_year: Restrict to enrollments of this academic year.
            semester: Restrict to enrollments of this semester.

        Returns:
            GPA rounded to two decimals; 0.0 with no grades.

        Raises:
            StudentNotFoundError: If student not found.
        """
        await self.validator.get_student(student_id)

        query = (
            select(func.avg(Grade.grade_points))
            .join(Enrollment, Enrollment.id == Grade.enrollment_id)
            .where(
                Grade.student_id == student_id,
                Grade.grade_points.is_not(None),
            )
        )
        if academic_year is not None:
            query = query.where(Enrollment.academic_year == academic_year)
        if semester is not None:
            query = query.where(Enrollment.semester == semester)

        result = await self.db.execute(query)
        gpa = result.scalar()
        return round(float(gpa), 2) if gpa is not None else 0.0

    async def student_cgpa(self, student_id: str) -> float:
        """Mean grade points over grade rows of COMPLETED enrollments.

        Returns:
            CGPA rounded to two decimals; 0.0 with no completed grades.

        Raises:
            StudentNotFoundError: If student not found.
        """
        await self.validator.get_student(student_id)

        query = (
            select(func.avg(Grade.grade_points))
            .join(Enrollment, Enrollment.id == Grade.enrollment_id)
            .where(
                Grade.student_id == student_id,
                Grade.grade_points.is_not(None),
                Enrollment.status == EnrollmentStatus.COMPLETED.value,
            )
        )
        result = await self.db.execute(query)
        cgpa = result.scalar()
        return round(float(cgpa), 2) if cgpa is not None else 0.0

    async def pass_rate(self, course_id: str) -> float:
        """Percentage of scored grade rows at or above the pass mark.

        Returns:
            Pass rate between 0 and 100, two decimals; 0.0 with no scores.

        Raises:
            CourseNotFoundError: If course not found.
        """
        await self.validator.get_course(course_id)
        scored, passed = await self._pass_counts(course_id)
        return round(passed / scored * 100, 2) if scored else 0.0

    async def course_statistics(self, course_id: str) -> CourseGradeStatistics:
        """Aggregate grade figures for a course.

        Raises:
            CourseNotFoundError: If course not found.
        """
        await self.validator.get_course(course_id)

        totals = await self.db.execute(
            select(
                func.count(Grade.id),
                func.avg(Grade.numeric_grade),
                func.max(Grade.numeric_grade),
                func.min(Grade.numeric_grade),
            ).where(Grade.course_id == course_id)
        )
        total, average, highest, lowest = totals.one()

        letters = await self.db.execute(
            select(Grade.letter_grade, func.count(Grade.id))
            .where(Grade.course_id == course_id, Grade.letter_grade.is_not(None))
            .group_by(Grade.letter_grade)
        )
        assessments = await self.db.execute(
            select(Grade.assessment_type, func.count(Grade.id))
            .where(Grade.course_id == course_id)
            .group_by(Grade.assessment_type)
        )

        scored, passed = await self._pass_counts(course_id)

        return CourseGradeStatistics(
            course_id=course_id,
            total_grades=total or 0,
            average=round(float(average), 2) if average is not None else 0.0,
            highest=float(highest) if highest is not None else None,
            lowest=float(lowest) if lowest is not None else None,
            pass_rate=round(passed / scored * 100, 2) if scored else 0.0,
            letter_distribution={letter: count for letter, count in letters.all()},
            assessment_distribution={kind: count for kind, count in assessments.all()},
        )

    async def list_student_grades(
        self,
        student_id: str,
        course_id: str | None = None,
        filters: HistoryFilter | None = None,
    ) -> list[GradeResponse]:
        """List a student's grade rows, newest first.

        Args:
            student_id: Student identifier.
            course_id: Restrict to one course.
            filters: Optional grade date range.

        Returns:
            Matching grade rows.

        Raises:
            StudentNotFoundError: If student not found.
        """
        await self.validator.get_student(student_id)

        query = select(Grade).where(Grade.student_id == student_id)
        if course_id is not None:
            query = query.where(Grade.course_id == course_id)
        query = apply_history_filter(query, Grade.grade_date, None, filters)
        query = query.order_by(Grade.grade_date.desc())

        result = await self.db.execute(query)
        return [self._to_response(g) for g in result.scalars().all()]

    async def _pass_counts(self, course_id: str) -> tuple[int, int]:
        """Count scored rows and passing rows for a course."""
        scored_query = select(func.count(Grade.id)).where(
            Grade.course_id == course_id,
            Grade.numeric_grade.is_not(None),
        )
        passed_query = scored_query.where(Grade.numeric_grade >= PASS_THRESHOLD)

        scored = (await self.db.execute(scored_query)).scalar() or 0
        passed = (await self.db.execute(passed_query)).scalar() or 0
        return scored, passed

    async def _get_grade(self, grade_id: str) -> Grade:
        """Get grade by ID.

        Raises:
            GradeNotFoundError: If not found.
        """
        grade = await self.db.get(Grade, grade_id)
        if not grade:
            raise GradeNotFoundError(grade_id)
        return grade

    def _to_response(self, grade: Grade) -> GradeResponse:
        """Convert grade model to response."""
        return GradeResponse.model_validate(grade)
