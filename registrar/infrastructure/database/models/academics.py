# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic entity tables: students, faculty, courses and their records.

Enrollment is the pivot. Grades and attendance rows point back at the
enrollment they were recorded under and survive when it is dropped.
"""

from datetime import date, datetime

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from registrar.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from registrar.models.common import (
    AttendanceStatus,
    CourseStatus,
    EnrollmentStatus,
    FeeStatus,
    StudentStatus,
)
from registrar.utils.datetime import utc_now

ACTIVE_ENROLLMENT_CLAUSE = text("status = 'ENROLLED'")
ATTENDANCE_KEY_COLUMNS = ("student_id", "course_id", "attendance_date")


class Student(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Student master record."""

    __tablename__ = "students"

    student_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=StudentStatus.ACTIVE.value
    )
    fee_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=FeeStatus.PENDING.value
    )
    # Only written by final-grade assignment.
    cgpa: Mapped[float | None] = mapped_column(Float, nullable=True)
    academic_year: Mapped[str | None] = mapped_column(String(9), nullable=True)
    semester: Mapped[int | None] = mapped_column(Integer, nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Faculty(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Teaching staff member."""

    __tablename__ = "faculty"

    employee_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)


class Course(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Course offering with a fixed seat capacity."""

    __tablename__ = "courses"

    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CourseStatus.DRAFT.value
    )
    instructor_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("faculty.id", ondelete="SET NULL"), nullable=True, index=True
    )
    academic_year: Mapped[str | None] = mapped_column(String(9), nullable=True)
    semester: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        CheckConstraint("credits > 0", name="ck_courses_credits_positive"),
        CheckConstraint("capacity > 0", name="ck_courses_capacity_positive"),
    )


class Enrollment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A student's seat in a course.

    Re-enrolling after a drop creates a new row; the partial unique index
    allows at most one ENROLLED row per student and course.
    """

    __tablename__ = "enrollments"

    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("students.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EnrollmentStatus.ENROLLED.value
    )
    enrollment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    final_grade: Mapped[str | None] = mapped_column(String(2), nullable=True)
    grade_points: Mapped[float | None] = mapped_column(Float, nullable=True)
    academic_year: Mapped[str | None] = mapped_column(String(9), nullable=True)
    semester: Mapped[int | None] = mapped_column(Integer, nullable=True)
    enrolled_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    dropped_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    dropped_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    graded_by: Mapped[str | None] = mapped_column(String(36), nullable=True)

    __table_args__ = (
        Index(
            "uq_enrollments_active_student_course",
            "student_id",
            "course_id",
            unique=True,
            postgresql_where=ACTIVE_ENROLLMENT_CLAUSE,
            sqlite_where=ACTIVE_ENROLLMENT_CLAUSE,
        ),
        Index("ix_enrollments_course_status", "course_id", "status"),
        CheckConstraint(
            "status IN ('ENROLLED','DROPPED','COMPLETED')", name="ck_enrollments_status"
        ),
        CheckConstraint(
            "grade_points IS NULL OR (grade_points >= 0 AND grade_points <= 10)",
            name="ck_enrollments_grade_points",
        ),
    )


class Grade(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """One assessment result. Several rows per assessment type are allowed."""

    __tablename__ = "grades"

    enrollment_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("enrollments.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("students.id", ondelete="RESTRICT"), nullable=False
    )
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    assessment_type: Mapped[str] = mapped_column(String(30), nullable=False)
    assessment_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    numeric_grade: Mapped[float | None] = mapped_column(Float, nullable=True)
    letter_grade: Mapped[str | None] = mapped_column(String(2), nullable=True)
    grade_points: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_points: Mapped[float | None] = mapped_column(Float, nullable=True)
    points_earned: Mapped[float | None] = mapped_column(Float, nullable=True)
    percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    grade_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    graded_by: Mapped[str | None] = mapped_column(String(36), nullable=True)

    __table_args__ = (
        Index("ix_grades_student_course_assessment", "student_id", "course_id", "assessment_type"),
        CheckConstraint(
            "numeric_grade IS NULL OR (numeric_grade >= 0 AND numeric_grade <= 100)",
            name="ck_grades_numeric_range",
        ),
    )


class AttendanceRecord(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Presence of one student at one course session date."""

    __tablename__ = "attendance_records"

    enrollment_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("enrollments.id", ondelete="SET NULL"), nullable=True, index=True
    )
    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("students.id", ondelete="RESTRICT"), nullable=False
    )
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    attendance_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(10), nullable=False, default=AttendanceStatus.PRESENT.value
    )
    remarks: Mapped[str | None] = mapped_column(String(255), nullable=True)
    marked_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    marked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=utc_now
    )

    __table_args__ = (
        UniqueConstraint(
            "student_id",
            "course_id",
            "attendance_date",
            name="uq_attendance_student_course_date",
        ),
        CheckConstraint(
            "status IN ('PRESENT','ABSENT','LATE')", name="ck_attendance_status"
        ),
    )