# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for database models.

Tests table definitions and the constraints the store enforces on its own.
"""

from datetime import date
from unittest.mock import MagicMock

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from registrar.infrastructure.database.models import (
    AttendanceRecord,
    Base,
    Enrollment,
    Grade,
    Student,
)
from registrar.infrastructure.database.models.base import TimestampMixin, new_id
from registrar.infrastructure.database.upsert import build_upsert


class TestBase:
    """Test base model functionality."""

    def test_tables_registered(self):
        """Verify every academic table is in the metadata."""
        assert set(Base.metadata.tables) >= {
            "students",
            "faculty",
            "courses",
            "enrollments",
            "grades",
            "attendance_records",
        }

    def test_timestamp_mixin_has_columns(self):
        """Verify TimestampMixin has created_at and updated_at."""
        assert hasattr(TimestampMixin, "created_at")
        assert hasattr(TimestampMixin, "updated_at")

    def test_new_id_is_uuid_string(self):
        """Verify generated ids are 36-character strings."""
        assert len(new_id()) == 36
        assert new_id() != new_id()

    def test_student_full_name(self):
        """Verify full_name joins first and last names."""
        student = Student(first_name="Ada", last_name="Lovelace")

        assert student.full_name == "Ada Lovelace"


class TestConstraints:
    """Test constraints enforced by the schema."""

    @pytest.mark.asyncio
    async def test_one_active_enrollment_per_pair(self, db_session, student, course):
        """Verify the partial unique index rejects a second ENROLLED row."""
        db_session.add(Enrollment(student_id=student.id, course_id=course.id))
        await db_session.commit()

        db_session.add(Enrollment(student_id=student.id, course_id=course.id))
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()

    @pytest.mark.asyncio
    async def test_closed_enrollments_may_repeat(self, db_session, student, course):
        """Verify dropped rows do not count against the unique index."""
        db_session.add_all(
            [
                Enrollment(student_id=student.id, course_id=course.id, status="DROPPED"),
                Enrollment(student_id=student.id, course_id=course.id, status="DROPPED"),
                Enrollment(student_id=student.id, course_id=course.id),
            ]
        )
        await db_session.commit()

    @pytest.mark.asyncio
    async def test_grade_score_range(self, db_session, student, course):
        """Verify the numeric grade CHECK constraint."""
        enrollment = Enrollment(student_id=student.id, course_id=course.id)
        db_session.add(enrollment)
        await db_session.commit()

        db_session.add(
            Grade(
                enrollment_id=enrollment.id,
                student_id=student.id,
                course_id=course.id,
                assessment_type="QUIZ",
                numeric_grade=120,
            )
        )
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()

    @pytest.mark.asyncio
    async def test_history_blocks_student_delete(self, db_session, student, course):
        """Verify deleting a student with enrollments and grades is refused."""
        enrollment = Enrollment(student_id=student.id, course_id=course.id)
        db_session.add(enrollment)
        await db_session.commit()
        db_session.add(
            Grade(
                enrollment_id=enrollment.id,
                student_id=student.id,
                course_id=course.id,
                assessment_type="QUIZ",
                numeric_grade=80,
            )
        )
        await db_session.commit()

        with pytest.raises(IntegrityError):
            await db_session.execute(delete(Student).where(Student.id == student.id))
        await db_session.rollback()

        enrollments = await db_session.execute(select(func.count(Enrollment.id)))
        grades = await db_session.execute(select(func.count(Grade.id)))
        assert enrollments.scalar_one() == 1
        assert grades.scalar_one() == 1

    @pytest.mark.asyncio
    async def test_attendance_natural_key(self, db_session, student, course):
        """Verify one attendance row per student, course and date."""
        for status in ("PRESENT", "ABSENT"):
            db_session.add(
                AttendanceRecord(
                    student_id=student.id,
                    course_id=course.id,
                    attendance_date=date(2025, 9, 1),
                    status=status,
                )
            )
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()


class TestBuildUpsert:
    """Test dialect selection for upserts."""

    @pytest.mark.asyncio
    async def test_sqlite_insert(self, db_session):
        """Verify the SQLite insert exposes ON CONFLICT."""
        stmt = build_upsert(db_session, AttendanceRecord)

        assert hasattr(stmt, "on_conflict_do_update")

    def test_unsupported_dialect(self):
        """Verify other dialects are refused."""
        session = MagicMock()
        session.get_bind.return_value.dialect.name = "mysql"

        with pytest.raises(NotImplementedError):
            build_upsert(session, AttendanceRecord)
