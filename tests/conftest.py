# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

Service tests run against a throwaway SQLite database (aiosqlite) created
per test, with the full schema including the partial unique index on active
enrollments. API tests build their own app and patch service factories.
"""

from collections.abc import AsyncGenerator
from itertools import count

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from registrar.core.config import clear_settings_cache
from registrar.infrastructure.database.connection import build_engine, create_schema
from registrar.infrastructure.database.models import Course, Faculty, Student
from registrar.models.common import CourseStatus, StudentStatus

_sequence = count(1)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a file-backed SQLite engine with the registrar schema."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path}/registrar.db")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    """Sessionmaker bound to the test engine."""
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Provide a session for one test."""
    async with session_factory() as session:
        yield session


# =============================================================================
# Seed Helpers
# =============================================================================

# Seeded rows are expunged after commit so a rollback inside the code under
# test cannot expire them.


async def create_student(session: AsyncSession, **overrides) -> Student:
    """Insert a student, ACTIVE unless overridden."""
    n = next(_sequence)
    values = {
        "student_number": f"STU{n:05d}",
        "first_name": "Student",
        "last_name": f"No{n}",
        "email": f"student{n}@college.test",
        "status": StudentStatus.ACTIVE.value,
        "academic_year": "2025-2026",
        "semester": 1,
    }
    values.update(overrides)
    student = Student(**values)
    session.add(student)
    await session.commit()
    session.expunge(student)
    return student


async def create_faculty(session: AsyncSession, **overrides) -> Faculty:
    """Insert a faculty member."""
    n = next(_sequence)
    values = {
        "employee_number": f"EMP{n:05d}",
        "first_name": "Faculty",
        "last_name": f"No{n}",
        "email": f"faculty{n}@college.test",
    }
    values.update(overrides)
    faculty = Faculty(**values)
    session.add(faculty)
    await session.commit()
    session.expunge(faculty)
    return faculty


async def create_course(session: AsyncSession, **overrides) -> Course:
    """Insert a course, ACTIVE with 30 seats unless overridden."""
    n = next(_sequence)
    values = {
        "code": f"CS{n:03d}",
        "name": f"Course {n}",
        "credits": 3,
        "capacity": 30,
        "status": CourseStatus.ACTIVE.value,
        "academic_year": "2025-2026",
        "semester": 1,
    }
    values.update(overrides)
    course = Course(**values)
    session.add(course)
    await session.commit()
    session.expunge(course)
    return course


@pytest.fixture
def make_student(db_session):
    """Factory inserting students into the test session."""

    async def _make(**overrides) -> Student:
        return await create_student(db_session, **overrides)

    return _make


@pytest.fixture
def make_faculty(db_session):
    """Factory inserting faculty into the test session."""

    async def _make(**overrides) -> Faculty:
        return await create_faculty(db_session, **overrides)

    return _make


@pytest.fixture
def make_course(db_session):
    """Factory inserting courses into the test session."""

    async def _make(**overrides) -> Course:
        return await create_course(db_session, **overrides)

    return _make


@pytest_asyncio.fixture
async def faculty(db_session) -> Faculty:
    """Faculty member who teaches ``course``."""
    return await create_faculty(db_session)


@pytest_asyncio.fixture
async def student(db_session) -> Student:
    """An active student."""
    return await create_student(db_session)


@pytest_asyncio.fixture
async def course(db_session, faculty) -> Course:
    """An active course taught by ``faculty``."""
    return await create_course(db_session, instructor_id=faculty.id)


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture
def clean_settings(monkeypatch):
    """Reset cached settings around a test that changes the environment."""
    clear_settings_cache()
    yield monkeypatch
    clear_settings_cache()


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
