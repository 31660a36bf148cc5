# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for Grades API endpoints."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from registrar.api.dependencies import get_db
from registrar.api.errors import academics_error_handler
from registrar.api.v1 import router as v1_router
from registrar.domains.exceptions import (
    AcademicsError,
    CourseAccessDeniedError,
    GradeNotFoundError,
    InvalidAssessmentTypeError,
    NotEnrolledError,
)
from registrar.models.common import BulkOperationResult
from registrar.models.grade import CourseGradeStatistics, GradeResponse


def _grade(**overrides) -> GradeResponse:
    values = {
        "id": str(uuid4()),
        "enrollment_id": str(uuid4()),
        "student_id": "s-1",
        "course_id": "c-1",
        "assessment_type": "MID_TERM",
        "numeric_grade": 95.0,
        "letter_grade": "A",
        "grade_points": 9.0,
        "grade_date": datetime(2025, 10, 1, tzinfo=timezone.utc),
        "graded_by": "f-1",
    }
    values.update(overrides)
    return GradeResponse(**values)


@pytest.fixture
def app():
    """Create test FastAPI app with domain error handling."""
    app = FastAPI()
    app.add_exception_handler(AcademicsError, academics_error_handler)
    app.include_router(v1_router)

    async def _db():
        yield AsyncMock()

    app.dependency_overrides[get_db] = _db
    return app


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def mock_service():
    """Patch the grade service factory."""
    service = MagicMock()
    with patch("registrar.api.v1.grades._get_grade_service", return_value=service):
        yield service


@pytest.fixture
def mock_validator():
    """Patch the validator factory used for ownership checks."""
    validator = MagicMock()
    validator.require_course_owned_by = AsyncMock()
    with patch("registrar.api.v1.grades._get_validator", return_value=validator):
        yield validator


class TestGradesAPIRouting:
    """Tests for grades API routing."""

    def test_routes_registered(self, app):
        """Test that grade routes are registered."""
        routes = {getattr(route, "path", None) for route in app.routes}

        assert "/api/v1/grades/courses/{course_id}/students/{student_id}" in routes
        assert "/api/v1/grades/courses/{course_id}/bulk" in routes
        assert "/api/v1/grades/courses/{course_id}/average" in routes
        assert "/api/v1/grades/courses/{course_id}/pass-rate" in routes
        assert "/api/v1/grades/courses/{course_id}/statistics" in routes
        assert "/api/v1/grades/students/{student_id}" in routes
        assert "/api/v1/grades/students/{student_id}/gpa" in routes
        assert "/api/v1/grades/students/{student_id}/cgpa" in routes
        assert "/api/v1/grades/{grade_id}" in routes


class TestEnterGradeEndpoint:
    """Tests for POST /grades/courses/{course_id}/students/{student_id}."""

    def test_enter_success(self, client, mock_service, mock_validator):
        """Test entering a grade as the course instructor."""
        mock_service.enter_grade = AsyncMock(return_value=_grade())

        response = client.post(
            "/api/v1/grades/courses/c-1/students/s-1",
            json={"assessment_type": "MID_TERM", "numeric_grade": 95},
            headers={"X-Actor-Id": "f-1"},
        )

        assert response.status_code == 201
        assert response.json()["letter_grade"] == "A"
        mock_validator.require_course_owned_by.assert_awaited_once_with("c-1", "f-1")
        args = mock_service.enter_grade.await_args
        assert args.args[:2] == ("c-1", "s-1")
        assert args.kwargs["entered_by"] == "f-1"

    def test_requires_actor(self, client):
        """Test that grading needs an actor."""
        response = client.post(
            "/api/v1/grades/courses/c-1/students/s-1",
            json={"assessment_type": "QUIZ", "numeric_grade": 80},
        )

        assert response.status_code == 401

    def test_forbidden(self, client, mock_service, mock_validator):
        """Test that only the instructor may grade."""
        mock_service.enter_grade = AsyncMock()
        mock_validator.require_course_owned_by.side_effect = CourseAccessDeniedError("c-1", "f-9")

        response = client.post(
            "/api/v1/grades/courses/c-1/students/s-1",
            json={"assessment_type": "QUIZ", "numeric_grade": 80},
            headers={"X-Actor-Id": "f-9"},
        )

        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"
        mock_service.enter_grade.assert_not_awaited()

    @pytest.mark.parametrize(
        "error,expected_status",
        [
            (NotEnrolledError("s-1", "c-1"), 404),
            (InvalidAssessmentTypeError("HOMEWORK"), 400),
        ],
    )
    def test_domain_errors(self, client, mock_service, mock_validator, error, expected_status):
        """Test grade entry failures."""
        mock_service.enter_grade = AsyncMock(side_effect=error)

        response = client.post(
            "/api/v1/grades/courses/c-1/students/s-1",
            json={"assessment_type": "HOMEWORK", "numeric_grade": 80},
            headers={"X-Actor-Id": "f-1"},
        )

        assert response.status_code == expected_status


class TestBulkAndUpdateEndpoints:
    """Tests for bulk entry and corrections."""

    def test_bulk(self, client, mock_service, mock_validator):
        """Test bulk entry passes entries through."""
        mock_service.bulk_enter_grades = AsyncMock(
            return_value=BulkOperationResult(total=2, succeeded=2)
        )

        response = client.post(
            "/api/v1/grades/courses/c-1/bulk",
            json={
                "entries": [
                    {"student_id": "s-1", "assessment_type": "QUIZ", "numeric_grade": 90},
                    {"student_id": "s-2", "assessment_type": "QUIZ", "letter_grade": "B"},
                ]
            },
            headers={"X-Actor-Id": "f-1"},
        )

        assert response.status_code == 200
        assert response.json()["succeeded"] == 2
        entries = mock_service.bulk_enter_grades.await_args.args[1]
        assert [e.student_id for e in entries] == ["s-1", "s-2"]

    def test_update(self, client, mock_service, mock_validator):
        """Test correcting a grade checks ownership of its course."""
        original = _grade()
        mock_service.get_grade = AsyncMock(return_value=original)
        mock_service.update_grade = AsyncMock(
            return_value=_grade(id=original.id, numeric_grade=98.0, letter_grade="A+")
        )

        response = client.patch(
            f"/api/v1/grades/{original.id}",
            json={"numeric_grade": 98},
            headers={"X-Actor-Id": "f-1"},
        )

        assert response.status_code == 200
        assert response.json()["letter_grade"] == "A+"
        mock_validator.require_course_owned_by.assert_awaited_once_with("c-1", "f-1")

    def test_update_missing_grade(self, client, mock_service, mock_validator):
        """Test correcting an unknown grade."""
        mock_service.get_grade = AsyncMock(side_effect=GradeNotFoundError("g-1"))

        response = client.patch(
            "/api/v1/grades/g-1", json={"comments": "x"}, headers={"X-Actor-Id": "f-1"}
        )

        assert response.status_code == 404


class TestGradeQueries:
    """Tests for grade aggregate endpoints."""

    def test_average(self, client, mock_service):
        """Test course average."""
        mock_service.course_average = AsyncMock(return_value=85.0)

        response = client.get("/api/v1/grades/courses/c-1/average")

        assert response.status_code == 200
        assert response.json() == {"course_id": "c-1", "metric": "average", "value": 85.0}

    def test_pass_rate(self, client, mock_service):
        """Test course pass rate."""
        mock_service.pass_rate = AsyncMock(return_value=100.0)

        response = client.get("/api/v1/grades/courses/c-1/pass-rate")

        assert response.json()["value"] == 100.0

    def test_statistics(self, client, mock_service):
        """Test course statistics."""
        mock_service.course_statistics = AsyncMock(
            return_value=CourseGradeStatistics(
                course_id="c-1", total_grades=3, average=85.0, letter_distribution={"A": 1}
            )
        )

        response = client.get("/api/v1/grades/courses/c-1/statistics")

        assert response.status_code == 200
        assert response.json()["letter_distribution"] == {"A": 1}

    def test_gpa_with_term(self, client, mock_service):
        """Test GPA restricted to a term."""
        mock_service.student_gpa = AsyncMock(return_value=8.5)

        response = client.get(
            "/api/v1/grades/students/s-1/gpa",
            params={"academic_year": "2025-2026", "semester": 1},
        )

        assert response.status_code == 200
        assert response.json()["value"] == 8.5
        assert response.json()["scope"] == "gpa"
        mock_service.student_gpa.assert_awaited_once_with("s-1", "2025-2026", 1)

    def test_cgpa(self, client, mock_service):
        """Test cumulative GPA."""
        mock_service.student_cgpa = AsyncMock(return_value=7.25)

        response = client.get("/api/v1/grades/students/s-1/cgpa")

        assert response.json()["scope"] == "cgpa"
        assert response.json()["value"] == 7.25

    def test_list_student_grades(self, client, mock_service):
        """Test grade history listing."""
        mock_service.list_student_grades = AsyncMock(return_value=[_grade(), _grade()])

        response = client.get("/api/v1/grades/students/s-1", params={"course_id": "c-1"})

        assert response.status_code == 200
        assert response.json()["total"] == 2
        assert mock_service.list_student_grades.await_args.args[1] == "c-1"
