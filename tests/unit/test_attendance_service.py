# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Attendance service."""

from datetime import date, timedelta

import pytest
import pytest_asyncio

from registrar.domains.attendance.service import (
    AttendanceService,
    alert_level,
    percentage_present,
)
from registrar.domains.enrollment.service import EnrollmentService
from registrar.domains.exceptions import (
    CourseNotFoundError,
    NotEnrolledError,
    ValidationError,
)
from registrar.models.attendance import SessionAttendanceEntry
from registrar.models.common import AttendanceAlertLevel, AttendanceStatus, HistoryFilter

SESSION = date(2025, 9, 1)


def _day(n: int) -> date:
    return SESSION + timedelta(days=n)


@pytest.fixture
def attendance_service(db_session):
    """Create attendance service on the test database."""
    return AttendanceService(db=db_session)


@pytest.fixture
def enrollment_service(db_session):
    """Create enrollment service on the test database."""
    return EnrollmentService(db=db_session)


@pytest_asyncio.fixture
async def enrolled(enrollment_service, student, course):
    """Student enrolled in course; returns the enrollment."""
    return await enrollment_service.enroll(student.id, course.id)


async def _mark_days(service, student_id, course_id, statuses):
    for n, status in enumerate(statuses):
        await service.mark_attendance(student_id, course_id, _day(n), status)


class TestThresholdHelpers:
    """Tests for percentage and alert level helpers."""

    def test_percentage_present(self) -> None:
        """Test percentage rounding and the empty case."""
        assert percentage_present(3, 4) == 75.0
        assert percentage_present(2, 3) == 66.67
        assert percentage_present(0, 0) == 0.0

    @pytest.mark.parametrize(
        "percentage,total,expected",
        [
            (100.0, 4, None),
            (75.0, 4, None),
            (74.99, 4, AttendanceAlertLevel.WARNING),
            (50.0, 4, AttendanceAlertLevel.WARNING),
            (49.99, 4, AttendanceAlertLevel.CRITICAL),
            (0.0, 0, None),
        ],
    )
    def test_alert_level(self, percentage, total, expected) -> None:
        """Test the warning and critical boundaries."""
        assert alert_level(percentage, total) == expected


class TestMarkAttendance:
    """Tests for mark_attendance."""

    @pytest.mark.asyncio
    async def test_mark_success(self, attendance_service, enrolled, student, course):
        """Test recording a session."""
        record = await attendance_service.mark_attendance(
            student.id, course.id, SESSION, AttendanceStatus.PRESENT, "on time", "f-1"
        )

        assert record.status == "PRESENT"
        assert record.attendance_date == SESSION
        assert record.enrollment_id == enrolled.id
        assert record.remarks == "on time"
        assert record.marked_by == "f-1"

    @pytest.mark.asyncio
    async def test_second_mark_overwrites(self, attendance_service, enrolled, student, course):
        """Test that marking the same date twice keeps one record with the latest status."""
        first = await attendance_service.mark_attendance(
            student.id, course.id, SESSION, "ABSENT"
        )
        second = await attendance_service.mark_attendance(
            student.id, course.id, SESSION, "late", marked_by="f-2"
        )

        records = await attendance_service.list_attendance(student.id, course.id)

        assert len(records) == 1
        assert second.id == first.id
        assert records[0].status == "LATE"
        assert records[0].marked_by == "f-2"

    @pytest.mark.asyncio
    async def test_unknown_status(self, attendance_service, enrolled, student, course):
        """Test that unknown statuses are rejected."""
        with pytest.raises(ValidationError):
            await attendance_service.mark_attendance(student.id, course.id, SESSION, "EXCUSED")

    @pytest.mark.asyncio
    async def test_never_enrolled(self, attendance_service, student, course):
        """Test marking a student with no enrollment history."""
        with pytest.raises(NotEnrolledError):
            await attendance_service.mark_attendance(student.id, course.id, SESSION, "PRESENT")

    @pytest.mark.asyncio
    async def test_dropped_student_can_be_marked(
        self, attendance_service, enrollment_service, enrolled, student, course
    ):
        """Test that history can still be recorded after a drop."""
        await enrollment_service.drop(student.id, course.id)

        record = await attendance_service.mark_attendance(
            student.id, course.id, SESSION, "ABSENT"
        )

        assert record.enrollment_id == enrolled.id


class TestSessionAttendance:
    """Tests for mark_session_attendance."""

    @pytest.mark.asyncio
    async def test_partial_failure(
        self, attendance_service, enrollment_service, make_student, course
    ):
        """Test that unenrolled students are reported per line."""
        a, b, outsider = await make_student(), await make_student(), await make_student()
        await enrollment_service.enroll(a.id, course.id)
        await enrollment_service.enroll(b.id, course.id)

        entries = [
            SessionAttendanceEntry(student_id=a.id, status=AttendanceStatus.PRESENT),
            SessionAttendanceEntry(student_id=outsider.id, status=AttendanceStatus.PRESENT),
            SessionAttendanceEntry(student_id=b.id, status=AttendanceStatus.LATE),
        ]

        result = await attendance_service.mark_session_attendance(
            course.id, SESSION, entries, marked_by="f-1"
        )

        assert result.total == 3
        assert result.succeeded == 2
        assert result.failed == 1
        assert result.items[1].success is False
        assert result.items[1].error_code == "not_found"
        assert result.items[2].record_id is not None

    @pytest.mark.asyncio
    async def test_unknown_course(self, attendance_service):
        """Test that the course must exist."""
        with pytest.raises(CourseNotFoundError):
            await attendance_service.mark_session_attendance(
                "missing",
                SESSION,
                [SessionAttendanceEntry(student_id="s", status=AttendanceStatus.PRESENT)],
            )


class TestAttendanceFigures:
    """Tests for percentage, alerts and summary."""

    @pytest.mark.asyncio
    async def test_three_of_four_present(self, attendance_service, enrolled, student, course):
        """Test that 3 of 4 sessions present is 75% with no alert."""
        await _mark_days(
            attendance_service, student.id, course.id, ["PRESENT", "PRESENT", "ABSENT", "PRESENT"]
        )

        assert await attendance_service.attendance_percentage(student.id, course.id) == 75.0
        assert await attendance_service.threshold_alert(student.id, course.id) is None

    @pytest.mark.asyncio
    async def test_no_records(self, attendance_service, enrolled, student, course):
        """Test that no records means 0% and no alert."""
        assert await attendance_service.attendance_percentage(student.id, course.id) == 0.0
        assert await attendance_service.threshold_alert(student.id, course.id) is None

    @pytest.mark.asyncio
    async def test_late_counts_against(self, attendance_service, enrolled, student, course):
        """Test that LATE sessions are not present."""
        await _mark_days(
            attendance_service, student.id, course.id, ["PRESENT", "LATE", "PRESENT", "LATE"]
        )

        assert await attendance_service.attendance_percentage(student.id, course.id) == 50.0
        assert (
            await attendance_service.threshold_alert(student.id, course.id)
            == AttendanceAlertLevel.WARNING
        )

    @pytest.mark.asyncio
    async def test_critical(self, attendance_service, enrolled, student, course):
        """Test that attendance under half is critical."""
        await _mark_days(
            attendance_service, student.id, course.id, ["ABSENT", "ABSENT", "PRESENT", "ABSENT"]
        )

        assert (
            await attendance_service.threshold_alert(student.id, course.id)
            == AttendanceAlertLevel.CRITICAL
        )

    @pytest.mark.asyncio
    async def test_summary(self, attendance_service, enrolled, student, course):
        """Test the per-status breakdown."""
        await _mark_days(
            attendance_service, student.id, course.id, ["PRESENT", "ABSENT", "LATE"]
        )

        summary = await attendance_service.attendance_summary(student.id, course.id)

        assert summary.total_sessions == 3
        assert summary.present == 1
        assert summary.absent == 1
        assert summary.late == 1
        assert summary.percentage == 33.33
        assert summary.alert == AttendanceAlertLevel.CRITICAL

    @pytest.mark.asyncio
    async def test_course_alerts(
        self, attendance_service, enrollment_service, make_student, course
    ):
        """Test that only students under the warning line are listed, lowest first."""
        good, weak, poor = await make_student(), await make_student(), await make_student()
        for s in (good, weak, poor):
            await enrollment_service.enroll(s.id, course.id)

        await _mark_days(attendance_service, good.id, course.id, ["PRESENT"] * 4)
        await _mark_days(
            attendance_service, weak.id, course.id, ["PRESENT", "ABSENT", "PRESENT"]
        )
        await _mark_days(attendance_service, poor.id, course.id, ["ABSENT", "ABSENT", "PRESENT"])

        alerts = await attendance_service.course_attendance_alerts(course.id)

        assert [a.student_id for a in alerts] == [poor.id, weak.id]
        assert alerts[0].level == AttendanceAlertLevel.CRITICAL
        assert alerts[0].percentage == 33.33
        assert alerts[1].level == AttendanceAlertLevel.WARNING
        assert alerts[1].total_sessions == 3
        assert alerts[1].present == 2

    @pytest.mark.asyncio
    async def test_course_alerts_unknown_course(self, attendance_service):
        """Test alerts for a missing course."""
        with pytest.raises(CourseNotFoundError):
            await attendance_service.course_attendance_alerts("missing")


class TestSessionRoster:
    """Tests for get_session_attendance."""

    @pytest.mark.asyncio
    async def test_roster_lists_enrolled_students(
        self, attendance_service, enrollment_service, make_student, course
    ):
        """Test statuses per enrolled student, UNMARKED gaps and counts."""
        carter = await make_student(last_name="Carter")
        adams = await make_student(last_name="Adams")
        baker = await make_student(last_name="Baker")
        leaver = await make_student(last_name="Dalton")
        for s in (carter, adams, baker, leaver):
            await enrollment_service.enroll(s.id, course.id)

        await attendance_service.mark_attendance(adams.id, course.id, SESSION, "PRESENT")
        await attendance_service.mark_attendance(
            carter.id, course.id, SESSION, "LATE", marked_by="f-1"
        )
        await attendance_service.mark_attendance(baker.id, course.id, _day(1), "ABSENT")
        await attendance_service.mark_attendance(leaver.id, course.id, SESSION, "ABSENT")
        await enrollment_service.drop(leaver.id, course.id)

        report = await attendance_service.get_session_attendance(course.id, SESSION)

        assert report.course_code == course.code
        assert report.attendance_date == SESSION
        assert [e.student_id for e in report.entries] == [adams.id, baker.id, carter.id]
        assert [e.status for e in report.entries] == ["PRESENT", "UNMARKED", "LATE"]
        assert report.entries[1].is_marked is False
        assert report.entries[1].marked_at is None
        assert report.entries[2].marked_by == "f-1"
        assert report.entries[0].student_name == adams.full_name
        assert report.total_students == 3
        assert (report.present, report.absent, report.late, report.unmarked) == (1, 0, 1, 1)

    @pytest.mark.asyncio
    async def test_roster_empty_course(self, attendance_service, course):
        """Test a course with nobody enrolled."""
        report = await attendance_service.get_session_attendance(course.id, SESSION)

        assert report.entries == []
        assert report.total_students == 0

    @pytest.mark.asyncio
    async def test_roster_unknown_course(self, attendance_service):
        """Test the roster of a missing course."""
        with pytest.raises(CourseNotFoundError):
            await attendance_service.get_session_attendance("missing", SESSION)


class TestListAttendance:
    """Tests for list_attendance."""

    @pytest.mark.asyncio
    async def test_latest_first(self, attendance_service, enrolled, student, course):
        """Test ordering by session date."""
        await _mark_days(attendance_service, student.id, course.id, ["PRESENT", "ABSENT", "LATE"])

        records = await attendance_service.list_attendance(student.id, course.id)

        assert [r.attendance_date for r in records] == [_day(2), _day(1), _day(0)]

    @pytest.mark.asyncio
    async def test_filters(self, attendance_service, enrolled, student, course):
        """Test date range and status filters together."""
        await _mark_days(
            attendance_service, student.id, course.id, ["ABSENT", "PRESENT", "ABSENT", "ABSENT"]
        )

        records = await attendance_service.list_attendance(
            student.id,
            course.id,
            HistoryFilter(start_date=_day(1), end_date=_day(2), statuses=["absent"]),
        )

        assert [r.attendance_date for r in records] == [_day(2)]
