# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance request and response DTOs."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from registrar.models.common import AttendanceAlertLevel, AttendanceStatus


class MarkAttendanceRequest(BaseModel):
    """Mark one student's presence for one session date."""

    student_id: str = Field(..., description="Student being marked")
    attendance_date: date = Field(..., description="Session date")
    status: AttendanceStatus = Field(..., description="PRESENT, ABSENT or LATE")
    remarks: str | None = Field(None, max_length=255)


class SessionAttendanceEntry(BaseModel):
    """One line of a session roll call."""

    student_id: str
    status: AttendanceStatus
    remarks: str | None = Field(None, max_length=255)


class SessionAttendanceRequest(BaseModel):
    """Roll call for a whole course session."""

    attendance_date: date
    entries: list[SessionAttendanceEntry] = Field(..., min_length=1)


class AttendanceRecordResponse(BaseModel):
    """Stored attendance record."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    enrollment_id: str | None = None
    student_id: str
    course_id: str
    attendance_date: date
    status: str
    remarks: str | None = None
    marked_by: str | None = None
    marked_at: datetime | None = None


class AttendanceListResponse(BaseModel):
    """List of attendance records."""

    items: list[AttendanceRecordResponse]
    total: int


class AttendanceSummary(BaseModel):
    """Attendance figures for one student in one course."""

    student_id: str
    course_id: str
    total_sessions: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    percentage: float = 0.0
    alert: AttendanceAlertLevel | None = None


class AttendanceAlert(BaseModel):
    """Student flagged below the attendance threshold."""

    student_id: str
    course_id: str
    level: AttendanceAlertLevel
    percentage: float
    total_sessions: int
    present: int


class SessionRosterEntry(BaseModel):
    """One enrolled student's line in a session roster."""

    student_id: str
    student_number: str
    student_name: str
    email: str | None = None
    status: str = Field(..., description="PRESENT, ABSENT, LATE or UNMARKED")
    remarks: str | None = None
    marked_by: str | None = None
    marked_at: datetime | None = None
    is_marked: bool = False


class SessionAttendanceReport(BaseModel):
    """Roster of a course session with its roll-call counts."""

    course_id: str
    course_code: str
    course_name: str
    attendance_date: date
    total_students: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    unmarked: int = 0
    entries: list[SessionRosterEntry] = Field(default_factory=list)
