# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Typed failures raised by the academic domain services.

This module defines the exception hierarchy shared by enrollment, grading
and attendance:
- AcademicsError: Base exception for all academic domain errors
- NotFoundError: A referenced entity or enrollment does not exist
- ValidationError: Input is malformed or out of range
- ConflictError: The operation collides with existing state
- InvalidStateError: The entity is not in a state that allows the operation
- ForbiddenError: The acting user may not touch the entity

Each category carries a stable ``code`` that the HTTP layer maps to a status.
"""


class AcademicsError(Exception):
    """Base exception for all academic domain errors.

    Attributes:
        message: Human-readable error description.
        details: Dictionary with additional error context.
        code: Stable failure category.
    """

    code = "academics_error"

    def __init__(self, message: str, details: dict | None = None):
        """Initialize academic domain error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with details if available."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message

    def to_dict(self) -> dict:
        """Serialize for error responses."""
        return {"code": self.code, "message": self.message, "details": self.details}


class NotFoundError(AcademicsError):
    """A referenced entity does not exist."""

    code = "not_found"


class ValidationError(AcademicsError):
    """Input failed domain validation."""

    code = "validation_error"


class ConflictError(AcademicsError):
    """Operation conflicts with existing records."""

    code = "conflict"


class InvalidStateError(AcademicsError):
    """Entity is in a state that does not allow the operation."""

    code = "invalid_state"


class ForbiddenError(AcademicsError):
    """Acting user is not allowed to perform the operation."""

    code = "forbidden"


class StudentNotFoundError(NotFoundError):
    """Raised when student is not found."""

    def __init__(self, student_id: str):
        super().__init__(f"Student {student_id} not found", {"student_id": student_id})


class CourseNotFoundError(NotFoundError):
    """Raised when course is not found."""

    def __init__(self, course_id: str):
        super().__init__(f"Course {course_id} not found", {"course_id": course_id})


class FacultyNotFoundError(NotFoundError):
    """Raised when faculty member is not found."""

    def __init__(self, faculty_id: str):
        super().__init__(f"Faculty {faculty_id} not found", {"faculty_id": faculty_id})


class EnrollmentNotFoundError(NotFoundError):
    """Raised when an enrollment id does not exist."""

    def __init__(self, enrollment_id: str):
        super().__init__(
            f"Enrollment {enrollment_id} not found", {"enrollment_id": enrollment_id}
        )


class GradeNotFoundError(NotFoundError):
    """Raised when a grade row does not exist."""

    def __init__(self, grade_id: str):
        super().__init__(f"Grade {grade_id} not found", {"grade_id": grade_id})


class NotEnrolledError(NotFoundError):
    """Raised when no qualifying enrollment exists for a student and course."""

    def __init__(self, student_id: str, course_id: str, message: str | None = None):
        super().__init__(
            message or "Student is not enrolled in this course",
            {"student_id": student_id, "course_id": course_id},
        )


class EnrollmentClosedError(NotEnrolledError, InvalidStateError):
    """Raised when the only enrollments for the pair are DROPPED or COMPLETED.

    Catchable both as a missing enrollment and as a state violation.
    """

    code = "not_found"

    def __init__(self, student_id: str, course_id: str, status: str):
        super().__init__(
            student_id,
            course_id,
            f"Enrollment is {status}; no active enrollment for this course",
        )
        self.details["status"] = status


class InvalidGradeError(ValidationError):
    """Raised for out-of-range scores, unknown letters or empty grade input."""


class InvalidAssessmentTypeError(ValidationError):
    """Raised for an unrecognised assessment type."""

    def __init__(self, assessment_type: str):
        super().__init__(
            f"Unknown assessment type '{assessment_type}'",
            {"assessment_type": assessment_type},
        )


class InvalidCourseConfigurationError(ValidationError):
    """Raised when a course cannot accept enrollments as configured."""


class DuplicateEnrollmentError(ConflictError):
    """Raised when student already has an active enrollment in the course."""

    def __init__(self, student_id: str, course_id: str):
        super().__init__(
            "Student is already enrolled in this course",
            {"student_id": student_id, "course_id": course_id},
        )


class CapacityExceededError(ConflictError):
    """Raised when the course has no free seats."""

    def __init__(self, course_id: str, capacity: int):
        super().__init__(
            f"Course is at capacity ({capacity})",
            {"course_id": course_id, "capacity": capacity},
        )


class CourseInactiveError(InvalidStateError):
    """Raised when enrolling into a course that is not ACTIVE."""

    def __init__(self, course_id: str, status: str):
        super().__init__(
            f"Course is not open for enrollment (status {status})",
            {"course_id": course_id, "status": status},
        )


class StudentInactiveError(InvalidStateError):
    """Raised when enrolling a student who is not ACTIVE."""

    def __init__(self, student_id: str, status: str):
        super().__init__(
            f"Student is not active (status {status})",
            {"student_id": student_id, "status": status},
        )


class EnrollmentStateError(InvalidStateError):
    """Raised when an enrollment transition is not allowed from its state."""


class CourseAccessDeniedError(ForbiddenError):
    """Raised when faculty is not the instructor of record for a course."""

    def __init__(self, course_id: str, faculty_id: str):
        super().__init__(
            "Faculty is not the instructor of this course",
            {"course_id": course_id, "faculty_id": faculty_id},
        )
