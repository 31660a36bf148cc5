# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Canonical grading scale.

One table serves per-assessment grade points, GPA, CGPA and final course
grades, so the three aggregates can never disagree about what a letter is
worth.
"""

import math

from registrar.domains.exceptions import InvalidAssessmentTypeError, InvalidGradeError
from registrar.models.common import AssessmentType

PASS_THRESHOLD = 60.0
MIN_SCORE = 0.0
MAX_SCORE = 100.0

# Lower bound (inclusive) of each letter band, highest first.
LETTER_BANDS: tuple[tuple[float, str], ...] = (
    (97.0, "A+"),
    (93.0, "A"),
    (90.0, "A-"),
    (87.0, "B+"),
    (83.0, "B"),
    (80.0, "B-"),
    (77.0, "C+"),
    (73.0, "C"),
    (70.0, "C-"),
    (67.0, "D+"),
    (60.0, "D"),
)
FAILING_LETTER = "F"

GRADE_POINTS: dict[str, float] = {
    "A+": 10.0,
    "A": 9.0,
    "A-": 9.0,
    "B+": 8.0,
    "B": 7.0,
    "B-": 7.0,
    "C+": 6.0,
    "C": 5.0,
    "C-": 5.0,
    "D+": 4.0,
    "D": 4.0,
    "F": 0.0,
}


def validate_score(score: float) -> float:
    """Check that a numeric score lies on the 0-100 scale.

    Raises:
        InvalidGradeError: If the score is NaN or outside 0-100.
    """
    if math.isnan(score) or score < MIN_SCORE or score > MAX_SCORE:
        raise InvalidGradeError(
            f"Numeric grade must be between {MIN_SCORE:g} and {MAX_SCORE:g}",
            {"numeric_grade": score},
        )
    return score


def letter_for_score(score: float) -> str:
    """Map a 0-100 score to its letter grade.

    Args:
        score: Numeric score.

    Returns:
        Letter grade, e.g. ``"A"`` for 95.

    Raises:
        InvalidGradeError: If the score is NaN or outside 0-100.
    """
    validate_score(score)
    for lower_bound, letter in LETTER_BANDS:
        if score >= lower_bound:
            return letter
    return FAILING_LETTER


def normalize_letter(letter: str) -> str:
    """Upper-case and validate a letter grade.

    Raises:
        InvalidGradeError: If the letter is not on the scale.
    """
    normalized = letter.strip().upper()
    if normalized not in GRADE_POINTS:
        raise InvalidGradeError(f"Unknown letter grade '{letter}'", {"letter_grade": letter})
    return normalized


def points_for_letter(letter: str) -> float:
    """Grade points for a letter on the 10-point scale.

    Raises:
        InvalidGradeError: If the letter is not on the scale.
    """
    return GRADE_POINTS[normalize_letter(letter)]


def is_passing(score: float) -> bool:
    """Whether a numeric score passes."""
    return score >= PASS_THRESHOLD


def parse_assessment_type(value: str | AssessmentType) -> AssessmentType:
    """Resolve an assessment type name.

    Raises:
        InvalidAssessmentTypeError: If the name is not a known type.
    """
    if isinstance(value, AssessmentType):
        return value
    try:
        return AssessmentType(value.strip().upper())
    except ValueError as e:
        raise InvalidAssessmentTypeError(value) from e


def percentage_of(points_earned: float | None, max_points: float | None) -> float | None:
    """Points earned as a percentage of the maximum, two decimals.

    Returns None unless both values are given and the maximum is positive.
    """
    if points_earned is None or max_points is None or max_points <= 0:
        return None
    return round(points_earned / max_points * 100, 2)
