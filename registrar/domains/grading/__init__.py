# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grading domain package: the canonical scale and the grade service."""

from registrar.domains.grading.scale import (
    GRADE_POINTS,
    PASS_THRESHOLD,
    letter_for_score,
    points_for_letter,
)
from registrar.domains.grading.service import GradeService

__all__ = [
    "GRADE_POINTS",
    "PASS_THRESHOLD",
    "GradeService",
    "letter_for_score",
    "points_for_letter",
]
