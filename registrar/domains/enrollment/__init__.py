# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

This package provides course enrollment management functionality including:
- Capacity-checked enrollment
- Dropping enrollments
- Final grade assignment
- Bulk enrollment operations
"""

from registrar.domains.enrollment.service import EnrollmentService

__all__ = ["EnrollmentService"]
