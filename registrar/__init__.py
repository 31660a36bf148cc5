"""Registrar Core.

Transactional academic records service: course enrollment, grading and
attendance tracking for a college.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
