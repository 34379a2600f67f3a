"""
Exam Scheduling API

Structure:
    api/
    ├── __init__.py              # This file
    ├── exams/                   # Exams domain
    │   └── __init__.py          # Re-exports from exam_api
    ├── shared/                  # Shared utilities
    │   ├── __init__.py
    │   └── validators.py        # Request validators
    └── exam_api.py              # Endpoints

Usage:
    frappe.call("exam_scheduling.api.exams.schedule_exam", ...)
    frappe.call("exam_scheduling.api.exam_api.schedule_exam", ...)
"""

from . import exams
from . import shared

__all__ = [
    "exams",
    "shared",
]
