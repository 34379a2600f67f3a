"""
Shared utilities for the Exam Scheduling API.
"""

from .validators import (
    sanitize_string,
    validate_date_string,
    validate_docname,
    validate_time_string,
)

__all__ = [
    "sanitize_string",
    "validate_date_string",
    "validate_docname",
    "validate_time_string",
]
