"""
Exams API Domain

Exam scheduling, session exams, enrollment and examiner availability.
"""

# Re-export endpoints from exam_api for new-style imports
from exam_scheduling.api.exam_api import (
    # Exams
    schedule_exam,
    cancel_exam,
    get_exams,
    get_exam_detail,
    get_my_exams,
    # Sessions
    schedule_session_exam,
    suggest_exam_sessions,
    enroll_in_session,
    # Availability
    create_availability,
    get_my_availability,
    delete_availability,
)

__all__ = [
    # Exams
    "schedule_exam",
    "cancel_exam",
    "get_exams",
    "get_exam_detail",
    "get_my_exams",
    # Sessions
    "schedule_session_exam",
    "suggest_exam_sessions",
    "enroll_in_session",
    # Availability
    "create_availability",
    "get_my_availability",
    "delete_availability",
]
