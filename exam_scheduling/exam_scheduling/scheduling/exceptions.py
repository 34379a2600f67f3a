"""
Scheduling Exceptions

Errors raised by the scheduling services. All of them derive from
frappe.ValidationError so that frappe.throw and the API layer treat them
as user-correctable input errors.
"""

import frappe
from typing import Any, Dict, List, Optional


class ExamSchedulingError(frappe.ValidationError):
	"""Malformed or out-of-policy scheduling request."""
	pass


class ExamConflictError(ExamSchedulingError):
	"""
	The requested slot overlaps one or more existing exams.

	Attributes:
		conflicts: list of dicts describing the overlapping exams
			({"name", "training_session", "exam_date", "exam_time", "duration_minutes"})
	"""

	def __init__(self, message: str, conflicts: Optional[List[Dict[str, Any]]] = None):
		super().__init__(message)
		self.conflicts = conflicts or []
