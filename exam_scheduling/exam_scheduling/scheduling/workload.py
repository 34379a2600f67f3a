"""
Workload Tracker

Counts the exams already assigned to an examiner on a calendar day and
exposes the per-day cap (Examiner.max_exams_per_day or the configured
default).
"""

import frappe
from frappe.utils import cint, getdate
from datetime import date
from typing import Any, Optional, Union

from .settings import get_scheduling_settings


def count_scheduled_exams(
	examiner: str,
	day: Union[date, str],
	exclude_exam: Optional[str] = None,
	for_update: bool = False
) -> int:
	"""
	Count exams assigned to the examiner on the given day.

	Every exam on that date counts, past or future.

	Args:
		examiner: Examiner name
		day: calendar day
		exclude_exam: Exam being rescheduled (not counted against itself)
		for_update: locking read. Under REPEATABLE READ a plain count
			returns the transaction snapshot; a locking read sees rows
			committed by concurrent transactions and locks them.
	"""
	if for_update:
		result = frappe.db.sql("""
			SELECT COUNT(*)
			FROM `tabExam`
			WHERE assigned_examiner = %(examiner)s
			AND exam_date = %(day)s
			AND name != %(exclude_exam)s
			FOR UPDATE
		""", {
			"examiner": examiner,
			"day": getdate(day),
			"exclude_exam": exclude_exam or "",
		})
		return cint(result[0][0]) if result else 0

	filters = {
		"assigned_examiner": examiner,
		"exam_date": getdate(day)
	}
	if exclude_exam:
		filters["name"] = ["!=", exclude_exam]

	return cint(frappe.db.count("Exam", filters))


def effective_daily_cap(max_exams_per_day: Any, default: Optional[int] = None) -> int:
	"""Empty or 0 means "use the configured default"."""
	value = cint(max_exams_per_day)
	if value > 0:
		return value

	if default is None:
		default = get_scheduling_settings().default_max_exams_per_day
	return default


def get_max_exams_per_day(examiner: str, default: Optional[int] = None) -> int:
	"""Per-day cap of the examiner, read from the database."""
	return effective_daily_cap(
		frappe.db.get_value("Examiner", examiner, "max_exams_per_day"),
		default
	)


def has_capacity(
	examiner: str,
	day: Union[date, str],
	exclude_exam: Optional[str] = None,
	for_update: bool = False
) -> bool:
	"""True while the examiner is under the daily cap for that day."""
	workload = count_scheduled_exams(examiner, day, exclude_exam, for_update=for_update)
	return workload < get_max_exams_per_day(examiner)
