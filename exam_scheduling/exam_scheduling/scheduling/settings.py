"""
Scheduling Settings

Reads Exam Scheduling Settings (Single DocType) and fills every empty
value with the built-in default.
"""

import frappe
from frappe.utils import cint
from typing import Any, List

DEFAULT_EXAM_TIME = "14:00:00"
DEFAULT_EXAM_DURATION = 60
EXAM_OFFSET_DAYS = 7
DEFAULT_MAX_EXAMS_PER_DAY = 3
DEFAULT_EXAMINER_PRIORITY = 1
CLASS_DAY_START = "06:00:00"
CLASS_DAY_END = "18:00:00"
EXAM_LATEST_START = "17:00:00"

SETTINGS_DOCTYPE = "Exam Scheduling Settings"


def get_scheduling_settings() -> "frappe._dict":
	"""
	Return the effective scheduling configuration.

	Returns:
		frappe._dict: {
			"default_exam_time": str,
			"default_exam_duration": int,
			"exam_offset_days": int,
			"default_max_exams_per_day": int,
			"default_examiner_priority": int,
			"class_day_start": str,
			"class_day_end": str,
			"exam_latest_start": str,
			"send_email_notifications": bool,
			"notify_students": bool,
			"additional_recipients": list[str]
		}
	"""
	doc = frappe.get_cached_doc(SETTINGS_DOCTYPE)

	return frappe._dict({
		"default_exam_time": _value(doc, "default_exam_time", DEFAULT_EXAM_TIME),
		"default_exam_duration": cint(_value(doc, "default_exam_duration", DEFAULT_EXAM_DURATION)),
		"exam_offset_days": cint(_value(doc, "exam_offset_days", EXAM_OFFSET_DAYS)),
		"default_max_exams_per_day": cint(
			_value(doc, "default_max_exams_per_day", DEFAULT_MAX_EXAMS_PER_DAY)
		),
		"default_examiner_priority": cint(
			_value(doc, "default_examiner_priority", DEFAULT_EXAMINER_PRIORITY)
		),
		"class_day_start": _value(doc, "class_day_start", CLASS_DAY_START),
		"class_day_end": _value(doc, "class_day_end", CLASS_DAY_END),
		"exam_latest_start": _value(doc, "exam_latest_start", EXAM_LATEST_START),
		"send_email_notifications": _flag(doc, "send_email_notifications", True),
		"notify_students": _flag(doc, "notify_students", True),
		"additional_recipients": _split_recipients(doc.get("additional_recipients")),
	})


def _value(doc: Any, fieldname: str, default: Any) -> Any:
	value = doc.get(fieldname)
	if value in (None, "", 0):
		return default
	return value


def _flag(doc: Any, fieldname: str, default: bool) -> bool:
	# Check fields of a never-saved Single come back as None
	value = doc.get(fieldname)
	if value is None:
		return default
	return bool(cint(value))


def _split_recipients(value: str) -> List[str]:
	if not value:
		return []
	parts = value.replace("\n", ",").split(",")
	return [part.strip() for part in parts if part.strip()]
