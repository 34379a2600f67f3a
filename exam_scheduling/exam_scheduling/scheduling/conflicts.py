"""
Conflict Detection Service

Detects time conflicts between slots ({date, time, duration_minutes}):
- class slots of a new session against the creator's other sessions
- class slots inside the same session
- a new or rescheduled exam against every other exam on the same date

Two slots conflict only on the same calendar day, using half-open
intervals: a slot ending exactly when the other starts is not a conflict.
"""

import frappe
from frappe.utils import getdate, get_time
from datetime import datetime, time, timedelta, date
from typing import Any, Dict, List, Optional, Tuple, Union

TimeValue = Union[time, timedelta, str]


def to_time(time_value: TimeValue) -> time:
	"""
	Convert the supported time representations to datetime.time.

	Args:
		time_value: time, timedelta (since midnight, as MariaDB returns Time
			columns) or string "HH:MM[:SS]"

	Returns:
		datetime.time object
	"""
	if isinstance(time_value, datetime):
		return time_value.time()
	elif isinstance(time_value, time):
		return time_value
	elif isinstance(time_value, timedelta):
		return (datetime.min + time_value).time()
	elif isinstance(time_value, str):
		return get_time(time_value)
	else:
		raise ValueError(f"Cannot convert {type(time_value)} to time")


def make_slot(
	slot_date: Union[date, str],
	slot_time: TimeValue,
	duration_minutes: int,
	**extra: Any
) -> "frappe._dict":
	"""Build a normalized slot dict; extra keys (name, title...) are kept."""
	slot = frappe._dict(extra)
	slot.date = getdate(slot_date)
	slot.time = to_time(slot_time)
	slot.duration_minutes = int(duration_minutes)
	return slot


def slot_bounds(slot: Dict[str, Any]) -> Tuple[datetime, datetime]:
	"""Return the [start, end) datetimes of a slot."""
	start = datetime.combine(getdate(slot["date"]), to_time(slot["time"]))
	end = start + timedelta(minutes=int(slot["duration_minutes"]))
	return start, end


def has_time_conflict(new_slot: Dict[str, Any], existing_slot: Dict[str, Any]) -> bool:
	"""
	Detect whether two slots overlap.

	Algorithm:
		1. Different calendar days never conflict
		2. Compute start/end of both slots
		3. Overlap iff new_start < existing_end AND new_end > existing_start

	The condition is symmetric, so has_time_conflict(a, b) == has_time_conflict(b, a).
	"""
	if getdate(new_slot["date"]) != getdate(existing_slot["date"]):
		return False

	new_start, new_end = slot_bounds(new_slot)
	existing_start, existing_end = slot_bounds(existing_slot)

	return new_start < existing_end and new_end > existing_start


def find_slot_conflicts(
	new_slots: List[Dict[str, Any]],
	existing_slots: List[Dict[str, Any]]
) -> List[Tuple[Dict[str, Any], Dict[str, Any]]]:
	"""
	Compare every new slot against every existing slot.

	Returns:
		list of (new_slot, existing_slot) pairs that overlap
	"""
	conflicts = []
	for existing in existing_slots:
		for new in new_slots:
			if has_time_conflict(new, existing):
				conflicts.append((new, existing))
	return conflicts


def find_internal_conflicts(slots: List[Dict[str, Any]]) -> List[Tuple[int, int]]:
	"""
	Detect overlapping slots inside the same list.

	Returns:
		list of (i, j) index pairs (i < j, 0-based) that overlap
	"""
	conflicts = []
	for i in range(len(slots)):
		for j in range(i + 1, len(slots)):
			if has_time_conflict(slots[i], slots[j]):
				conflicts.append((i, j))
	return conflicts


def find_exam_conflicts(
	exam_date: Union[date, str],
	exam_time: TimeValue,
	duration_minutes: int,
	exclude_exam: Optional[str] = None
) -> List[Dict[str, Any]]:
	"""
	Find existing exams that overlap the requested exam slot.

	Args:
		exam_date: date of the requested slot
		exam_time: start time of the requested slot
		duration_minutes: length of the requested slot
		exclude_exam: name of the Exam being rescheduled (ignored)

	Returns:
		list[dict]: [
			{
				"name": "EXAM-00001",
				"training_session": "TS-00003",
				"exam_date": date,
				"exam_time": "14:00:00",
				"duration_minutes": 60
			},
			...
		]
	"""
	requested = make_slot(exam_date, exam_time, duration_minutes)

	filters = {"exam_date": requested.date}
	if exclude_exam:
		filters["name"] = ["!=", exclude_exam]

	exams = frappe.get_all(
		"Exam",
		filters=filters,
		fields=["name", "training_session", "exam_date", "exam_time", "duration_minutes"],
		order_by="exam_time asc"
	)

	conflicts = []
	for exam in exams:
		existing = make_slot(exam.exam_date, exam.exam_time, exam.duration_minutes)
		if has_time_conflict(requested, existing):
			conflicts.append({
				"name": exam.name,
				"training_session": exam.training_session,
				"exam_date": existing.date,
				"exam_time": existing.time.strftime("%H:%M:%S"),
				"duration_minutes": existing.duration_minutes,
			})

	return conflicts
