"""
Exam Date Calculator

Derives the exam slot of a training session from its class slots.
Pure functions: callers pass configured defaults in, nothing is read
from the database here.
"""

import frappe
from frappe.utils import getdate
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from .conflicts import TimeValue, to_time
from .settings import DEFAULT_EXAM_DURATION, DEFAULT_EXAM_TIME, EXAM_OFFSET_DAYS

SATURDAY = 5
SUNDAY = 6


def _slot_date(slot: Any) -> date:
	if isinstance(slot, dict):
		value = slot.get("class_date") or slot.get("date")
	else:
		value = slot.class_date
	return getdate(value)


def get_last_class_date(class_slots: List[Any]) -> date:
	"""
	Return the chronologically latest class date.

	Class slots are stored in insertion order, so they are sorted
	descending by date before picking the first one.

	Raises:
		ValueError: if class_slots is empty
	"""
	if not class_slots:
		raise ValueError("At least one class slot is required to compute an exam date")

	dates = sorted((_slot_date(slot) for slot in class_slots), reverse=True)
	return dates[0]


def roll_forward_weekend(target_date: date) -> date:
	"""Move Saturday to Monday (+2) and Sunday to Monday (+1)."""
	weekday = target_date.weekday()
	if weekday == SATURDAY:
		return target_date + timedelta(days=2)
	if weekday == SUNDAY:
		return target_date + timedelta(days=1)
	return target_date


def calculate_exam_date(class_slots: List[Any], offset_days: int = EXAM_OFFSET_DAYS) -> date:
	"""
	Compute the exam date for a session.

	Algorithm:
		1. Take the latest class date
		2. Add offset_days (7 by default)
		3. Roll weekends forward to the next Monday

	Example:
		last class 2024-03-02 (Sat) -> 2024-03-09 (Sat) -> 2024-03-11 (Mon)
	"""
	last_class_date = get_last_class_date(class_slots)
	return roll_forward_weekend(last_class_date + timedelta(days=offset_days))


def build_exam_window(
	class_slots: List[Any],
	exam_time: Optional[TimeValue] = None,
	duration_minutes: Optional[int] = None,
	offset_days: int = EXAM_OFFSET_DAYS,
	default_time: TimeValue = DEFAULT_EXAM_TIME,
	default_duration: int = DEFAULT_EXAM_DURATION
) -> "frappe._dict":
	"""
	Build the full exam window for auto-scheduling.

	Returns:
		frappe._dict: {"date": date, "time": time, "duration_minutes": int}
	"""
	return frappe._dict({
		"date": calculate_exam_date(class_slots, offset_days=offset_days),
		"time": to_time(exam_time or default_time),
		"duration_minutes": int(duration_minutes or default_duration),
	})


def format_duration(duration_minutes: int) -> str:
	"""Format a duration as "1hr 30min"."""
	hours, minutes = divmod(int(duration_minutes), 60)
	return f"{hours}hr {minutes}min"


def describe_slot(slot: Dict[str, Any]) -> str:
	"""Human-readable "2024-03-11 14:00 (1hr 0min)" label for messages."""
	slot_date = getdate(slot["date"]).strftime("%Y-%m-%d")
	slot_time = to_time(slot["time"]).strftime("%H:%M")
	return f"{slot_date} {slot_time} ({format_duration(slot['duration_minutes'])})"
