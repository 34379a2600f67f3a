"""
Assignment Resolver

Selects the examiner for an exam window combining availability and
workload. Finding nobody is a normal result (examiner=None plus a reason),
never an exception: the exam is persisted anyway and can be reassigned later.
"""

import frappe
from frappe.utils import cint, getdate
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .availability import find_candidates
from .conflicts import TimeValue, make_slot, slot_bounds
from .settings import get_scheduling_settings
from .workload import count_scheduled_exams, effective_daily_cap, has_capacity

NO_EXAMINERS_REASON = "No examiners available for this time slot"
DAILY_LIMIT_REASON = "All available examiners have reached their daily limit"


def get_exam_window(
	exam_date: Union[date, str],
	exam_time: TimeValue,
	duration_minutes: int
) -> Tuple[datetime, datetime]:
	"""Return the [start, end) datetimes of an exam slot."""
	return slot_bounds(make_slot(exam_date, exam_time, duration_minutes))


def rank_candidates(candidates: List[Dict[str, Any]]) -> "frappe._dict":
	"""
	Pick the best candidate.

	Args:
		candidates: [
			{
				"examiner": str,
				"full_name": str,
				"workload": int,
				"max_exams_per_day": int,
				"priority": int
			},
			...
		]

	Returns:
		frappe._dict: {
			"examiner": str | None,
			"reason": str,
			"priority": int | None,
			"workload": int | None,
			"max_exams_per_day": int | None
		}

	Algorithm:
		1. No candidates -> "no examiners" sentinel
		2. Drop candidates with workload >= max_exams_per_day
		3. Nobody left -> "daily limit" sentinel
		4. Sort by (priority, workload, examiner): lower priority number wins,
		   then lower load, then examiner ID so the result is deterministic
		5. Return the first one
	"""
	if not candidates:
		return _unassigned(NO_EXAMINERS_REASON)

	eligible = [c for c in candidates if c["workload"] < c["max_exams_per_day"]]
	if not eligible:
		return _unassigned(DAILY_LIMIT_REASON)

	eligible.sort(key=lambda c: (c["priority"], c["workload"], c["examiner"]))
	chosen = eligible[0]

	reason = (
		f"Assigned to {chosen.get('full_name') or chosen['examiner']}: "
		f"priority {chosen['priority']}, "
		f"{chosen['workload']} of {chosen['max_exams_per_day']} exam(s) already scheduled that day"
	)

	return frappe._dict({
		"examiner": chosen["examiner"],
		"reason": reason,
		"priority": chosen["priority"],
		"workload": chosen["workload"],
		"max_exams_per_day": chosen["max_exams_per_day"],
	})


def resolve_examiner(
	exam_date: Union[date, str],
	exam_time: TimeValue,
	duration_minutes: int,
	exclude: Optional[Iterable[str]] = None,
	exclude_exam: Optional[str] = None
) -> "frappe._dict":
	"""
	Select an examiner for an exam window.

	Args:
		exam_date: exam day
		exam_time: exam start time
		duration_minutes: exam length
		exclude: examiners that must not be picked (revocation cascade)
		exclude_exam: Exam being rescheduled, not counted in workloads

	Returns:
		frappe._dict: see rank_candidates()
	"""
	start, end = get_exam_window(exam_date, exam_time, duration_minutes)

	candidates = find_candidates(start, end) - set(exclude or ())
	if not candidates:
		return _unassigned(NO_EXAMINERS_REASON)

	settings = get_scheduling_settings()
	profiles = frappe.get_all(
		"Examiner",
		filters={"name": ["in", sorted(candidates)]},
		fields=["name", "full_name", "priority", "max_exams_per_day"]
	)

	day = getdate(exam_date)
	ranked_input = []
	for profile in profiles:
		ranked_input.append({
			"examiner": profile.name,
			"full_name": profile.full_name,
			"workload": count_scheduled_exams(profile.name, day, exclude_exam),
			"max_exams_per_day": effective_daily_cap(profile.max_exams_per_day, settings.default_max_exams_per_day),
			"priority": cint(profile.priority) or settings.default_examiner_priority,
		})

	return rank_candidates(ranked_input)


def resolve_and_reserve(
	exam_date: Union[date, str],
	exam_time: TimeValue,
	duration_minutes: int,
	exclude: Optional[Iterable[str]] = None,
	exclude_exam: Optional[str] = None
) -> "frappe._dict":
	"""
	Resolve an examiner and hold a row lock on it until the transaction ends.

	The Examiner row is locked (SELECT ... FOR UPDATE) and the workload is
	counted again with a locking read, which sees exams committed by
	concurrent requests after this transaction took its snapshot. A
	concurrent request that filled the last slot in the meantime makes
	this examiner ineligible and resolution starts over without it. Callers must persist the Exam in the same
	transaction.
	"""
	excluded = set(exclude or ())
	capped = False

	while True:
		resolution = resolve_examiner(
			exam_date, exam_time, duration_minutes,
			exclude=excluded,
			exclude_exam=exclude_exam
		)
		if not resolution.examiner:
			if capped and resolution.reason == NO_EXAMINERS_REASON:
				return _unassigned(DAILY_LIMIT_REASON)
			return resolution

		frappe.db.get_value("Examiner", resolution.examiner, "name", for_update=True)

		if has_capacity(resolution.examiner, exam_date, exclude_exam, for_update=True):
			return resolution

		frappe.logger().info(
			f"Examiner {resolution.examiner} reached the daily limit while reserving, resolving again"
		)
		excluded.add(resolution.examiner)
		capped = True


def _unassigned(reason: str) -> "frappe._dict":
	return frappe._dict({
		"examiner": None,
		"reason": reason,
		"priority": None,
		"workload": None,
		"max_exams_per_day": None,
	})
