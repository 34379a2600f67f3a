"""
Scheduling Orchestrator

Validates exam slot requests, detects conflicts with other exams,
assigns an examiner and persists the Exam. Used for:
- coordinator-driven scheduling and rescheduling (API)
- auto-scheduling after a Training Session is created or its class slots change

Flow:
	request -> validate shape and time-of-day policy
	        -> session/exam must exist
	        -> no conflict with other exams on the same date
	        -> resolve_and_reserve (examiner or sentinel)
	        -> insert/update Exam
	        -> enqueue notifications after commit
"""

import re
import frappe
from frappe import _
from frappe.utils import cint, getdate, sbool
from typing import Any, Dict, Optional

from .assignment import resolve_and_reserve
from .conflicts import find_exam_conflicts, to_time
from .exam_dates import build_exam_window, describe_slot
from .exceptions import ExamConflictError, ExamSchedulingError
from .settings import get_scheduling_settings

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def build_slot_request(
	session_id: Optional[str] = None,
	date: Any = None,
	time: Any = None,
	duration_minutes: Any = None,
	is_online: Any = False,
	online_link: Optional[str] = None,
	location: Optional[str] = None,
	exam_id: Optional[str] = None
) -> "frappe._dict":
	"""
	Parse a time-slot request payload.

	Args:
		session_id: Training Session name (optional when exam_id is given)
		date: ISO calendar date "YYYY-MM-DD" (or date object)
		time: "HH:MM" 24h (or time object)
		duration_minutes: positive integer
		is_online: bool-like
		online_link: link for online exams
		location: place for on-site exams
		exam_id: Exam to reschedule

	Returns:
		frappe._dict: {session, date, time, duration_minutes, is_online,
			online_link, location, exam}

	Raises:
		ExamSchedulingError: missing or malformed fields
	"""
	missing = []
	if not session_id and not exam_id:
		missing.append("session_id")
	if not date:
		missing.append("date")
	if not time:
		missing.append("time")
	if duration_minutes in (None, ""):
		missing.append("duration_minutes")
	if missing:
		frappe.throw(_("Missing required fields: {0}").format(", ".join(missing)), ExamSchedulingError)

	if isinstance(date, str):
		if not DATE_PATTERN.match(date.strip()):
			frappe.throw(_("Invalid date format. Use YYYY-MM-DD"), ExamSchedulingError)
		date = date.strip()

	if isinstance(time, str) and not TIME_PATTERN.match(time.strip()):
		frappe.throw(_("Invalid time format. Use HH:MM (24h)"), ExamSchedulingError)

	try:
		exam_date = getdate(date)
		exam_time = to_time(time.strip() if isinstance(time, str) else time)
	except Exception:
		frappe.throw(_("Invalid exam date or time"), ExamSchedulingError)

	if isinstance(duration_minutes, bool) or not str(duration_minutes).strip().isdigit():
		frappe.throw(_("Duration must be a positive whole number of minutes"), ExamSchedulingError)
	duration = cint(duration_minutes)
	if duration <= 0:
		frappe.throw(_("Duration must be a positive whole number of minutes"), ExamSchedulingError)

	online = bool(cint(sbool(is_online)))

	return frappe._dict({
		"session": session_id,
		"date": exam_date,
		"time": exam_time,
		"duration_minutes": duration,
		"is_online": online,
		"online_link": online_link if online else None,
		"location": location if not online else None,
		"exam": exam_id,
	})


def validate_slot_request(request: Dict[str, Any], manual: bool = True) -> None:
	"""
	Apply the time-of-day policy.

	Manually scheduled exams must start strictly before exam_latest_start
	(17:00 by default). Auto-scheduled exams use the configured default time.
	"""
	if cint(request.get("duration_minutes")) <= 0:
		frappe.throw(_("Duration must be a positive whole number of minutes"), ExamSchedulingError)

	if not manual:
		return

	latest_start = to_time(get_scheduling_settings().exam_latest_start)
	if to_time(request["time"]) >= latest_start:
		frappe.throw(
			_("Exams must start before {0}").format(latest_start.strftime("%H:%M")),
			ExamSchedulingError
		)


def check_exam_conflicts(request: Dict[str, Any]) -> None:
	"""
	Reject the request if it overlaps another exam on the same date.

	Raises:
		ExamConflictError: with the conflicting exams attached
	"""
	conflicts = find_exam_conflicts(
		request["date"],
		request["time"],
		request["duration_minutes"],
		exclude_exam=request.get("exam")
	)
	if not conflicts:
		return

	names = ", ".join(conflict["name"] for conflict in conflicts)
	message = _("The slot {0} conflicts with existing exam(s): {1}").format(
		describe_slot(request), names
	)
	raise ExamConflictError(message, conflicts)


def get_session_exam(session_name: str) -> Optional[str]:
	"""Lazy Session -> Exam lookup (sessions keep no reference to their exam)."""
	return frappe.db.get_value("Exam", {"training_session": session_name}, "name")


def schedule_exam(
	request: Dict[str, Any],
	requested_by: Optional[str] = None,
	manual: bool = True
) -> Any:
	"""
	Schedule a new exam or reschedule request["exam"].

	Args:
		request: output of build_slot_request()
		requested_by: acting user (defaults to the session user)
		manual: True for coordinator requests (17:00 rule applies)

	Returns:
		Exam doc. assigned_examiner may be empty: assignment degrades to a
		sentinel reason instead of failing the scheduling.
	"""
	requested_by = requested_by or frappe.session.user
	validate_slot_request(request, manual=manual)

	exam = None
	if request.get("exam"):
		_ensure_exists("Exam", request["exam"])
		exam = frappe.get_doc("Exam", request["exam"])
		if not request.get("session"):
			request["session"] = exam.training_session

	_ensure_exists("Training Session", request["session"])
	check_exam_conflicts(request)

	resolution = resolve_and_reserve(
		request["date"],
		request["time"],
		request["duration_minutes"],
		exclude_exam=request.get("exam")
	)

	if exam is None:
		exam = frappe.new_doc("Exam")
		exam.status = "Scheduled"
		exam.requested_by = requested_by
		event = "scheduled"
	else:
		exam.status = "Rescheduled"
		event = "rescheduled"

	exam.training_session = request["session"]
	exam.exam_date = request["date"]
	exam.exam_time = to_time(request["time"]).strftime("%H:%M:%S")
	exam.duration_minutes = request["duration_minutes"]
	exam.is_online = 1 if request.get("is_online") else 0
	exam.online_link = request.get("online_link")
	exam.location = request.get("location")
	exam.assigned_examiner = resolution.examiner
	exam.assignment_reason = resolution.reason

	exam.flags.ignore_permissions = True
	if exam.is_new():
		exam.insert()
	else:
		exam.save()

	frappe.logger().info(
		f"Exam {exam.name} {event} for session {exam.training_session} on "
		f"{describe_slot(request)}; examiner: {exam.assigned_examiner or 'unassigned'} "
		f"({exam.assignment_reason})"
	)

	from exam_scheduling.exam_scheduling.notifications.exam import enqueue_exam_notification
	enqueue_exam_notification(exam, event, requested_by=requested_by)

	return exam


def reschedule_exam(
	exam_name: str,
	date: Any,
	time: Any,
	duration_minutes: Any,
	is_online: Any = None,
	online_link: Optional[str] = None,
	location: Optional[str] = None,
	requested_by: Optional[str] = None
) -> Any:
	"""Move an existing exam to a new slot; mode/link/location default to the current ones."""
	_ensure_exists("Exam", exam_name)
	current = frappe.get_doc("Exam", exam_name)

	if is_online is None:
		is_online = current.is_online
		online_link = online_link or current.online_link
		location = location or current.location

	request = build_slot_request(
		session_id=current.training_session,
		date=date,
		time=time,
		duration_minutes=duration_minutes,
		is_online=is_online,
		online_link=online_link,
		location=location,
		exam_id=exam_name
	)
	return schedule_exam(request, requested_by=requested_by)


def schedule_exam_for_session(
	session_name: str,
	exam_time: Any = None,
	duration_minutes: Optional[int] = None,
	requested_by: Optional[str] = None
) -> Any:
	"""
	Auto-schedule the exam of a Training Session.

	The date comes from the Exam Date Calculator (last class + offset,
	weekends rolled forward); time and duration fall back to the settings.
	An existing exam of the session is rescheduled in place.
	"""
	_ensure_exists("Training Session", session_name)
	session = frappe.get_doc("Training Session", session_name)
	settings = get_scheduling_settings()

	window = build_exam_window(
		session.class_slots,
		exam_time=exam_time,
		duration_minutes=duration_minutes,
		offset_days=settings.exam_offset_days,
		default_time=settings.default_exam_time,
		default_duration=settings.default_exam_duration
	)

	is_online = not session.is_live
	request = frappe._dict({
		"session": session.name,
		"date": window.date,
		"time": window.time,
		"duration_minutes": window.duration_minutes,
		"is_online": is_online,
		"online_link": session.online_link if is_online else None,
		"location": session.location if not is_online else None,
		"exam": get_session_exam(session.name),
	})

	return schedule_exam(
		request,
		requested_by=requested_by or session.created_by,
		manual=exam_time is not None
	)


def cancel_exam(
	exam_name: str,
	reason: Optional[str] = None,
	requested_by: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Cancel an exam: delete it, then notify recipients.

	The notification payload is snapshotted before the delete and only
	queued once the delete succeeded, so a failed cancellation sends nothing.

	Returns:
		dict: {"exam": str, "status": "cancelled", "detail": str}
	"""
	_ensure_exists("Exam", exam_name)
	exam = frappe.get_doc("Exam", exam_name)
	reason = reason or _("Cancelled by coordinator")

	from exam_scheduling.exam_scheduling.notifications.exam import enqueue_exam_notification, exam_snapshot
	exam_data = exam_snapshot(exam)

	frappe.delete_doc("Exam", exam_name, ignore_permissions=True)

	enqueue_exam_notification(exam_data, "cancelled", requested_by=requested_by, reason=reason)

	frappe.logger().info(f"Exam {exam_name} cancelled: {reason}")

	return {"exam": exam_name, "status": "cancelled", "detail": reason}


def _ensure_exists(doctype: str, name: Optional[str]) -> None:
	if not name or not frappe.db.exists(doctype, name):
		frappe.throw(_("{0} {1} not found").format(_(doctype), name), frappe.DoesNotExistError)
