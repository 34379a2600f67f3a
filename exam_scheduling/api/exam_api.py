"""
Exam Scheduling API Endpoints

Whitelisted functions for the coordinator, examiner and student frontends.
All endpoints require a logged-in user; role checks use frappe.only_for
or explicit ownership checks.

Error contract:
- validation, permission and not-found errors propagate as Frappe errors
- exam slot conflicts return {"success": False, "message", "conflicts"} with HTTP 409
- anything else is logged as "API Error" and reported generically
"""

import math
import frappe
from frappe import _
from frappe.utils import getdate
from typing import Any, Dict, List, Optional

from exam_scheduling.exam_scheduling.scheduling.availability import get_examiner_windows, normalize_window_datetime
from exam_scheduling.exam_scheduling.scheduling.conflicts import to_time
from exam_scheduling.exam_scheduling.scheduling.exceptions import ExamConflictError
from exam_scheduling.exam_scheduling.scheduling.orchestrator import (
	build_slot_request,
	cancel_exam as cancel_scheduled_exam,
	schedule_exam as schedule_exam_request,
	schedule_exam_for_session,
)
from exam_scheduling.exam_scheduling.scheduling.revocation import withdraw_availability
from exam_scheduling.install import COORDINATOR_ROLE, EXAMINER_ROLE

from exam_scheduling.api.shared import (
	sanitize_string,
	validate_date_string,
	validate_docname,
	validate_time_string,
)

COORDINATOR_ROLES = [COORDINATOR_ROLE, "System Manager"]
STAFF_ROLES = [COORDINATOR_ROLE, EXAMINER_ROLE, "System Manager"]

# Students per exam sitting
ONLINE_SITTING_CAPACITY = 20
OFFLINE_SITTING_CAPACITY = 30

EXPECTED_ERRORS = (
	frappe.ValidationError,
	frappe.PermissionError,
	frappe.DoesNotExistError,
	frappe.DuplicateEntryError,
)

EXAM_FIELDS = [
	"name",
	"training_session",
	"exam_date",
	"exam_time",
	"duration_minutes",
	"start_datetime",
	"end_datetime",
	"is_online",
	"online_link",
	"location",
	"assigned_examiner",
	"assignment_reason",
	"status",
	"requested_by",
]


# ===== EXAMS =====

@frappe.whitelist(methods=['POST'])
def schedule_exam(
	session_id: Optional[str] = None,
	date: Optional[str] = None,
	time: Optional[str] = None,
	duration_minutes: Optional[int] = None,
	is_online: Any = 0,
	online_link: Optional[str] = None,
	location: Optional[str] = None,
	exam_id: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Schedule a new exam, or reschedule exam_id, for a Training Session.

	The examiner is assigned automatically (priority, then workload).
	If nobody is available the exam is still created with an empty
	assigned_examiner and the reason in assignment_reason.

	Args:
		session_id: Training Session name
		date: YYYY-MM-DD
		time: HH:MM (24h), must be before 17:00
		duration_minutes: positive integer
		is_online: 1/0
		online_link: link for online exams
		location: place for on-site exams
		exam_id: Exam to reschedule (optional)

	Returns:
		dict: {
			"success": True,
			"message": str,
			"exam": {...}
		}
		or, on overlap with another exam (HTTP 409):
		{
			"success": False,
			"message": str,
			"conflicts": [{"name", "training_session", "exam_date", "exam_time", "duration_minutes"}]
		}

	Example:
		```javascript
		frappe.call({
			method: "exam_scheduling.api.exams.schedule_exam",
			args: {
				session_id: "TS-00001",
				date: "2026-03-16",
				time: "10:00",
				duration_minutes: 90,
				is_online: 1,
				online_link: "https://meet.example.com/abc"
			}
		});
		```
	"""
	frappe.only_for(COORDINATOR_ROLES)

	if session_id:
		session_id = validate_docname(session_id, "session_id")
	if exam_id:
		exam_id = validate_docname(exam_id, "exam_id")

	try:
		request = build_slot_request(
			session_id=session_id,
			date=date,
			time=time,
			duration_minutes=duration_minutes,
			is_online=is_online,
			online_link=sanitize_string(online_link),
			location=sanitize_string(location),
			exam_id=exam_id
		)
		exam = schedule_exam_request(request, requested_by=frappe.session.user)

		return {
			"success": True,
			"message": _("Exam rescheduled") if exam_id else _("Exam scheduled"),
			"exam": _exam_summary(exam),
		}

	except ExamConflictError as e:
		return _conflict_response(e)
	except EXPECTED_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in schedule_exam: {str(e)}", "API Error")
		frappe.throw(_("Error scheduling exam: {0}").format(str(e)))


@frappe.whitelist(methods=['POST'])
def cancel_exam(exam_id: str, reason: Optional[str] = None) -> Dict[str, Any]:
	"""
	Cancel (delete) an exam and notify its recipients.

	Returns:
		dict: {
			"success": True,
			"message": str,
			"outcome": {"exam": str, "status": "cancelled", "detail": str}
		}
	"""
	frappe.only_for(COORDINATOR_ROLES)
	exam_id = validate_docname(exam_id, "exam_id")

	try:
		outcome = cancel_scheduled_exam(
			exam_id,
			reason=sanitize_string(reason),
			requested_by=frappe.session.user
		)
		return {
			"success": True,
			"message": _("Exam cancelled"),
			"outcome": outcome,
		}

	except EXPECTED_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in cancel_exam: {str(e)}", "API Error")
		frappe.throw(_("Error cancelling exam: {0}").format(str(e)))


@frappe.whitelist(methods=['GET'])
def get_exams(
	session_id: Optional[str] = None,
	examiner: Optional[str] = None,
	from_date: Optional[str] = None,
	to_date: Optional[str] = None
) -> List[Dict[str, Any]]:
	"""
	List exams, optionally filtered by session, examiner and date range.

	Examiners without the coordinator role only see their own exams.

	Returns:
		list[dict]: exams ordered by date and time
	"""
	frappe.only_for(STAFF_ROLES)

	filters = {}
	if session_id:
		filters["training_session"] = validate_docname(session_id, "session_id")

	if _is_coordinator():
		if examiner:
			filters["assigned_examiner"] = validate_docname(examiner, "examiner")
	else:
		filters["assigned_examiner"] = _get_current_examiner()

	if from_date and to_date:
		start_date = getdate(validate_date_string(from_date, "from_date"))
		end_date = getdate(validate_date_string(to_date, "to_date"))
		if start_date > end_date:
			frappe.throw(_("from_date must be before or equal to to_date"))
		filters["exam_date"] = ["between", [start_date, end_date]]
	elif from_date:
		filters["exam_date"] = [">=", getdate(validate_date_string(from_date, "from_date"))]
	elif to_date:
		filters["exam_date"] = ["<=", getdate(validate_date_string(to_date, "to_date"))]

	try:
		exams = frappe.get_all(
			"Exam",
			filters=filters,
			fields=EXAM_FIELDS,
			order_by="exam_date asc, exam_time asc"
		)
		return [_exam_summary(exam) for exam in exams]

	except Exception as e:
		frappe.log_error(f"Error in get_exams: {str(e)}", "API Error")
		frappe.throw(_("Error getting exams"))


@frappe.whitelist(methods=['GET'])
def get_exam_detail(exam_id: str) -> Dict[str, Any]:
	"""
	Full detail of one exam, with session title, examiner name and enrollment count.

	Returns:
		dict: exam fields plus "session_title", "examiner_name", "enrolled_students"
	"""
	frappe.only_for(STAFF_ROLES)
	exam_id = validate_docname(exam_id, "exam_id")

	if not frappe.db.exists("Exam", exam_id):
		frappe.throw(_("Exam {0} not found").format(exam_id), frappe.DoesNotExistError)

	exam = frappe.get_doc("Exam", exam_id)

	if not _is_coordinator() and exam.assigned_examiner != _get_current_examiner():
		frappe.throw(_("You can only view your own exams"), frappe.PermissionError)

	detail = _exam_summary(exam)
	detail["session_title"] = frappe.db.get_value("Training Session", exam.training_session, "title")
	detail["examiner_name"] = (
		frappe.db.get_value("Examiner", exam.assigned_examiner, "full_name")
		if exam.assigned_examiner else None
	)
	detail["enrolled_students"] = frappe.db.count(
		"Session Enrollment", {"training_session": exam.training_session}
	)
	return detail


@frappe.whitelist(methods=['GET'])
def get_my_exams() -> List[Dict[str, Any]]:
	"""
	Exams of the sessions the current user is enrolled in.

	Returns:
		list[dict]: exam summaries plus "session_title", ordered by date and time
	"""
	sessions = frappe.get_all(
		"Session Enrollment",
		filters={"student": frappe.session.user},
		pluck="training_session"
	)
	if not sessions:
		return []

	titles = dict(frappe.get_all(
		"Training Session",
		filters={"name": ["in", sessions]},
		fields=["name", "title"],
		as_list=True
	))

	exams = frappe.get_all(
		"Exam",
		filters={"training_session": ["in", sessions]},
		fields=EXAM_FIELDS,
		order_by="exam_date asc, exam_time asc"
	)

	result = []
	for exam in exams:
		summary = _exam_summary(exam)
		summary["session_title"] = titles.get(exam.training_session)
		result.append(summary)
	return result


# ===== SESSIONS =====

@frappe.whitelist(methods=['POST'])
def schedule_session_exam(
	session_id: str,
	exam_time: Optional[str] = None,
	duration_minutes: Optional[int] = None
) -> Dict[str, Any]:
	"""
	Run auto-scheduling for a session now.

	The date is derived from the class slots (last class + 7 days, weekends
	rolled to Monday). An existing exam of the session is rescheduled.
	Allowed for coordinators and for the session's creator.

	Returns:
		dict: {"success": True, "message": str, "exam": {...}}
		or the conflict response (HTTP 409)
	"""
	session_id = validate_docname(session_id, "session_id")

	if not frappe.db.exists("Training Session", session_id):
		frappe.throw(_("Training Session {0} not found").format(session_id), frappe.DoesNotExistError)

	created_by = frappe.db.get_value("Training Session", session_id, "created_by")
	if not _is_coordinator() and created_by != frappe.session.user:
		frappe.throw(_("Only the session creator or a coordinator can schedule its exam"), frappe.PermissionError)

	if exam_time:
		exam_time = validate_time_string(exam_time, "exam_time")

	try:
		exam = schedule_exam_for_session(
			session_id,
			exam_time=exam_time,
			duration_minutes=duration_minutes,
			requested_by=frappe.session.user
		)
		return {
			"success": True,
			"message": _("Exam {0} for {1}").format(exam.status.lower(), session_id),
			"exam": _exam_summary(exam),
		}

	except ExamConflictError as e:
		return _conflict_response(e)
	except EXPECTED_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in schedule_session_exam: {str(e)}", "API Error")
		frappe.throw(_("Error scheduling exam: {0}").format(str(e)))


@frappe.whitelist(methods=['GET'])
def suggest_exam_sessions(session_id: str) -> Dict[str, Any]:
	"""
	Suggest how many exam sittings a session needs.

	One online sitting per 20 enrolled students, one on-site sitting per 30.

	Returns:
		dict: {
			"session": str,
			"total_students": int,
			"online_sessions": int,
			"offline_sessions": int
		}
	"""
	frappe.only_for(COORDINATOR_ROLES)
	session_id = validate_docname(session_id, "session_id")

	if not frappe.db.exists("Training Session", session_id):
		frappe.throw(_("Training Session {0} not found").format(session_id), frappe.DoesNotExistError)

	total_students = frappe.db.count("Session Enrollment", {"training_session": session_id})

	return {
		"session": session_id,
		"total_students": total_students,
		"online_sessions": math.ceil(total_students / ONLINE_SITTING_CAPACITY),
		"offline_sessions": math.ceil(total_students / OFFLINE_SITTING_CAPACITY),
	}


@frappe.whitelist(methods=['POST'])
def enroll_in_session(session_id: str, student: Optional[str] = None) -> Dict[str, Any]:
	"""
	Enroll the current user (or, for coordinators, the given student) in a session.

	Raises:
		frappe.DuplicateEntryError: the student is already enrolled

	Returns:
		dict: {"success": True, "message": str, "enrollment": str}
	"""
	session_id = validate_docname(session_id, "session_id")

	if not frappe.db.exists("Training Session", session_id):
		frappe.throw(_("Training Session {0} not found").format(session_id), frappe.DoesNotExistError)

	if student and student != frappe.session.user:
		frappe.only_for(COORDINATOR_ROLES)
		student = validate_docname(student, "student")
	else:
		student = frappe.session.user

	enrollment = frappe.get_doc({
		"doctype": "Session Enrollment",
		"training_session": session_id,
		"student": student,
	})
	enrollment.insert(ignore_permissions=True)

	return {
		"success": True,
		"message": _("Enrolled successfully"),
		"enrollment": enrollment.name,
	}


# ===== AVAILABILITY =====

@frappe.whitelist(methods=['POST'])
def create_availability(
	available_from: str,
	available_to: str,
	examiner: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Add an availability window for the current examiner.

	Coordinators may pass examiner to create it on someone else's behalf.
	ISO timestamps with an offset are converted to the site timezone.

	Returns:
		dict: {
			"success": True,
			"availability": {"name", "examiner", "available_from", "available_to"}
		}
	"""
	frappe.only_for(STAFF_ROLES)

	if examiner and _is_coordinator():
		examiner = validate_docname(examiner, "examiner")
	else:
		examiner = _get_current_examiner()

	try:
		start = normalize_window_datetime(available_from)
		end = normalize_window_datetime(available_to)
	except Exception:
		frappe.throw(_("Invalid date format. Use an ISO date and time"))

	window = frappe.get_doc({
		"doctype": "Examiner Availability",
		"examiner": examiner,
		"available_from": start,
		"available_to": end,
	})
	window.insert(ignore_permissions=True)

	return {
		"success": True,
		"availability": {
			"name": window.name,
			"examiner": window.examiner,
			"available_from": window.available_from,
			"available_to": window.available_to,
		},
	}


@frappe.whitelist(methods=['GET'])
def get_my_availability() -> List[Dict[str, Any]]:
	"""List the current examiner's availability windows, newest first."""
	frappe.only_for(STAFF_ROLES)
	return get_examiner_windows(_get_current_examiner())


@frappe.whitelist(methods=['POST', 'DELETE'])
def delete_availability(availability_id: str) -> Dict[str, Any]:
	"""
	Withdraw an availability window.

	Exams of the examiner starting inside the window are reassigned to
	another available examiner or, if nobody qualifies, cancelled.

	Returns:
		dict: {
			"success": True,
			"message": str,
			"outcomes": [
				{"exam": "EXAM-00001", "status": "reassigned", "detail": "Assigned to ..."},
				{"exam": "EXAM-00002", "status": "cancelled", "detail": "no available examiners"}
			]
		}
	"""
	frappe.only_for(STAFF_ROLES)
	availability_id = validate_docname(availability_id, "availability_id")

	if not frappe.db.exists("Examiner Availability", availability_id):
		frappe.throw(_("Availability {0} not found").format(availability_id), frappe.DoesNotExistError)

	owner = frappe.db.get_value("Examiner Availability", availability_id, "examiner")
	if not _is_coordinator() and owner != _get_current_examiner():
		frappe.throw(_("You can only delete your own availability"), frappe.PermissionError)

	try:
		result = withdraw_availability(availability_id)
		return {
			"success": True,
			"message": result["message"],
			"outcomes": result["outcomes"],
		}

	except EXPECTED_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in delete_availability: {str(e)}", "API Error")
		frappe.throw(_("Error deleting availability: {0}").format(str(e)))


# ===== HELPERS =====

def _is_coordinator() -> bool:
	if frappe.session.user == "Administrator":
		return True
	return bool(set(COORDINATOR_ROLES) & set(frappe.get_roles()))


def _get_current_examiner() -> str:
	examiner = frappe.db.get_value("Examiner", {"user": frappe.session.user}, "name")
	if not examiner:
		frappe.throw(
			_("No Examiner profile found for {0}").format(frappe.session.user),
			frappe.DoesNotExistError
		)
	return examiner


def _exam_summary(exam: Any) -> Dict[str, Any]:
	summary = {field: exam.get(field) for field in EXAM_FIELDS}
	summary["exam_time"] = to_time(exam.get("exam_time")).strftime("%H:%M")
	summary["is_online"] = bool(exam.get("is_online"))
	return summary


def _conflict_response(error: ExamConflictError) -> Dict[str, Any]:
	frappe.local.response["http_status_code"] = 409
	return {
		"success": False,
		"message": str(error),
		"conflicts": error.conflicts,
	}
