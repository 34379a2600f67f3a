"""
Revocation Cascade

When an examiner withdraws an availability window, every exam of theirs
starting inside that window is reassigned to another examiner or, if
nobody qualifies, cancelled. Each exam is processed in its own savepoint:
one failure is reported for that exam and the others go on.
"""

import frappe
from frappe import _
from frappe.utils import get_datetime
from typing import Any, Dict, List

from .assignment import resolve_and_reserve
from .availability import remove
from .orchestrator import cancel_exam

NO_EXAMS_AFFECTED = "no exams affected"
NO_AVAILABLE_EXAMINERS = "no available examiners"


def find_affected_exams(examiner: str, available_from: Any, available_to: Any) -> List[str]:
	"""
	Exams assigned to the examiner whose start falls within [available_from, available_to].

	Returns:
		list[str]: Exam names ordered by start
	"""
	return frappe.get_all(
		"Exam",
		filters={
			"assigned_examiner": examiner,
			"start_datetime": ["between", [get_datetime(available_from), get_datetime(available_to)]]
		},
		order_by="start_datetime asc",
		pluck="name"
	)


def revoke_availability(window: Dict[str, Any]) -> Dict[str, Any]:
	"""
	Run the cascade for a removed availability window.

	Args:
		window: {"name", "examiner", "available_from", "available_to"}
			(see availability.window_snapshot)

	Returns:
		dict: {
			"message": str,
			"outcomes": [
				{"exam": str, "status": "reassigned" | "cancelled" | "error", "detail": str},
				...
			]
		}
	"""
	affected = find_affected_exams(
		window["examiner"], window["available_from"], window["available_to"]
	)
	if not affected:
		return {"message": NO_EXAMS_AFFECTED, "outcomes": []}

	outcomes = []
	for exam_name in affected:
		save_point = f"revoke_{frappe.generate_hash(length=10)}"
		frappe.db.savepoint(save_point)
		try:
			outcomes.append(_reassign_or_cancel(exam_name, window["examiner"]))
		except Exception as e:
			frappe.db.rollback(save_point=save_point)
			frappe.log_error(
				message=f"Revocation of {window.get('name')} failed for exam {exam_name}: {str(e)}\n\n"
				f"{frappe.get_traceback()}",
				title="Availability Revocation Error"
			)
			outcomes.append({"exam": exam_name, "status": "error", "detail": str(e)})

	reassigned = sum(1 for o in outcomes if o["status"] == "reassigned")
	cancelled = sum(1 for o in outcomes if o["status"] == "cancelled")
	failed = len(outcomes) - reassigned - cancelled

	message = _("{0} exam(s) affected: {1} reassigned, {2} cancelled, {3} failed").format(
		len(outcomes), reassigned, cancelled, failed
	)
	frappe.logger().info(
		f"Availability {window.get('name')} of {window['examiner']} revoked. {message}"
	)

	return {"message": message, "outcomes": outcomes}


def withdraw_availability(availability_name: str) -> Dict[str, Any]:
	"""Delete a window, then cascade over its exams."""
	window = remove(availability_name)
	return revoke_availability(window)


def _reassign_or_cancel(exam_name: str, withdrawing_examiner: str) -> Dict[str, Any]:
	exam = frappe.get_doc("Exam", exam_name)

	resolution = resolve_and_reserve(
		exam.exam_date,
		exam.exam_time,
		exam.duration_minutes,
		exclude=[withdrawing_examiner],
		exclude_exam=exam.name
	)

	if not resolution.examiner:
		cancel_exam(exam.name, reason=NO_AVAILABLE_EXAMINERS)
		return {"exam": exam_name, "status": "cancelled", "detail": NO_AVAILABLE_EXAMINERS}

	exam.assigned_examiner = resolution.examiner
	exam.assignment_reason = resolution.reason
	exam.flags.ignore_permissions = True
	exam.save()

	from exam_scheduling.exam_scheduling.notifications.exam import enqueue_exam_notification
	enqueue_exam_notification(
		exam,
		"reassigned",
		reason=_("{0} withdrew availability").format(withdrawing_examiner)
	)

	return {"exam": exam_name, "status": "reassigned", "detail": resolution.reason}
