"""
Scheduled Tasks

Background jobs of the scheduling engine:
- auto_schedule_session_exam: schedules the exam of one Training Session
  (enqueued after the session commits)
- schedule_pending_sessions: cron sweep for sessions whose job never ran
"""

import frappe
from frappe.utils import add_to_date, now_datetime
from typing import Any, Dict, Optional

from .exceptions import ExamConflictError
from .orchestrator import get_session_exam, schedule_exam_for_session

# Sessions younger than this are left to their own enqueued job
PENDING_GRACE_MINUTES = 5


def enqueue_session_scheduling(session_name: str, reschedule: bool = False) -> None:
	"""Queue auto-scheduling for a session once the current transaction commits."""
	frappe.enqueue(
		"exam_scheduling.exam_scheduling.scheduling.tasks.auto_schedule_session_exam",
		session_name=session_name,
		reschedule=reschedule,
		queue="default",
		enqueue_after_commit=True,
		now=frappe.flags.in_test,
	)


def auto_schedule_session_exam(session_name: str, reschedule: bool = False) -> Optional[Dict[str, Any]]:
	"""
	Schedule the exam of a session.

	Re-checks state before acting, so running it twice is harmless:
		- session deleted meanwhile -> skip
		- session already has an exam and reschedule is False -> skip
		- otherwise schedule (or reschedule in place)

	A conflict with another exam is logged as a warning, not to the Error
	Log, since the cron sweep retries the session every 15 minutes.

	Returns:
		dict | None: {"exam", "assigned_examiner", "assignment_reason"} or None if skipped
	"""
	if not frappe.db.exists("Training Session", session_name):
		frappe.logger().info(f"Auto-scheduling skipped: Training Session {session_name} no longer exists")
		return None

	if get_session_exam(session_name) and not reschedule:
		frappe.logger().info(f"Auto-scheduling skipped: Training Session {session_name} already has an exam")
		return None

	try:
		exam = schedule_exam_for_session(session_name)
	except ExamConflictError as e:
		# Expected while another exam holds the derived slot; the sweep retries
		frappe.logger().warning(
			f"Auto-scheduling deferred for Training Session {session_name}: {str(e)}"
		)
		return None
	except Exception as e:
		frappe.log_error(
			message=f"Auto-scheduling failed for Training Session {session_name}: {str(e)}\n\n"
			f"{frappe.get_traceback()}",
			title="Exam Auto-Scheduling Error"
		)
		return None

	return {
		"exam": exam.name,
		"assigned_examiner": exam.assigned_examiner,
		"assignment_reason": exam.assignment_reason,
	}


def schedule_pending_sessions() -> int:
	"""
	Schedule exams for sessions that still have none.
	Runs every 15 minutes via cron (hooks.py).

	Returns:
		int: number of exams created
	"""
	cutoff = add_to_date(now_datetime(), minutes=-PENDING_GRACE_MINUTES)

	pending = frappe.db.sql("""
		SELECT ts.name
		FROM `tabTraining Session` ts
		WHERE ts.creation < %s
		AND NOT EXISTS (
			SELECT 1 FROM `tabExam` e WHERE e.training_session = ts.name
		)
		AND EXISTS (
			SELECT 1 FROM `tabClass Slot` cs
			WHERE cs.parent = ts.name AND cs.parenttype = 'Training Session'
		)
	""", (cutoff,), as_dict=True)

	scheduled_count = 0

	for row in pending:
		if auto_schedule_session_exam(row.name):
			scheduled_count += 1

	if scheduled_count > 0:
		frappe.logger().info(
			f"schedule_pending_sessions: {scheduled_count} pending exam(s) scheduled"
		)

	frappe.db.commit()

	return scheduled_count
