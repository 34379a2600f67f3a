# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Exam Notification Service

Sends email notifications when an exam is scheduled, rescheduled,
reassigned or cancelled.

Recipients are resolved here, never hard-coded:
  - the user who requested the change
  - the assigned examiner
  - students enrolled in the session (if notify_students is enabled)
  - additional_recipients from Exam Scheduling Settings
  - extra recipients returned by the exam_notification_recipients hook

Every recipient is sent independently; a failure is logged and never
propagates to the scheduling operation.
"""

import frappe
from frappe import _
from frappe.utils import formatdate, get_url
from typing import Any, Dict, List, Optional

from exam_scheduling.exam_scheduling.scheduling.conflicts import to_time
from exam_scheduling.exam_scheduling.scheduling.settings import get_scheduling_settings

EXAM_EVENTS = {
	"scheduled": "Exam Scheduled",
	"rescheduled": "Exam Rescheduled",
	"reassigned": "Examiner Reassigned",
	"cancelled": "Exam Cancelled",
}

EMAIL_TEMPLATE = "exam_scheduling/templates/emails/exam_notification.html"


def has_outgoing_email() -> bool:
	"""Return True if at least one outgoing Email Account is configured in Frappe."""
	return bool(frappe.db.count("Email Account", {"enable_outgoing": 1}))


def send_notification(to: str, subject: str, body: str) -> bool:
	"""
	Queue one email for one recipient.

	Returns:
		bool: False if queuing failed (the error is logged)
	"""
	try:
		frappe.sendmail(recipients=[to], subject=subject, message=body)
		return True
	except Exception as e:
		frappe.log_error(
			message=f"Failed to send '{subject}' to {to}: {str(e)}",
			title="Exam Notification Failed"
		)
		return False


def exam_snapshot(exam: Any) -> Dict[str, Any]:
	"""
	Plain, serializable copy of an Exam used as notification payload.

	Cancelled exams are deleted before the notification job runs, so the
	job never reads the Exam back from the database.
	"""
	session_title = frappe.db.get_value("Training Session", exam.training_session, "title")

	examiner_name = None
	examiner_email = None
	if exam.assigned_examiner:
		examiner_name, examiner_email = frappe.db.get_value(
			"Examiner", exam.assigned_examiner, ["full_name", "email"]
		) or (None, None)

	return {
		"name": exam.name,
		"training_session": exam.training_session,
		"session_title": session_title or exam.training_session,
		"exam_date": str(exam.exam_date),
		"exam_time": to_time(exam.exam_time).strftime("%H:%M"),
		"duration_minutes": exam.duration_minutes,
		"is_online": bool(exam.is_online),
		"online_link": exam.online_link or "",
		"location": exam.location or "",
		"assigned_examiner": exam.assigned_examiner,
		"examiner_name": examiner_name or "",
		"examiner_email": examiner_email or "",
		"assignment_reason": exam.assignment_reason or "",
		"status": exam.status,
		"requested_by": exam.requested_by,
	}


def get_exam_recipients(
	exam_data: Dict[str, Any],
	event: str,
	requested_by: Optional[str] = None
) -> List[str]:
	"""
	Resolve notification recipients for an exam event.

	Returns:
		list[str]: unique email addresses, in resolution order
	"""
	settings = get_scheduling_settings()
	recipients = []

	requester = requested_by or exam_data.get("requested_by")
	if requester:
		recipients.append(frappe.db.get_value("User", requester, "email") or requester)

	if exam_data.get("examiner_email"):
		recipients.append(exam_data["examiner_email"])

	if settings.notify_students and exam_data.get("training_session"):
		recipients.extend(frappe.get_all(
			"Session Enrollment",
			filters={"training_session": exam_data["training_session"]},
			pluck="student_email"
		))

	recipients.extend(settings.additional_recipients)

	for hook_path in frappe.get_hooks("exam_notification_recipients"):
		try:
			extra = frappe.get_attr(hook_path)(exam_data, event)
			if extra:
				recipients.extend(extra)
		except Exception:
			frappe.log_error(
				f"Error in exam_notification_recipients hook: {hook_path}",
				"Exam Notification"
			)

	unique = []
	for recipient in recipients:
		if recipient and "@" in recipient and recipient not in unique:
			unique.append(recipient)
	return unique


def enqueue_exam_notification(
	exam: Any,
	event: str,
	requested_by: Optional[str] = None,
	reason: Optional[str] = None
) -> None:
	"""
	Enqueue the notification job after the current transaction commits.

	Args:
		exam: Exam doc, or an exam_snapshot() taken before the exam was deleted
		event: one of EXAM_EVENTS
		requested_by: user who triggered the change
		reason: free text shown in the email (cancellations, reassignments)
	"""
	if not get_scheduling_settings().send_email_notifications:
		return

	frappe.enqueue(
		"exam_scheduling.exam_scheduling.notifications.exam.send_exam_notification",
		exam_data=exam if isinstance(exam, dict) else exam_snapshot(exam),
		exam_event=event,
		requested_by=requested_by,
		reason=reason,
		queue="default",
		enqueue_after_commit=True,
		now=frappe.flags.in_test,
	)


def send_exam_notification(
	exam_data: Dict[str, Any],
	exam_event: str,
	requested_by: Optional[str] = None,
	reason: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Build and send the exam notification emails.

	Runs as a background job.

	Returns:
		dict: {"sent": int, "failed": list[str], "skipped": bool}
	"""
	result = {"sent": 0, "failed": [], "skipped": False}

	try:
		if not has_outgoing_email():
			frappe.logger().warning(
				f"Exam notification skipped for {exam_data.get('name')}: "
				"no outgoing Email Account configured in Frappe."
			)
			result["skipped"] = True
			return result

		recipients = get_exam_recipients(exam_data, exam_event, requested_by)
		if not recipients:
			frappe.logger().info(
				f"No notification recipients for exam {exam_data.get('name')}, skipping email."
			)
			result["skipped"] = True
			return result

		subject = _("{0}: {1} – {2}").format(
			_(EXAM_EVENTS.get(exam_event, "Exam Update")),
			exam_data.get("session_title"),
			formatdate(exam_data.get("exam_date")),
		)
		body = frappe.render_template(EMAIL_TEMPLATE, {
			"event": exam_event,
			"heading": _(EXAM_EVENTS.get(exam_event, "Exam Update")),
			"exam": exam_data,
			"exam_date": formatdate(exam_data.get("exam_date")),
			"reason": reason,
			"exam_url": f"{get_url()}/app/exam/{exam_data.get('name')}",
		})

		for recipient in recipients:
			if send_notification(recipient, subject, body):
				result["sent"] += 1
			else:
				result["failed"].append(recipient)

		frappe.logger().info(
			f"Exam notification '{exam_event}' for {exam_data.get('name')}: "
			f"{result['sent']} sent, {len(result['failed'])} failed"
		)

	except Exception as e:
		frappe.log_error(
			message=f"Failed to send exam notification for {exam_data.get('name')}: {str(e)}",
			title="Exam Notification Failed"
		)

	return result
