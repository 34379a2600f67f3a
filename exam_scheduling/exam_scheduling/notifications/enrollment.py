# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Enrollment Notification Service

Confirms a session enrollment to the student and informs the session
creator. Runs as a background job enqueued after the enrollment commits.
"""

import frappe
from frappe import _
from frappe.utils import formatdate

from exam_scheduling.exam_scheduling.scheduling.conflicts import to_time
from exam_scheduling.exam_scheduling.scheduling.exam_dates import format_duration
from exam_scheduling.exam_scheduling.notifications.exam import has_outgoing_email, send_notification


def send_enrollment_notification(enrollment_name: str) -> None:
	"""
	Send the enrollment confirmation and the notice to the session creator.

	Args:
		enrollment_name: Name of the Session Enrollment document
	"""
	try:
		if not has_outgoing_email():
			frappe.logger().warning(
				f"Enrollment notification skipped for {enrollment_name}: "
				"no outgoing Email Account configured in Frappe."
			)
			return

		enrollment = frappe.get_doc("Session Enrollment", enrollment_name)
		session = frappe.get_doc("Training Session", enrollment.training_session)

		schedule = "<br>".join(
			f"{formatdate(slot.class_date)} {to_time(slot.class_time).strftime('%H:%M')} "
			f"({format_duration(slot.duration_minutes)})"
			for slot in session.class_slots
		)
		mode = _("Live") if session.is_live else _("Online")
		where = session.location if session.is_live else (session.online_link or "")

		send_notification(
			enrollment.student_email,
			_("Enrollment Confirmation: {0}").format(session.title),
			f"<h2>{_('Enrollment Confirmed')}</h2>"
			f"<p>{_('You have been enrolled in')} <strong>{session.title}</strong></p>"
			f"<p>{session.description or ''}</p>"
			f"<p><strong>{_('Schedule')}:</strong><br>{schedule}</p>"
			f"<p><strong>{_('Mode')}:</strong> {mode} {where}</p>"
			f"<p>{_('We will notify you when the exam is scheduled.')}</p>"
		)

		creator_email = frappe.db.get_value("User", session.created_by, "email")
		if creator_email:
			total = frappe.db.count("Session Enrollment", {"training_session": session.name})
			send_notification(
				creator_email,
				_("New Student Enrollment: {0}").format(session.title),
				f"<h2>{_('New Student Enrollment')}</h2>"
				f"<p>{enrollment.student_email} {_('enrolled in')} <strong>{session.title}</strong></p>"
				f"<p><strong>{_('Total Enrollments')}:</strong> {total}</p>"
			)

	except Exception as e:
		frappe.log_error(
			message=f"Failed to send enrollment notification for {enrollment_name}: {str(e)}",
			title="Enrollment Notification Failed"
		)
