# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import now_datetime

from exam_scheduling.exam_scheduling.scheduling.settings import get_scheduling_settings


class SessionEnrollment(Document):
	"""One student enrolled in one Training Session (unique pair)."""

	def validate(self) -> None:
		self._validate_not_enrolled()

		self.student_email = frappe.db.get_value("User", self.student, "email") or self.student
		if not self.enrolled_at:
			self.enrolled_at = now_datetime()

	def after_insert(self) -> None:
		if not get_scheduling_settings().send_email_notifications:
			return

		frappe.enqueue(
			"exam_scheduling.exam_scheduling.notifications.enrollment.send_enrollment_notification",
			enrollment_name=self.name,
			queue="default",
			enqueue_after_commit=True,
			now=frappe.flags.in_test,
		)

	def _validate_not_enrolled(self) -> None:
		existing = frappe.db.exists("Session Enrollment", {
			"training_session": self.training_session,
			"student": self.student,
			"name": ["!=", self.name]
		})
		if existing:
			frappe.throw(
				_("{0} is already enrolled in {1}").format(self.student, self.training_session),
				frappe.DuplicateEntryError
			)
