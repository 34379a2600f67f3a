# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import cint


class Examiner(Document):
	"""Examiner profile: ranking priority, daily cap and active flag of a User."""

	def validate(self) -> None:
		self._sync_user_details()
		self._validate_limits()

	def _sync_user_details(self) -> None:
		"""Copy full_name and email from the linked User."""
		if not self.user:
			frappe.throw(_("User is required"))

		full_name, email = frappe.db.get_value("User", self.user, ["full_name", "email"]) or (None, None)
		self.full_name = full_name or self.user
		self.email = email

	def _validate_limits(self) -> None:
		if cint(self.priority) < 1:
			frappe.throw(_("Priority must be 1 or higher"))
		if cint(self.max_exams_per_day) < 0:
			frappe.throw(_("Max Exams Per Day cannot be negative"))
