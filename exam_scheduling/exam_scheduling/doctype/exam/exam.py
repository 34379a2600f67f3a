# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Exam DocType

The scheduled exam of a Training Session. Created and updated through
scheduling.orchestrator, which resolves the examiner; the controller
keeps the derived fields consistent.
"""

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import cint

from exam_scheduling.exam_scheduling.scheduling.conflicts import make_slot, slot_bounds
from exam_scheduling.exam_scheduling.scheduling.exceptions import ExamSchedulingError


class Exam(Document):
	def validate(self) -> None:
		"""
		Steps:
		1. Required fields
		2. Positive duration
		3. Derive start_datetime / end_datetime
		4. Clear online_link or location, whichever does not match the mode
		"""
		self._validate_required_fields()
		self._validate_duration()
		self._set_datetime_range()
		self._clear_unused_mode_field()

		if not self.status:
			self.status = "Scheduled"

	def _validate_required_fields(self) -> None:
		if not self.training_session:
			frappe.throw(_("Training Session is required"), ExamSchedulingError)

		if not self.exam_date or not self.exam_time:
			frappe.throw(_("Exam Date and Exam Time are required"), ExamSchedulingError)

	def _validate_duration(self) -> None:
		if cint(self.duration_minutes) <= 0:
			frappe.throw(_("Duration must be greater than zero"), ExamSchedulingError)

	def _set_datetime_range(self) -> None:
		"""start/end are stored so the revocation cascade can query by range."""
		self.start_datetime, self.end_datetime = slot_bounds(
			make_slot(self.exam_date, self.exam_time, self.duration_minutes)
		)

	def _clear_unused_mode_field(self) -> None:
		if cint(self.is_online):
			self.location = None
		else:
			self.online_link = None
