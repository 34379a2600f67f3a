# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Examiner Availability DocType

One window in which an examiner can take exams. Deleting a window runs
the revocation cascade over the exams it covered.
"""

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import format_datetime, get_datetime

from exam_scheduling.exam_scheduling.scheduling.availability import (
	find_overlapping_windows,
	normalize_window_datetime,
	window_snapshot,
)
from exam_scheduling.exam_scheduling.scheduling.exceptions import ExamSchedulingError


class ExaminerAvailability(Document):
	"""
	Validations:
	- examiner, available_from and available_to required
	- available_to > available_from
	- no overlap with the examiner's other windows
	"""

	def validate(self) -> None:
		self._validate_required_fields()
		self._normalize_window()
		self._validate_window_order()
		self._validate_no_overlap()

	def on_trash(self) -> None:
		"""
		Reassign or cancel the exams covered by this window.

		availability.remove() deletes with ignore_on_trash and runs the
		cascade itself; this path covers deletions from the desk.
		"""
		from exam_scheduling.exam_scheduling.scheduling.revocation import revoke_availability

		result = revoke_availability(window_snapshot(self))
		if result["outcomes"]:
			frappe.msgprint(result["message"], alert=True, indicator="orange")

	def _validate_required_fields(self) -> None:
		if not self.examiner:
			frappe.throw(_("Examiner is required"), ExamSchedulingError)
		if not self.available_from or not self.available_to:
			frappe.throw(_("Available From and Available To are required"), ExamSchedulingError)

	def _normalize_window(self) -> None:
		self.available_from = normalize_window_datetime(self.available_from)
		self.available_to = normalize_window_datetime(self.available_to)

	def _validate_window_order(self) -> None:
		if get_datetime(self.available_to) <= get_datetime(self.available_from):
			frappe.throw(_("Available To must be after Available From"), ExamSchedulingError)

	def _validate_no_overlap(self) -> None:
		overlapping = find_overlapping_windows(
			self.examiner,
			self.available_from,
			self.available_to,
			exclude=self.name
		)
		if overlapping:
			window = overlapping[0]
			frappe.throw(
				_("This availability overlaps with {0} ({1} - {2})").format(
					window.name,
					format_datetime(window.available_from),
					format_datetime(window.available_to)
				),
				ExamSchedulingError
			)
