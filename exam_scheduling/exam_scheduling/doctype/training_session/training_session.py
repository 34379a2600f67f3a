# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Training Session DocType

A course with its class slots. Once the session commits, its exam is
auto-scheduled in the background; slot changes reschedule that exam and
deleting the session cancels it.
"""

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import cint, getdate, now_datetime
from datetime import datetime
from typing import List, Optional, Set, Tuple

from exam_scheduling.exam_scheduling.scheduling.conflicts import (
	find_internal_conflicts,
	find_slot_conflicts,
	make_slot,
	to_time,
)
from exam_scheduling.exam_scheduling.scheduling.exam_dates import describe_slot, format_duration
from exam_scheduling.exam_scheduling.scheduling.exceptions import ExamSchedulingError
from exam_scheduling.exam_scheduling.scheduling.settings import get_scheduling_settings


class TrainingSession(Document):
	"""
	Training Session with schedule validation.

	Validations:
	- title and at least one class slot required
	- live sessions need a location
	- every class starts within the permitted daily window (06:00-18:00)
	- new or moved classes cannot be in the past
	- classes of the session do not overlap each other
	- classes do not overlap the creator's other sessions
	"""

	def validate(self) -> None:
		if not self.created_by:
			self.created_by = frappe.session.user

		self._validate_required_fields()
		self._validate_mode()
		self._validate_class_slots()
		self._validate_internal_conflicts()
		self._validate_creator_conflicts()

	def after_insert(self) -> None:
		"""Queue auto-scheduling once the insert commits."""
		from exam_scheduling.exam_scheduling.scheduling.tasks import enqueue_session_scheduling
		enqueue_session_scheduling(self.name)

	def on_update(self) -> None:
		"""Reschedule the exam when the class slots changed."""
		before = self.get_doc_before_save()
		if not before:
			return

		if self._slot_keys(before) == self._slot_keys(self):
			return

		from exam_scheduling.exam_scheduling.scheduling.tasks import enqueue_session_scheduling
		enqueue_session_scheduling(self.name, reschedule=True)

	def on_trash(self) -> None:
		"""Cancel the exam and drop enrollments of the session."""
		exam = self.get_scheduled_exam()
		if exam:
			from exam_scheduling.exam_scheduling.scheduling.orchestrator import cancel_exam
			cancel_exam(exam, reason=_("Training Session {0} was deleted").format(self.title))

		frappe.db.delete("Session Enrollment", {"training_session": self.name})

	def get_scheduled_exam(self) -> Optional[str]:
		"""Name of the session's exam, if any."""
		from exam_scheduling.exam_scheduling.scheduling.orchestrator import get_session_exam
		return get_session_exam(self.name)

	# ===== VALIDATION METHODS =====

	def _validate_required_fields(self) -> None:
		if not self.title:
			frappe.throw(_("Title is required"), ExamSchedulingError)

		if not self.class_slots:
			frappe.throw(_("At least one class slot is required"), ExamSchedulingError)

	def _validate_mode(self) -> None:
		if cint(self.is_live) and not (self.location or "").strip():
			frappe.throw(_("Location is required for live sessions"), ExamSchedulingError)

	def _validate_class_slots(self) -> None:
		"""
		Per-row checks; also fills duration_formatted.

		Classes already stored before this save may lie in the past,
		so editing an ongoing session stays possible.
		"""
		settings = get_scheduling_settings()
		day_start = to_time(settings.class_day_start)
		day_end = to_time(settings.class_day_end)

		before = self.get_doc_before_save()
		previous = self._slot_keys(before) if before else set()
		current_time = now_datetime()

		for row in self.class_slots:
			if not row.class_date or not row.class_time:
				frappe.throw(
					_("Row {0}: Class Date and Class Time are required").format(row.idx),
					ExamSchedulingError
				)

			if cint(row.duration_minutes) <= 0:
				frappe.throw(
					_("Row {0}: Duration must be greater than zero").format(row.idx),
					ExamSchedulingError
				)

			class_time = to_time(row.class_time)
			if class_time < day_start or class_time > day_end:
				frappe.throw(
					_("Row {0}: classes must start between {1} and {2}").format(
						row.idx, day_start.strftime("%H:%M"), day_end.strftime("%H:%M")
					),
					ExamSchedulingError
				)

			starts_at = datetime.combine(getdate(row.class_date), class_time)
			if starts_at < current_time and self._slot_key(row) not in previous:
				frappe.throw(
					_("Row {0}: class on {1} is in the past").format(
						row.idx, starts_at.strftime("%Y-%m-%d %H:%M")
					),
					ExamSchedulingError
				)

			row.duration_formatted = format_duration(row.duration_minutes)

	def _validate_internal_conflicts(self) -> None:
		conflicts = find_internal_conflicts(self._slots())
		if conflicts:
			i, j = conflicts[0]
			frappe.throw(
				_("Class slots in rows {0} and {1} overlap").format(i + 1, j + 1),
				ExamSchedulingError
			)

	def _validate_creator_conflicts(self) -> None:
		"""Compare against the class slots of every other session of the same creator."""
		other_sessions = frappe.get_all(
			"Training Session",
			filters={"created_by": self.created_by, "name": ["!=", self.name]},
			pluck="name"
		)
		if not other_sessions:
			return

		rows = frappe.get_all(
			"Class Slot",
			filters={"parenttype": "Training Session", "parent": ["in", other_sessions]},
			fields=["parent", "class_date", "class_time", "duration_minutes"],
			parent_doctype="Training Session"
		)
		existing = [
			make_slot(row.class_date, row.class_time, row.duration_minutes, session=row.parent)
			for row in rows
		]

		conflicts = find_slot_conflicts(self._slots(), existing)
		if conflicts:
			new_slot, existing_slot = conflicts[0]
			frappe.throw(
				_("Class {0} conflicts with session {1} ({2})").format(
					describe_slot(new_slot), existing_slot.session, describe_slot(existing_slot)
				),
				ExamSchedulingError
			)

	# ===== HELPERS =====

	def _slots(self) -> List["frappe._dict"]:
		return [
			make_slot(row.class_date, row.class_time, row.duration_minutes, idx=row.idx)
			for row in self.class_slots
		]

	def _slot_keys(self, doc: Document) -> Set[Tuple]:
		return {self._slot_key(row) for row in doc.class_slots}

	@staticmethod
	def _slot_key(row) -> Tuple:
		return (getdate(row.class_date), to_time(row.class_time), cint(row.duration_minutes))
