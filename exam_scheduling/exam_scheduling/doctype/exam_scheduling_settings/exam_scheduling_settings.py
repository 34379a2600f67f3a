# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import cint


class ExamSchedulingSettings(Document):
	def validate(self) -> None:
		for fieldname in ("default_exam_duration", "default_max_exams_per_day"):
			if self.get(fieldname) not in (None, "") and cint(self.get(fieldname)) <= 0:
				frappe.throw(_("{0} must be greater than zero").format(self.meta.get_label(fieldname)))

		if cint(self.exam_offset_days) < 0:
			frappe.throw(_("Exam Offset (Days) cannot be negative"))
