# Copyright (c) 2026, Sebastian Ortiz Valencia and Contributors
# See license.txt

"""
Tests for Exam DocType
"""

import frappe
from frappe.tests.utils import FrappeTestCase
from frappe.utils import get_datetime

from exam_scheduling.exam_scheduling.tests.utils import make_exam, make_session


class TestExam(FrappeTestCase):
	"""Tests for Exam DocType."""

	def setUp(self):
		self.session = make_session("Exam Doctype Session", [("2030-06-03", "09:00", 60)]).name

	def tearDown(self):
		frappe.db.rollback()

	def test_datetime_range_derived(self):
		exam = make_exam(self.session, "2030-06-17", "10:00:00", duration_minutes=90)

		self.assertEqual(get_datetime(exam.start_datetime), get_datetime("2030-06-17 10:00:00"))
		self.assertEqual(get_datetime(exam.end_datetime), get_datetime("2030-06-17 11:30:00"))
		self.assertEqual(exam.status, "Scheduled")

	def test_online_exam_clears_location(self):
		exam = frappe.get_doc({
			"doctype": "Exam",
			"training_session": self.session,
			"exam_date": "2030-06-17",
			"exam_time": "10:00:00",
			"duration_minutes": 60,
			"is_online": 1,
			"online_link": "https://meet.example.com/exam",
			"location": "Room 1"
		}).insert(ignore_permissions=True)

		self.assertIsNone(exam.location)
		self.assertEqual(exam.online_link, "https://meet.example.com/exam")

	def test_onsite_exam_clears_link(self):
		exam = frappe.get_doc({
			"doctype": "Exam",
			"training_session": self.session,
			"exam_date": "2030-06-17",
			"exam_time": "10:00:00",
			"duration_minutes": 60,
			"is_online": 0,
			"online_link": "https://meet.example.com/exam",
			"location": "Room 1"
		}).insert(ignore_permissions=True)

		self.assertIsNone(exam.online_link)
		self.assertEqual(exam.location, "Room 1")

	def test_zero_duration_rejected(self):
		with self.assertRaises(frappe.ValidationError):
			make_exam(self.session, "2030-06-17", "10:00:00", duration_minutes=0)
