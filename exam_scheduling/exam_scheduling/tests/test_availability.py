"""
Tests for scheduling/availability.py
"""

import unittest
import frappe
import pytz
from datetime import datetime
from frappe.utils import get_datetime, get_system_timezone

from exam_scheduling.exam_scheduling.scheduling.availability import (
	find_candidates,
	find_overlapping_windows,
	get_examiner_windows,
	normalize_window_datetime,
	remove,
)
from exam_scheduling.exam_scheduling.tests.utils import (
	CLASS_FRIDAY,
	EXAM_MONDAY,
	make_exam,
	make_examiner,
	make_session,
	make_window,
)


class TestAvailability(unittest.TestCase):
	"""Tests for the availability index."""

	def setUp(self):
		self.ana = make_examiner("ana.availability@example.com", "Ana")
		self.bob = make_examiner("bob.availability@example.com", "Bob")

		self.ana_window = make_window(self.ana, f"{EXAM_MONDAY} 08:00:00", f"{EXAM_MONDAY} 12:00:00")

	def tearDown(self):
		frappe.db.rollback()

	def test_window_must_fully_contain_exam(self):
		inside = find_candidates(get_datetime(f"{EXAM_MONDAY} 09:00:00"), get_datetime(f"{EXAM_MONDAY} 10:00:00"))
		self.assertIn(self.ana, inside)

		partial = find_candidates(get_datetime(f"{EXAM_MONDAY} 11:30:00"), get_datetime(f"{EXAM_MONDAY} 12:30:00"))
		self.assertNotIn(self.ana, partial)

	def test_exact_window_qualifies(self):
		candidates = find_candidates(get_datetime(f"{EXAM_MONDAY} 08:00:00"), get_datetime(f"{EXAM_MONDAY} 12:00:00"))
		self.assertIn(self.ana, candidates)

	def test_no_candidates_is_empty_set(self):
		candidates = find_candidates(get_datetime(f"{EXAM_MONDAY} 19:00:00"), get_datetime(f"{EXAM_MONDAY} 20:00:00"))
		self.assertEqual(candidates, set())

	def test_overlapping_own_window_rejected(self):
		with self.assertRaises(frappe.ValidationError):
			make_window(self.ana, f"{EXAM_MONDAY} 11:00:00", f"{EXAM_MONDAY} 13:00:00")

	def test_touching_windows_allowed(self):
		make_window(self.ana, f"{EXAM_MONDAY} 12:00:00", f"{EXAM_MONDAY} 14:00:00")
		self.assertEqual(len(get_examiner_windows(self.ana)), 2)

	def test_other_examiner_may_overlap(self):
		window = make_window(self.bob, f"{EXAM_MONDAY} 09:00:00", f"{EXAM_MONDAY} 11:00:00")

		overlapping = find_overlapping_windows(
			self.bob, get_datetime(f"{EXAM_MONDAY} 10:00:00"), get_datetime(f"{EXAM_MONDAY} 12:00:00")
		)
		self.assertEqual([w.name for w in overlapping], [window.name])

		touching = find_overlapping_windows(
			self.ana, get_datetime(f"{EXAM_MONDAY} 12:00:00"), get_datetime(f"{EXAM_MONDAY} 13:00:00")
		)
		self.assertEqual(touching, [])

	def test_window_end_must_follow_start(self):
		with self.assertRaises(frappe.ValidationError):
			make_window(self.bob, f"{EXAM_MONDAY} 12:00:00", f"{EXAM_MONDAY} 12:00:00")

	def test_remove_returns_snapshot_and_keeps_exams(self):
		session = make_session("Availability Session", [(CLASS_FRIDAY, "09:00", 60)])
		exam = make_exam(session.name, EXAM_MONDAY, "09:00:00", examiner=self.ana)

		removed = remove(self.ana_window.name)

		self.assertEqual(removed.name, self.ana_window.name)
		self.assertEqual(removed.examiner, self.ana)
		self.assertEqual(removed.available_from, get_datetime(f"{EXAM_MONDAY} 08:00:00"))
		self.assertFalse(frappe.db.exists("Examiner Availability", self.ana_window.name))
		self.assertEqual(frappe.db.get_value("Exam", exam.name, "assigned_examiner"), self.ana)

	def test_normalize_naive_datetime_unchanged(self):
		self.assertEqual(
			normalize_window_datetime(f"{EXAM_MONDAY} 09:00:00"),
			datetime(2030, 3, 11, 9, 0)
		)

	def test_normalize_aware_datetime_to_system_timezone(self):
		expected = pytz.utc.localize(datetime(2030, 3, 11, 13, 0)).astimezone(
			pytz.timezone(get_system_timezone() or "UTC")
		).replace(tzinfo=None)

		self.assertEqual(normalize_window_datetime("2030-03-11T13:00:00+00:00"), expected)
