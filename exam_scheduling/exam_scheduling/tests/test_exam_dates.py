"""
Tests for scheduling/exam_dates.py
"""

import unittest
from datetime import date, time

from exam_scheduling.exam_scheduling.scheduling.exam_dates import (
	build_exam_window,
	calculate_exam_date,
	describe_slot,
	format_duration,
	get_last_class_date,
	roll_forward_weekend,
)


class TestExamDates(unittest.TestCase):
	"""Tests for the exam date calculator."""

	def test_last_class_date_ignores_insertion_order(self):
		slots = [
			{"class_date": "2024-03-05"},
			{"class_date": "2024-03-12"},
			{"class_date": "2024-03-01"},
		]
		self.assertEqual(get_last_class_date(slots), date(2024, 3, 12))

	def test_last_class_date_requires_slots(self):
		with self.assertRaises(ValueError):
			get_last_class_date([])

	def test_weekday_is_kept(self):
		# Friday -> following Friday
		slots = [{"class_date": "2024-03-01"}]
		self.assertEqual(calculate_exam_date(slots), date(2024, 3, 8))

	def test_saturday_rolls_to_monday(self):
		# 2024-03-02 (Sat) + 7 = 2024-03-09 (Sat) -> 2024-03-11 (Mon)
		slots = [{"class_date": "2024-03-02"}]
		self.assertEqual(calculate_exam_date(slots), date(2024, 3, 11))

	def test_sunday_rolls_to_monday(self):
		# 2024-03-03 (Sun) + 7 = 2024-03-10 (Sun) -> 2024-03-11 (Mon)
		slots = [{"class_date": "2024-03-03"}]
		self.assertEqual(calculate_exam_date(slots), date(2024, 3, 11))

	def test_roll_forward_weekend(self):
		self.assertEqual(roll_forward_weekend(date(2024, 3, 9)), date(2024, 3, 11))
		self.assertEqual(roll_forward_weekend(date(2024, 3, 10)), date(2024, 3, 11))
		self.assertEqual(roll_forward_weekend(date(2024, 3, 11)), date(2024, 3, 11))

	def test_custom_offset(self):
		slots = [{"class_date": "2024-03-04"}]
		self.assertEqual(calculate_exam_date(slots, offset_days=3), date(2024, 3, 7))

	def test_build_exam_window_defaults(self):
		window = build_exam_window([{"class_date": "2024-03-01"}])

		self.assertEqual(window.date, date(2024, 3, 8))
		self.assertEqual(window.time, time(14, 0))
		self.assertEqual(window.duration_minutes, 60)

	def test_build_exam_window_overrides(self):
		window = build_exam_window(
			[{"class_date": "2024-03-01"}],
			exam_time="09:30",
			duration_minutes=120
		)

		self.assertEqual(window.time, time(9, 30))
		self.assertEqual(window.duration_minutes, 120)

	def test_format_duration(self):
		self.assertEqual(format_duration(90), "1hr 30min")
		self.assertEqual(format_duration(45), "0hr 45min")
		self.assertEqual(format_duration(120), "2hr 0min")

	def test_describe_slot(self):
		slot = {"date": "2024-03-11", "time": "14:00", "duration_minutes": 60}
		self.assertEqual(describe_slot(slot), "2024-03-11 14:00 (1hr 0min)")
