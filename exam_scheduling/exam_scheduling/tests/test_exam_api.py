"""
Tests for api/exam_api.py

Tests whitelisted API endpoints.
"""

import unittest
import frappe

from exam_scheduling.api.exam_api import (
	cancel_exam,
	create_availability,
	delete_availability,
	enroll_in_session,
	get_exam_detail,
	get_exams,
	get_my_availability,
	get_my_exams,
	schedule_exam,
	schedule_session_exam,
	suggest_exam_sessions,
)
from exam_scheduling.exam_scheduling.tests.utils import (
	CLASS_FRIDAY,
	CLASS_SATURDAY,
	EXAM_MONDAY,
	make_examiner,
	make_session,
	make_user,
	make_window,
)


class TestExamAPI(unittest.TestCase):
	"""Tests for API endpoints."""

	def setUp(self):
		self.session = make_session("API Session", [(CLASS_FRIDAY, "09:00", 60)]).name

		self.ana = make_examiner("ana.api@example.com", "Ana", priority=1)
		self.ana_window = make_window(self.ana, f"{EXAM_MONDAY} 08:00:00", f"{EXAM_MONDAY} 18:00:00")

	def tearDown(self):
		frappe.set_user("Administrator")
		frappe.local.response.pop("http_status_code", None)
		frappe.db.rollback()

	def _schedule(self, time="09:00", duration=60):
		return schedule_exam(
			session_id=self.session,
			date=EXAM_MONDAY,
			time=time,
			duration_minutes=duration,
			is_online=1,
			online_link="https://meet.example.com/exam"
		)

	def test_schedule_exam_returns_summary(self):
		result = self._schedule()

		self.assertTrue(result["success"])
		exam = result["exam"]
		self.assertEqual(exam["training_session"], self.session)
		self.assertEqual(exam["exam_time"], "09:00")
		self.assertEqual(exam["assigned_examiner"], self.ana)
		self.assertIs(exam["is_online"], True)
		self.assertEqual(exam["status"], "Scheduled")

	def test_schedule_exam_conflict_returns_409(self):
		first = self._schedule(time="09:00", duration=90)

		result = self._schedule(time="10:00")

		self.assertFalse(result["success"])
		self.assertEqual([c["name"] for c in result["conflicts"]], [first["exam"]["name"]])
		self.assertEqual(frappe.local.response.get("http_status_code"), 409)

	def test_schedule_exam_after_five_rejected(self):
		with self.assertRaises(frappe.ValidationError):
			self._schedule(time="17:30")

	def test_schedule_exam_invalid_session_id(self):
		with self.assertRaises(frappe.ValidationError):
			schedule_exam(session_id="TS-1; DROP TABLE", date=EXAM_MONDAY, time="09:00", duration_minutes=60)

	def test_reschedule_through_exam_id(self):
		exam_name = self._schedule()["exam"]["name"]

		result = schedule_exam(
			date=EXAM_MONDAY,
			time="11:00",
			duration_minutes=60,
			is_online=1,
			online_link="https://meet.example.com/exam",
			exam_id=exam_name
		)

		self.assertTrue(result["success"])
		self.assertEqual(result["exam"]["name"], exam_name)
		self.assertEqual(result["exam"]["status"], "Rescheduled")

	def test_cancel_exam(self):
		exam_name = self._schedule()["exam"]["name"]

		result = cancel_exam(exam_name, reason="Examiner sick")

		self.assertTrue(result["success"])
		self.assertEqual(result["outcome"]["status"], "cancelled")
		self.assertFalse(frappe.db.exists("Exam", exam_name))

	def test_get_exams_filtered_by_session(self):
		exam_name = self._schedule()["exam"]["name"]

		exams = get_exams(session_id=self.session)
		names = [exam["name"] for exam in exams]

		self.assertIn(exam_name, names)
		self.assertTrue(all(exam["training_session"] == self.session for exam in exams))

	def test_get_exams_invalid_range(self):
		with self.assertRaises(frappe.ValidationError):
			get_exams(from_date="2030-03-12", to_date="2030-03-11")

	def test_get_exam_detail(self):
		exam_name = self._schedule()["exam"]["name"]

		detail = get_exam_detail(exam_name)

		self.assertEqual(detail["session_title"], "API Session")
		self.assertEqual(detail["examiner_name"], "Ana")
		self.assertEqual(detail["enrolled_students"], 0)

	def test_get_exam_detail_missing(self):
		with self.assertRaises(frappe.DoesNotExistError):
			get_exam_detail("EXAM-DOES-NOT-EXIST")

	def test_get_my_exams_as_student(self):
		student = make_user("student.myexams@example.com")
		exam_name = self._schedule()["exam"]["name"]

		frappe.set_user(student)
		self.assertEqual(get_my_exams(), [])

		enroll_in_session(self.session)
		exams = get_my_exams()

		self.assertIn(exam_name, [exam["name"] for exam in exams])
		self.assertTrue(all(exam["training_session"] == self.session for exam in exams))
		self.assertEqual(exams[0]["session_title"], "API Session")

	def test_schedule_session_exam_uses_explicit_time(self):
		result = schedule_session_exam(self.session, exam_time="10:30", duration_minutes=45)

		self.assertTrue(result["success"])
		self.assertEqual(result["exam"]["exam_time"], "10:30")
		self.assertEqual(result["exam"]["duration_minutes"], 45)

	def test_suggest_exam_sessions(self):
		for i in range(21):
			enroll_in_session(self.session, student=make_user(f"student{i}.api@example.com"))

		result = suggest_exam_sessions(self.session)

		self.assertEqual(result["total_students"], 21)
		self.assertEqual(result["online_sessions"], 2)
		self.assertEqual(result["offline_sessions"], 1)

	def test_suggest_exam_sessions_without_students(self):
		result = suggest_exam_sessions(self.session)

		self.assertEqual(result["online_sessions"], 0)
		self.assertEqual(result["offline_sessions"], 0)

	def test_enroll_twice_rejected(self):
		student = make_user("student.api@example.com")
		result = enroll_in_session(self.session, student=student)
		self.assertTrue(result["success"])

		with self.assertRaises(frappe.DuplicateEntryError):
			enroll_in_session(self.session, student=student)

	def test_create_availability_for_examiner(self):
		bob = make_examiner("bob.api@example.com", "Bob")

		result = create_availability(
			f"{EXAM_MONDAY} 08:00:00",
			f"{EXAM_MONDAY} 12:00:00",
			examiner=bob
		)

		self.assertTrue(result["success"])
		self.assertEqual(result["availability"]["examiner"], bob)
		self.assertTrue(frappe.db.exists("Examiner Availability", result["availability"]["name"]))

	def test_create_overlapping_availability_rejected(self):
		with self.assertRaises(frappe.ValidationError):
			create_availability(f"{EXAM_MONDAY} 09:00:00", f"{EXAM_MONDAY} 10:00:00", examiner=self.ana)

	def test_get_my_availability_as_examiner(self):
		frappe.set_user(self.ana)

		windows = get_my_availability()

		self.assertEqual([w.name for w in windows], [self.ana_window.name])

	def test_get_my_availability_without_profile(self):
		frappe.set_user(make_user("nobody.api@example.com"))

		with self.assertRaises(frappe.DoesNotExistError):
			get_my_availability()

	def test_delete_availability_returns_outcomes(self):
		exam_name = self._schedule()["exam"]["name"]

		result = delete_availability(self.ana_window.name)

		self.assertTrue(result["success"])
		self.assertEqual(result["outcomes"][0]["exam"], exam_name)
		self.assertEqual(result["outcomes"][0]["status"], "cancelled")
		self.assertFalse(frappe.db.exists("Examiner Availability", self.ana_window.name))


class TestSessionEndpointsOnSaturdayClass(unittest.TestCase):
	"""schedule_session_exam without an explicit time uses the derived defaults."""

	def tearDown(self):
		frappe.db.rollback()

	def test_default_exam_on_monday_afternoon(self):
		session = make_session("API Weekend Session", [(CLASS_SATURDAY, "09:00", 60)]).name

		result = schedule_session_exam(session)

		self.assertTrue(result["success"])
		self.assertEqual(str(result["exam"]["exam_date"]), EXAM_MONDAY)
		self.assertEqual(result["exam"]["exam_time"], "14:00")
