"""
Shared test fixtures.

Builders are idempotent for Users and Examiners. Sessions, windows and
exams are meant to be rolled back in tearDown.
"""

import frappe

# Fridays/Mondays far enough in the future for the "not in the past" rule
CLASS_FRIDAY = "2030-03-01"
CLASS_SATURDAY = "2030-03-02"
EXAM_FRIDAY = "2030-03-08"
EXAM_MONDAY = "2030-03-11"
EXAM_TUESDAY = "2030-03-12"


def make_user(email, first_name=None):
	if not frappe.db.exists("User", email):
		frappe.get_doc({
			"doctype": "User",
			"email": email,
			"first_name": first_name or email.split("@")[0],
			"send_welcome_email": 0,
			"enabled": 1
		}).insert(ignore_permissions=True)
	return email


def make_examiner(email, first_name=None, priority=1, max_exams_per_day=3, is_active=1):
	make_user(email, first_name)

	if frappe.db.exists("Examiner", email):
		examiner = frappe.get_doc("Examiner", email)
	else:
		examiner = frappe.new_doc("Examiner")
		examiner.user = email

	examiner.priority = priority
	examiner.max_exams_per_day = max_exams_per_day
	examiner.is_active = is_active
	examiner.save(ignore_permissions=True)
	return examiner.name


def make_window(examiner, available_from, available_to):
	return frappe.get_doc({
		"doctype": "Examiner Availability",
		"examiner": examiner,
		"available_from": available_from,
		"available_to": available_to
	}).insert(ignore_permissions=True)


def make_session(title, class_slots, **fields):
	"""class_slots: list of (class_date, class_time, duration_minutes)."""
	session = frappe.get_doc({
		"doctype": "Training Session",
		"title": title,
		"class_slots": [
			{"class_date": class_date, "class_time": class_time, "duration_minutes": duration}
			for class_date, class_time, duration in class_slots
		],
		**fields
	})
	session.insert(ignore_permissions=True)
	return session


def make_exam(session, exam_date, exam_time="10:00:00", duration_minutes=60, examiner=None):
	"""Insert an Exam directly, bypassing the orchestrator."""
	return frappe.get_doc({
		"doctype": "Exam",
		"training_session": session,
		"exam_date": exam_date,
		"exam_time": exam_time,
		"duration_minutes": duration_minutes,
		"is_online": 1,
		"online_link": "https://meet.example.com/exam",
		"assigned_examiner": examiner,
		"assignment_reason": "fixture"
	}).insert(ignore_permissions=True)
