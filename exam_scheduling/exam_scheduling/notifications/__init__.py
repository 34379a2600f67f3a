"""
Notifications Module

Email notifications for exam scheduling events:
- Exam scheduled, rescheduled, reassigned or cancelled (exam.py)
- Session enrollment confirmations (enrollment.py)
"""
