"""
Scheduling Services Module

This module provides the core business logic for exam scheduling:
- Conflict detection between time slots (conflicts.py)
- Exam date calculation from class slots (exam_dates.py)
- Examiner availability lookups (availability.py)
- Per-day workload tracking (workload.py)
- Examiner selection (assignment.py)
- Exam scheduling and rescheduling (orchestrator.py)
- Reassignment/cancellation after availability withdrawal (revocation.py)
- Background jobs (tasks.py)
"""
