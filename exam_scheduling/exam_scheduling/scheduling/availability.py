"""
Availability Service

Stores and queries Examiner Availability windows:
- which examiners are free during a whole exam window
- overlap checks between an examiner's own windows
- removal of a single window (exams are handled by revocation.py)
"""

import frappe
from frappe.utils import get_datetime, get_system_timezone
from datetime import datetime
from typing import Any, Dict, List, Optional, Set, Union
import pytz


def normalize_window_datetime(value: Union[datetime, str]) -> datetime:
	"""
	Convert a window boundary to a naive datetime in the system timezone.

	Browsers send ISO timestamps with an offset ("2026-03-11T09:00:00Z");
	Datetime fields store naive values in the site's timezone.

	Args:
		value: datetime or ISO string

	Returns:
		naive datetime in the system timezone
	"""
	dt = get_datetime(value)
	if dt is None:
		raise ValueError("A date and time is required")

	if dt.tzinfo is None:
		return dt

	system_tz = pytz.timezone(get_system_timezone() or "UTC")
	return dt.astimezone(system_tz).replace(tzinfo=None)


def find_candidates(window_start: datetime, window_end: datetime) -> Set[str]:
	"""
	Return the examiners whose availability fully contains [window_start, window_end].

	Condition per window:
		available_from <= window_start AND available_to >= window_end

	Partial overlap does not qualify. Inactive examiners are skipped.
	An empty set is a normal result ("no examiner available").
	"""
	windows = frappe.get_all(
		"Examiner Availability",
		filters={
			"available_from": ["<=", window_start],
			"available_to": [">=", window_end]
		},
		fields=["examiner"]
	)

	examiners = {window.examiner for window in windows if window.examiner}
	if not examiners:
		return set()

	active = frappe.get_all(
		"Examiner",
		filters={"name": ["in", list(examiners)], "is_active": 1},
		pluck="name"
	)
	return set(active)


def find_overlapping_windows(
	examiner: str,
	available_from: datetime,
	available_to: datetime,
	exclude: Optional[str] = None
) -> List[Dict[str, Any]]:
	"""
	Find the examiner's own windows overlapping [available_from, available_to).

	Overlap condition: existing.from < available_to AND existing.to > available_from
	"""
	filters = {
		"examiner": examiner,
		"available_from": ["<", available_to],
		"available_to": [">", available_from]
	}
	if exclude:
		filters["name"] = ["!=", exclude]

	return frappe.get_all(
		"Examiner Availability",
		filters=filters,
		fields=["name", "available_from", "available_to"],
		order_by="available_from asc"
	)


def get_examiner_windows(examiner: str) -> List[Dict[str, Any]]:
	"""List an examiner's windows, newest first."""
	return frappe.get_all(
		"Examiner Availability",
		filters={"examiner": examiner},
		fields=["name", "examiner", "examiner_name", "available_from", "available_to", "creation"],
		order_by="creation desc"
	)


def remove(availability_name: str) -> "frappe._dict":
	"""
	Delete one availability window and return what was removed.

	Exams are not touched here: on_trash is skipped so that the caller
	decides when to run the revocation cascade.

	Returns:
		frappe._dict: {"name", "examiner", "available_from", "available_to"}
	"""
	doc = frappe.get_doc("Examiner Availability", availability_name)
	removed = window_snapshot(doc)

	frappe.delete_doc(
		"Examiner Availability",
		availability_name,
		ignore_permissions=True,
		ignore_on_trash=True
	)

	return removed


def window_snapshot(doc: Any) -> "frappe._dict":
	"""Plain copy of an Examiner Availability doc, usable after deletion."""
	return frappe._dict({
		"name": doc.name,
		"examiner": doc.examiner,
		"available_from": get_datetime(doc.available_from),
		"available_to": get_datetime(doc.available_to),
	})
