"""
App installation hooks.
"""

import frappe

COORDINATOR_ROLE = "Exam Coordinator"
EXAMINER_ROLE = "Examiner"

APP_ROLES = (COORDINATOR_ROLE, EXAMINER_ROLE)


def after_install() -> None:
	"""Create the roles used by the exam scheduling endpoints."""
	for role_name in APP_ROLES:
		if frappe.db.exists("Role", role_name):
			continue

		frappe.get_doc({
			"doctype": "Role",
			"role_name": role_name,
			"desk_access": 1,
		}).insert(ignore_permissions=True)

	frappe.db.commit()
