import frappe

STAFF_ROLE = "Clinic Manager"


def after_install():
	"""Create the clinic staff role used by the staff endpoints and DocType permissions."""
	if not frappe.db.exists("Role", STAFF_ROLE):
		frappe.get_doc({
			"doctype": "Role",
			"role_name": STAFF_ROLE,
			"desk_access": 1,
		}).insert(ignore_permissions=True)
		frappe.db.commit()
