# Copyright (c) 2026, Clinic Scheduling and contributors
# For license information, please see license.txt

from frappe.model.document import Document


class WorkingHoursSlot(Document):
	pass
