"""
Scheduled Tasks

Background tasks that run periodically:
- complete_past_appointments: marks ended Scheduled appointments Completed
"""

import frappe
from frappe.utils import now_datetime

from .store import COMPLETED, open_store


def complete_past_appointments() -> int:
	"""
	Marca como Completed las citas Scheduled cuyo fin ya paso.
	Se ejecuta cada hora (configurado en hooks.py).

	Returns:
		int: Cantidad de citas completadas
	"""
	store = open_store()
	logger = frappe.logger("clinic_scheduling")

	completed_count = 0

	for record in store.list_overdue(now_datetime()):
		try:
			store.update_status(record.name, COMPLETED)
			completed_count += 1
		except frappe.ValidationError as e:
			# Status changed between the query and the update
			logger.warning(f"Could not complete appointment {record.name}: {e}")
			continue

	if completed_count > 0:
		logger.info(f"complete_past_appointments: {completed_count} appointments completed")

	frappe.db.commit()

	return completed_count
