"""
Scheduling Services Module

Core business logic for appointment scheduling:
- Interval primitives (intervals.py)
- Weekly working hours (working_hours.py)
- Slot calculation (slots.py)
- Conflict detection (conflicts.py, overlap.py)
- Appointment persistence (store.py)
- Availability for a dentist and date (availability.py)
- Booking and status changes (booking.py)
- Scheduled tasks (tasks.py)
"""
