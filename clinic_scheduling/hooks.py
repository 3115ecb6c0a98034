app_name = "clinic_scheduling"
app_title = "Clinic Scheduling"
app_publisher = "Clinic Scheduling Contributors"
app_description = "Dental clinic appointment scheduling with patient sign-up and booking API"
app_email = "dev@clinic-scheduling.example"
app_license = "mit"

# Apps
# ------------------

# required_apps = []

# Installation
# ------------

after_install = "clinic_scheduling.install.after_install"

# Document Events
# ---------------
# Hook on document methods and events

# doc_events = {
# 	"*": {
# 		"on_update": "method",
# 		"on_cancel": "method",
# 		"on_trash": "method"
# 	}
# }

# Scheduled Tasks
# ---------------

scheduler_events = {
	"hourly": [
		"clinic_scheduling.clinic_scheduling.scheduling.tasks.complete_past_appointments"
	]
}

# Testing
# -------

before_tests = "clinic_scheduling.install.after_install"

# Request Events
# ----------------
after_request = ["clinic_scheduling.api.security.add_security_headers"]

# User Data Protection
# --------------------

user_data_fields = [
	{
		"doctype": "Clinic User",
		"filter_by": "email_address",
		"redact_fields": ["first_name", "last_name", "mobile_number"],
		"partial": 1,
	},
	{
		"doctype": "Patient",
		"filter_by": "email",
		"redact_fields": ["first_name", "last_name", "mobile_number", "date_of_birth", "notes"],
		"partial": 1,
	},
]

# default_log_clearing_doctypes = {
# 	"Logging DocType Name": 30  # days to retain logs
# }
