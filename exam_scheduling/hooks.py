app_name = "exam_scheduling"
app_title = "Exam Scheduling"
app_publisher = "Sebastian Ortiz Valencia"
app_description = "Training sessions, exam scheduling and examiner assignment"
app_email = "sebastianortiz989@gmail.com"
app_license = "mit"

# Apps
# ------------------

# required_apps = []

# Includes in <head>
# ------------------

# include js, css files in header of desk.html
# app_include_css = "/assets/exam_scheduling/css/exam_scheduling.css"
# app_include_js = "/assets/exam_scheduling/js/exam_scheduling.js"

# include js in doctype views
# doctype_js = {"doctype" : "public/js/doctype.js"}
# doctype_list_js = {"doctype" : "public/js/doctype_list.js"}

# Installation
# ------------

# before_install = "exam_scheduling.install.before_install"
after_install = "exam_scheduling.install.after_install"

# Uninstallation
# ------------

# before_uninstall = "exam_scheduling.uninstall.before_uninstall"
# after_uninstall = "exam_scheduling.uninstall.after_uninstall"

# Permissions
# -----------
# Permissions evaluated in scripted ways

# permission_query_conditions = {
# 	"Exam": "exam_scheduling.permissions.get_exam_query_conditions",
# }

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
	"cron": {
		"*/15 * * * *": [  # Every 15 minutes
			"exam_scheduling.exam_scheduling.scheduling.tasks.schedule_pending_sessions"
		]
	}
}

# Exam Notifications
# ------------------
# Other apps can add recipients to exam notifications. Each hook receives
# (exam_data: dict, event: str) and returns a list of email addresses.
# event is one of: scheduled, rescheduled, reassigned, cancelled

# exam_notification_recipients = [
# 	"custom_app.notifications.get_exam_recipients"
# ]

# Testing
# -------

# before_tests = "exam_scheduling.install.before_tests"

# Ignore links to specified DocTypes when deleting documents
# -----------------------------------------------------------

# ignore_links_on_delete = ["Communication", "ToDo"]

# Job Events
# ----------
# before_job = ["exam_scheduling.utils.before_job"]
# after_job = ["exam_scheduling.utils.after_job"]

# User Data Protection
# --------------------

# user_data_fields = [
# 	{
# 		"doctype": "Session Enrollment",
# 		"filter_by": "student",
# 		"redact_fields": ["student_email"],
# 		"partial": 1,
# 	},
# ]

# default_log_clearing_doctypes = {
# 	"Logging DocType Name": 30  # days to retain logs
# }
