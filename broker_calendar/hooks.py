app_name = "broker_calendar"
app_title = "Broker Calendar"
app_publisher = "Broker Calendar Contributors"
app_description = "Disponibilidad y agenda de reuniones con clientes para el panel de administración"
app_email = "dev@broker-calendar.local"
app_license = "mit"

# Apps
# ------------------

# required_apps = []

# Installation
# ------------

# before_install = "broker_calendar.install.before_install"
# after_install = "broker_calendar.install.after_install"

# Document Events
# ---------------
# Meeting re-validates itself in its controller (doctype/meeting/meeting.py)

# doc_events = {
# 	"Meeting": {
# 		"after_insert": "method",
# 	}
# }

# Meeting Notifications
# ---------------------
# Other apps deliver the "meeting scheduled" message by registering a sender:
#
# meeting_notification_senders = [
# 	"my_app.notifications.send_to_customer"
# ]
#
# Each sender is called as sender(customer_id, message, template_name) and
# raises on failure; the meeting is kept and the admin gets a warning.

meeting_notification_senders = []

# Testing
# -------

# before_tests = "broker_calendar.install.before_tests"

# Overriding Methods
# ------------------------------
#
# override_whitelisted_methods = {
# 	"broker_calendar.api.meetings.create_meeting": "my_app.meetings.create_meeting"
# }

# Ignore links to specified DocTypes when deleting documents
# -----------------------------------------------------------

# ignore_links_on_delete = ["Communication", "ToDo"]

# Automatically update python controller files with type annotations for this app.
# export_python_type_annotations = True
