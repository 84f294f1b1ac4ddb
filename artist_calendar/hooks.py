app_name = "artist_calendar"
app_title = "Artist Calendar"
app_publisher = "Inkwell Studio Tools"
app_description = "Disponibilidad, días libres y repeticiones del calendario de artistas"
app_email = "dev@inkwellstudio.tools"
app_license = "mit"

# Apps
# ------------------

# required_apps = []

# Installation
# ------------

# after_install = "artist_calendar.install.after_install"

# Document Events
# ---------------
# Las ocurrencias de Off Day / Event Block Time se reconstruyen en validate()
# de cada DocType, no hacen falta doc_events.

# Scheduled Tasks
# ---------------
# Sin tareas programadas: el motor no corre jobs en segundo plano.

# Testing
# -------

# before_tests = "artist_calendar.install.before_tests"

# Overriding Methods
# ------------------------------
#
# override_whitelisted_methods = {
# 	"frappe.desk.doctype.event.event.get_events": "artist_calendar.event.get_events"
# }
