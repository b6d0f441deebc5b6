"""
Centralized constants for scheduler, sheet layout and board views.

Change job IDs, tab names or custom ids here instead of scattering literals across main and services.
"""

# Scheduler job IDs (must match ids used in main.py add_job)
WEEK_ROLL_JOB_ID = "planning_week_roll"
HOURLY_REFRESH_JOB_ID = "planning_hourly_refresh"

# Sheet tabs
TAB_CURRENT = "Semaine_Courante"
TAB_NEXT = "Semaine_Avenir"
TAB_HISTORY = "Historique"

# Week grid layout: row 1 display labels, row 2 ISO day keys, then one row per hour; columns A (hour) + B..H (days)
GRID_RANGE = "A1:H200"
GRID_HEADER_ROWS = 2
GRID_DAY_COLUMNS = 7
HISTORY_RANGE = "A:F"
HISTORY_HEADER_MARKER = "Date"

# Cell values
CELL_CLAIMED = "Réservé"
CELL_OPEN_VALUES = ("true", "oui")

# Board views: the embed title is the identity marker used to find a view's message in the channel
VIEW_CURRENT = "planning_current"
VIEW_NEXT = "planning_next"
VIEW_RESERVATIONS = "reservations"
VIEW_TITLES = {
    VIEW_CURRENT: "🗓️ Planning — Semaine en cours",
    VIEW_NEXT: "🗓️ Planning — Semaine à venir",
    VIEW_RESERVATIONS: "📌 Réservations",
}
VIEW_ORDER = (VIEW_CURRENT, VIEW_NEXT, VIEW_RESERVATIONS)

# Interaction custom ids
CUSTOM_ID_HISTORY = "historique"
CUSTOM_ID_REFRESH = "refresh_manual"
CUSTOM_ID_PICK_SLOT = "pick_slot"
WEEK_KEY_CURRENT = "cur"
WEEK_KEY_NEXT = "nxt"
WEEK_KEY_TABS = {WEEK_KEY_CURRENT: TAB_CURRENT, WEEK_KEY_NEXT: TAB_NEXT}

# Discord limits and scan window
CHANNEL_SCAN_LIMIT = 50  # recent messages inspected when resolving a view's message
BUTTONS_PER_ROW = 5
MAX_ACTION_ROWS = 5
MAX_SELECT_OPTIONS = 25
RESERVATIONS_MAX_LINES = 30
HISTORY_MAX_LINES = 30
EPHEMERAL_NOTICE_SECONDS = 2.5  # ephemeral confirmations are removed after this delay
