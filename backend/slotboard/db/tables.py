"""
Single source of truth for database tables that exist after migrations.

Week grids and reservation history live in the spreadsheet, not here; the database only
holds the message bindings of the board views.
"""
# All tables that exist in the DB. Must match models and migrations.
ALL_TABLE_NAMES = ("message_bindings",)
