"""Google Sheets access (service account over REST)."""
from slotboard.services.sheets.client import SheetsClient
from slotboard.services.sheets.config import SheetsConfig

__all__ = ["SheetsClient", "SheetsConfig"]
