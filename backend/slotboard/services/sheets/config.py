"""Google Sheets config. Service-account credentials from settings (GOOGLE_CLIENT_EMAIL, GOOGLE_PRIVATE_KEY) or SheetsConfig args."""
from slotboard.config import settings

DEFAULT_BASE_URL = "https://sheets.googleapis.com/v4"
TOKEN_URL = "https://oauth2.googleapis.com/token"
SCOPE = "https://www.googleapis.com/auth/spreadsheets"


class SheetsConfig:
    """Spreadsheet id, service account and base URL."""

    __slots__ = ("spreadsheet_id", "client_email", "private_key", "base_url", "timeout")

    def __init__(
        self,
        *,
        spreadsheet_id: str | None = None,
        client_email: str | None = None,
        private_key: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = None,
    ) -> None:
        self.spreadsheet_id = (spreadsheet_id or settings.google_sheet_id).strip()
        self.client_email = (client_email or settings.google_client_email).strip()
        self.private_key = private_key or settings.google_private_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds

    def is_configured(self) -> bool:
        return bool(self.spreadsheet_id and self.client_email and self.private_key)
