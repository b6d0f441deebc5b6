"""
Google Sheets v4 client: lowest level, sends requests only. No grid semantics.

Auth is a service-account JWT grant (RS256) exchanged for a bearer token, cached until shortly
before expiry. Every failure (missing config, transport error, non-2xx) raises StoreUnavailable.
"""
import logging
import time
from typing import Any
from urllib.parse import quote

import httpx
import jwt

from slotboard.core.errors import StoreUnavailable
from slotboard.services.sheets.config import SCOPE, TOKEN_URL, SheetsConfig

logger = logging.getLogger(__name__)

_TOKEN_LIFETIME_SECONDS = 3600
_TOKEN_REFRESH_MARGIN_SECONDS = 5 * 60


class SheetsClient:
    """Values and batchUpdate calls against one spreadsheet."""

    def __init__(self, config: SheetsConfig | None = None) -> None:
        self._config = config or SheetsConfig()
        self._token: tuple[str, float] | None = None  # (access_token, expiry_epoch)

    # --- auth ---

    def _access_token(self) -> str:
        if not self._config.is_configured():
            raise StoreUnavailable("Google Sheets not configured. Set GOOGLE_SHEET_ID, GOOGLE_CLIENT_EMAIL, GOOGLE_PRIVATE_KEY.")
        now = time.time()
        if self._token and self._token[1] > now:
            return self._token[0]
        assertion = jwt.encode(
            {
                "iss": self._config.client_email,
                "scope": SCOPE,
                "aud": TOKEN_URL,
                "iat": int(now),
                "exp": int(now) + _TOKEN_LIFETIME_SECONDS,
            },
            self._config.private_key,
            algorithm="RS256",
        )
        try:
            with httpx.Client(timeout=self._config.timeout) as c:
                r = c.post(
                    TOKEN_URL,
                    data={"grant_type": "urn:ietf:params:oauth:grant-type:jwt-bearer", "assertion": assertion},
                )
        except httpx.HTTPError as e:
            raise StoreUnavailable(f"Google token request failed: {e}") from e
        if not r.is_success:
            raise StoreUnavailable(f"Google token error: {r.status_code} {r.text[:300]}")
        body = r.json()
        token = body["access_token"]
        expires_in = int(body.get("expires_in") or _TOKEN_LIFETIME_SECONDS)
        self._token = (token, now + expires_in - _TOKEN_REFRESH_MARGIN_SECONDS)
        return token

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self._config.base_url}/spreadsheets/{self._config.spreadsheet_id}{path}"
        headers = {"Authorization": f"Bearer {self._access_token()}"}
        try:
            with httpx.Client(timeout=self._config.timeout) as c:
                r = c.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise StoreUnavailable(f"Sheets {method} {path} failed: {e}") from e
        if not r.is_success:
            raise StoreUnavailable(f"Sheets API error {r.status_code} on {method} {path}: {r.text[:300]}")
        return r.json() if r.content else {}

    @staticmethod
    def _range_path(range_a1: str) -> str:
        return f"/values/{quote(range_a1, safe='')}"

    # --- spreadsheet metadata ---

    def sheet_ids(self) -> dict[str, int]:
        """Tab title -> sheetId."""
        meta = self._request("GET", "", params={"fields": "sheets.properties(sheetId,title)"})
        out: dict[str, int] = {}
        for s in meta.get("sheets") or []:
            props = s.get("properties") or {}
            if "title" in props:
                out[props["title"]] = int(props.get("sheetId", 0))
        return out

    def batch_update(self, requests: list[dict[str, Any]]) -> dict[str, Any]:
        return self._request("POST", ":batchUpdate", json={"requests": requests})

    def add_sheet(self, title: str) -> None:
        self.batch_update([{"addSheet": {"properties": {"title": title}}}])

    def set_boolean_validation(
        self,
        sheet_id: int,
        *,
        start_row: int,
        end_row: int,
        start_col: int,
        end_col: int,
    ) -> None:
        """Checkbox UI on a 0-based, end-exclusive range."""
        self.batch_update([
            {
                "setDataValidation": {
                    "range": {
                        "sheetId": sheet_id,
                        "startRowIndex": start_row,
                        "endRowIndex": end_row,
                        "startColumnIndex": start_col,
                        "endColumnIndex": end_col,
                    },
                    "rule": {"condition": {"type": "BOOLEAN"}, "showCustomUi": True, "strict": True},
                }
            }
        ])

    # --- values ---

    def get_values(self, range_a1: str) -> list[list[Any]]:
        return self._request("GET", self._range_path(range_a1)).get("values") or []

    def update_values(self, range_a1: str, values: list[list[Any]]) -> None:
        self._request(
            "PUT",
            self._range_path(range_a1),
            params={"valueInputOption": "RAW"},
            json={"range": range_a1, "majorDimension": "ROWS", "values": values},
        )

    def clear_values(self, range_a1: str) -> None:
        self._request("POST", f"{self._range_path(range_a1)}:clear", json={})

    def append_values(self, range_a1: str, values: list[list[Any]]) -> None:
        self._request(
            "POST",
            f"{self._range_path(range_a1)}:append",
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            json={"values": values},
        )
        logger.debug("Appended %s row(s) to %s", len(values), range_a1)
