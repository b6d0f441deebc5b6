"""Discord REST client: channel messages and interaction follow-ups. Sends requests only."""
import logging
from typing import Any

import httpx

from slotboard.core.errors import DISCORD_UNKNOWN_MESSAGE, ChatPlatformError, UIMessageMissing
from slotboard.services.discord.config import DiscordConfig

logger = logging.getLogger(__name__)


def _error_code(r: httpx.Response) -> int | None:
    try:
        body = r.json()
    except ValueError:
        return None
    return body.get("code") if isinstance(body, dict) else None


class DiscordClient:
    """Bot-authenticated calls against one guild's channels."""

    def __init__(self, config: DiscordConfig | None = None) -> None:
        self._config = config or DiscordConfig()
        self._bot_user_id: str | None = None

    def _request(self, method: str, path: str, *, auth: bool = True, **kwargs: Any) -> Any:
        if auth and not self._config.is_configured():
            raise ChatPlatformError("Discord bot token not configured. Add DISCORD_BOT_TOKEN to .env.")
        url = f"{self._config.base_url}{path}"
        headers = self._config.headers() if auth else {}
        try:
            with httpx.Client(timeout=self._config.timeout) as c:
                r = c.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise ChatPlatformError(f"Discord {method} {path} failed: {e}") from e
        if not r.is_success:
            code = _error_code(r)
            if code == DISCORD_UNKNOWN_MESSAGE or (r.status_code == 404 and "/messages/" in path):
                raise UIMessageMissing(f"Unknown message: {path}", status_code=r.status_code, code=code)
            raise ChatPlatformError(
                f"Discord API error {r.status_code} on {method} {path}: {r.text[:300]}",
                status_code=r.status_code,
                code=code,
            )
        return r.json() if r.content else None

    def bot_user_id(self) -> str:
        if self._bot_user_id is None:
            self._bot_user_id = str(self._request("GET", "/users/@me")["id"])
        return self._bot_user_id

    # --- channel messages ---

    def list_messages(self, channel_id: str, limit: int = 50) -> list[dict[str, Any]]:
        """Most recent messages, newest first (Discord order)."""
        return self._request("GET", f"/channels/{channel_id}/messages", params={"limit": limit}) or []

    def send_message(self, channel_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", f"/channels/{channel_id}/messages", json=payload)

    def edit_message(self, channel_id: str, message_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("PATCH", f"/channels/{channel_id}/messages/{message_id}", json=payload)

    def delete_message(self, channel_id: str, message_id: str) -> None:
        self._request("DELETE", f"/channels/{channel_id}/messages/{message_id}")

    # --- interaction follow-ups (interaction token auth, no bot header) ---

    def edit_original_response(self, interaction_token: str, payload: dict[str, Any]) -> None:
        path = f"/webhooks/{self._config.application_id}/{interaction_token}/messages/@original"
        self._request("PATCH", path, auth=False, json=payload)

    def delete_original_response(self, interaction_token: str) -> None:
        path = f"/webhooks/{self._config.application_id}/{interaction_token}/messages/@original"
        self._request("DELETE", path, auth=False)
