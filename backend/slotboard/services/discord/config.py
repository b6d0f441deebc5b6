"""Discord API config. Bot token, application id and public key from settings or DiscordConfig args."""
from slotboard.config import settings

DEFAULT_BASE_URL = "https://discord.com/api/v10"


class DiscordConfig:
    """Credentials and base URL for Discord REST."""

    __slots__ = ("bot_token", "application_id", "public_key", "base_url", "timeout")

    def __init__(
        self,
        *,
        bot_token: str | None = None,
        application_id: str | None = None,
        public_key: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = None,
    ) -> None:
        self.bot_token = (bot_token or settings.discord_bot_token).strip()
        self.application_id = (application_id or settings.discord_application_id).strip()
        self.public_key = (public_key or settings.discord_public_key).strip()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds

    def is_configured(self) -> bool:
        return bool(self.bot_token)

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bot {self.bot_token}",
            "User-Agent": "DiscordBot (https://github.com/slotboard, 0.1.0)",
        }
