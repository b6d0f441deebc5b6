"""Discord access: REST client (bot token) and interaction payload helpers."""
from slotboard.services.discord.client import DiscordClient
from slotboard.services.discord.config import DiscordConfig

__all__ = ["DiscordClient", "DiscordConfig"]
