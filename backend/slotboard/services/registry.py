"""Registry of shared clients (sheet store, Discord). Built on first use; tests register fakes."""
import logging
from typing import Any

logger = logging.getLogger(__name__)

_clients: dict[str, Any] = {}


def register(name: str, client: Any) -> None:
    """Register a client under 'store' or 'chat' (replaces any previous one)."""
    _clients[name] = client
    logger.debug("Registered client: %s (%s)", name, type(client).__name__)


def reset() -> None:
    _clients.clear()


def get_store():
    if "store" not in _clients:
        from slotboard.services.grid import WeekGridStore

        register("store", WeekGridStore())
    return _clients["store"]


def get_chat():
    if "chat" not in _clients:
        from slotboard.services.discord import DiscordClient

        register("chat", DiscordClient())
    return _clients["chat"]
