"""
Discord interaction payloads: request signature check, type constants and response builders.

Discord posts every button click and select choice to the interactions endpoint, signed with the
application's Ed25519 key over timestamp + raw body. The endpoint must answer within 3 seconds,
so slow work is acknowledged with a deferred response and finished through the original-response
webhook.
"""
from typing import Any

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from slotboard.core.errors import InvalidInteractionSignature

# Interaction types
PING = 1
APPLICATION_COMMAND = 2
MESSAGE_COMPONENT = 3

# Component types
COMPONENT_ACTION_ROW = 1
COMPONENT_BUTTON = 2
COMPONENT_STRING_SELECT = 3

# Response types
RESPONSE_PONG = 1
RESPONSE_CHANNEL_MESSAGE = 4
RESPONSE_DEFERRED_CHANNEL_MESSAGE = 5
RESPONSE_DEFERRED_UPDATE_MESSAGE = 6

FLAG_EPHEMERAL = 1 << 6

# Member permission bits allowed to trigger a manual refresh
PERMISSION_ADMINISTRATOR = 1 << 3
PERMISSION_MANAGE_GUILD = 1 << 5


def verify_signature(public_key_hex: str, signature_hex: str, timestamp: str, body: bytes) -> None:
    """Raise InvalidInteractionSignature unless signature is valid for timestamp + body."""
    if not public_key_hex or not signature_hex or not timestamp:
        raise InvalidInteractionSignature("missing signature headers or public key")
    try:
        key = Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key_hex))
        key.verify(bytes.fromhex(signature_hex), timestamp.encode() + body)
    except (InvalidSignature, ValueError) as e:
        raise InvalidInteractionSignature("invalid request signature") from e


def interaction_user(interaction: dict[str, Any]) -> dict[str, Any]:
    """Guild interactions carry member.user; DMs carry user."""
    member = interaction.get("member") or {}
    return member.get("user") or interaction.get("user") or {}


def interaction_username(interaction: dict[str, Any]) -> str:
    return str(interaction_user(interaction).get("username") or "inconnu")


def is_admin_or_manager(interaction: dict[str, Any]) -> bool:
    raw = (interaction.get("member") or {}).get("permissions")
    if not raw:
        return False
    try:
        perms = int(raw)
    except (TypeError, ValueError):
        return False
    return bool(perms & (PERMISSION_ADMINISTRATOR | PERMISSION_MANAGE_GUILD))


def ephemeral(content: str | None = None, **extra: Any) -> dict[str, Any]:
    data: dict[str, Any] = {"flags": FLAG_EPHEMERAL, **extra}
    if content is not None:
        data["content"] = content
    return {"type": RESPONSE_CHANNEL_MESSAGE, "data": data}


def deferred_ephemeral() -> dict[str, Any]:
    return {"type": RESPONSE_DEFERRED_CHANNEL_MESSAGE, "data": {"flags": FLAG_EPHEMERAL}}


def deferred_update() -> dict[str, Any]:
    return {"type": RESPONSE_DEFERRED_UPDATE_MESSAGE}
