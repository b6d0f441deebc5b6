"""
UI reconciler: exactly one live Discord message per board view.

A view's message is found through its persisted binding; when the binding is missing or stale
(message deleted outside the bot) a new message is sent and the binding replaced. At startup the
channel is scanned once: bot messages whose first embed title is a view's title are grouped, the
newest is kept as canonical and the others are deleted. Views must appear in channel order
current week, next week, reservations; when a re-created message breaks that order, the views
after it are re-created too.
"""
import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from slotboard.core.constants import CHANNEL_SCAN_LIMIT, VIEW_CURRENT, VIEW_NEXT, VIEW_ORDER, VIEW_TITLES
from slotboard.core.errors import ChatPlatformError, UIMessageMissing
from slotboard.services.binding_service import clear_binding, get_binding, save_binding
from slotboard.services.discord import DiscordClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConvergeResult:
    message_id: str
    created: bool  # True when a new message was sent instead of editing


def created_order(message_id: str) -> int:
    """Discord snowflakes grow with creation time."""
    return int(message_id)


def is_view_message(message: dict[str, Any], bot_id: str, view_id: str) -> bool:
    if str((message.get("author") or {}).get("id")) != bot_id:
        return False
    embeds = message.get("embeds") or []
    return bool(embeds) and embeds[0].get("title") == VIEW_TITLES[view_id]


def _delete_quietly(chat: DiscordClient, channel_id: str, message_id: str) -> None:
    try:
        chat.delete_message(channel_id, message_id)
    except UIMessageMissing:
        pass
    except ChatPlatformError as e:
        logger.warning("Could not delete message %s in %s: %s", message_id, channel_id, e)


def resolve_binding(
    chat: DiscordClient,
    db: Session,
    channel_id: str,
    view_id: str,
    *,
    messages: list[dict[str, Any]] | None = None,
) -> str | None:
    """
    Find the view's canonical message among recent channel messages (newest bot message with the
    view's title), delete the other matches and persist the binding. Returns the message id or None.
    """
    if messages is None:
        messages = chat.list_messages(channel_id, CHANNEL_SCAN_LIMIT)
    bot_id = chat.bot_user_id()
    matches = sorted(
        (m for m in messages if is_view_message(m, bot_id, view_id)),
        key=lambda m: created_order(m["id"]),
        reverse=True,
    )
    if not matches:
        clear_binding(db, view_id)
        return None
    canonical, duplicates = matches[0], matches[1:]
    for dup in duplicates:
        _delete_quietly(chat, channel_id, dup["id"])
    if duplicates:
        logger.info("View %s: kept %s, deleted %s duplicate(s)", view_id, canonical["id"], len(duplicates))
    save_binding(db, view_id, channel_id, str(canonical["id"]))
    return str(canonical["id"])


def converge(chat: DiscordClient, db: Session, channel_id: str, view_id: str, payload: dict[str, Any]) -> ConvergeResult:
    """Edit the bound message in place; send a new one (and rebind) if there is none or it is gone."""
    binding = get_binding(db, view_id)
    if binding is not None and binding.channel_id == channel_id:
        try:
            chat.edit_message(channel_id, binding.message_id, payload)
            return ConvergeResult(binding.message_id, created=False)
        except UIMessageMissing:
            logger.info("View %s: message %s is gone, sending a new one", view_id, binding.message_id)
    elif binding is not None:
        logger.info("View %s moved from channel %s to %s", view_id, binding.channel_id, channel_id)
        _delete_quietly(chat, binding.channel_id, binding.message_id)
    message = chat.send_message(channel_id, payload)
    message_id = str(message["id"])
    save_binding(db, view_id, channel_id, message_id)
    return ConvergeResult(message_id, created=True)


def ensure_order_and_dedupe(chat: DiscordClient, db: Session, channel_id: str) -> dict[str, str | None]:
    """
    Startup pass: resolve every view from one channel scan. If the current-week message is newer
    than the next-week message both are deleted and unbound, so the next refresh sends them in order.
    """
    messages = chat.list_messages(channel_id, CHANNEL_SCAN_LIMIT)
    resolved = {view_id: resolve_binding(chat, db, channel_id, view_id, messages=messages) for view_id in VIEW_ORDER}
    cur, nxt = resolved[VIEW_CURRENT], resolved[VIEW_NEXT]
    if cur and nxt and created_order(cur) > created_order(nxt):
        logger.info("Planning messages out of order (%s after %s); recreating both", cur, nxt)
        for view_id in (VIEW_CURRENT, VIEW_NEXT):
            _delete_quietly(chat, channel_id, resolved[view_id])
            clear_binding(db, view_id)
            resolved[view_id] = None
    return resolved


def converge_all(chat: DiscordClient, db: Session, channel_id: str, payloads: dict[str, dict[str, Any]]) -> dict[str, str]:
    """
    Converge the views in channel order. A view whose message is older than the previous view's
    (the previous one was just re-sent) is deleted and re-sent as well, keeping the order intact.
    """
    out: dict[str, str] = {}
    last_id: str | None = None
    for view_id in VIEW_ORDER:
        if view_id not in payloads:
            continue
        binding = get_binding(db, view_id)
        if (
            last_id is not None
            and binding is not None
            and binding.channel_id == channel_id
            and created_order(binding.message_id) < created_order(last_id)
        ):
            _delete_quietly(chat, channel_id, binding.message_id)
            clear_binding(db, view_id)
        result = converge(chat, db, channel_id, view_id, payloads[view_id])
        out[view_id] = result.message_id
        last_id = result.message_id
    return out
