"""
Interaction handling: button clicks and slot picks coming from the board messages.

handle_interaction returns the immediate response for Discord plus an optional follow-up callable.
Quick reads (history, slot picker) answer directly; the claim and the manual refresh answer with a
deferred response and finish in the follow-up, which edits the original ephemeral reply.
"""
import logging
import time
from typing import Any, Callable

from slotboard.core.constants import (
    CUSTOM_ID_HISTORY,
    CUSTOM_ID_PICK_SLOT,
    CUSTOM_ID_REFRESH,
    EPHEMERAL_NOTICE_SECONDS,
    WEEK_KEY_CURRENT,
    WEEK_KEY_TABS,
)
from slotboard.core.errors import ChatPlatformError, StoreUnavailable
from slotboard.services.availability import available_hours
from slotboard.services.board.refresh import refresh_all
from slotboard.services.board.render import history_embed, slot_picker
from slotboard.services.discord.interactions import (
    MESSAGE_COMPONENT,
    PING,
    RESPONSE_PONG,
    deferred_ephemeral,
    deferred_update,
    ephemeral,
    interaction_username,
    is_admin_or_manager,
)
from slotboard.services.registry import get_chat, get_store
from slotboard.services.reservation_service import claim, parse_pick_value

logger = logging.getLogger(__name__)

FollowUp = Callable[[], None]

MSG_STORE_DOWN = "❌ Calendrier indisponible, réessaie plus tard."


def handle_interaction(interaction: dict[str, Any], *, store=None, chat=None) -> tuple[dict[str, Any], FollowUp | None]:
    store = store or get_store()
    chat = chat or get_chat()
    kind = interaction.get("type")
    if kind == PING:
        return {"type": RESPONSE_PONG}, None
    if kind != MESSAGE_COMPONENT:
        return ephemeral("❓ Action inconnue."), None

    custom_id = str((interaction.get("data") or {}).get("custom_id") or "")
    try:
        if custom_id == CUSTOM_ID_HISTORY:
            return ephemeral(embeds=[history_embed(store.list_history())]), None
        if custom_id == CUSTOM_ID_REFRESH:
            return _manual_refresh(interaction, store, chat)
        if custom_id == CUSTOM_ID_PICK_SLOT:
            return _pick_slot(interaction, store, chat)
        week_key, _, day_name = custom_id.partition("_")
        if week_key in WEEK_KEY_TABS and day_name:
            return _day_picker(week_key, day_name, store), None
    except StoreUnavailable as e:
        logger.warning("Interaction %s: store unavailable: %s", custom_id, e)
        return ephemeral(MSG_STORE_DOWN), None
    except Exception:
        logger.exception("Interaction %s failed", custom_id)
        return ephemeral(MSG_STORE_DOWN), None
    return ephemeral("❓ Action inconnue."), None


def _day_picker(week_key: str, day_name: str, store) -> dict[str, Any]:
    grid = store.read(WEEK_KEY_TABS[week_key])
    if grid.is_empty:
        return ephemeral("❌ Calendrier pas prêt.")
    day = grid.find_day(day_name)
    if day is None:
        return ephemeral("❌ Jour introuvable.")
    options = available_hours(grid, day, week_key == WEEK_KEY_CURRENT)
    if not options:
        return ephemeral("🔒 Aucun créneau réservable.")
    return ephemeral(**slot_picker(week_key, day.name, options))


def _dismiss_later(chat, token: str) -> None:
    time.sleep(EPHEMERAL_NOTICE_SECONDS)
    try:
        chat.delete_original_response(token)
    except ChatPlatformError:
        pass


def _manual_refresh(interaction: dict[str, Any], store, chat) -> tuple[dict[str, Any], FollowUp | None]:
    if not is_admin_or_manager(interaction):
        return ephemeral("⛔ Tu n'as pas la permission d'utiliser ce bouton."), None
    token = interaction.get("token") or ""
    user = interaction_username(interaction)

    def follow_up() -> None:
        try:
            refresh_all(store=store, chat=chat)
            chat.edit_original_response(token, {"content": "✅ Refresh effectué."})
        except Exception:
            logger.exception("Manual refresh by %s failed", user)
            try:
                chat.edit_original_response(token, {"content": "❌ Refresh échoué."})
            except ChatPlatformError:
                pass
            return
        _dismiss_later(chat, token)

    return deferred_ephemeral(), follow_up


def _pick_slot(interaction: dict[str, Any], store, chat) -> tuple[dict[str, Any], FollowUp | None]:
    values = (interaction.get("data") or {}).get("values") or []
    user = interaction_username(interaction)
    request = parse_pick_value(values[0] if values else "", user)
    if request is None:
        return ephemeral("❌ Créneau invalide."), None
    token = interaction.get("token") or ""

    def follow_up() -> None:
        try:
            result = claim(store, request, on_claimed=lambda: refresh_all(store=store, chat=chat))
        except Exception:
            logger.exception(
                "Claim failed: %s row=%s col=%s by %s", request.tab, request.row, request.col, request.user
            )
            try:
                chat.edit_original_response(token, {"content": MSG_STORE_DOWN, "components": []})
            except ChatPlatformError:
                pass
            return
        try:
            chat.edit_original_response(token, {"content": result.message, "components": []})
        except ChatPlatformError as e:
            logger.warning("Could not update picker for %s: %s", request.user, e)
            return
        if result.ok:
            _dismiss_later(chat, token)

    return deferred_update(), follow_up
