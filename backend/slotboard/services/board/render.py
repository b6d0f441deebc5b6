"""
Board rendering: Discord embeds and components for the three views, the history notice and the slot picker.

Everything here returns plain JSON-ready dicts; nothing talks to Discord.
"""
import re
from datetime import date, datetime, timezone
from typing import Any

from slotboard.core.constants import (
    BUTTONS_PER_ROW,
    CUSTOM_ID_HISTORY,
    CUSTOM_ID_PICK_SLOT,
    CUSTOM_ID_REFRESH,
    HISTORY_MAX_LINES,
    MAX_ACTION_ROWS,
    MAX_SELECT_OPTIONS,
    RESERVATIONS_MAX_LINES,
    VIEW_CURRENT,
    VIEW_NEXT,
    VIEW_RESERVATIONS,
    VIEW_TITLES,
    WEEK_KEY_CURRENT,
    WEEK_KEY_NEXT,
)
from slotboard.core.timeutil import hour_to_number, week_range_text
from slotboard.services.availability import SlotOption, available_days, render_text
from slotboard.services.discord.interactions import COMPONENT_ACTION_ROW, COMPONENT_BUTTON, COMPONENT_STRING_SELECT
from slotboard.services.grid import HistoryRow, WeekGrid
from slotboard.services.reservation_service import pick_value

# Button styles
STYLE_PRIMARY = 1
STYLE_SECONDARY = 2
STYLE_SUCCESS = 3

EMBED_FIELD_MAX = 1024
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_PLANNING = {
    VIEW_CURRENT: {"week_key": WEEK_KEY_CURRENT, "marker": "🔵", "color": 0x3498DB, "style": STYLE_PRIMARY},
    VIEW_NEXT: {"week_key": WEEK_KEY_NEXT, "marker": "🟣", "color": 0x9B59B6, "style": STYLE_SUCCESS},
}


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def chunk(items: list[Any], n: int) -> list[list[Any]]:
    return [items[i:i + n] for i in range(0, len(items), n)]


def button(custom_id: str, label: str, style: int) -> dict[str, Any]:
    return {"type": COMPONENT_BUTTON, "custom_id": custom_id, "label": label, "style": style}


def history_row() -> dict[str, Any]:
    return {
        "type": COMPONENT_ACTION_ROW,
        "components": [
            button(CUSTOM_ID_HISTORY, "📜 Historique", STYLE_SECONDARY),
            button(CUSTOM_ID_REFRESH, "🔄 Refresh", STYLE_SECONDARY),
        ],
    }


def planning_components(view_id: str, day_names: list[str]) -> list[dict[str, Any]]:
    """Day buttons (5 per row) for the view's week, then the history/refresh row; at most 5 rows."""
    cfg = _PLANNING[view_id]
    buttons = [button(f"{cfg['week_key']}_{d}", d, cfg["style"]) for d in day_names]
    rows = [{"type": COMPONENT_ACTION_ROW, "components": group} for group in chunk(buttons, BUTTONS_PER_ROW)]
    return (rows + [history_row()])[:MAX_ACTION_ROWS]


def planning_payload(view_id: str, grid: WeekGrid, monday: date, now: datetime) -> dict[str, Any]:
    """Embed + components for the current-week or next-week board. `monday` is used only when the grid is empty."""
    cfg = _PLANNING[view_id]
    is_current = view_id == VIEW_CURRENT
    text = render_text(grid, is_current, now)
    shown_monday = grid.week_start or monday
    embed = {
        "title": VIEW_TITLES[view_id],
        "description": f"{cfg['marker']} **{week_range_text(shown_monday)}**\n\u200b\n*Choisis un jour puis une heure.*",
        "color": cfg["color"],
        "fields": [{"name": "📅 Disponibilités", "value": text[:EMBED_FIELD_MAX], "inline": False}],
        "timestamp": _timestamp(),
    }
    days = available_days(grid, is_current, now)
    return {"embeds": [embed], "components": planning_components(view_id, days)}


def clamp_lines(lines: list[str], max_lines: int) -> tuple[str, int]:
    """Join at most max_lines lines; also return how many were left out."""
    if len(lines) <= max_lines:
        return "\n".join(lines), 0
    return "\n".join(lines[:max_lines]), len(lines) - max_lines


def reservation_lines(history: list[HistoryRow]) -> list[str]:
    """Reservations sorted by slot date then hour; rows without a valid ISO slot date are skipped."""
    items: list[tuple[str, int, str]] = []
    for h in history:
        rec = h.record
        if not _ISO_DATE_RE.match(rec.slot_iso):
            continue
        line = f"• **{rec.day_name} {h.display_date}** — `{rec.hour}` → **{rec.user}**"
        items.append((rec.slot_iso, hour_to_number(rec.hour), line))
    items.sort(key=lambda x: (x[0], x[1]))
    return [line for _, _, line in items]


def reservations_payload(history: list[HistoryRow]) -> dict[str, Any]:
    text, extra = clamp_lines(reservation_lines(history), RESERVATIONS_MAX_LINES)
    description = (text or "Aucune réservation.") + (f"\n… +{extra} autres" if extra else "")
    embed = {
        "title": VIEW_TITLES[VIEW_RESERVATIONS],
        "color": 0x2ECC71,
        "description": description,
        "timestamp": _timestamp(),
        "footer": {"text": "📜 Historique global via le bouton."},
    }
    return {"embeds": [embed], "components": []}


def history_embed(history: list[HistoryRow]) -> dict[str, Any]:
    """Ephemeral notice: the last HISTORY_MAX_LINES history rows in append order."""
    last = history[-HISTORY_MAX_LINES:]
    lines = [f"• {h.record.day_name} {h.display_date} à {h.record.hour} → **{h.record.user}**" for h in last]
    return {
        "title": "📜 Historique global",
        "color": 0x95A5A6,
        "description": "\n".join(lines) if lines else "Aucune réservation.",
        "timestamp": _timestamp(),
    }


def slot_picker(week_key: str, day_name: str, options: list[SlotOption]) -> dict[str, Any]:
    """Ephemeral message data with one select menu listing the day's bookable hours."""
    week_text = "semaine en cours" if week_key == WEEK_KEY_CURRENT else "semaine à venir"
    select = {
        "type": COMPONENT_STRING_SELECT,
        "custom_id": CUSTOM_ID_PICK_SLOT,
        "placeholder": f"Choisis une heure ({day_name})",
        "options": [
            {"label": o.hour, "value": pick_value(o.tab, o.row, o.col, o.day_name, o.day_iso, o.hour)}
            for o in options[:MAX_SELECT_OPTIONS]
        ],
    }
    return {
        "content": f"🕒 **{day_name}** — choisis une heure ({week_text})",
        "components": [{"type": COMPONENT_ACTION_ROW, "components": [select]}],
    }
