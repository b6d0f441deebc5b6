"""
Availability scanner: which days and hours of a week grid are bookable right now.

Pure functions of (grid snapshot, is_current_week, now); recomputed on every refresh, never cached.
For the current week a day whose last instant has passed is skipped without scanning its cells,
and individual hours before `now` are hidden. The next week is never time-filtered.
"""
from dataclasses import dataclass
from datetime import datetime

from slotboard.config import settings
from slotboard.core.timeutil import is_day_past, is_slot_past, now_local
from slotboard.services.grid.types import CellState, DayColumn, WeekGrid


@dataclass(frozen=True)
class SlotOption:
    """One pickable slot, addressed by 1-based sheet coordinates."""

    tab: str
    row: int
    col: int
    day_name: str
    day_iso: str
    hour: str


def _day_is_past(day: DayColumn, is_current_week: bool, now: datetime) -> bool:
    if not is_current_week:
        return False
    if not day.iso:
        return True
    return is_day_past(day.iso, now)


def _bookable(grid: WeekGrid, day: DayColumn, is_current_week: bool, now: datetime):
    """Yield the hour rows of `day` that are open and (current week only) not past, top to bottom."""
    for hour in grid.hours:
        if grid.state(hour, day) is not CellState.OPEN:
            continue
        if is_current_week and is_slot_past(day.iso, hour.label, now):
            continue
        yield hour


def available_days(grid: WeekGrid, is_current_week: bool, now: datetime | None = None) -> list[str]:
    """Day names with at least one bookable slot, in configured day order."""
    now = now or now_local()
    has_any: dict[str, bool] = {}
    for day in grid.days:
        if _day_is_past(day, is_current_week, now):
            has_any[day.name] = False
            continue
        has_any[day.name] = next(_bookable(grid, day, is_current_week, now), None) is not None
    return [name for name in settings.day_names if has_any.get(name)]


def available_hours(
    grid: WeekGrid,
    day: DayColumn,
    is_current_week: bool,
    now: datetime | None = None,
) -> list[SlotOption]:
    now = now or now_local()
    if _day_is_past(day, is_current_week, now):
        return []
    return [
        SlotOption(tab=grid.tab, row=hour.row, col=day.col, day_name=day.name, day_iso=day.iso, hour=hour.label)
        for hour in _bookable(grid, day, is_current_week, now)
    ]


def render_text(grid: WeekGrid, is_current_week: bool, now: datetime | None = None) -> str:
    """Per-day breakdown for the planning embed. Past days are omitted for the current week."""
    if grid.is_empty:
        return "Aucune donnée."
    now = now or now_local()
    blocks: list[str] = []
    for day in grid.days:
        if _day_is_past(day, is_current_week, now):
            continue
        hours = [f"`{h.label}`" for h in _bookable(grid, day, is_current_week, now)]
        if hours:
            blocks.append(f"🟢 **{day.name}**\n{' • '.join(hours)}\n\u200b")
        else:
            blocks.append(f"🔴 **{day.name}**\nAucun créneau\n\u200b")
    return "\n".join(blocks).strip() or "Aucun jour affichable (tout est passé)."
