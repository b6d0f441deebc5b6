"""
Time & slot addressing: wall-clock "now" and week offsets mapped to calendar coordinates.

All functions are pure given `now`; callers pass `now` explicitly in tests and let it default
to the configured zone's current time elsewhere. A slot is past when its start instant is
strictly before now; a day is past when its last instant is strictly before now.
"""
import re
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from slotboard.config import settings

_HOUR_RE = re.compile(r"(\d{1,2})")


def zone() -> ZoneInfo:
    return ZoneInfo(settings.timezone)


def now_local() -> datetime:
    return datetime.now(zone())


def monday_of(d: date) -> date:
    return d - timedelta(days=d.weekday())


def week_start(offset_weeks: int = 0, now: datetime | None = None) -> date:
    """Monday at or before `now` (local), shifted by offset_weeks."""
    now = now or now_local()
    return monday_of(now.astimezone(zone()).date()) + timedelta(weeks=offset_weeks)


_WEEKDAYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


def roll_lead(day_of_week: str, hour: int) -> timedelta:
    """Time from the weekly roll instant to the following Monday 00:00."""
    weekday = _WEEKDAYS.index(day_of_week.strip().lower()[:3])
    return timedelta(days=7 - weekday) - timedelta(hours=hour)


def board_week_start(offset_weeks: int = 0, now: datetime | None = None) -> date:
    """
    Monday of the week a board tab should hold at `now`. Between the weekly roll and the following
    Monday the boards already show the coming week, so the reference instant is shifted by the lead.
    """
    now = now or now_local()
    lead = roll_lead(settings.week_roll_day_of_week, settings.week_roll_hour)
    return week_start(offset_weeks, now + lead)


def add_days(iso_date: str, days: int) -> str:
    return (date.fromisoformat(iso_date) + timedelta(days=days)).isoformat()


def ddmm(iso_date: str) -> str:
    """'2026-10-19' -> '19/10'."""
    return date.fromisoformat(iso_date).strftime("%d/%m")


def week_range_text(monday: date) -> str:
    return f"{monday.strftime('%d/%m')} → {(monday + timedelta(days=6)).strftime('%d/%m')}"


def hour_to_number(hour_label: str | None) -> int:
    """First 1-2 digit number in the label ('14h' -> 14); 0 if there is none."""
    m = _HOUR_RE.search(str(hour_label or ""))
    return int(m.group(1)) if m else 0


def slot_instant(day_iso: str, hour_label: str) -> datetime:
    hour = hour_to_number(hour_label)
    return datetime.combine(date.fromisoformat(day_iso), time(hour=hour), tzinfo=zone())


def day_end(day_iso: str) -> datetime:
    return datetime.combine(date.fromisoformat(day_iso), time.max, tzinfo=zone())


def is_slot_past(day_iso: str, hour_label: str, now: datetime | None = None) -> bool:
    return slot_instant(day_iso, hour_label) < (now or now_local())


def is_day_past(day_iso: str, now: datetime | None = None) -> bool:
    return day_end(day_iso) < (now or now_local())


def column_letter(index0: int) -> str:
    """0 -> 'A', 7 -> 'H'. The grid never goes past column Z."""
    return chr(ord("A") + index0)
