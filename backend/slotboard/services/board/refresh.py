"""
Refresh cycle and weekly roll.

A full refresh reads both week grids and the history once, renders the three views and converges
them into the channel. Refreshes are serialized so two overlapping triggers (hourly tick, claim,
manual button) cannot both send a missing view; none is skipped.
"""
import logging
import threading
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from slotboard.config import settings
from slotboard.core.constants import TAB_CURRENT, TAB_HISTORY, TAB_NEXT, VIEW_CURRENT, VIEW_NEXT, VIEW_RESERVATIONS
from slotboard.core.timeutil import board_week_start, now_local
from slotboard.db.session import SessionLocal
from slotboard.services.board.reconciler import converge_all, ensure_order_and_dedupe
from slotboard.services.board.render import planning_payload, reservations_payload
from slotboard.services.grid import WeekGrid
from slotboard.services.registry import get_chat, get_store

logger = logging.getLogger(__name__)

_refresh_lock = threading.Lock()


def build_payloads(store, now: datetime) -> dict[str, dict[str, Any]]:
    """Read grids + history and render every view."""
    current = store.read(TAB_CURRENT)
    upcoming = store.read(TAB_NEXT)
    history = store.list_history()
    return {
        VIEW_CURRENT: planning_payload(VIEW_CURRENT, current, board_week_start(0, now), now),
        VIEW_NEXT: planning_payload(VIEW_NEXT, upcoming, board_week_start(1, now), now),
        VIEW_RESERVATIONS: reservations_payload(history),
    }


def refresh_all(
    *,
    store=None,
    chat=None,
    db: Session | None = None,
    channel_id: str | None = None,
    now: datetime | None = None,
) -> dict[str, str]:
    """Read, scan, render, reconcile. Returns view_id -> message_id."""
    store = store or get_store()
    chat = chat or get_chat()
    channel_id = channel_id or settings.discord_channel_id
    own_session = db is None
    if own_session:
        db = SessionLocal()
    try:
        with _refresh_lock:
            payloads = build_payloads(store, now or now_local())
            bound = converge_all(chat, db, channel_id, payloads)
        logger.debug("Refresh done: %s", bound)
        return bound
    finally:
        if own_session:
            db.close()


def _snapshots(store) -> tuple[WeekGrid, WeekGrid]:
    store.ensure(TAB_CURRENT)
    store.ensure(TAB_NEXT)
    return store.read(TAB_CURRENT), store.read(TAB_NEXT)


def roll_weeks(*, store=None, now: datetime | None = None) -> None:
    """
    Regenerate both week grids for the boundaries that start at the roll: fired on Sunday 23:00,
    the current tab gets the Monday an hour away and the next tab the Monday after. Cells already
    set for a week that stays tracked (the old next week) are carried over; the ending week is dropped.
    """
    store = store or get_store()
    now = now or now_local()
    current, upcoming = board_week_start(0, now), board_week_start(1, now)
    store.ensure(TAB_HISTORY)
    snapshots = _snapshots(store)
    store.regenerate(TAB_CURRENT, current, keep_from=snapshots)
    store.regenerate(TAB_NEXT, upcoming, keep_from=snapshots)
    logger.info("Week grids rolled: current=%s next=%s", current, upcoming)


def sync_weeks(*, store=None, now: datetime | None = None) -> list[str]:
    """
    Make sure both week tabs exist and hold the expected week. A tab is regenerated only when it is
    missing, empty or holds another week; otherwise its ticked and claimed cells are left alone.
    Returns the regenerated tabs.
    """
    store = store or get_store()
    now = now or now_local()
    store.ensure(TAB_HISTORY)
    snapshots = _snapshots(store)
    regenerated: list[str] = []
    for tab, offset, grid in ((TAB_CURRENT, 0, snapshots[0]), (TAB_NEXT, 1, snapshots[1])):
        expected = board_week_start(offset, now)
        held = grid.week_start
        if held == expected:
            continue
        logger.info("Tab %s holds week %s, expected %s; regenerating", tab, held, expected)
        store.regenerate(tab, expected, keep_from=snapshots)
        regenerated.append(tab)
    return regenerated


def startup_sync(
    *,
    store=None,
    chat=None,
    db: Session | None = None,
    channel_id: str | None = None,
    now: datetime | None = None,
) -> dict[str, str]:
    """On boot: bring missing or stale grids up to date, dedupe/re-order the channel's board messages, then refresh."""
    store = store or get_store()
    chat = chat or get_chat()
    channel_id = channel_id or settings.discord_channel_id
    own_session = db is None
    if own_session:
        db = SessionLocal()
    try:
        sync_weeks(store=store, now=now)
        ensure_order_and_dedupe(chat, db, channel_id)
        return refresh_all(store=store, chat=chat, db=db, channel_id=channel_id, now=now)
    finally:
        if own_session:
            db.close()
