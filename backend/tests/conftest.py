# backend/tests/conftest.py
import os
import re
import sys
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo

# --- Path + environment: must happen before any slotboard import (settings/engine are built at import) ---
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TIMEZONE"] = "Europe/Paris"
os.environ["DISCORD_CHANNEL_ID"] = "chan-1"
os.environ["DISCORD_APPLICATION_ID"] = "app-1"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from slotboard.config import settings
from slotboard.core.errors import UIMessageMissing
from slotboard.db.base import Base
from slotboard.models import MessageBinding  # noqa: F401
from slotboard.services import registry
from slotboard.services.grid import WeekGridStore, build_week_table

TZ = ZoneInfo("Europe/Paris")
# Wednesday 21 Oct 2026, 14:30 local; the current week starts Monday 19 Oct
NOW = datetime(2026, 10, 21, 14, 30, tzinfo=TZ)
MONDAY = date(2026, 10, 19)
NEXT_MONDAY = date(2026, 10, 26)


# ----------------------------- Fake spreadsheet -----------------------------

_CELL_RE = re.compile(r"^([A-Z]+)(\d*)$")


def _col_index(letters: str) -> int:
    n = 0
    for ch in letters:
        n = n * 26 + (ord(ch) - ord("A") + 1)
    return n


def _parse_range(range_a1: str) -> tuple[str, int, int, int | None, int | None]:
    """'Tab!B3:H16' -> (tab, row0, col0, row1|None, col1|None), 1-based inclusive."""
    tab, _, cells = range_a1.partition("!")
    start, _, end = cells.partition(":")
    m1 = _CELL_RE.match(start)
    r0 = int(m1.group(2)) if m1.group(2) else 1
    c0 = _col_index(m1.group(1))
    if not end:
        if m1.group(2):
            return tab, r0, c0, r0, c0
        return tab, r0, c0, None, c0
    m2 = _CELL_RE.match(end)
    r1 = int(m2.group(2)) if m2.group(2) else None
    return tab, r0, c0, r1, _col_index(m2.group(1))


class FakeSheetsClient:
    """In-memory stand-in for SheetsClient: same method names, cells keyed by 1-based (row, col)."""

    def __init__(self) -> None:
        self.tabs: dict[str, dict[tuple[int, int], object]] = {}
        self.ids: dict[str, int] = {}
        self.validations: list[tuple[int, dict]] = []
        self.fail_append = False
        self.calls: list[str] = []

    def load(self, tab: str, values: list[list[object]]) -> None:
        self.add_sheet(tab) if tab not in self.ids else None
        cells = self.tabs[tab]
        cells.clear()
        for r, row in enumerate(values, start=1):
            for c, v in enumerate(row, start=1):
                cells[(r, c)] = v

    def sheet_ids(self) -> dict[str, int]:
        return dict(self.ids)

    def add_sheet(self, title: str) -> None:
        self.calls.append(f"add_sheet:{title}")
        self.ids[title] = len(self.ids) + 100
        self.tabs[title] = {}

    def set_boolean_validation(self, sheet_id: int, **rng) -> None:
        self.validations.append((sheet_id, rng))

    def _last_row(self, tab: str) -> int:
        return max((r for r, _ in self.tabs.get(tab, {})), default=0)

    def get_values(self, range_a1: str) -> list[list[object]]:
        tab, r0, c0, r1, c1 = _parse_range(range_a1)
        cells = self.tabs.get(tab, {})
        r1 = min(r1 or self._last_row(tab), max(self._last_row(tab), 0))
        out: list[list[object]] = []
        for r in range(r0, r1 + 1):
            row = [cells.get((r, c), "") for c in range(c0, c1 + 1)]
            while row and row[-1] in ("", None):
                row.pop()
            out.append(row)
        while out and not out[-1]:
            out.pop()
        return out

    def update_values(self, range_a1: str, values: list[list[object]]) -> None:
        self.calls.append(f"update:{range_a1}")
        tab, r0, c0, _, _ = _parse_range(range_a1)
        for i, row in enumerate(values):
            for j, v in enumerate(row):
                self.tabs[tab][(r0 + i, c0 + j)] = v

    def clear_values(self, range_a1: str) -> None:
        self.calls.append(f"clear:{range_a1}")
        tab, r0, c0, r1, c1 = _parse_range(range_a1)
        for (r, c) in list(self.tabs[tab]):
            if r >= r0 and (r1 is None or r <= r1) and c0 <= c <= c1:
                del self.tabs[tab][(r, c)]

    def append_values(self, range_a1: str, values: list[list[object]]) -> None:
        if self.fail_append:
            from slotboard.core.errors import StoreUnavailable

            raise StoreUnavailable("append failed")
        tab, _, c0, _, _ = _parse_range(range_a1)
        start = self._last_row(tab) + 1
        for i, row in enumerate(values):
            for j, v in enumerate(row):
                self.tabs[tab][(start + i, c0 + j)] = v


# ----------------------------- Fake Discord -----------------------------


class FakeDiscordClient:
    """In-memory channel: messages keep insertion order, ids grow like snowflakes."""

    BOT_ID = "bot-1"

    def __init__(self) -> None:
        self.messages: dict[str, list[dict]] = {}
        self._next_id = 1000
        self.sent = 0
        self.edits = 0
        self.deleted: list[str] = []
        self.original_edits: list[tuple[str, dict]] = []
        self.original_deletes: list[str] = []

    def bot_user_id(self) -> str:
        return self.BOT_ID

    def post(self, channel_id: str, payload: dict, author_id: str | None = None) -> dict:
        self._next_id += 1
        msg = {"id": str(self._next_id), "author": {"id": author_id or self.BOT_ID}, **payload}
        self.messages.setdefault(channel_id, []).append(msg)
        return msg

    def list_messages(self, channel_id: str, limit: int = 50) -> list[dict]:
        return list(reversed(self.messages.get(channel_id, [])))[:limit]

    def send_message(self, channel_id: str, payload: dict) -> dict:
        self.sent += 1
        return self.post(channel_id, payload)

    def _find(self, channel_id: str, message_id: str) -> dict:
        for m in self.messages.get(channel_id, []):
            if m["id"] == message_id:
                return m
        raise UIMessageMissing(f"Unknown message: {message_id}", status_code=404, code=10008)

    def edit_message(self, channel_id: str, message_id: str, payload: dict) -> dict:
        msg = self._find(channel_id, message_id)
        self.edits += 1
        msg.update(payload)
        return msg

    def delete_message(self, channel_id: str, message_id: str) -> None:
        msg = self._find(channel_id, message_id)
        self.messages[channel_id].remove(msg)
        self.deleted.append(message_id)

    def edit_original_response(self, interaction_token: str, payload: dict) -> None:
        self.original_edits.append((interaction_token, payload))

    def delete_original_response(self, interaction_token: str) -> None:
        self.original_deletes.append(interaction_token)

    def titles(self, channel_id: str) -> list[str]:
        return [m["embeds"][0]["title"] for m in self.messages.get(channel_id, []) if m.get("embeds")]


# ----------------------------- Helpers + fixtures -----------------------------


def week_values(monday: date, open_cells=(), claimed_cells=()) -> list[list[object]]:
    """Grid values with the given (day_name, hour) cells ticked or claimed."""
    table = build_week_table(monday, settings.hours, settings.day_names)
    for day_name, hour in open_cells:
        table[2 + settings.hours.index(hour)][1 + settings.day_names.index(day_name)] = True
    for day_name, hour in claimed_cells:
        table[2 + settings.hours.index(hour)][1 + settings.day_names.index(day_name)] = "Réservé"
    return table


def sheet_row(hour: str) -> int:
    return 3 + settings.hours.index(hour)


def sheet_col(day_name: str) -> int:
    return 2 + settings.day_names.index(day_name)


@pytest.fixture
def sheets() -> FakeSheetsClient:
    return FakeSheetsClient()


@pytest.fixture
def store(sheets) -> WeekGridStore:
    return WeekGridStore(client=sheets)


@pytest.fixture
def chat() -> FakeDiscordClient:
    return FakeDiscordClient()


@pytest.fixture
def session_factory():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def clean_registry():
    registry.reset()
    yield
    registry.reset()
