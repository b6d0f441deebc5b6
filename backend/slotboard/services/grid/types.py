"""
Week grid types: explicit cell states, day/hour axes and reservation history rows.

Sheet layout (1-based rows/cols as in A1 notation):
  row 1   'Heures' | 'Lundi 19/10' | ... | 'Dimanche 25/10'
  row 2   'ISO'    | '2026-10-19'  | ... | '2026-10-25'
  row 3+  '10h'    | cell          | ... | cell
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from slotboard.core.constants import CELL_CLAIMED, CELL_OPEN_VALUES, GRID_DAY_COLUMNS, GRID_HEADER_ROWS
from slotboard.core.timeutil import add_days, ddmm


class CellState(str, Enum):
    OPEN = "open"  # ticked by an operator: bookable
    CLAIMED = "claimed"  # consumed by a reservation
    CLOSED = "closed"  # empty, unticked or anything else: never offered


def parse_cell(value: Any) -> CellState:
    text = ("" if value is None else str(value)).strip().lower()
    if text in CELL_OPEN_VALUES:
        return CellState.OPEN
    if text == CELL_CLAIMED.lower():
        return CellState.CLAIMED
    return CellState.CLOSED


def _cell(values: list[list[Any]], r: int, c: int) -> str:
    if r >= len(values) or c >= len(values[r]):
        return ""
    v = values[r][c]
    return "" if v is None else str(v).strip()


@dataclass(frozen=True)
class DayColumn:
    col: int  # 1-based sheet column (B=2 .. H=8)
    label: str  # 'Lundi 19/10'
    iso: str  # '2026-10-19'

    @property
    def name(self) -> str:
        return self.label.split(" ")[0]


@dataclass(frozen=True)
class HourRow:
    row: int  # 1-based sheet row
    label: str  # '14h'


@dataclass
class WeekGrid:
    """Point-in-time snapshot of one week tab."""

    tab: str
    days: list[DayColumn] = field(default_factory=list)
    hours: list[HourRow] = field(default_factory=list)
    cells: dict[tuple[int, int], CellState] = field(default_factory=dict)  # (row, col) -> state

    @classmethod
    def from_values(cls, tab: str, values: list[list[Any]]) -> WeekGrid:
        if len(values) <= GRID_HEADER_ROWS:
            return cls(tab=tab)
        days: list[DayColumn] = []
        for c in range(1, GRID_DAY_COLUMNS + 1):
            label = _cell(values, 0, c)
            if not label:
                continue
            days.append(DayColumn(col=c + 1, label=label, iso=_cell(values, 1, c)))
        hours: list[HourRow] = []
        cells: dict[tuple[int, int], CellState] = {}
        for r in range(GRID_HEADER_ROWS, len(values)):
            label = _cell(values, r, 0)
            if not label:
                continue
            hour = HourRow(row=r + 1, label=label)
            hours.append(hour)
            for day in days:
                raw = values[r][day.col - 1] if day.col - 1 < len(values[r]) else None
                cells[(hour.row, day.col)] = parse_cell(raw)
        return cls(tab=tab, days=days, hours=hours, cells=cells)

    @property
    def is_empty(self) -> bool:
        return not self.days

    @property
    def week_start(self) -> date | None:
        for day in self.days:
            if day.iso:
                try:
                    return date.fromisoformat(day.iso)
                except ValueError:
                    return None
        return None

    def state(self, hour: HourRow, day: DayColumn) -> CellState:
        return self.cells.get((hour.row, day.col), CellState.CLOSED)

    def find_day(self, day_name: str) -> DayColumn | None:
        for day in self.days:
            if day.label.startswith(day_name):
                return day
        return None


def build_week_table(monday: date, hours: list[str], day_names: list[str]) -> list[list[Any]]:
    """Fresh grid values for a week: headers plus every cell unticked (False)."""
    monday_iso = monday.isoformat()
    isos = [add_days(monday_iso, i) for i in range(len(day_names))]
    header_display = ["Heures"] + [f"{name} {ddmm(iso)}" for name, iso in zip(day_names, isos)]
    header_iso = ["ISO"] + isos
    rows = [[h] + [False] * len(day_names) for h in hours]
    return [header_display, header_iso, *rows]


@dataclass(frozen=True)
class ReservationRecord:
    """One history row: [dd/MM, hour, day name, user, written-at ISO, slot ISO]. Immutable once appended."""

    slot_iso: str
    hour: str
    day_name: str
    user: str
    written_at: str = ""

    @property
    def display_date(self) -> str:
        return ddmm(self.slot_iso)

    @classmethod
    def new(cls, slot_iso: str, hour: str, day_name: str, user: str) -> ReservationRecord:
        written = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return cls(slot_iso=slot_iso, hour=hour, day_name=day_name, user=user, written_at=written)

    def to_row(self) -> list[str]:
        return [self.display_date, self.hour, self.day_name, self.user, self.written_at, self.slot_iso]

    @classmethod
    def from_row(cls, row: list[Any]) -> ReservationRecord:
        cells = [("" if v is None else str(v)).strip() for v in row] + [""] * 6
        return cls(slot_iso=cells[5], hour=cells[1], day_name=cells[2], user=cells[3], written_at=cells[4])


@dataclass(frozen=True)
class HistoryRow:
    """A listed history row, keeping the display date as written (it may predate ReservationRecord)."""

    display_date: str
    record: ReservationRecord

    @classmethod
    def from_row(cls, row: list[Any]) -> HistoryRow:
        first = ("" if not row or row[0] is None else str(row[0])).strip()
        return cls(display_date=first, record=ReservationRecord.from_row(row))
