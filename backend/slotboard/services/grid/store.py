"""
Week grid store adapter: the only code that knows how grids and history sit in the spreadsheet.

Reads are point-in-time snapshots with no guarantee against concurrent human edits.
Writes are single-cell (claims) or whole-tab (weekly regeneration).
"""
import logging
from datetime import date
from typing import Any, Iterable

from slotboard.config import settings
from slotboard.core.constants import (
    CELL_CLAIMED,
    GRID_DAY_COLUMNS,
    GRID_HEADER_ROWS,
    GRID_RANGE,
    HISTORY_HEADER_MARKER,
    HISTORY_RANGE,
    TAB_HISTORY,
)
from slotboard.core.errors import StoreInconsistent
from slotboard.core.timeutil import column_letter
from slotboard.services.grid.types import (
    CellState,
    HistoryRow,
    ReservationRecord,
    WeekGrid,
    build_week_table,
    parse_cell,
)
from slotboard.services.sheets import SheetsClient

logger = logging.getLogger(__name__)


def cell_a1(tab: str, row: int, col: int) -> str:
    """1-based row/col -> 'Tab!C5'."""
    return f"{tab}!{column_letter(col - 1)}{row}"


def _overlay(table: list[list[Any]], grids: Iterable[WeekGrid]) -> int:
    """Copy Open/Claimed states from `grids` into a fresh table, matched by day ISO date and hour label."""
    cols = {iso: c for c, iso in enumerate(table[1]) if c > 0}
    rows = {row[0]: r for r, row in enumerate(table) if r >= GRID_HEADER_ROWS}
    kept = 0
    for grid in grids:
        for hour in grid.hours:
            for day in grid.days:
                state = grid.state(hour, day)
                if state is CellState.CLOSED or day.iso not in cols or hour.label not in rows:
                    continue
                table[rows[hour.label]][cols[day.iso]] = CELL_CLAIMED if state is CellState.CLAIMED else True
                kept += 1
    return kept


class WeekGridStore:
    def __init__(self, client: SheetsClient | None = None) -> None:
        self._client = client or SheetsClient()

    def ensure(self, tab: str) -> None:
        """Create the tab if absent; no-op when it exists."""
        if tab in self._client.sheet_ids():
            return
        self._client.add_sheet(tab)
        logger.info("Created sheet tab %s", tab)

    def read(self, tab: str) -> WeekGrid:
        return WeekGrid.from_values(tab, self._client.get_values(f"{tab}!{GRID_RANGE}"))

    def read_cell(self, tab: str, row: int, col: int) -> CellState:
        values = self._client.get_values(cell_a1(tab, row, col))
        raw = values[0][0] if values and values[0] else None
        return parse_cell(raw)

    def read_day_iso(self, tab: str, col: int) -> str:
        """ISO date key of a day column (row 2)."""
        values = self._client.get_values(cell_a1(tab, GRID_HEADER_ROWS, col))
        raw = values[0][0] if values and values[0] else None
        return "" if raw is None else str(raw).strip()

    def write_claimed(self, tab: str, row: int, col: int) -> None:
        self._client.update_values(cell_a1(tab, row, col), [[CELL_CLAIMED]])

    def regenerate(self, tab: str, monday: date, keep_from: Iterable[WeekGrid] = ()) -> None:
        """
        Wipe the tab and rebuild headers for the week starting `monday`, every cell unticked.
        Open and Claimed cells of the `keep_from` snapshots whose day and hour exist in the new week
        are written back, so a week moving from the next tab to the current one keeps its cells.
        """
        self.ensure(tab)
        self._client.clear_values(f"{tab}!{GRID_RANGE}")
        table = build_week_table(monday, settings.hours, settings.day_names)
        kept = _overlay(table, keep_from)
        last_col = column_letter(GRID_DAY_COLUMNS)
        self._client.update_values(f"{tab}!A1:{last_col}{len(table)}", table)

        sheet_id = self._client.sheet_ids().get(tab)
        if sheet_id is None:
            raise StoreInconsistent(f"Sheet id not found for tab {tab} after ensure")
        self._client.set_boolean_validation(
            sheet_id,
            start_row=GRID_HEADER_ROWS,
            end_row=GRID_HEADER_ROWS + len(settings.hours),
            start_col=1,
            end_col=1 + GRID_DAY_COLUMNS,
        )
        logger.info(
            "Regenerated %s for week of %s (%s hour rows, %s cells kept)", tab, monday.isoformat(), len(settings.hours), kept
        )

    def append_history(self, record: ReservationRecord) -> None:
        self.ensure(TAB_HISTORY)
        self._client.append_values(f"{TAB_HISTORY}!{HISTORY_RANGE}", [record.to_row()])

    def list_history(self) -> list[HistoryRow]:
        """All history rows in append order, header rows excluded."""
        self.ensure(TAB_HISTORY)
        rows = self._client.get_values(f"{TAB_HISTORY}!{HISTORY_RANGE}")
        return [
            HistoryRow.from_row(r)
            for r in rows
            if r and str(r[0] or "").strip() != HISTORY_HEADER_MARKER
        ]
