"""
Week grids: one tab per tracked week (current, next) plus the append-only history tab.
"""
from slotboard.services.grid.store import WeekGridStore, cell_a1
from slotboard.services.grid.types import (
    CellState,
    DayColumn,
    HistoryRow,
    HourRow,
    ReservationRecord,
    WeekGrid,
    build_week_table,
    parse_cell,
)

__all__ = [
    "CellState",
    "DayColumn",
    "HistoryRow",
    "HourRow",
    "ReservationRecord",
    "WeekGrid",
    "WeekGridStore",
    "build_week_table",
    "cell_a1",
    "parse_cell",
]
