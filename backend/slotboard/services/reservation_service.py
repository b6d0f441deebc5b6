"""
Reservation transactor: turns an Open slot into Claimed and appends the history row.

Per slot the state machine is Open -> Claimed, terminal. Claims are serialized by one
in-process lock around read-check-write, so of two near-simultaneous picks on the same cell
the first writes and the second re-reads Claimed and gets SLOT_NO_LONGER_AVAILABLE.

The cell write and the history append are not atomic with each other: if the append fails the
slot stays Claimed and the history is short one row (logged, not retried).
"""
import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Callable

from slotboard.core.constants import GRID_DAY_COLUMNS, GRID_HEADER_ROWS, TAB_CURRENT, TAB_NEXT
from slotboard.core.timeutil import is_slot_past, now_local
from slotboard.services.grid import CellState, ReservationRecord, WeekGridStore

logger = logging.getLogger(__name__)

_claim_lock = threading.Lock()


class ClaimStatus(str, Enum):
    CLAIMED = "claimed"
    SLOT_NO_LONGER_AVAILABLE = "slot_no_longer_available"
    SLOT_EXPIRED = "slot_expired"


CLAIM_MESSAGES = {
    ClaimStatus.CLAIMED: "✅ Créneau réservé.",
    ClaimStatus.SLOT_NO_LONGER_AVAILABLE: "⚠️ Ce créneau n'est plus disponible.",
    ClaimStatus.SLOT_EXPIRED: "⚠️ Ce créneau est déjà passé.",
}


@dataclass(frozen=True)
class ClaimRequest:
    tab: str
    row: int
    col: int
    day_name: str
    day_iso: str
    hour: str
    user: str


@dataclass(frozen=True)
class ClaimResult:
    status: ClaimStatus
    history_written: bool = False

    @property
    def ok(self) -> bool:
        return self.status is ClaimStatus.CLAIMED

    @property
    def message(self) -> str:
        return CLAIM_MESSAGES[self.status]


def claim(
    store: WeekGridStore,
    request: ClaimRequest,
    *,
    now: datetime | None = None,
    on_claimed: Callable[[], None] | None = None,
) -> ClaimResult:
    """
    Claim one slot. Re-reads the cell from the store (the picker may be stale), rejects it when it
    is no longer Open or, on the current-week tab, already started; otherwise writes Claimed and
    appends the history record. `on_claimed` (the full refresh) runs after the lock is released;
    its failure is logged and does not undo the claim.
    """
    with _claim_lock:
        state = store.read_cell(request.tab, request.row, request.col)
        if state is not CellState.OPEN:
            logger.info(
                "Claim rejected (%s): %s row=%s col=%s by %s",
                state.value, request.tab, request.row, request.col, request.user,
            )
            return ClaimResult(ClaimStatus.SLOT_NO_LONGER_AVAILABLE)

        # the tab may have been rolled to another week since the picker was built
        if store.read_day_iso(request.tab, request.col) != request.day_iso:
            logger.info(
                "Claim rejected (week rolled): %s col=%s no longer %s, by %s",
                request.tab, request.col, request.day_iso, request.user,
            )
            return ClaimResult(ClaimStatus.SLOT_NO_LONGER_AVAILABLE)

        if request.tab == TAB_CURRENT and is_slot_past(request.day_iso, request.hour, now or now_local()):
            logger.info("Claim rejected (expired): %s %s %s by %s", request.tab, request.day_iso, request.hour, request.user)
            return ClaimResult(ClaimStatus.SLOT_EXPIRED)

        store.write_claimed(request.tab, request.row, request.col)
        logger.info("Slot claimed: %s %s %s by %s", request.tab, request.day_iso, request.hour, request.user)

        history_written = True
        record = ReservationRecord.new(request.day_iso, request.hour, request.day_name, request.user)
        try:
            store.append_history(record)
        except Exception:
            history_written = False
            logger.exception(
                "History append failed after claim (slot stays claimed): %s %s %s by %s",
                request.tab, request.day_iso, request.hour, request.user,
            )

    if on_claimed is not None:
        try:
            on_claimed()
        except Exception:
            logger.exception("Refresh after claim failed: %s %s %s", request.tab, request.day_iso, request.hour)
    return ClaimResult(ClaimStatus.CLAIMED, history_written=history_written)


def parse_pick_value(value: str, user: str) -> ClaimRequest | None:
    """Select-menu value 'tab|row|col|day|iso|hour' -> ClaimRequest; None when malformed."""
    parts = (value or "").split("|")
    if len(parts) != 6:
        return None
    tab, row, col, day_name, day_iso, hour = parts
    if tab not in (TAB_CURRENT, TAB_NEXT):
        return None
    try:
        row_n, col_n = int(row), int(col)
        date.fromisoformat(day_iso)
    except ValueError:
        return None
    # only the editable cell range of a week tab can be claimed
    if row_n <= GRID_HEADER_ROWS or not 2 <= col_n <= 1 + GRID_DAY_COLUMNS:
        return None
    return ClaimRequest(tab=tab, row=row_n, col=col_n, day_name=day_name, day_iso=day_iso, hour=hour, user=user)


def pick_value(tab: str, row: int, col: int, day_name: str, day_iso: str, hour: str) -> str:
    return f"{tab}|{row}|{col}|{day_name}|{day_iso}|{hour}"
