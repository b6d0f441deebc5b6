"""
Board: the three long-lived Discord messages (current week, next week, reservations).

- render: embeds/components as dicts.
- reconciler: one message per view (bindings, duplicate cleanup, channel order).
- refresh: full refresh cycle, weekly roll, startup sync.
"""
from slotboard.services.board.reconciler import (
    converge,
    converge_all,
    ensure_order_and_dedupe,
    resolve_binding,
)
from slotboard.services.board.refresh import build_payloads, refresh_all, roll_weeks, startup_sync, sync_weeks

__all__ = [
    "build_payloads",
    "converge",
    "converge_all",
    "ensure_order_and_dedupe",
    "refresh_all",
    "resolve_binding",
    "roll_weeks",
    "startup_sync",
    "sync_weeks",
]
