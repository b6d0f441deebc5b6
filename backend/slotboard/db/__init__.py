from slotboard.db.base import Base
from slotboard.db.session import engine, SessionLocal
from slotboard.db.tables import ALL_TABLE_NAMES

__all__ = ["engine", "SessionLocal", "Base", "ALL_TABLE_NAMES"]
