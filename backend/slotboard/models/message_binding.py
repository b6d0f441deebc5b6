"""One row per board view: which Discord message currently renders it. Replaced when the message is gone."""
from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func

from slotboard.db.base import Base


class MessageBinding(Base):
    __tablename__ = "message_bindings"

    view_id = Column(String(32), primary_key=True)  # planning_current | planning_next | reservations
    channel_id = Column(String(32), nullable=False)
    message_id = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
