"""Persisted view -> message bindings (one row per board view)."""
from sqlalchemy.orm import Session

from slotboard.models.message_binding import MessageBinding


def get_binding(db: Session, view_id: str) -> MessageBinding | None:
    return db.get(MessageBinding, view_id)


def save_binding(db: Session, view_id: str, channel_id: str, message_id: str) -> MessageBinding:
    """Upsert the binding for view_id."""
    row = db.get(MessageBinding, view_id)
    if row is None:
        row = MessageBinding(view_id=view_id, channel_id=channel_id, message_id=message_id)
        db.add(row)
    else:
        row.channel_id = channel_id
        row.message_id = message_id
    db.commit()
    return row


def clear_binding(db: Session, view_id: str) -> None:
    db.query(MessageBinding).filter(MessageBinding.view_id == view_id).delete()
    db.commit()
