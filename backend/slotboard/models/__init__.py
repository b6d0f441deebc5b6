from slotboard.models.message_binding import MessageBinding

__all__ = ["MessageBinding"]
