from slotboard.services.binding_service import clear_binding, get_binding, save_binding

__all__ = ["clear_binding", "get_binding", "save_binding"]
