"""Cache keys shared by handlers and signal-driven invalidation."""


def ticket_types_key(event_id) -> str:
    return f"events:{event_id}:ticket_types"
