"""Parsing of identifiers received from clients."""

from ticketing.domain import EventId, TicketId
from ticketing.domain.errors import InvalidIdError


def parse_event_id(raw: str) -> EventId:
    """Parse an event ID, raising InvalidIdError if it is not a UUID."""
    try:
        return EventId.from_string(str(raw))
    except ValueError as exc:
        raise InvalidIdError("event") from exc


def parse_ticket_id(raw: str) -> TicketId:
    """Parse a ticket ID, raising InvalidIdError if it is not a UUID."""
    try:
        return TicketId.from_string(str(raw))
    except ValueError as exc:
        raise InvalidIdError("ticket") from exc
