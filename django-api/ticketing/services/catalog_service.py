"""Catalog service - read-only views of ticket types and issued tickets.

These reads take no locks and may be slightly stale; only the purchase
service's in-transaction check decides whether a ticket can be sold.
"""

from ticketing.domain import OwnedTicket, TicketStatus, TicketTypeAvailability
from ticketing.domain.errors import EventNotFoundError, TicketNotFoundError
from ticketing.services.ids import parse_event_id, parse_ticket_id
from ticketing.stores.interfaces import TicketingStore


class CatalogService:
    """Service for catalog reads."""

    def __init__(self, store: TicketingStore) -> None:
        self._store = store

    def list_ticket_types(self, event_id: str) -> list[TicketTypeAvailability]:
        """Return the ticket types of a public event with their availability.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist, is deleted or private.
        """
        parsed_id = parse_event_id(event_id)
        event = self._store.get_event(parsed_id)
        if event is None or event.is_deleted or not event.is_public:
            raise EventNotFoundError(event_id)
        return self._store.list_ticket_types(parsed_id)

    def list_tickets_for_user(
        self,
        user_id: int,
        status: str | None = None,
        event_id: str | None = None,
    ) -> list[OwnedTicket]:
        """Return the tickets a user has bought, newest first.

        Raises:
            InvalidIdError: If event_id is given and is not a valid UUID.
            ValueError: If status is not a known ticket status.
        """
        return self._store.list_tickets_for_user(
            user_id,
            status=TicketStatus(status) if status else None,
            event_id=parse_event_id(event_id) if event_id else None,
        )

    def get_ticket_for_user(self, ticket_id: str, user_id: int) -> OwnedTicket:
        """Return one ticket bought by the user.

        Raises:
            InvalidIdError: If the ticket_id is not a valid UUID.
            TicketNotFoundError: If the ticket does not exist or belongs to
                someone else.
        """
        ticket = self._store.get_ticket_for_user(parse_ticket_id(ticket_id), user_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        return ticket
