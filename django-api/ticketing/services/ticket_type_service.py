"""Ticket type service - lets organizers put ticket types on sale."""

import logging

from ticketing.domain import TicketType, TicketTypeDraft
from ticketing.domain.errors import EventNotFoundError, InvalidTicketTypeError
from ticketing.services.ids import parse_event_id
from ticketing.stores.interfaces import TicketingStore

logger = logging.getLogger(__name__)


class TicketTypeService:
    """Service for organizer-side ticket type management."""

    def __init__(self, store: TicketingStore) -> None:
        self._store = store

    def create_ticket_type(
        self, event_id: str, organizer_id: int, draft: TicketTypeDraft
    ) -> TicketType:
        """Add a ticket type to an event the caller organizes.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist, is deleted or is
                organized by someone else.
            InvalidTicketTypeError: If the sale window or per-order limits
                are inconsistent.
        """
        parsed_id = parse_event_id(event_id)
        event = self._store.get_event(parsed_id)
        if event is None or event.is_deleted or event.organizer_id != organizer_id:
            raise EventNotFoundError(event_id)

        if (
            draft.sale_start is not None
            and draft.sale_end is not None
            and draft.sale_end <= draft.sale_start
        ):
            raise InvalidTicketTypeError("Sale end date must be after start date")
        if draft.min_purchase < 1:
            raise InvalidTicketTypeError("Minimum per order must be at least 1")
        if draft.max_purchase < draft.min_purchase:
            raise InvalidTicketTypeError(
                "Maximum per order must not be below the minimum per order"
            )

        ticket_type = self._store.create_ticket_type(parsed_id, draft)
        logger.info(
            "Ticket type created: event=%s ticket_type=%s organizer=%s name=%s",
            parsed_id,
            ticket_type.id,
            organizer_id,
            ticket_type.name,
        )
        return ticket_type
