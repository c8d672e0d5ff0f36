"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

from ticketing.domain import (
    Event,
    EventId,
    NewOrder,
    NewTicket,
    OrderId,
    OwnedTicket,
    Ticket,
    TicketId,
    TicketStatus,
    TicketType,
    TicketTypeAvailability,
    TicketTypeDraft,
    TicketTypeId,
)


class TicketingStore(ABC):
    """Interface for ticketing persistence operations."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Open a transactional scope.

        Everything written inside the scope is committed when it exits
        normally and rolled back when an exception escapes. Implementations
        translate lock timeouts, deadlocks and serialization failures into
        ConcurrencyConflictError and other database failures into
        StoreFailureError.
        """
        ...

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if it does not exist."""
        ...

    @abstractmethod
    def get_ticket_types(
        self,
        event_id: EventId,
        ticket_type_ids: list[TicketTypeId],
        *,
        for_update: bool = False,
    ) -> list[TicketTypeAvailability]:
        """Return the requested, non-deleted ticket types of an event with sold counts.

        Ticket types that are missing or belong to another event are left out.
        With `for_update` the ticket type rows stay locked until the enclosing
        transaction ends, so the sold counts cannot change underneath the
        caller. Must be called inside `atomic()` when `for_update` is set.
        """
        ...

    @abstractmethod
    def list_ticket_types(self, event_id: EventId) -> list[TicketTypeAvailability]:
        """Return all non-deleted ticket types of an event, cheapest first."""
        ...

    @abstractmethod
    def create_order(self, order: NewOrder) -> OrderId:
        """Insert a pending order and return its ID."""
        ...

    @abstractmethod
    def create_ticket(self, ticket: NewTicket) -> Ticket:
        """Insert an active ticket.

        Raises:
            TicketCodeTakenError: If the ticket code is already used. The
                enclosing transaction remains usable.
        """
        ...

    @abstractmethod
    def complete_order(self, order_id: OrderId) -> None:
        """Mark an order completed."""
        ...

    @abstractmethod
    def list_tickets_for_user(
        self,
        user_id: int,
        *,
        status: TicketStatus | None = None,
        event_id: EventId | None = None,
    ) -> list[OwnedTicket]:
        """Return the tickets bought by a user, newest first."""
        ...

    @abstractmethod
    def get_ticket_for_user(self, ticket_id: TicketId, user_id: int) -> OwnedTicket | None:
        """Return a ticket if it was bought by the user, otherwise None."""
        ...

    @abstractmethod
    def create_ticket_type(self, event_id: EventId, draft: TicketTypeDraft) -> TicketType:
        """Insert a ticket type for an event and return it."""
        ...
