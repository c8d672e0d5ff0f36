"""Purchase service - quotes baskets and sells tickets.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

A purchase validates the basket with plain reads first, then opens a store
transaction, re-validates against locked ticket type rows and only then
writes the order and its tickets. Nothing is written unless the locked
re-check passes, and nothing survives a failure after it.
"""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from enum import Enum
from uuid import uuid4

from django.utils import timezone

from ticketing.domain import (
    EventId,
    IssuedTicket,
    LineItem,
    Money,
    NewOrder,
    NewTicket,
    OrderId,
    OrderStatus,
    PricedLine,
    PurchaseQuote,
    PurchaseRequest,
    PurchaseResult,
    Ticket,
    TicketCode,
)
from ticketing.domain.errors import (
    ConcurrencyConflictError,
    DomainError,
    EventNotFoundError,
    IneligibleError,
    InsufficientInventoryError,
    InvalidPurchaseError,
    LimitExceededError,
    NotYetOnSaleError,
    SaleEndedError,
    StoreFailureError,
    TicketCodeTakenError,
    TicketTypeNotFoundError,
)
from ticketing.domain.models import Attendee, EventStatus, validate_line_items
from ticketing.services.codes import generate_ticket_code
from ticketing.services.ids import parse_event_id
from ticketing.stores.interfaces import TicketingStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
CodeGenerator = Callable[[], TicketCode]


class PurchaseState(Enum):
    STARTED = "started"
    VALIDATING = "validating"
    REJECTED = "rejected"
    RESERVING = "reserving"
    ABORTED = "aborted"
    COMMITTED = "committed"


_TRANSITIONS: dict[PurchaseState, frozenset[PurchaseState]] = {
    PurchaseState.STARTED: frozenset({PurchaseState.VALIDATING}),
    PurchaseState.VALIDATING: frozenset({PurchaseState.REJECTED, PurchaseState.RESERVING}),
    PurchaseState.RESERVING: frozenset({PurchaseState.ABORTED, PurchaseState.COMMITTED}),
}

TERMINAL_STATES = frozenset(
    {PurchaseState.REJECTED, PurchaseState.ABORTED, PurchaseState.COMMITTED}
)


class PurchaseAttempt:
    """One pass through the purchase state machine.

    Started -> Validating -> (Rejected | Reserving) -> (Aborted | Committed).
    Attempts are never reused; a retry starts a fresh attempt.
    """

    def __init__(self, event_id: EventId) -> None:
        self.id = uuid4().hex[:12]
        self.event_id = event_id
        self.state = PurchaseState.STARTED

    def advance(self, state: PurchaseState) -> None:
        if state not in _TRANSITIONS.get(self.state, frozenset()):
            raise RuntimeError(
                f"Illegal purchase transition {self.state.value} -> {state.value}"
            )
        logger.debug("Purchase %s: %s -> %s", self.id, self.state.value, state.value)
        self.state = state

    def fail(self) -> None:
        """Move to the terminal failure state reachable from the current one."""
        if self.state is PurchaseState.VALIDATING:
            self.advance(PurchaseState.REJECTED)
        elif self.state is PurchaseState.RESERVING:
            self.advance(PurchaseState.ABORTED)

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES


class PurchaseService:
    """Service for quoting and executing ticket purchases."""

    def __init__(
        self,
        store: TicketingStore,
        *,
        clock: Clock = timezone.now,
        code_generator: CodeGenerator = generate_ticket_code,
        max_code_attempts: int = 5,
        conflict_retries: int = 1,
    ) -> None:
        self._store = store
        self._clock = clock
        self._code_generator = code_generator
        self._max_code_attempts = max_code_attempts
        self._conflict_retries = conflict_retries

    def quote(self, event_id: str, line_items: Sequence[LineItem]) -> PurchaseQuote:
        """Validate and price a basket without writing anything.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            InvalidPurchaseError: If the basket shape is invalid.
            EventNotFoundError, TicketTypeNotFoundError, IneligibleError,
            NotYetOnSaleError, SaleEndedError, LimitExceededError,
            InsufficientInventoryError: If the basket cannot be sold.
        """
        parsed_id = parse_event_id(event_id)
        items = tuple(line_items)
        try:
            validate_line_items(items)
        except ValueError as exc:
            raise InvalidPurchaseError(str(exc)) from exc
        return self._validate(parsed_id, items, self._clock(), for_update=False)

    def purchase(self, request: PurchaseRequest) -> PurchaseResult:
        """Sell the requested tickets as one atomic order.

        A purchase that hits a lock timeout, deadlock or serialization
        failure is attempted again up to `conflict_retries` times before
        ConcurrencyConflictError reaches the caller.
        """
        retries_left = self._conflict_retries
        while True:
            try:
                return self._attempt_purchase(request)
            except ConcurrencyConflictError:
                if retries_left <= 0:
                    raise
                retries_left -= 1
                logger.warning("Retrying purchase for event %s after a conflict", request.event_id)

    def _attempt_purchase(self, request: PurchaseRequest) -> PurchaseResult:
        attempt = PurchaseAttempt(request.event_id)
        attempt.advance(PurchaseState.VALIDATING)
        issued: list[IssuedTicket] = []
        try:
            # Fail fast without taking any locks.
            self._validate(request.event_id, request.line_items, self._clock(), for_update=False)
            with self._store.atomic():
                attempt.advance(PurchaseState.RESERVING)
                # A failed re-check here aborts the open transaction.
                quote = self._validate(
                    request.event_id, request.line_items, self._clock(), for_update=True
                )
                order_id = self._store.create_order(
                    NewOrder(
                        event_id=request.event_id,
                        buyer_id=request.buyer_id,
                        total=quote.total,
                        customer=request.customer,
                    )
                )
                for line, item in zip(quote.lines, request.line_items):
                    for index in range(line.quantity):
                        ticket = self._issue_ticket(
                            order_id, line, item.attendee_for(index, request.customer)
                        )
                        issued.append(IssuedTicket(ticket=ticket, ticket_type_name=line.ticket_type.name))
                self._store.complete_order(order_id)
        except DomainError as exc:
            attempt.fail()
            logger.info("Purchase %s %s: %s", attempt.id, attempt.state.value, exc)
            raise
        except Exception:
            attempt.fail()
            logger.exception("Purchase %s %s unexpectedly", attempt.id, attempt.state.value)
            raise

        attempt.advance(PurchaseState.COMMITTED)
        logger.info(
            "Tickets purchased: order=%s event=%s buyer=%s total=%s tickets=%d",
            order_id,
            request.event_id,
            request.buyer_id,
            quote.total,
            len(issued),
        )
        return PurchaseResult(
            order_id=order_id,
            event_id=request.event_id,
            total=quote.total,
            status=OrderStatus.COMPLETED,
            tickets=tuple(issued),
        )

    def _issue_ticket(self, order_id: OrderId, line: PricedLine, attendee: Attendee) -> Ticket:
        for attempt in range(1, self._max_code_attempts + 1):
            code = self._code_generator()
            try:
                return self._store.create_ticket(
                    NewTicket(
                        order_id=order_id,
                        ticket_type_id=line.ticket_type.id,
                        code=code,
                        purchase_price=line.unit_price,
                        attendee=attendee,
                    )
                )
            except TicketCodeTakenError:
                logger.warning(
                    "Ticket code collision (attempt %d/%d)", attempt, self._max_code_attempts
                )
        raise StoreFailureError("Could not allocate a unique ticket code")

    def _validate(
        self,
        event_id: EventId,
        line_items: Sequence[LineItem],
        now: datetime,
        *,
        for_update: bool,
    ) -> PurchaseQuote:
        event = self._store.get_event(event_id)
        if event is None or event.is_deleted or event.status != EventStatus.PUBLISHED:
            raise EventNotFoundError(str(event_id))
        if not event.is_purchasable(now):
            raise IneligibleError("Cannot purchase tickets for events that have already started")

        available = self._store.get_ticket_types(
            event_id, [item.ticket_type_id for item in line_items], for_update=for_update
        )
        by_id = {entry.ticket_type.id: entry for entry in available}

        lines: list[PricedLine] = []
        for item in line_items:
            entry = by_id.get(item.ticket_type_id)
            if entry is None:
                raise TicketTypeNotFoundError(str(item.ticket_type_id))
            ticket_type = entry.ticket_type
            if not ticket_type.is_active:
                raise IneligibleError(f'Ticket type "{ticket_type.name}" is not active')
            if ticket_type.sale_start is not None and now < ticket_type.sale_start:
                raise NotYetOnSaleError(ticket_type.name)
            if ticket_type.sale_end is not None and now > ticket_type.sale_end:
                raise SaleEndedError(ticket_type.name)
            if item.quantity > ticket_type.max_purchase:
                raise LimitExceededError.above_max(ticket_type.name, ticket_type.max_purchase)
            if item.quantity < ticket_type.min_purchase:
                raise LimitExceededError.below_min(ticket_type.name, ticket_type.min_purchase)
            remaining = entry.available_count
            if item.quantity > remaining:
                raise InsufficientInventoryError(
                    str(ticket_type.id), ticket_type.name, remaining
                )
            lines.append(
                PricedLine(
                    ticket_type=ticket_type,
                    quantity=item.quantity,
                    unit_price=ticket_type.price,
                    line_total=ticket_type.price.times(item.quantity),
                    remaining_after=remaining - item.quantity,
                )
            )

        return PurchaseQuote(event_id=event_id, lines=tuple(lines), total=_sum_lines(lines))


def _sum_lines(lines: list[PricedLine]) -> Money:
    total = Money.zero(lines[0].unit_price.currency)
    try:
        for line in lines:
            total = total + line.line_total
    except ValueError as exc:
        raise InvalidPurchaseError(
            "Ticket types priced in different currencies cannot be bought together"
        ) from exc
    return total
