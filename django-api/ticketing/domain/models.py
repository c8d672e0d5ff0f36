"""Domain models representing persisted state and purchase inputs.

These are pure domain objects with no API input rules.
Django ORM models are in ticketing/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from ticketing.domain.value_objects import (
    Capacity,
    EventId,
    Money,
    OrderId,
    TicketCode,
    TicketId,
    TicketTypeId,
)

MAX_LINE_ITEMS = 20
MAX_LINE_QUANTITY = 10
DEFAULT_MAX_PURCHASE = 10


class EventStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELLED = "cancelled"


class OrderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class TicketStatus(str, Enum):
    ACTIVE = "active"
    USED = "used"
    REFUNDED = "refunded"
    TRANSFERRED = "transferred"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    title: str
    venue: str
    starts_at: datetime
    ends_at: datetime
    status: EventStatus
    is_public: bool
    is_deleted: bool = False
    organizer_id: int | None = None

    def is_purchasable(self, now: datetime) -> bool:
        return (
            not self.is_deleted
            and self.status == EventStatus.PUBLISHED
            and self.starts_at > now
        )


@dataclass(frozen=True)
class TicketType:
    """Domain representation of a TicketType."""

    id: TicketTypeId
    event_id: EventId
    name: str
    price: Money
    quantity_total: Capacity
    min_purchase: int
    max_purchase: int
    sale_start: datetime | None
    sale_end: datetime | None
    is_active: bool
    description: str = ""

    def in_sale_window(self, now: datetime) -> bool:
        if self.sale_start is not None and now < self.sale_start:
            return False
        if self.sale_end is not None and now > self.sale_end:
            return False
        return True


@dataclass(frozen=True)
class TicketTypeDraft:
    """Organizer input for a new ticket type, before it belongs to an event."""

    name: str
    price: Money
    quantity_total: Capacity
    description: str = ""
    min_purchase: int = 1
    max_purchase: int = DEFAULT_MAX_PURCHASE
    sale_start: datetime | None = None
    sale_end: datetime | None = None
    is_active: bool = True


@dataclass(frozen=True)
class TicketTypeAvailability:
    """A ticket type together with its sold count at read time."""

    ticket_type: TicketType
    sold_count: int

    @property
    def available_count(self) -> int:
        return self.ticket_type.quantity_total.remaining(self.sold_count)

    def is_available(self, now: datetime) -> bool:
        return (
            self.ticket_type.is_active
            and self.available_count > 0
            and self.ticket_type.in_sale_window(now)
        )


@dataclass(frozen=True)
class Attendee:
    name: str
    email: str


@dataclass(frozen=True)
class CustomerInfo:
    """Buyer contact snapshot copied onto the order."""

    first_name: str
    last_name: str
    email: str
    phone: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def as_attendee(self) -> Attendee:
        return Attendee(name=self.full_name, email=self.email)


@dataclass(frozen=True)
class LineItem:
    """One requested (ticket type, quantity) pair."""

    ticket_type_id: TicketTypeId
    quantity: int
    attendees: tuple[Attendee, ...] = ()

    def __post_init__(self) -> None:
        if not 1 <= self.quantity <= MAX_LINE_QUANTITY:
            raise ValueError(f"Quantity must be between 1 and {MAX_LINE_QUANTITY}")
        if len(self.attendees) > self.quantity:
            raise ValueError("More attendees than tickets requested")

    def attendee_for(self, index: int, buyer: CustomerInfo) -> Attendee:
        if index < len(self.attendees):
            return self.attendees[index]
        return buyer.as_attendee()


@dataclass(frozen=True)
class PurchaseRequest:
    """A complete purchase request from an authenticated buyer."""

    event_id: EventId
    buyer_id: int
    line_items: tuple[LineItem, ...]
    customer: CustomerInfo

    def __post_init__(self) -> None:
        validate_line_items(self.line_items)


def validate_line_items(line_items: tuple[LineItem, ...]) -> None:
    """Check the basket shape: 1..20 lines, each ticket type at most once."""
    if not 1 <= len(line_items) <= MAX_LINE_ITEMS:
        raise ValueError(f"A purchase must contain between 1 and {MAX_LINE_ITEMS} ticket types")
    ids = [item.ticket_type_id for item in line_items]
    if len(set(ids)) != len(ids):
        raise ValueError("Each ticket type may appear only once per purchase")


@dataclass(frozen=True)
class PricedLine:
    """A validated line item priced at the ticket type's current price."""

    ticket_type: TicketType
    quantity: int
    unit_price: Money
    line_total: Money
    remaining_after: int


@dataclass(frozen=True)
class PurchaseQuote:
    """Result of validating a basket: priced lines and the grand total."""

    event_id: EventId
    lines: tuple[PricedLine, ...]
    total: Money


@dataclass(frozen=True)
class NewOrder:
    event_id: EventId
    buyer_id: int
    total: Money
    customer: CustomerInfo


@dataclass(frozen=True)
class NewTicket:
    order_id: OrderId
    ticket_type_id: TicketTypeId
    code: TicketCode
    purchase_price: Money
    attendee: Attendee


@dataclass(frozen=True)
class Ticket:
    """Domain representation of an issued Ticket."""

    id: TicketId
    order_id: OrderId
    ticket_type_id: TicketTypeId
    code: TicketCode
    status: TicketStatus
    purchase_price: Money
    attendee: Attendee
    created_at: datetime


@dataclass(frozen=True)
class IssuedTicket:
    ticket: Ticket
    ticket_type_name: str


@dataclass(frozen=True)
class PurchaseResult:
    """A committed order and the tickets issued with it."""

    order_id: OrderId
    event_id: EventId
    total: Money
    status: OrderStatus
    tickets: tuple[IssuedTicket, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class OwnedTicket:
    """A ticket as listed for its owner, joined with type, event and order."""

    ticket: Ticket
    ticket_type_name: str
    event_id: EventId
    event_title: str
    event_starts_at: datetime
    event_venue: str
    order_total: Money
