from ticketing.domain.models import (
    Attendee,
    CustomerInfo,
    Event,
    EventStatus,
    IssuedTicket,
    LineItem,
    NewOrder,
    NewTicket,
    OrderStatus,
    OwnedTicket,
    PricedLine,
    PurchaseQuote,
    PurchaseRequest,
    PurchaseResult,
    Ticket,
    TicketStatus,
    TicketType,
    TicketTypeAvailability,
    TicketTypeDraft,
)
from ticketing.domain.value_objects import (
    Capacity,
    EventId,
    Money,
    OrderId,
    TicketCode,
    TicketId,
    TicketTypeId,
)

__all__ = [
    "Attendee",
    "CustomerInfo",
    "Event",
    "EventStatus",
    "IssuedTicket",
    "LineItem",
    "NewOrder",
    "NewTicket",
    "OrderStatus",
    "OwnedTicket",
    "PricedLine",
    "PurchaseQuote",
    "PurchaseRequest",
    "PurchaseResult",
    "Ticket",
    "TicketStatus",
    "TicketType",
    "TicketTypeAvailability",
    "TicketTypeDraft",
    "EventId",
    "TicketTypeId",
    "OrderId",
    "TicketId",
    "TicketCode",
    "Money",
    "Capacity",
]
