"""Domain error codes for the ticketing module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    TICKET_TYPE_NOT_FOUND = "TICKET_TYPE_NOT_FOUND"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    INVALID_ID = "INVALID_ID"
    INVALID_PURCHASE = "INVALID_PURCHASE"
    INVALID_TICKET_TYPE = "INVALID_TICKET_TYPE"
    INELIGIBLE = "INELIGIBLE"
    NOT_YET_ON_SALE = "NOT_YET_ON_SALE"
    SALE_ENDED = "SALE_ENDED"
    LIMIT_EXCEEDED = "LIMIT_EXCEEDED"
    INSUFFICIENT_INVENTORY = "INSUFFICIENT_INVENTORY"
    CONCURRENCY_CONFLICT = "CONCURRENCY_CONFLICT"
    STORE_FAILURE = "STORE_FAILURE"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(DomainError):
    """Raised when an event is missing, deleted or not open for purchase."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found or not available for purchase",
        )
        self.event_id = event_id


class TicketTypeNotFoundError(DomainError):
    """Raised when a ticket type does not exist or belongs to another event."""

    def __init__(self, ticket_type_id: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_TYPE_NOT_FOUND,
            message="One or more ticket types not found",
        )
        self.ticket_type_id = ticket_type_id


class TicketNotFoundError(DomainError):
    """Raised when a ticket does not exist or is not owned by the caller."""

    def __init__(self, ticket_id: str) -> None:
        super().__init__(code=ErrorCode.TICKET_NOT_FOUND, message="Ticket not found")
        self.ticket_id = ticket_id


class InvalidIdError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, kind: str = "event") -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {kind} ID format",
        )


class InvalidPurchaseError(DomainError):
    """Raised when a purchase request is structurally invalid."""

    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.INVALID_PURCHASE, message=reason)


class InvalidTicketTypeError(DomainError):
    """Raised when an organizer submits an inconsistent ticket type."""

    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.INVALID_TICKET_TYPE, message=reason)


class IneligibleError(DomainError):
    """Raised when a ticket type or its event cannot be sold right now."""

    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.INELIGIBLE, message=reason)


class NotYetOnSaleError(DomainError):
    def __init__(self, ticket_type_name: str) -> None:
        super().__init__(
            code=ErrorCode.NOT_YET_ON_SALE,
            message=f'Sales for "{ticket_type_name}" have not started yet',
        )


class SaleEndedError(DomainError):
    def __init__(self, ticket_type_name: str) -> None:
        super().__init__(
            code=ErrorCode.SALE_ENDED,
            message=f'Sales for "{ticket_type_name}" have ended',
        )


class LimitExceededError(DomainError):
    """Raised when a line item quantity falls outside the per-order bounds."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.LIMIT_EXCEEDED, message=message)

    @classmethod
    def above_max(cls, ticket_type_name: str, max_purchase: int) -> "LimitExceededError":
        return cls(
            f'Maximum {max_purchase} tickets allowed per order for "{ticket_type_name}"'
        )

    @classmethod
    def below_min(cls, ticket_type_name: str, min_purchase: int) -> "LimitExceededError":
        return cls(
            f'Minimum {min_purchase} tickets required per order for "{ticket_type_name}"'
        )


class InsufficientInventoryError(DomainError):
    """Raised when fewer units remain than were requested.

    `remaining` is the exact number of units still available for the ticket
    type at the time of the check.
    """

    def __init__(self, ticket_type_id: str, ticket_type_name: str, remaining: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_INVENTORY,
            message=f'Only {remaining} tickets available for "{ticket_type_name}"',
        )
        self.ticket_type_id = ticket_type_id
        self.remaining = remaining


class ConcurrencyConflictError(DomainError):
    """Raised on lock timeouts, deadlocks and serialization failures.

    Transient: the whole purchase can safely be attempted again.
    """

    def __init__(self, detail: str = "") -> None:
        super().__init__(
            code=ErrorCode.CONCURRENCY_CONFLICT,
            message="The purchase conflicted with another purchase, please retry",
        )
        self.detail = detail


class StoreFailureError(DomainError):
    """Raised when the data store fails; the transaction has been rolled back."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(
            code=ErrorCode.STORE_FAILURE,
            message="The purchase could not be completed",
        )
        self.detail = detail


class TicketCodeTakenError(Exception):
    """Raised by stores when a generated ticket code is already in use."""

    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.code = code
