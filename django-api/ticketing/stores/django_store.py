"""Django ORM implementation of the TicketingStore.

Inventory is guarded pessimistically: `get_ticket_types(for_update=True)`
locks the ticket type rows with SELECT ... FOR UPDATE (ascending id order)
before counting sold tickets, and every purchase takes those locks before it
inserts tickets.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from django.conf import settings
from django.db import DatabaseError, IntegrityError, OperationalError, connections, transaction
from django.db.models import Count

from ticketing import models
from ticketing.domain import (
    Attendee,
    Capacity,
    Event,
    EventId,
    EventStatus,
    Money,
    NewOrder,
    NewTicket,
    OrderId,
    OrderStatus,
    OwnedTicket,
    Ticket,
    TicketCode,
    TicketId,
    TicketStatus,
    TicketType,
    TicketTypeAvailability,
    TicketTypeDraft,
    TicketTypeId,
)
from ticketing.domain.errors import (
    ConcurrencyConflictError,
    StoreFailureError,
    TicketCodeTakenError,
)
from ticketing.stores.interfaces import TicketingStore

logger = logging.getLogger(__name__)

# serialization_failure, deadlock_detected, lock_not_available, query_canceled
TRANSIENT_SQLSTATES = frozenset({"40001", "40P01", "55P03", "57014"})


def _is_transient(exc: OperationalError) -> bool:
    cause = exc.__cause__
    sqlstate = getattr(cause, "sqlstate", None) or getattr(cause, "pgcode", None)
    if sqlstate in TRANSIENT_SQLSTATES:
        return True
    # SQLite reports writer contention without a SQLSTATE.
    return "database is locked" in str(exc)


def _to_event(row: models.Event) -> Event:
    return Event(
        id=EventId(row.id),
        title=row.title,
        venue=row.venue,
        starts_at=row.starts_at,
        ends_at=row.ends_at,
        status=EventStatus(row.status),
        is_public=row.is_public,
        is_deleted=row.deleted_at is not None,
        organizer_id=row.organizer_id,
    )


def _to_ticket_type(row: models.TicketType) -> TicketType:
    return TicketType(
        id=TicketTypeId(row.id),
        event_id=EventId(row.event_id),
        name=row.name,
        description=row.description,
        price=Money(amount=row.price, currency=row.currency),
        quantity_total=Capacity(row.quantity_total),
        min_purchase=row.min_purchase,
        max_purchase=row.max_purchase,
        sale_start=row.sale_start,
        sale_end=row.sale_end,
        is_active=row.is_active,
    )


def _to_ticket(row: models.Ticket) -> Ticket:
    return Ticket(
        id=TicketId(row.id),
        order_id=OrderId(row.order_id),
        ticket_type_id=TicketTypeId(row.ticket_type_id),
        code=TicketCode(row.code),
        status=TicketStatus(row.status),
        purchase_price=Money(amount=row.purchase_price, currency=row.currency),
        attendee=Attendee(name=row.attendee_name, email=row.attendee_email),
        created_at=row.created_at,
    )


def _to_owned_ticket(row: models.Ticket) -> OwnedTicket:
    event = row.ticket_type.event
    return OwnedTicket(
        ticket=_to_ticket(row),
        ticket_type_name=row.ticket_type.name,
        event_id=EventId(event.id),
        event_title=event.title,
        event_starts_at=event.starts_at,
        event_venue=event.venue,
        order_total=Money(amount=row.order.total_amount, currency=row.order.currency),
    )


class DjangoTicketingStore(TicketingStore):
    """PostgreSQL-backed ticketing store using Django ORM."""

    def __init__(self, using: str = "default") -> None:
        self._using = using

    @contextmanager
    def atomic(self) -> Iterator[None]:
        try:
            with transaction.atomic(using=self._using):
                self._apply_timeouts()
                yield
        except OperationalError as exc:
            if _is_transient(exc):
                logger.warning("Purchase transaction conflicted: %s", exc)
                raise ConcurrencyConflictError(str(exc)) from exc
            logger.exception("Purchase transaction failed")
            raise StoreFailureError(str(exc)) from exc
        except DatabaseError as exc:
            logger.exception("Purchase transaction failed")
            raise StoreFailureError(str(exc)) from exc

    def _apply_timeouts(self) -> None:
        """Bound lock waits and statements to the current transaction (PostgreSQL only)."""
        connection = connections[self._using]
        if connection.vendor != "postgresql":
            return
        config = settings.TICKETING
        with connection.cursor() as cursor:
            cursor.execute(
                "SELECT set_config('lock_timeout', %s, true),"
                " set_config('statement_timeout', %s, true)",
                [f"{config['LOCK_TIMEOUT_MS']}ms", f"{config['STATEMENT_TIMEOUT_MS']}ms"],
            )

    def get_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.using(self._using).filter(pk=event_id.value).first()
        return _to_event(row) if row is not None else None

    def get_ticket_types(
        self,
        event_id: EventId,
        ticket_type_ids: list[TicketTypeId],
        *,
        for_update: bool = False,
    ) -> list[TicketTypeAvailability]:
        queryset = (
            models.TicketType.objects.using(self._using)
            .filter(
                event_id=event_id.value,
                id__in=[ticket_type_id.value for ticket_type_id in ticket_type_ids],
                deleted_at__isnull=True,
            )
            .order_by("id")
        )
        if for_update:
            queryset = queryset.select_for_update()
        return self._with_sold_counts(list(queryset))

    def list_ticket_types(self, event_id: EventId) -> list[TicketTypeAvailability]:
        rows = (
            models.TicketType.objects.using(self._using)
            .filter(event_id=event_id.value, deleted_at__isnull=True)
            .order_by("price", "name")
        )
        return self._with_sold_counts(list(rows))

    def _with_sold_counts(self, rows: list[models.TicketType]) -> list[TicketTypeAvailability]:
        sold = dict(
            models.Ticket.objects.using(self._using)
            .filter(ticket_type_id__in=[row.id for row in rows])
            .exclude(status=TicketStatus.CANCELLED.value)
            .order_by()
            .values("ticket_type_id")
            .annotate(sold=Count("id"))
            .values_list("ticket_type_id", "sold")
        )
        return [
            TicketTypeAvailability(ticket_type=_to_ticket_type(row), sold_count=sold.get(row.id, 0))
            for row in rows
        ]

    def create_order(self, order: NewOrder) -> OrderId:
        row = models.Order.objects.using(self._using).create(
            user_id=order.buyer_id,
            event_id=order.event_id.value,
            total_amount=order.total.amount,
            currency=order.total.currency,
            status=OrderStatus.PENDING.value,
            customer_first_name=order.customer.first_name,
            customer_last_name=order.customer.last_name,
            customer_email=order.customer.email,
            customer_phone=order.customer.phone,
        )
        return OrderId(row.id)

    def create_ticket(self, ticket: NewTicket) -> Ticket:
        tickets = models.Ticket.objects.using(self._using)
        try:
            # Savepoint, so a code collision leaves the outer transaction usable.
            with transaction.atomic(using=self._using):
                row = tickets.create(
                    order_id=ticket.order_id.value,
                    ticket_type_id=ticket.ticket_type_id.value,
                    code=str(ticket.code),
                    status=TicketStatus.ACTIVE.value,
                    purchase_price=ticket.purchase_price.amount,
                    currency=ticket.purchase_price.currency,
                    attendee_name=ticket.attendee.name,
                    attendee_email=ticket.attendee.email,
                )
        except IntegrityError:
            if tickets.filter(code=str(ticket.code)).exists():
                raise TicketCodeTakenError(str(ticket.code)) from None
            raise
        return _to_ticket(row)

    def complete_order(self, order_id: OrderId) -> None:
        row = models.Order.objects.using(self._using).get(pk=order_id.value)
        row.status = OrderStatus.COMPLETED.value
        row.save(update_fields=["status", "updated_at"])

    def list_tickets_for_user(
        self,
        user_id: int,
        *,
        status: TicketStatus | None = None,
        event_id: EventId | None = None,
    ) -> list[OwnedTicket]:
        rows = self._owned_tickets(user_id)
        if status is not None:
            rows = rows.filter(status=status.value)
        if event_id is not None:
            rows = rows.filter(ticket_type__event_id=event_id.value)
        return [_to_owned_ticket(row) for row in rows.order_by("-created_at", "code")]

    def get_ticket_for_user(self, ticket_id: TicketId, user_id: int) -> OwnedTicket | None:
        row = self._owned_tickets(user_id).filter(pk=ticket_id.value).first()
        return _to_owned_ticket(row) if row is not None else None

    def _owned_tickets(self, user_id: int):
        return (
            models.Ticket.objects.using(self._using)
            .select_related("ticket_type", "ticket_type__event", "order")
            .filter(order__user_id=user_id)
        )

    def create_ticket_type(self, event_id: EventId, draft: TicketTypeDraft) -> TicketType:
        try:
            with transaction.atomic(using=self._using):
                row = models.TicketType.objects.using(self._using).create(
                    event_id=event_id.value,
                    name=draft.name,
                    description=draft.description,
                    price=draft.price.amount,
                    currency=draft.price.currency,
                    quantity_total=draft.quantity_total.value,
                    min_purchase=draft.min_purchase,
                    max_purchase=draft.max_purchase,
                    sale_start=draft.sale_start,
                    sale_end=draft.sale_end,
                    is_active=draft.is_active,
                )
        except DatabaseError as exc:
            logger.exception("Ticket type insert failed for event %s", event_id)
            raise StoreFailureError(str(exc)) from exc
        return _to_ticket_type(row)
