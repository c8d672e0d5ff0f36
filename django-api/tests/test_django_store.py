"""Integration tests for DjangoTicketingStore and purchases through the ORM.

Run with: pytest tests/test_django_store.py -v
"""

from dataclasses import replace
from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
from django.db import OperationalError
from django.utils import timezone

from tests.fakes import SequenceCodes
from ticketing import models
from ticketing.domain import (
    Attendee,
    Capacity,
    CustomerInfo,
    EventId,
    LineItem,
    Money,
    NewTicket,
    PurchaseRequest,
    TicketCode,
    TicketStatus,
    TicketId,
    TicketTypeDraft,
    TicketTypeId,
)
from ticketing.domain.errors import (
    ConcurrencyConflictError,
    InsufficientInventoryError,
    SaleEndedError,
    StoreFailureError,
    TicketCodeTakenError,
)
from ticketing.services.purchase_service import PurchaseService
from ticketing.stores.django_store import DjangoTicketingStore

CUSTOMER = CustomerInfo(first_name="Ada", last_name="Lovelace", email="ada@example.com")


def _request(user, event, ticket_type, quantity: int = 1) -> PurchaseRequest:
    return PurchaseRequest(
        event_id=EventId(event.id),
        buyer_id=user.pk,
        line_items=(LineItem(TicketTypeId(ticket_type.id), quantity),),
        customer=CUSTOMER,
    )


class _FailingStore(DjangoTicketingStore):
    """Fails on the n-th ticket insert to exercise rollback."""

    def __init__(self, fail_on: int) -> None:
        super().__init__()
        self._fail_on = fail_on
        self._inserted = 0

    def create_ticket(self, ticket):
        self._inserted += 1
        if self._inserted == self._fail_on:
            raise RuntimeError("injected failure")
        return super().create_ticket(ticket)


@pytest.mark.django_db
class TestDjangoTicketingStore:
    """Tests for reads and writes against the ORM."""

    def test_sold_count_excludes_cancelled_tickets(self, user, make_event, make_ticket_type):
        event = make_event()
        ticket_type = make_ticket_type(event, quantity_total=5)
        service = PurchaseService(DjangoTicketingStore())
        service.purchase(_request(user, event, ticket_type, quantity=3))
        models.Ticket.objects.filter(pk=models.Ticket.objects.first().pk).update(
            status=TicketStatus.CANCELLED.value
        )

        [entry] = DjangoTicketingStore().get_ticket_types(
            EventId(event.id), [TicketTypeId(ticket_type.id)]
        )

        assert entry.sold_count == 2
        assert entry.available_count == 3

    def test_get_ticket_types_skips_other_events_and_deleted(self, make_event, make_ticket_type):
        event = make_event()
        other = make_event(title="Other")
        kept = make_ticket_type(event)
        deleted = make_ticket_type(event, name="Old", deleted_at=timezone.now())
        foreign = make_ticket_type(other)
        store = DjangoTicketingStore()

        with store.atomic():
            found = store.get_ticket_types(
                EventId(event.id),
                [TicketTypeId(kept.id), TicketTypeId(deleted.id), TicketTypeId(foreign.id)],
                for_update=True,
            )

        assert [entry.ticket_type.id.value for entry in found] == [kept.id]

    def test_list_ticket_types_cheapest_first(self, make_event, make_ticket_type):
        event = make_event()
        make_ticket_type(event, name="VIP", price=Decimal("90.00"))
        make_ticket_type(event, name="General", price=Decimal("20.00"))

        listed = DjangoTicketingStore().list_ticket_types(EventId(event.id))

        assert [entry.ticket_type.name for entry in listed] == ["General", "VIP"]

    def test_duplicate_code_raises_and_keeps_transaction_usable(self, user, make_event, make_ticket_type):
        event = make_event()
        ticket_type = make_ticket_type(event)
        service = PurchaseService(DjangoTicketingStore(), code_generator=SequenceCodes("DUPLICATE0"))
        order_id = service.purchase(_request(user, event, ticket_type)).order_id
        django_store = DjangoTicketingStore()
        new_ticket = NewTicket(
            order_id=order_id,
            ticket_type_id=TicketTypeId(ticket_type.id),
            code=TicketCode("DUPLICATE0"),
            purchase_price=Money(Decimal("20.00")),
            attendee=Attendee(name="Ada Lovelace", email="ada@example.com"),
        )

        with django_store.atomic():
            with pytest.raises(TicketCodeTakenError):
                django_store.create_ticket(new_ticket)
            django_store.create_ticket(replace(new_ticket, code=TicketCode("UNIQUE0000")))

        assert models.Ticket.objects.filter(order_id=order_id.value).count() == 2

    def test_operational_errors_are_translated(self):
        store = DjangoTicketingStore()
        with pytest.raises(ConcurrencyConflictError):
            with store.atomic():
                raise OperationalError("database is locked")
        with pytest.raises(StoreFailureError):
            with store.atomic():
                raise OperationalError("disk I/O error")

    def test_list_tickets_for_user(self, user, django_user_model, make_event, make_ticket_type):
        event = make_event()
        ticket_type = make_ticket_type(event)
        other_user = django_user_model.objects.create_user(username="other", password="pass12345")
        service = PurchaseService(DjangoTicketingStore())
        service.purchase(_request(user, event, ticket_type, quantity=2))
        service.purchase(_request(other_user, event, ticket_type, quantity=1))

        owned = DjangoTicketingStore().list_tickets_for_user(user.pk)

        assert len(owned) == 2
        assert {entry.event_title for entry in owned} == {"Launch Party"}
        assert all(entry.order_total == Money(Decimal("40.00")) for entry in owned)


    def test_get_ticket_for_user_checks_owner(self, user, django_user_model, make_event, make_ticket_type):
        event = make_event()
        ticket_type = make_ticket_type(event)
        other_user = django_user_model.objects.create_user(username="other", password="pass12345")
        result = PurchaseService(DjangoTicketingStore()).purchase(_request(user, event, ticket_type))
        ticket_id = result.tickets[0].ticket.id
        store = DjangoTicketingStore()

        owned = store.get_ticket_for_user(ticket_id, user.pk)

        assert owned.ticket.code == result.tickets[0].ticket.code
        assert owned.event_id == EventId(event.id)
        assert store.get_ticket_for_user(ticket_id, other_user.pk) is None
        assert store.get_ticket_for_user(TicketId(uuid4()), user.pk) is None

    def test_create_ticket_type(self, make_event):
        event = make_event()
        draft = TicketTypeDraft(
            name="Early Bird",
            price=Money(Decimal("15.00"), "EUR"),
            quantity_total=Capacity(50),
        )

        created = DjangoTicketingStore().create_ticket_type(EventId(event.id), draft)

        row = models.TicketType.objects.get(pk=created.id.value)
        assert (row.name, row.price, row.currency) == ("Early Bird", Decimal("15.00"), "EUR")
        assert (row.quantity_total, row.max_purchase) == (50, 10)
        assert created.event_id == EventId(event.id)

@pytest.mark.django_db
class TestPurchaseThroughOrm:
    """Tests for PurchaseService backed by the Django store."""

    def test_purchase_persists_completed_order_and_tickets(self, user, make_event, make_ticket_type):
        event = make_event()
        ticket_type = make_ticket_type(event, price=Decimal("20.00"))

        result = PurchaseService(DjangoTicketingStore()).purchase(
            _request(user, event, ticket_type, quantity=2)
        )

        order = models.Order.objects.get(pk=result.order_id.value)
        assert order.status == "completed"
        assert order.total_amount == Decimal("40.00")
        assert order.customer_email == "ada@example.com"
        tickets = list(order.tickets.all())
        assert len(tickets) == 2
        assert all(ticket.purchase_price == Decimal("20.00") for ticket in tickets)
        assert all(ticket.status == "active" for ticket in tickets)
        assert all(ticket.attendee_name == "Ada Lovelace" for ticket in tickets)

    def test_failure_mid_transaction_leaves_no_rows(self, user, make_event, make_ticket_type):
        event = make_event()
        ticket_type = make_ticket_type(event)

        with pytest.raises(RuntimeError):
            PurchaseService(_FailingStore(fail_on=2)).purchase(
                _request(user, event, ticket_type, quantity=3)
            )

        assert models.Order.objects.count() == 0
        assert models.Ticket.objects.count() == 0

    def test_last_unit_sold_once(self, user, make_event, make_ticket_type):
        event = make_event()
        ticket_type = make_ticket_type(event, quantity_total=1, price=Decimal("20.00"))
        service = PurchaseService(DjangoTicketingStore())

        first = service.purchase(_request(user, event, ticket_type))
        with pytest.raises(InsufficientInventoryError) as exc_info:
            service.purchase(_request(user, event, ticket_type))

        assert first.tickets[0].ticket.purchase_price == Money(Decimal("20.00"))
        assert exc_info.value.remaining == 0
        assert models.Ticket.objects.filter(ticket_type=ticket_type).count() == 1

    def test_sale_ended_yesterday(self, user, make_event, make_ticket_type):
        event = make_event()
        ticket_type = make_ticket_type(
            event,
            sale_start=timezone.now() - timedelta(days=10),
            sale_end=timezone.now() - timedelta(days=1),
        )

        with pytest.raises(SaleEndedError):
            PurchaseService(DjangoTicketingStore()).purchase(_request(user, event, ticket_type))

        assert models.Order.objects.count() == 0
