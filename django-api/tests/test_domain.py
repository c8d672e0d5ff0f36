"""Unit tests for domain primitives.

These test invariants that must hold at construction time.
Run with: pytest tests/test_domain.py -v
"""

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from tests.fakes import NOW, InMemoryTicketingStore
from ticketing.domain import (
    Attendee,
    Capacity,
    CustomerInfo,
    EventId,
    LineItem,
    Money,
    PurchaseRequest,
    TicketCode,
    TicketId,
    TicketTypeAvailability,
    TicketTypeId,
)
from ticketing.domain.errors import ErrorCode, InvalidIdError
from ticketing.services.ids import parse_event_id, parse_ticket_id


def _line(quantity: int = 1, **kwargs) -> LineItem:
    return LineItem(ticket_type_id=TicketTypeId(uuid4()), quantity=quantity, **kwargs)


CUSTOMER = CustomerInfo(first_name="Ada", last_name="Lovelace", email="ada@example.com")


class TestMoney:
    """Tests for Money value object."""

    def test_money_accepts_positive_amount(self):
        """Money can be created with positive amount."""
        assert Money(Decimal("12.50")).amount == Decimal("12.50")

    def test_money_accepts_zero(self):
        """Money can be created with zero."""
        assert Money.zero().amount == 0

    def test_money_rejects_negative_amount(self):
        """Money raises ValueError for negative amount."""
        with pytest.raises(ValueError):
            Money(Decimal("-0.01"))

    def test_money_str_format(self):
        """Money string representation is formatted to 2 decimal places."""
        assert str(Money(Decimal("7"))) == "7.00"

    def test_money_times_and_add(self):
        """Line totals multiply by quantity and add within one currency."""
        total = Money(Decimal("20.00")).times(3) + Money(Decimal("5.50"))
        assert total == Money(Decimal("65.50"))

    def test_money_rejects_mixed_currencies(self):
        """Adding amounts in different currencies raises ValueError."""
        with pytest.raises(ValueError):
            Money(Decimal("1"), "USD") + Money(Decimal("1"), "EUR")


class TestCapacity:
    """Tests for Capacity value object."""

    def test_capacity_accepts_positive_value(self):
        """Capacity can be created with positive value."""
        assert Capacity(10).value == 10

    def test_capacity_accepts_zero(self):
        """Capacity can be created with zero."""
        assert Capacity(0).remaining(0) == 0

    def test_capacity_rejects_negative_value(self):
        """Capacity raises ValueError for negative value."""
        with pytest.raises(ValueError):
            Capacity(-1)

    def test_remaining_never_negative(self):
        """Remaining units bottom out at zero."""
        assert Capacity(3).remaining(1) == 2
        assert Capacity(3).remaining(5) == 0


class TestEventId:
    """Tests for EventId value object."""

    def test_from_string_valid_uuid(self):
        """EventId.from_string parses valid UUID."""
        raw = str(uuid4())
        assert str(EventId.from_string(raw)) == raw

    def test_from_string_invalid_uuid(self):
        """EventId.from_string raises ValueError for invalid UUID."""
        with pytest.raises(ValueError):
            EventId.from_string("not-a-uuid")


class TestParseIds:
    """Tests for the shared client ID parsers."""

    def test_event_id_is_canonicalised(self):
        raw = uuid4()
        assert parse_event_id(str(raw).upper()) == EventId(raw)

    def test_ticket_id_parses(self):
        raw = uuid4()
        assert parse_ticket_id(str(raw)) == TicketId(raw)

    @pytest.mark.parametrize(
        "parser,message",
        [(parse_event_id, "Invalid event ID format"), (parse_ticket_id, "Invalid ticket ID format")],
    )
    def test_invalid_id_raises_domain_error(self, parser, message):
        with pytest.raises(InvalidIdError) as exc_info:
            parser("not-a-uuid")
        assert exc_info.value.code == ErrorCode.INVALID_ID
        assert exc_info.value.message == message


class TestTicketCode:
    """Tests for TicketCode value object."""

    def test_accepts_ten_uppercase_alphanumerics(self):
        assert str(TicketCode("AB12CD34EF")) == "AB12CD34EF"

    @pytest.mark.parametrize("value", ["ab12cd34ef", "AB12CD34E", "AB12CD34EF0", "AB12-D34EF"])
    def test_rejects_malformed_codes(self, value):
        with pytest.raises(ValueError):
            TicketCode(value)


class TestPurchaseRequest:
    """Tests for basket shape rules."""

    def test_quantity_bounds(self):
        """Line quantities must be within 1..10."""
        _line(1)
        _line(10)
        with pytest.raises(ValueError):
            _line(0)
        with pytest.raises(ValueError):
            _line(11)

    def test_rejects_more_attendees_than_tickets(self):
        attendee = Attendee(name="Grace", email="grace@example.com")
        with pytest.raises(ValueError):
            _line(1, attendees=(attendee, attendee))

    def test_rejects_empty_basket(self):
        with pytest.raises(ValueError):
            PurchaseRequest(event_id=EventId(uuid4()), buyer_id=1, line_items=(), customer=CUSTOMER)

    def test_rejects_more_than_twenty_lines(self):
        lines = tuple(_line() for _ in range(21))
        with pytest.raises(ValueError):
            PurchaseRequest(event_id=EventId(uuid4()), buyer_id=1, line_items=lines, customer=CUSTOMER)

    def test_rejects_duplicate_ticket_types(self):
        line = _line()
        with pytest.raises(ValueError):
            PurchaseRequest(
                event_id=EventId(uuid4()), buyer_id=1, line_items=(line, line), customer=CUSTOMER
            )

    def test_attendee_falls_back_to_buyer(self):
        """Tickets without explicit attendee details carry the buyer's."""
        grace = Attendee(name="Grace Hopper", email="grace@example.com")
        line = _line(2, attendees=(grace,))
        assert line.attendee_for(0, CUSTOMER) == grace
        assert line.attendee_for(1, CUSTOMER) == Attendee(name="Ada Lovelace", email="ada@example.com")


class TestAvailability:
    """Tests for ticket type availability rules."""

    def test_sale_window_and_inventory(self):
        store = InMemoryTicketingStore()
        event = store.add_event()
        ticket_type = store.add_ticket_type(
            event,
            quantity_total=Capacity(2),
            sale_start=NOW - timedelta(days=1),
            sale_end=NOW + timedelta(days=1),
        )
        assert TicketTypeAvailability(ticket_type, sold_count=1).is_available(NOW)
        assert not TicketTypeAvailability(ticket_type, sold_count=2).is_available(NOW)
        assert not TicketTypeAvailability(ticket_type, sold_count=0).is_available(NOW + timedelta(days=2))
        assert not TicketTypeAvailability(ticket_type, sold_count=0).is_available(NOW - timedelta(days=2))
