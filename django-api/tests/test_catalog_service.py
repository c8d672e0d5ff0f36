"""Unit tests for CatalogService.

These test error handling and domain error mapping.
Run with: pytest tests/test_catalog_service.py -v
"""

from decimal import Decimal

import pytest

from tests.fakes import InMemoryTicketingStore
from ticketing.domain import Capacity, CustomerInfo, LineItem, Money, PurchaseRequest
from ticketing.domain.errors import EventNotFoundError, InvalidIdError, TicketNotFoundError
from ticketing.services.catalog_service import CatalogService


class TestCatalogService:
    """Tests for CatalogService."""

    def test_list_ticket_types_invalid_id_raises_error(self):
        """list_ticket_types raises InvalidIdError for malformed UUID."""
        with pytest.raises(InvalidIdError):
            CatalogService(InMemoryTicketingStore()).list_ticket_types("abc")

    def test_list_ticket_types_event_not_found_raises_error(self):
        """list_ticket_types raises EventNotFoundError for an unknown event."""
        with pytest.raises(EventNotFoundError):
            CatalogService(InMemoryTicketingStore()).list_ticket_types(
                "0b6f9b1e-0000-4000-8000-000000000000"
            )

    def test_private_event_is_not_listed(self):
        store = InMemoryTicketingStore()
        event = store.add_event(is_public=False)
        with pytest.raises(EventNotFoundError):
            CatalogService(store).list_ticket_types(str(event.id))

    def test_list_ticket_types_reports_sold_and_available(self, memory_store, purchase_service):
        event = memory_store.add_event()
        vip = memory_store.add_ticket_type(event, name="VIP", price=Money(Decimal("80")))
        general = memory_store.add_ticket_type(event, quantity_total=Capacity(10))
        purchase_service.purchase(
            PurchaseRequest(
                event_id=event.id,
                buyer_id=1,
                line_items=(LineItem(general.id, 3),),
                customer=CustomerInfo("Ada", "Lovelace", "ada@example.com"),
            )
        )

        listed = CatalogService(memory_store).list_ticket_types(str(event.id))

        assert [entry.ticket_type.name for entry in listed] == ["General", "VIP"]
        assert (listed[0].sold_count, listed[0].available_count) == (3, 7)
        assert listed[1].ticket_type == vip

    def test_list_tickets_for_user_filters_by_owner(self, memory_store, purchase_service):
        event = memory_store.add_event()
        general = memory_store.add_ticket_type(event)
        for buyer_id in (1, 2):
            purchase_service.purchase(
                PurchaseRequest(
                    event_id=event.id,
                    buyer_id=buyer_id,
                    line_items=(LineItem(general.id, buyer_id),),
                    customer=CustomerInfo("Ada", "Lovelace", "ada@example.com"),
                )
            )

        owned = CatalogService(memory_store).list_tickets_for_user(2)

        assert len(owned) == 2
        assert {entry.event_title for entry in owned} == {"Launch Party"}

    def test_list_tickets_for_user_rejects_unknown_status(self, memory_store):
        with pytest.raises(ValueError):
            CatalogService(memory_store).list_tickets_for_user(1, status="lost")


class TestTicketDetail:
    """Tests for CatalogService.get_ticket_for_user."""

    def _buy(self, memory_store, purchase_service, buyer_id: int):
        event = memory_store.add_event()
        general = memory_store.add_ticket_type(event)
        return purchase_service.purchase(
            PurchaseRequest(
                event_id=event.id,
                buyer_id=buyer_id,
                line_items=(LineItem(general.id, 1),),
                customer=CustomerInfo("Ada", "Lovelace", "ada@example.com"),
            )
        )

    def test_owner_gets_ticket_with_event_and_order(self, memory_store, purchase_service):
        result = self._buy(memory_store, purchase_service, buyer_id=1)
        ticket = result.tickets[0].ticket

        owned = CatalogService(memory_store).get_ticket_for_user(str(ticket.id), 1)

        assert owned.ticket == ticket
        assert owned.event_title == "Launch Party"
        assert owned.order_total == Money(Decimal("20.00"))

    def test_other_users_ticket_is_not_found(self, memory_store, purchase_service):
        result = self._buy(memory_store, purchase_service, buyer_id=1)

        with pytest.raises(TicketNotFoundError):
            CatalogService(memory_store).get_ticket_for_user(str(result.tickets[0].ticket.id), 2)

    def test_unknown_ticket_is_not_found(self, memory_store):
        with pytest.raises(TicketNotFoundError):
            CatalogService(memory_store).get_ticket_for_user(
                "0b6f9b1e-0000-4000-8000-000000000000", 1
            )

    def test_invalid_ticket_id(self, memory_store):
        with pytest.raises(InvalidIdError):
            CatalogService(memory_store).get_ticket_for_user("abc", 1)
