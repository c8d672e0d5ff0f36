"""Pytest configuration and shared fixtures."""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from tests.fakes import InMemoryTicketingStore, SequenceCodes, fixed_clock
from ticketing.services.purchase_service import PurchaseService


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def memory_store() -> InMemoryTicketingStore:
    return InMemoryTicketingStore()


@pytest.fixture
def purchase_service(memory_store) -> PurchaseService:
    return PurchaseService(memory_store, clock=fixed_clock, code_generator=SequenceCodes())


@pytest.fixture
def user(db, django_user_model):
    return django_user_model.objects.create_user(
        username="buyer", password="pass12345", email="buyer@example.com"
    )


@pytest.fixture
def auth_client(api_client, user) -> APIClient:
    api_client.force_authenticate(user=user)
    return api_client


@pytest.fixture
def make_event(db):
    from ticketing.models import Event

    def _make_event(**overrides):
        fields = {
            "title": "Launch Party",
            "venue": "Main Hall",
            "starts_at": timezone.now() + timedelta(days=30),
            "ends_at": timezone.now() + timedelta(days=30, hours=4),
            "status": "published",
            "is_public": True,
        }
        fields.update(overrides)
        return Event.objects.create(**fields)

    return _make_event


@pytest.fixture
def make_ticket_type(db):
    from ticketing.models import TicketType

    def _make_ticket_type(event, **overrides):
        fields = {
            "name": "General",
            "price": Decimal("20.00"),
            "quantity_total": 100,
            "max_purchase": 5,
        }
        fields.update(overrides)
        return TicketType.objects.create(event=event, **fields)

    return _make_ticket_type


@pytest.fixture
def customer_payload() -> dict:
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "phone": "+15555550100",
    }
