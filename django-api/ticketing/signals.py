"""Django signals for cache invalidation.

The ticket type listing of an event is cached by the handlers. Any change to
the event, its ticket types or its orders drops that entry once the
surrounding transaction commits.
"""

from django.core.cache import cache
from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from ticketing.cache_keys import ticket_types_key
from ticketing.models import Event, Order, TicketType


def _invalidate_ticket_types(event_id) -> None:
    transaction.on_commit(lambda: cache.delete(ticket_types_key(event_id)))


@receiver([post_save, post_delete], sender=Event)
def invalidate_event_cache(sender, instance, **kwargs):
    """Invalidate caches when an event is saved or deleted."""
    _invalidate_ticket_types(instance.pk)


@receiver([post_save, post_delete], sender=TicketType)
def invalidate_ticket_type_cache(sender, instance, **kwargs):
    """Invalidate caches when a ticket type is saved or deleted."""
    _invalidate_ticket_types(instance.event_id)


@receiver([post_save, post_delete], sender=Order)
def invalidate_order_cache(sender, instance, **kwargs):
    """Invalidate availability caches when an order is written."""
    _invalidate_ticket_types(instance.event_id)
