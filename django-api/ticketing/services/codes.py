"""Ticket code generation."""

import secrets

from ticketing.domain import TicketCode
from ticketing.domain.value_objects import TICKET_CODE_ALPHABET, TICKET_CODE_LENGTH


def generate_ticket_code() -> TicketCode:
    """Return a random 10-character code drawn from A-Z0-9.

    Uniqueness is not guaranteed here; the store's unique constraint on
    ticket codes is the final arbiter and callers regenerate on conflict.
    """
    return TicketCode(
        "".join(secrets.choice(TICKET_CODE_ALPHABET) for _ in range(TICKET_CODE_LENGTH))
    )
