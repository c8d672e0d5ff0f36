from ticketing.handlers.views import (
    MyTicketsView,
    PurchaseView,
    QuoteView,
    TicketDetailView,
    TicketTypeListView,
)

__all__ = ["TicketTypeListView", "QuoteView", "PurchaseView", "MyTicketsView", "TicketDetailView"]
