from django.urls import path

from ticketing.handlers import (
    MyTicketsView,
    PurchaseView,
    QuoteView,
    TicketDetailView,
    TicketTypeListView,
)

urlpatterns = [
    path(
        "events/<str:event_id>/ticket-types",
        TicketTypeListView.as_view(),
        name="ticket-type-list",
    ),
    path("tickets/quote", QuoteView.as_view(), name="ticket-quote"),
    path("tickets/purchase", PurchaseView.as_view(), name="ticket-purchase"),
    path("tickets/mine", MyTicketsView.as_view(), name="my-tickets"),
    path("tickets/<str:ticket_id>", TicketDetailView.as_view(), name="ticket-detail"),
]
