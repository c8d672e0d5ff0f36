"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import logging

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from ticketing.cache_keys import ticket_types_key
from ticketing.domain import EventId, PurchaseRequest
from ticketing.domain.errors import DomainError, ErrorCode, InsufficientInventoryError
from ticketing.handlers.serializers import (
    OwnedTicketSerializer,
    PurchaseInputSerializer,
    PurchaseQuoteSerializer,
    PurchaseResultSerializer,
    QuoteInputSerializer,
    TicketTypeAvailabilitySerializer,
    TicketTypeInputSerializer,
    TicketTypeSerializer,
)
from ticketing.services.catalog_service import CatalogService
from ticketing.services.ids import parse_event_id
from ticketing.services.purchase_service import PurchaseService
from ticketing.services.ticket_type_service import TicketTypeService
from ticketing.stores.django_store import DjangoTicketingStore

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TICKET_TYPE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TICKET_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_PURCHASE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_TICKET_TYPE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INELIGIBLE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_YET_ON_SALE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.SALE_ENDED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.LIMIT_EXCEEDED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INSUFFICIENT_INVENTORY: status.HTTP_400_BAD_REQUEST,
    ErrorCode.CONCURRENCY_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.STORE_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(error: DomainError) -> Response:
    body = {"code": error.code.value, "message": error.message}
    if isinstance(error, InsufficientInventoryError):
        body["remaining"] = error.remaining
    return Response({"error": body}, status=ERROR_STATUS[error.code])


def invalid_input_response(errors, code: ErrorCode = ErrorCode.INVALID_PURCHASE) -> Response:
    return Response(
        {
            "error": {
                "code": code.value,
                "message": "Invalid request",
                "details": errors,
            }
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


def _purchase_service() -> PurchaseService:
    config = settings.TICKETING
    return PurchaseService(
        DjangoTicketingStore(),
        max_code_attempts=config["MAX_CODE_ATTEMPTS"],
        conflict_retries=config["CONFLICT_RETRIES"],
    )


def _catalog_service() -> CatalogService:
    return CatalogService(DjangoTicketingStore())


class TicketTypeListView(APIView):
    """Handler for GET and POST /api/events/{event_id}/ticket-types"""

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated()]
        return [AllowAny()]

    def get(self, request: Request, event_id: str) -> Response:
        try:
            key = ticket_types_key(parse_event_id(event_id))
        except DomainError as exc:
            return error_response(exc)
        cached = cache.get(key)
        if cached is not None:
            return Response(cached)
        try:
            ticket_types = _catalog_service().list_ticket_types(event_id)
        except DomainError as exc:
            return error_response(exc)
        serializer = TicketTypeAvailabilitySerializer(
            ticket_types, many=True, context={"now": timezone.now()}
        )
        data = {"ticket_types": serializer.data}
        cache.set(key, data, settings.TICKETING["TICKET_TYPES_CACHE_TTL"])
        return Response(data)

    def post(self, request: Request, event_id: str) -> Response:
        serializer = TicketTypeInputSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input_response(serializer.errors, ErrorCode.INVALID_TICKET_TYPE)
        try:
            ticket_type = TicketTypeService(DjangoTicketingStore()).create_ticket_type(
                event_id, request.user.pk, serializer.draft()
            )
        except DomainError as exc:
            return error_response(exc)
        return Response(
            {"ticket_type": TicketTypeSerializer(ticket_type).data},
            status=status.HTTP_201_CREATED,
        )


class QuoteView(APIView):
    """Handler for POST /api/tickets/quote"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request) -> Response:
        serializer = QuoteInputSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input_response(serializer.errors)
        try:
            quote = _purchase_service().quote(
                str(serializer.validated_data["event_id"]), serializer.line_items()
            )
        except DomainError as exc:
            return error_response(exc)
        return Response(PurchaseQuoteSerializer(quote).data)


class PurchaseView(APIView):
    """Handler for POST /api/tickets/purchase"""

    permission_classes = [IsAuthenticated]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "purchase"

    def post(self, request: Request) -> Response:
        serializer = PurchaseInputSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input_response(serializer.errors)
        purchase = PurchaseRequest(
            event_id=EventId(serializer.validated_data["event_id"]),
            buyer_id=request.user.pk,
            line_items=serializer.line_items(),
            customer=serializer.customer_info(),
        )
        try:
            result = _purchase_service().purchase(purchase)
        except DomainError as exc:
            return error_response(exc)
        return Response(PurchaseResultSerializer(result).data, status=status.HTTP_201_CREATED)


class MyTicketsView(APIView):
    """Handler for GET /api/tickets/mine"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        try:
            tickets = _catalog_service().list_tickets_for_user(
                request.user.pk,
                status=request.query_params.get("status"),
                event_id=request.query_params.get("event_id"),
            )
        except DomainError as exc:
            return error_response(exc)
        except ValueError:
            return invalid_input_response({"status": ["Unknown ticket status."]})
        return Response({"tickets": OwnedTicketSerializer(tickets, many=True).data})


class TicketDetailView(APIView):
    """Handler for GET /api/tickets/{ticket_id}"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request, ticket_id: str) -> Response:
        try:
            ticket = _catalog_service().get_ticket_for_user(ticket_id, request.user.pk)
        except DomainError as exc:
            return error_response(exc)
        return Response({"ticket": OwnedTicketSerializer(ticket).data})
