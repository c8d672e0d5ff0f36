"""Serializers for parsing purchase input and rendering domain models."""

from decimal import Decimal

from rest_framework import serializers

from ticketing.domain import (
    Attendee,
    Capacity,
    CustomerInfo,
    LineItem,
    Money,
    TicketTypeDraft,
    TicketTypeId,
)
from ticketing.domain.models import DEFAULT_MAX_PURCHASE, MAX_LINE_ITEMS, MAX_LINE_QUANTITY


class AttendeeInputSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=1, max_length=200)
    email = serializers.EmailField()


class LineItemInputSerializer(serializers.Serializer):
    ticket_type_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_LINE_QUANTITY)
    attendees = serializers.ListField(
        child=AttendeeInputSerializer(), required=False, max_length=MAX_LINE_QUANTITY
    )

    def validate(self, attrs):
        if len(attrs.get("attendees", [])) > attrs["quantity"]:
            raise serializers.ValidationError("More attendees than tickets requested.")
        return attrs


class CustomerInputSerializer(serializers.Serializer):
    first_name = serializers.CharField(min_length=1, max_length=100)
    last_name = serializers.CharField(min_length=1, max_length=100)
    email = serializers.EmailField()
    phone = serializers.CharField(
        min_length=10, max_length=20, required=False, allow_null=True
    )


class QuoteInputSerializer(serializers.Serializer):
    event_id = serializers.UUIDField()
    tickets = serializers.ListField(
        child=LineItemInputSerializer(), min_length=1, max_length=MAX_LINE_ITEMS
    )

    def validate_tickets(self, value):
        ids = [item["ticket_type_id"] for item in value]
        if len(set(ids)) != len(ids):
            raise serializers.ValidationError("Each ticket type may appear only once.")
        return value

    def line_items(self) -> tuple[LineItem, ...]:
        return tuple(
            LineItem(
                ticket_type_id=TicketTypeId(item["ticket_type_id"]),
                quantity=item["quantity"],
                attendees=tuple(
                    Attendee(name=attendee["name"], email=attendee["email"])
                    for attendee in item.get("attendees", [])
                ),
            )
            for item in self.validated_data["tickets"]
        )


class PurchaseInputSerializer(QuoteInputSerializer):
    customer = CustomerInputSerializer()

    def customer_info(self) -> CustomerInfo:
        customer = self.validated_data["customer"]
        return CustomerInfo(
            first_name=customer["first_name"],
            last_name=customer["last_name"],
            email=customer["email"],
            phone=customer.get("phone"),
        )


class TicketTypeInputSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=100)
    description = serializers.CharField(max_length=500, allow_blank=True, default="")
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0"))
    currency = serializers.CharField(min_length=3, max_length=3, default="USD")
    quantity_total = serializers.IntegerField(min_value=1, max_value=100000)
    min_purchase = serializers.IntegerField(min_value=1, max_value=100, default=1)
    max_purchase = serializers.IntegerField(
        min_value=1, max_value=100, default=DEFAULT_MAX_PURCHASE
    )
    sale_start = serializers.DateTimeField(allow_null=True, default=None)
    sale_end = serializers.DateTimeField(allow_null=True, default=None)
    is_active = serializers.BooleanField(default=True)

    def draft(self) -> TicketTypeDraft:
        data = self.validated_data
        return TicketTypeDraft(
            name=data["name"],
            description=data["description"],
            price=Money(amount=data["price"], currency=data["currency"].upper()),
            quantity_total=Capacity(data["quantity_total"]),
            min_purchase=data["min_purchase"],
            max_purchase=data["max_purchase"],
            sale_start=data["sale_start"],
            sale_end=data["sale_end"],
            is_active=data["is_active"],
        )


class TicketTypeSerializer(serializers.Serializer):
    id = serializers.UUIDField(source="id.value")
    event_id = serializers.UUIDField(source="event_id.value")
    name = serializers.CharField()
    description = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2, source="price.amount")
    currency = serializers.CharField(source="price.currency")
    quantity_total = serializers.IntegerField(source="quantity_total.value")
    min_purchase = serializers.IntegerField()
    max_purchase = serializers.IntegerField()
    sale_start = serializers.DateTimeField()
    sale_end = serializers.DateTimeField()
    is_active = serializers.BooleanField()


class IssuedTicketSerializer(serializers.Serializer):
    id = serializers.UUIDField(source="ticket.id.value")
    code = serializers.CharField(source="ticket.code.value")
    ticket_type_name = serializers.CharField()
    purchase_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, source="ticket.purchase_price.amount"
    )
    attendee_name = serializers.CharField(source="ticket.attendee.name")


class PurchaseResultSerializer(serializers.Serializer):
    order_id = serializers.UUIDField(source="order_id.value")
    event_id = serializers.UUIDField(source="event_id.value")
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, source="total.amount")
    currency = serializers.CharField(source="total.currency")
    status = serializers.CharField(source="status.value")
    tickets = IssuedTicketSerializer(many=True)


class PricedLineSerializer(serializers.Serializer):
    ticket_type_id = serializers.UUIDField(source="ticket_type.id.value")
    ticket_type_name = serializers.CharField(source="ticket_type.name")
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, source="unit_price.amount")
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, source="line_total.amount")
    remaining_after = serializers.IntegerField()


class PurchaseQuoteSerializer(serializers.Serializer):
    event_id = serializers.UUIDField(source="event_id.value")
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, source="total.amount")
    currency = serializers.CharField(source="total.currency")
    lines = PricedLineSerializer(many=True)


class TicketTypeAvailabilitySerializer(serializers.Serializer):
    """Renders a TicketTypeAvailability; expects `now` in the context."""

    id = serializers.UUIDField(source="ticket_type.id.value")
    name = serializers.CharField(source="ticket_type.name")
    description = serializers.CharField(source="ticket_type.description")
    price = serializers.DecimalField(max_digits=10, decimal_places=2, source="ticket_type.price.amount")
    currency = serializers.CharField(source="ticket_type.price.currency")
    quantity_total = serializers.IntegerField(source="ticket_type.quantity_total.value")
    sold_count = serializers.IntegerField()
    available_count = serializers.IntegerField()
    min_purchase = serializers.IntegerField(source="ticket_type.min_purchase")
    max_purchase = serializers.IntegerField(source="ticket_type.max_purchase")
    sale_start = serializers.DateTimeField(source="ticket_type.sale_start")
    sale_end = serializers.DateTimeField(source="ticket_type.sale_end")
    is_active = serializers.BooleanField(source="ticket_type.is_active")
    is_available = serializers.SerializerMethodField()

    def get_is_available(self, obj) -> bool:
        return obj.is_available(self.context["now"])


class OwnedTicketSerializer(serializers.Serializer):
    id = serializers.UUIDField(source="ticket.id.value")
    code = serializers.CharField(source="ticket.code.value")
    status = serializers.CharField(source="ticket.status.value")
    purchase_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, source="ticket.purchase_price.amount"
    )
    attendee_name = serializers.CharField(source="ticket.attendee.name")
    attendee_email = serializers.EmailField(source="ticket.attendee.email")
    created_at = serializers.DateTimeField(source="ticket.created_at")
    ticket_type = serializers.SerializerMethodField()
    event = serializers.SerializerMethodField()
    order = serializers.SerializerMethodField()

    def get_ticket_type(self, obj) -> dict:
        return {"id": str(obj.ticket.ticket_type_id), "name": obj.ticket_type_name}

    def get_event(self, obj) -> dict:
        return {
            "id": str(obj.event_id),
            "title": obj.event_title,
            "starts_at": serializers.DateTimeField().to_representation(obj.event_starts_at),
            "venue": obj.event_venue,
        }

    def get_order(self, obj) -> dict:
        return {"id": str(obj.ticket.order_id), "total_amount": str(obj.order_total)}
