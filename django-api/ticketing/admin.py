from django.contrib import admin

from ticketing.models import Event, Order, Ticket, TicketType


class TicketTypeInline(admin.TabularInline):
    model = TicketType
    extra = 1


class TicketInline(admin.TabularInline):
    model = Ticket
    extra = 0
    readonly_fields = ["code", "ticket_type", "purchase_price", "status"]
    can_delete = False


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["title", "venue", "organizer", "starts_at", "status", "is_public"]
    list_filter = ["status", "is_public"]
    search_fields = ["title", "venue"]
    inlines = [TicketTypeInline]


@admin.register(TicketType)
class TicketTypeAdmin(admin.ModelAdmin):
    list_display = ["name", "event", "price", "quantity_total", "is_active"]
    list_filter = ["event", "is_active"]


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ["id", "user", "event", "total_amount", "status", "created_at"]
    list_filter = ["status"]
    search_fields = ["customer_email"]
    inlines = [TicketInline]


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ["code", "ticket_type", "status", "purchase_price", "created_at"]
    list_filter = ["status"]
    search_fields = ["code", "attendee_email"]
