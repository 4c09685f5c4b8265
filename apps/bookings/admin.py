"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "hotel",
        "user",
        "guest_name",
        "booking_status",
        "payment_status",
        "check_in_date",
        "check_out_date",
        "final_amount",
        "created_at",
    )
    list_filter = ("booking_status", "payment_status", "room_type", "check_in_date")
    search_fields = ("guest_name", "guest_email", "hotel__name", "gateway_order_id", "gateway_payment_id")
    list_select_related = ("hotel", "user")
    readonly_fields = (
        "number_of_nights",
        "total_amount",
        "tax_amount",
        "final_amount",
        "gateway_order_id",
        "gateway_payment_id",
        "cancelled_at",
        "refund_amount",
        "created_at",
        "updated_at",
    )
