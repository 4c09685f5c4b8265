"""Admin registration for hotels."""

from __future__ import annotations

from django.contrib import admin

from .models import Hotel


@admin.register(Hotel)
class HotelAdmin(admin.ModelAdmin):
    list_display = ("name", "location", "price_per_night", "room_capacity", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "location")
