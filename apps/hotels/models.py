"""Hotel directory models."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Hotel(models.Model):
    """A hotel that can be booked."""

    name = models.CharField(max_length=255)
    location = models.CharField(max_length=255)
    address = models.CharField(max_length=255, blank=True)
    price_per_night = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    room_capacity = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Rooms available per night. Falls back to HOTEL_DEFAULT_ROOM_CAPACITY when empty."),
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Hotel")
        verbose_name_plural = _("Hotels")
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.location})"

    def get_room_capacity(self) -> int:
        if self.room_capacity is not None:
            return self.room_capacity
        return settings.HOTEL_DEFAULT_ROOM_CAPACITY
