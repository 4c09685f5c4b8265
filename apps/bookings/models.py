"""Booking domain models for Tourbook."""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.core.validators import (  # type: ignore
    MaxLengthValidator,
    MaxValueValidator,
    MinValueValidator,
    RegexValidator,
)
from django.db import models, transaction  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import EventRecorder
from shared.domain.value_objects import DateRange

CENT = Decimal("0.01")

GUEST_NAME_VALIDATOR = RegexValidator(
    regex=r"^[a-zA-Z\s]+$",
    message=_("Guest name can only contain letters and spaces"),
)
GUEST_PHONE_VALIDATOR = RegexValidator(
    regex=r"^[+]?[\d\s\-\(\)]+$",
    message=_("Please provide a valid phone number"),
)

# Hours before check-in that bound the cancellation policy
CANCELLATION_CUTOFF_HOURS = 24
FULL_REFUND_HOURS = 48
PARTIAL_REFUND_RATE = Decimal("0.5")


class Booking(EventRecorder, models.Model):
    """Reservation of hotel rooms for a date range."""

    class Status(models.TextChoices):
        PENDING = "Pending", _("Pending")
        CONFIRMED = "Confirmed", _("Confirmed")
        CANCELLED = "Cancelled", _("Cancelled")
        COMPLETED = "Completed", _("Completed")

    class PaymentStatus(models.TextChoices):
        PENDING = "Pending", _("Pending")
        PAID = "Paid", _("Paid")
        FAILED = "Failed", _("Failed")
        REFUNDED = "Refunded", _("Refunded")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    hotel = models.ForeignKey(
        "hotels.Hotel",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    check_in_date = models.DateTimeField()
    check_out_date = models.DateTimeField()
    number_of_nights = models.PositiveSmallIntegerField(default=1)
    room_type = models.CharField(max_length=100)
    number_of_rooms = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(10)],
    )
    guest_name = models.CharField(max_length=150, validators=[GUEST_NAME_VALIDATOR])
    guest_email = models.EmailField()
    guest_phone = models.CharField(max_length=30, validators=[GUEST_PHONE_VALIDATOR])
    number_of_guests = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(20)],
    )
    special_requests = models.TextField(blank=True, validators=[MaxLengthValidator(500)])
    price_per_night = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    final_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    payment_status = models.CharField(
        max_length=16,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        db_index=True,
    )
    payment_method = models.CharField(max_length=50, blank=True)
    gateway_order_id = models.CharField(max_length=64, unique=True, null=True, blank=True)
    gateway_payment_id = models.CharField(max_length=64, unique=True, null=True, blank=True)
    booking_status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    cancellation_reason = models.CharField(max_length=500, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    refund_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out_date__gt=models.F("check_in_date")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="booking_user_created_idx"),
            models.Index(fields=["hotel", "check_in_date"], name="booking_hotel_checkin_idx"),
            models.Index(fields=["booking_status", "payment_status"], name="booking_status_idx"),
            models.Index(fields=["check_in_date", "check_out_date"], name="booking_dates_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} at {self.hotel_id} ({self.booking_status}/{self.payment_status})"

    @property
    def stay(self) -> DateRange:
        return DateRange(self.check_in_date, self.check_out_date)

    def clean(self) -> None:
        if self.check_in_date is None or self.check_out_date is None:
            return
        if self.check_in_date >= self.check_out_date:
            raise ValidationError(_("Check-out date must be after check-in date"))

        self.number_of_nights = self.stay.nights

        if self.final_amount is None:
            self.final_amount = self.total_amount + (self.tax_amount or Decimal("0.00"))

    def save(self, *args, **kwargs):  # type: ignore
        with transaction.atomic():
            self.clean()
            update_fields = kwargs.get("update_fields")
            if update_fields is not None:
                kwargs["update_fields"] = set(update_fields) | {"number_of_nights", "final_amount", "updated_at"}
            super().save(*args, **kwargs)

    def hours_until_check_in(self, now: datetime | None = None) -> float:
        return self.stay.hours_from(now or timezone.now())

    def can_be_cancelled(self, now: datetime | None = None) -> bool:
        """Cancellation is allowed up to 24 hours before check-in."""
        if self.booking_status in (self.Status.CANCELLED, self.Status.COMPLETED):
            return False
        return self.hours_until_check_in(now) > CANCELLATION_CUTOFF_HOURS

    def calculate_refund(self, now: datetime | None = None) -> Decimal:
        """Full refund more than 48 hours out, half refund more than 24 hours out."""
        now = now or timezone.now()
        if not self.can_be_cancelled(now):
            return Decimal("0.00")

        hours = self.hours_until_check_in(now)
        if hours > FULL_REFUND_HOURS:
            return self.final_amount
        if hours > CANCELLATION_CUTOFF_HOURS:
            return (self.final_amount * PARTIAL_REFUND_RATE).quantize(CENT, rounding=ROUND_HALF_UP)
        return Decimal("0.00")

    @property
    def amount_in_minor_units(self) -> int:
        return int((self.final_amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
