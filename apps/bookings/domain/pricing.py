"""Server-side price calculation for new bookings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.exceptions import ValidationError
from shared.domain.value_objects import DateRange

CENT = Decimal("0.01")


@dataclass(frozen=True)
class PriceQuote:
    number_of_nights: int
    total_amount: Decimal
    tax_amount: Decimal
    final_amount: Decimal


def tax_rate() -> Decimal:
    return Decimal(str(getattr(settings, "BOOKING_TAX_RATE", "0.18")))


def calculate_price(
    check_in: datetime,
    check_out: datetime,
    price_per_night: Decimal,
    number_of_rooms: int,
    now: datetime | None = None,
) -> PriceQuote:
    """Quote a stay: price x nights x rooms, plus tax.

    Client-supplied totals are never trusted; callers always store the quote.
    """

    now = now or timezone.now()
    if check_in <= now:
        raise ValidationError("Check-in date must be in the future")
    if check_out <= check_in:
        raise ValidationError("Check-out date must be after check-in date")

    price_per_night = Decimal(price_per_night)
    if price_per_night < 0:
        raise ValidationError("Price per night cannot be negative")
    if number_of_rooms < 1:
        raise ValidationError("At least one room must be booked")

    nights = DateRange(check_in, check_out).nights
    total = (price_per_night * nights * number_of_rooms).quantize(CENT, rounding=ROUND_HALF_UP)
    tax = (total * tax_rate()).quantize(CENT, rounding=ROUND_HALF_UP)

    return PriceQuote(
        number_of_nights=nights,
        total_amount=total,
        tax_amount=tax,
        final_amount=total + tax,
    )
