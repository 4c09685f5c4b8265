"""Room availability checks for hotel bookings."""

from __future__ import annotations

import logging
from typing import Iterable

from django.db.models import Q, Sum  # type: ignore

from apps.bookings.exceptions import CapacityExceededError

logger = logging.getLogger(__name__)


def overlapping_filter(check_in, check_out) -> Q:
    """Bookings sharing at least one night with [check_in, check_out).

    Back-to-back stays (one checks out as the other checks in) do not overlap.
    """

    starts_inside = Q(check_in_date__gte=check_in, check_in_date__lt=check_out)
    ends_inside = Q(check_out_date__gt=check_in, check_out_date__lte=check_out)
    contains = Q(check_in_date__lte=check_in, check_out_date__gte=check_out)
    return starts_inside | ends_inside | contains


def booked_rooms(hotel, room_type: str, check_in, check_out) -> int:
    from apps.bookings.models import Booking  # Local import to prevent circular dependency

    blocking_statuses: Iterable[str] = (
        Booking.Status.CONFIRMED,
        Booking.Status.PENDING,
    )

    bookings_qs = Booking.objects.filter(
        hotel=hotel,
        room_type=room_type,
        booking_status__in=blocking_statuses,
    ).filter(overlapping_filter(check_in, check_out))

    return bookings_qs.aggregate(total=Sum("number_of_rooms"))["total"] or 0


def ensure_rooms_available(hotel, room_type: str, check_in, check_out, number_of_rooms: int) -> None:
    """Ensure the hotel can fit the requested rooms for the given period."""

    capacity = hotel.get_room_capacity()
    booked = booked_rooms(hotel, room_type, check_in, check_out)

    if booked + number_of_rooms > capacity:
        logger.info(
            f"Hotel {hotel.pk} '{room_type}' full for {check_in} - {check_out}: "
            f"{booked} booked, {number_of_rooms} requested, capacity {capacity}"
        )
        raise CapacityExceededError(capacity - booked)
