"""Object builders shared by the booking and payment tests."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.bookings.models import Booking
from apps.hotels.models import Hotel

User = get_user_model()


def make_user(username: str = "guest", **extra):
    return User.objects.create_user(username=username, password="GuestPass123", **extra)


def make_admin(username: str = "admin"):
    return User.objects.create_user(username=username, password="AdminPass123", is_staff=True)


def make_hotel(**overrides) -> Hotel:
    data = {
        "name": "Sea View Resort",
        "location": "Goa",
        "price_per_night": Decimal("1000.00"),
    }
    data.update(overrides)
    return Hotel.objects.create(**data)


def booking_data(check_in=None, nights: int = 2, **overrides) -> dict:
    check_in = check_in or timezone.now() + timedelta(days=10)
    data = {
        "check_in_date": check_in,
        "check_out_date": check_in + timedelta(days=nights),
        "room_type": "Deluxe",
        "number_of_rooms": 1,
        "guest_name": "Asha Verma",
        "guest_email": "asha@example.com",
        "guest_phone": "+91 98765 43210",
        "number_of_guests": 2,
        "price_per_night": Decimal("1000.00"),
        "total_amount": Decimal("2000.00"),
        "tax_amount": Decimal("360.00"),
    }
    data.update(overrides)
    return data


def make_booking(user, hotel, **overrides) -> Booking:
    return Booking.objects.create(user=user, hotel=hotel, **booking_data(**overrides))
