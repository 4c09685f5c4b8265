"""Tests for the cancellation window and refund policy on the Booking model."""

from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest

from apps.bookings.models import Booking

NOW = datetime(2030, 6, 1, 12, 0, tzinfo=dt_timezone.utc)


def booking_checking_in_after(hours: float, status: str = Booking.Status.PENDING) -> Booking:
    check_in = NOW + timedelta(hours=hours)
    return Booking(
        check_in_date=check_in,
        check_out_date=check_in + timedelta(days=2),
        final_amount=Decimal("2360.00"),
        booking_status=status,
    )


@pytest.mark.parametrize(
    "hours, cancellable, refund",
    [
        (72, True, Decimal("2360.00")),
        (48.01, True, Decimal("2360.00")),
        (48, True, Decimal("1180.00")),
        (36, True, Decimal("1180.00")),
        (30, True, Decimal("1180.00")),
        (24.01, True, Decimal("1180.00")),
        (24, False, Decimal("0.00")),
        (10, False, Decimal("0.00")),
        (-5, False, Decimal("0.00")),
    ],
)
def test_refund_depends_on_hours_before_check_in(hours, cancellable, refund):
    booking = booking_checking_in_after(hours)

    assert booking.can_be_cancelled(NOW) is cancellable
    assert booking.calculate_refund(NOW) == refund


@pytest.mark.parametrize("status", [Booking.Status.CANCELLED, Booking.Status.COMPLETED])
def test_finished_bookings_cannot_be_cancelled(status):
    booking = booking_checking_in_after(100, status=status)

    assert booking.can_be_cancelled(NOW) is False
    assert booking.calculate_refund(NOW) == Decimal("0.00")


def test_confirmed_booking_can_be_cancelled():
    booking = booking_checking_in_after(100, status=Booking.Status.CONFIRMED)

    assert booking.can_be_cancelled(NOW) is True


def test_half_refund_is_rounded_to_cents():
    booking = booking_checking_in_after(30)
    booking.final_amount = Decimal("100.01")

    assert booking.calculate_refund(NOW) == Decimal("50.01")


def test_amount_in_minor_units():
    booking = booking_checking_in_after(30)

    assert booking.amount_in_minor_units == 236000
