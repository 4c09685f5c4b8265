"""
Booking State Machine

Booking and payment status transitions, kept as module-level tables so the
allowed moves can be read (and tested) without walking through code paths.

Booking:  Pending -> Confirmed -> Completed
          Pending/Confirmed -> Cancelled
Payment:  Pending -> Paid -> Refunded
          Pending -> Failed -> Pending (retry)

Every function mutates the booking in memory and records domain events on
it; persisting and publishing is up to the caller's unit of work.
"""

from __future__ import annotations

import logging
from datetime import datetime

from django.utils import timezone  # type: ignore

from apps.bookings.domain.events import (
    BookingCancelled,
    BookingCompleted,
    BookingConfirmed,
    PaymentCaptured,
    PaymentFailed,
)
from apps.bookings.exceptions import InvalidStatusError, ValidationError
from apps.bookings.models import Booking

logger = logging.getLogger(__name__)

Status = Booking.Status
PaymentStatus = Booking.PaymentStatus

BOOKING_TRANSITIONS: dict[str, frozenset[str]] = {
    "Pending": frozenset({"Confirmed", "Cancelled"}),
    "Confirmed": frozenset({"Cancelled", "Completed"}),
    "Cancelled": frozenset(),
    "Completed": frozenset(),
}

PAYMENT_TRANSITIONS: dict[str, frozenset[str]] = {
    "Pending": frozenset({"Paid", "Failed"}),
    "Paid": frozenset({"Refunded"}),
    "Failed": frozenset({"Pending"}),
    "Refunded": frozenset(),
}

# (new payment status, current booking status) -> new booking status
PAYMENT_COUPLING_RULES: dict[tuple[str, str], str] = {
    ("Paid", "Pending"): "Confirmed",
}

CANCELLATION_WINDOW_MESSAGE = (
    "Booking cannot be cancelled at this time. "
    "Must be cancelled at least 24 hours before check-in."
)


def _confirmed_event(booking: Booking) -> BookingConfirmed:
    return BookingConfirmed(
        aggregate_id=booking.pk,
        booking_id=booking.pk,
        hotel_id=booking.hotel_id,
        user_id=booking.user_id,
    )


def _apply_coupling(booking: Booking) -> None:
    target = PAYMENT_COUPLING_RULES.get((str(booking.payment_status), str(booking.booking_status)))
    if target is None:
        return

    booking.booking_status = target
    if target == Status.CONFIRMED:
        booking.add_event(_confirmed_event(booking))


def change_booking_status(
    booking: Booking,
    target: str,
    cancellation_reason: str = "",
    now: datetime | None = None,
) -> None:
    """
    Move the booking to `target`

    Cancelled goes through cancel_booking() so the cancellation policy and
    refund calculation always apply.
    """
    target = str(target)
    if target not in Status.values:
        raise InvalidStatusError()

    if booking.booking_status == target:
        return

    if target == Status.CANCELLED:
        cancel_booking(booking, cancellation_reason, now=now)
        return

    if target not in BOOKING_TRANSITIONS[str(booking.booking_status)]:
        raise InvalidStatusError(
            f"Cannot change booking status from {booking.booking_status} to {target}"
        )

    if target == Status.COMPLETED:
        complete_booking(booking)
        return

    booking.booking_status = target
    booking.add_event(_confirmed_event(booking))


def change_payment_status(booking: Booking, target: str) -> None:
    """Move the payment status to `target` and apply the coupling rules"""
    target = str(target)
    if target not in PaymentStatus.values:
        raise InvalidStatusError("Invalid payment status")

    if booking.payment_status == target:
        return

    if target not in PAYMENT_TRANSITIONS[str(booking.payment_status)]:
        raise InvalidStatusError(
            f"Cannot change payment status from {booking.payment_status} to {target}"
        )

    booking.payment_status = target
    _apply_coupling(booking)


def cancel_booking(booking: Booking, reason: str, now: datetime | None = None) -> None:
    """
    Cancel booking (Pending/Confirmed -> Cancelled)

    Stores the refund owed under the cancellation policy. The payment status
    is left alone; refunds are settled outside this service.
    Events: BookingCancelled
    """
    now = now or timezone.now()

    if not booking.can_be_cancelled(now):
        raise InvalidStatusError(CANCELLATION_WINDOW_MESSAGE)

    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("Cancellation reason is required")

    old_status = booking.booking_status
    refund_amount = booking.calculate_refund(now)

    booking.booking_status = Status.CANCELLED
    booking.cancellation_reason = reason
    booking.cancelled_at = now
    booking.refund_amount = refund_amount

    booking.add_event(BookingCancelled(
        aggregate_id=booking.pk,
        booking_id=booking.pk,
        hotel_id=booking.hotel_id,
        reason=reason,
        refund_amount=refund_amount,
        old_status=old_status,
    ))


def complete_booking(booking: Booking) -> None:
    """
    Complete booking (Confirmed -> Completed)

    Events: BookingCompleted
    """
    if booking.booking_status != Status.CONFIRMED:
        raise InvalidStatusError(
            f"Cannot complete booking from status {booking.booking_status}. "
            f"Booking must be Confirmed."
        )

    booking.booking_status = Status.COMPLETED
    booking.add_event(BookingCompleted(
        aggregate_id=booking.pk,
        booking_id=booking.pk,
        hotel_id=booking.hotel_id,
    ))


def record_capture(booking: Booking, payment_id: str) -> bool:
    """
    Apply a capture reported by the payment gateway

    Idempotent: a booking that is already Paid (or Refunded) is left as is.
    Returns True when the booking changed.
    Events: PaymentCaptured, BookingConfirmed
    """
    if booking.payment_status in (PaymentStatus.PAID, PaymentStatus.REFUNDED):
        logger.info(f"Booking {booking.pk} already {booking.payment_status}, capture ignored")
        return False

    booking.payment_status = PaymentStatus.PAID
    booking.gateway_payment_id = payment_id
    booking.add_event(PaymentCaptured(
        aggregate_id=booking.pk,
        booking_id=booking.pk,
        payment_id=payment_id,
    ))

    if booking.booking_status == Status.CANCELLED:
        logger.warning(f"Payment {payment_id} captured for cancelled booking {booking.pk}")

    _apply_coupling(booking)
    return True


def record_failure(booking: Booking) -> None:
    """
    Apply a failure reported by the payment gateway

    The gateway is authoritative here, so no transition check is made.
    Events: PaymentFailed
    """
    booking.payment_status = PaymentStatus.FAILED
    booking.add_event(PaymentFailed(
        aggregate_id=booking.pk,
        booking_id=booking.pk,
    ))
