"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.uow import DjangoUnitOfWork

from .domain.state_machine import complete_booking
from .models import Booking
from .notifications import (
    send_booking_cancelled_email,
    send_booking_confirmation_email,
    send_payment_failed_email,
)

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.complete_finished_bookings")
def complete_finished_bookings() -> dict[str, int]:
    """
    Move confirmed bookings whose check-out has passed to Completed.

    Runs hourly.

    Returns:
        dict: {"completed": number of completed bookings}
    """
    now = timezone.now()
    completed_count = 0

    booking_ids = list(
        Booking.objects.filter(
            booking_status=Booking.Status.CONFIRMED,
            check_out_date__lte=now,
        ).values_list("id", flat=True)
    )

    for booking_id in booking_ids:
        try:
            with DjangoUnitOfWork() as uow:
                booking = Booking.objects.select_for_update().get(pk=booking_id)
                if booking.booking_status != Booking.Status.CONFIRMED:
                    continue
                complete_booking(booking)
                booking.save(update_fields=["booking_status"])
                uow.collect_events(booking)

            completed_count += 1
            logger.info(f"Booking {booking_id} completed")
        except Exception as e:
            logger.error(f"Error completing booking {booking_id}: {e}", exc_info=True)

    if completed_count > 0:
        logger.info(f"Completed {completed_count} bookings")

    return {"completed": completed_count}


# ============================================================================
# NOTIFICATION TASKS
# ============================================================================

@shared_task(name="bookings.notify_booking_confirmed")
def notify_booking_confirmed(booking_id: int) -> bool:
    """Tell the guest the booking is confirmed."""
    try:
        booking = Booking.objects.select_related("hotel").get(id=booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for confirmation notification")
        return False

    logger.info(f"[NOTIFICATION] Booking confirmed: {booking.pk} to guest {booking.guest_email}")
    return send_booking_confirmation_email(booking)


@shared_task(name="bookings.notify_booking_cancelled")
def notify_booking_cancelled(booking_id: int) -> bool:
    """Tell the guest the booking was cancelled and what refund is due."""
    try:
        booking = Booking.objects.select_related("hotel").get(id=booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for cancellation notification")
        return False

    logger.info(
        f"[NOTIFICATION] Booking cancelled: {booking.pk} for guest {booking.guest_email}, "
        f"refund {booking.refund_amount}"
    )
    return send_booking_cancelled_email(booking)


@shared_task(name="bookings.notify_payment_failed")
def notify_payment_failed(booking_id: int) -> bool:
    """Tell the guest the payment did not go through."""
    try:
        booking = Booking.objects.select_related("hotel").get(id=booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for payment failure notification")
        return False

    logger.info(f"[NOTIFICATION] Payment failed: booking {booking.pk} guest {booking.guest_email}")
    return send_payment_failed_email(booking)
