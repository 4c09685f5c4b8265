"""
Booking Event Handlers

Subscribe booking domain events to the Celery notification tasks.
Handlers run after the transaction has committed.
"""

import logging

from shared.application.message_bus import message_bus
from apps.bookings.domain.events import (
    BookingCancelled,
    BookingConfirmed,
    PaymentFailed,
)

logger = logging.getLogger(__name__)


def on_booking_confirmed(event: BookingConfirmed):
    from apps.bookings.tasks import notify_booking_confirmed

    notify_booking_confirmed.delay(event.booking_id)


def on_booking_cancelled(event: BookingCancelled):
    from apps.bookings.tasks import notify_booking_cancelled

    logger.info(
        f"Booking {event.booking_id} cancelled from {event.old_status}, refund {event.refund_amount}"
    )
    notify_booking_cancelled.delay(event.booking_id)


def on_payment_failed(event: PaymentFailed):
    from apps.bookings.tasks import notify_payment_failed

    notify_payment_failed.delay(event.booking_id)


def register_handlers():
    message_bus.register_event_handler(BookingConfirmed, on_booking_confirmed)
    message_bus.register_event_handler(BookingCancelled, on_booking_cancelled)
    message_bus.register_event_handler(PaymentFailed, on_payment_failed)
