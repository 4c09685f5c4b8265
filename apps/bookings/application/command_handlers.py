"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- CreateBookingCommand: Create a new booking
- UpdateBookingStatusCommand: Move a booking through its lifecycle
- UpdatePaymentStatusCommand: Manually set the payment status
- CancelBookingCommand: Cancel a booking under the cancellation policy
"""

from dataclasses import dataclass
from datetime import datetime
import logging

from django.utils import timezone

from shared.application.uow import DjangoUnitOfWork
from apps.bookings.domain import state_machine
from apps.bookings.domain.availability import ensure_rooms_available
from apps.bookings.domain.events import BookingCreated
from apps.bookings.domain.pricing import calculate_price
from apps.bookings.exceptions import NotFoundError
from apps.bookings.models import Booking
from apps.bookings.permissions import ensure_can_access
from apps.hotels.models import Hotel

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to create a new booking

    Totals are never taken from the client; they are quoted from the hotel's
    current nightly price.
    """
    user: object
    hotel_id: int
    check_in_date: datetime
    check_out_date: datetime
    room_type: str
    number_of_rooms: int
    guest_name: str
    guest_email: str
    guest_phone: str
    number_of_guests: int
    special_requests: str = ''
    payment_method: str = ''


@dataclass
class UpdateBookingStatusCommand:
    """Command to change the booking status"""
    booking_id: int
    user: object
    status: str
    cancellation_reason: str = ''


@dataclass
class UpdatePaymentStatusCommand:
    """Command to change the payment status (manual reconciliation)"""
    booking_id: int
    user: object
    payment_status: str
    payment_id: str = ''
    order_id: str = ''


@dataclass
class CancelBookingCommand:
    """Command to cancel a booking"""
    booking_id: int
    user: object
    reason: str


def _load_for_update(booking_id: int, user) -> Booking:
    try:
        booking = Booking.objects.select_for_update().get(pk=booking_id)
    except Booking.DoesNotExist:
        raise NotFoundError()
    ensure_can_access(booking, user)
    return booking


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    1. Load the active hotel
    2. Quote the price (validates the dates)
    3. Check room availability
    4. Insert the booking as Pending/Pending
    5. Publish BookingCreated after commit

    The availability check and the insert are not serialized against
    concurrent requests.
    """

    def handle(self, command: CreateBookingCommand) -> Booking:
        logger.info(
            f"Creating booking for hotel {command.hotel_id}, user {command.user.pk}, "
            f"dates {command.check_in_date} - {command.check_out_date}"
        )

        try:
            hotel = Hotel.objects.get(pk=command.hotel_id, is_active=True)
        except Hotel.DoesNotExist:
            raise NotFoundError("Hotel not found")

        quote = calculate_price(
            command.check_in_date,
            command.check_out_date,
            hotel.price_per_night,
            command.number_of_rooms,
        )

        with DjangoUnitOfWork() as uow:
            ensure_rooms_available(
                hotel,
                command.room_type,
                command.check_in_date,
                command.check_out_date,
                command.number_of_rooms,
            )

            booking = Booking(
                user=command.user,
                hotel=hotel,
                check_in_date=command.check_in_date,
                check_out_date=command.check_out_date,
                number_of_nights=quote.number_of_nights,
                room_type=command.room_type,
                number_of_rooms=command.number_of_rooms,
                guest_name=command.guest_name,
                guest_email=command.guest_email,
                guest_phone=command.guest_phone,
                number_of_guests=command.number_of_guests,
                special_requests=command.special_requests,
                price_per_night=hotel.price_per_night,
                total_amount=quote.total_amount,
                tax_amount=quote.tax_amount,
                final_amount=quote.final_amount,
                payment_method=command.payment_method,
                booking_status=Booking.Status.PENDING,
                payment_status=Booking.PaymentStatus.PENDING,
            )
            booking.save()

            booking.add_event(BookingCreated(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                hotel_id=hotel.pk,
                user_id=command.user.pk,
                final_amount=booking.final_amount,
            ))
            uow.collect_events(booking)

        logger.info(f"Booking created successfully: {booking.pk} ({booking.final_amount})")
        return booking


class UpdateBookingStatusHandler:
    """Handler for booking status changes"""

    def handle(self, command: UpdateBookingStatusCommand) -> Booking:
        logger.info(f"Updating booking {command.booking_id} status to {command.status}")

        with DjangoUnitOfWork() as uow:
            booking = _load_for_update(command.booking_id, command.user)
            state_machine.change_booking_status(
                booking,
                command.status,
                cancellation_reason=command.cancellation_reason,
                now=timezone.now(),
            )
            booking.save()
            uow.collect_events(booking)

        return booking


class UpdatePaymentStatusHandler:
    """Handler for manual payment status changes"""

    def handle(self, command: UpdatePaymentStatusCommand) -> Booking:
        logger.info(
            f"Updating booking {command.booking_id} payment status to {command.payment_status}"
        )

        with DjangoUnitOfWork() as uow:
            booking = _load_for_update(command.booking_id, command.user)
            state_machine.change_payment_status(booking, command.payment_status)
            if command.payment_id:
                booking.gateway_payment_id = command.payment_id
            if command.order_id:
                booking.gateway_order_id = command.order_id
            booking.save()
            uow.collect_events(booking)

        return booking


class CancelBookingHandler:
    """Handler for cancelling booking"""

    def handle(self, command: CancelBookingCommand) -> Booking:
        logger.info(f"Cancelling booking {command.booking_id}, reason: {command.reason}")

        with DjangoUnitOfWork() as uow:
            booking = _load_for_update(command.booking_id, command.user)
            state_machine.cancel_booking(booking, command.reason, now=timezone.now())
            booking.save()
            uow.collect_events(booking)
            # Event: BookingCancelled

        logger.info(f"Booking {booking.pk} cancelled, refund {booking.refund_amount}")
        return booking
