"""
Payment Reconciliation

Keeps booking payment state in line with what the gateway reports, whether
it arrives through client-side verification or the server-to-server webhook.
Both paths re-read the booking under a row lock and converge on Paid/Confirmed.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from django.conf import settings

from shared.application.uow import DjangoUnitOfWork
from apps.bookings.domain.state_machine import record_capture, record_failure
from apps.bookings.exceptions import (
    AccessDeniedError,
    AlreadyPaidError,
    BookingCancelledError,
    InvalidSignatureError,
    NotFoundError,
    PaymentVerificationFailedError,
    ValidationError,
)
from apps.bookings.models import Booking
from apps.payments.gateway import GatewayPayment, PaymentGateway
from apps.payments.signatures import verify_payment_signature, verify_webhook_signature

logger = logging.getLogger(__name__)

EVENT_PAYMENT_CAPTURED = "payment.captured"
EVENT_PAYMENT_FAILED = "payment.failed"


class PaymentReconciliationService:
    """
    Gateway orders, client verification and webhook processing

    Usage:
        service = PaymentReconciliationService(get_payment_gateway())
        order = service.create_order(booking_id, request.user)
    """

    def __init__(self, gateway: PaymentGateway):
        self.gateway = gateway

    # ===== Orders =====

    def create_order(self, booking_id: int, user) -> dict:
        """Create a gateway order for the full final amount of a booking"""
        try:
            booking = Booking.objects.select_related("hotel").get(pk=booking_id)
        except Booking.DoesNotExist:
            raise NotFoundError()

        if booking.user_id != user.pk:
            raise AccessDeniedError("Access denied. You can only pay for your own bookings")
        if booking.payment_status == Booking.PaymentStatus.PAID:
            raise AlreadyPaidError()
        if booking.booking_status == Booking.Status.CANCELLED:
            raise BookingCancelledError()

        currency = getattr(settings, "BOOKING_CURRENCY", "INR")
        order = self.gateway.create_order(
            amount=booking.amount_in_minor_units,
            currency=currency,
            receipt=f"booking_{booking.pk}",
            notes={
                "booking_id": str(booking.pk),
                "user_id": str(user.pk),
                "hotel_id": str(booking.hotel_id),
            },
        )

        booking.gateway_order_id = order.id
        booking.save(update_fields=["gateway_order_id"])
        logger.info(f"Gateway order {order.id} created for booking {booking.pk}")

        return {
            "order_id": order.id,
            "amount": order.amount,
            "currency": order.currency,
            "key_id": self.gateway.key_id,
            "booking": booking,
        }

    # ===== Client verification =====

    def verify_payment(self, order_id: str, payment_id: str, signature: str, user):
        """
        Verify a checkout result posted by the client

        Returns (booking, gateway payment) when the payment was captured.

        Raises:
            InvalidSignatureError: signature mismatch, booking untouched
            PaymentVerificationFailedError: gateway says not captured; the
                Failed payment status is committed first
        """
        if not order_id or not payment_id or not signature:
            raise ValidationError("Missing payment verification details")

        booking = Booking.objects.filter(gateway_order_id=order_id).first()
        if booking is None:
            raise NotFoundError("Booking not found for this order")
        if booking.user_id != user.pk:
            raise AccessDeniedError()

        if not verify_payment_signature(order_id, payment_id, signature, self.gateway.key_secret):
            logger.warning(f"Invalid payment signature for order {order_id}")
            raise InvalidSignatureError()

        payment = self.gateway.fetch_payment(payment_id)

        if payment.is_captured:
            booking = self._apply_capture(order_id, payment_id)
            return booking, payment

        logger.warning(f"Payment {payment_id} for order {order_id} is {payment.status}")
        self._apply_failure(order_id)
        raise PaymentVerificationFailedError()

    # ===== Webhook =====

    def process_webhook(self, raw_body: bytes, signature: str) -> str:
        """
        Apply a gateway webhook

        The signature covers the exact raw body. Returns a short outcome used
        for logging; anything that is not an error is acknowledged.
        """
        secret = self.gateway.webhook_secret or self.gateway.key_secret
        if not verify_webhook_signature(raw_body, signature, secret):
            logger.warning("Invalid webhook signature")
            raise InvalidSignatureError("Invalid webhook signature")

        try:
            payload = json.loads(raw_body)
        except ValueError:
            logger.error("Webhook body is not valid JSON")
            return "ignored"

        if not isinstance(payload, dict):
            logger.error("Webhook body is not a JSON object")
            return "ignored"

        event = payload.get("event")
        entity = self._payment_entity(payload)
        order_id = entity.get("order_id")

        if event == EVENT_PAYMENT_CAPTURED:
            booking = self._apply_capture(order_id, entity.get("id"))
            return "captured" if booking else "unknown_order"

        if event == EVENT_PAYMENT_FAILED:
            booking = self._apply_failure(order_id, force=True)
            return "failed" if booking else "unknown_order"

        logger.info(f"Unhandled webhook event: {event}")
        return "ignored"

    # ===== Helpers =====

    @staticmethod
    def _payment_entity(payload: dict) -> dict:
        node = payload
        for key in ("payload", "payment", "entity"):
            node = node.get(key) if isinstance(node, dict) else None
        return node if isinstance(node, dict) else {}

    def _apply_capture(self, order_id: Optional[str], payment_id: Optional[str]) -> Optional[Booking]:
        if not order_id or not payment_id:
            logger.error(f"Capture without order or payment id: order={order_id} payment={payment_id}")
            return None

        with DjangoUnitOfWork() as uow:
            booking = Booking.objects.select_for_update().filter(gateway_order_id=order_id).first()
            if booking is None:
                logger.error(f"No booking for gateway order {order_id}")
                return None

            if record_capture(booking, payment_id):
                booking.save()
                uow.collect_events(booking)
                logger.info(
                    f"Booking {booking.pk} paid via {payment_id}: "
                    f"{booking.payment_status}/{booking.booking_status}"
                )

        return booking

    def _apply_failure(self, order_id: Optional[str], force: bool = False) -> Optional[Booking]:
        """Mark the payment Failed; a Paid booking is only touched when `force`"""
        if not order_id:
            logger.error("Payment failure without order id")
            return None

        with DjangoUnitOfWork() as uow:
            booking = Booking.objects.select_for_update().filter(gateway_order_id=order_id).first()
            if booking is None:
                logger.error(f"No booking for gateway order {order_id}")
                return None

            if booking.payment_status == Booking.PaymentStatus.PAID and not force:
                logger.info(f"Booking {booking.pk} already Paid, failure ignored")
                return booking

            record_failure(booking)
            booking.save()
            uow.collect_events(booking)

        return booking


def describe_payment(payment: GatewayPayment, order_id: str) -> dict:
    """Payment details returned to the client after verification"""
    return {
        "payment_id": payment.id,
        "order_id": order_id,
        "amount": payment.amount / 100,
        "status": payment.status,
        "method": payment.method,
    }
