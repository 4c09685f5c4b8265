"""Tests for payment reconciliation through verification and webhooks."""

from __future__ import annotations

import json

from django.test import TestCase

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
from apps.bookings.tests.helpers import make_booking, make_hotel, make_user
from apps.payments.services import PaymentReconciliationService, describe_payment
from apps.payments.signatures import compute_payment_signature, compute_webhook_signature
from apps.payments.tests.fakes import FakeGateway

ORDER_ID = "order_test_1"


def webhook_body(event: str, order_id: str = ORDER_ID, payment_id: str = "pay_hook") -> bytes:
    return json.dumps(
        {
            "event": event,
            "payload": {"payment": {"entity": {"id": payment_id, "order_id": order_id}}},
        }
    ).encode()


class ReconciliationTestCase(TestCase):
    def setUp(self) -> None:
        self.guest = make_user()
        self.hotel = make_hotel()
        self.booking = make_booking(self.guest, self.hotel, gateway_order_id=ORDER_ID)
        self.gateway = FakeGateway()
        self.service = PaymentReconciliationService(self.gateway)

    def sign(self, payment_id: str, order_id: str = ORDER_ID) -> str:
        return compute_payment_signature(order_id, payment_id, self.gateway.key_secret)

    def send_webhook(self, body: bytes) -> str:
        signature = compute_webhook_signature(body, self.gateway.webhook_secret)
        return self.service.process_webhook(body, signature)


class CreateOrderTests(ReconciliationTestCase):
    def test_order_uses_minor_units_receipt_and_notes(self) -> None:
        booking = make_booking(self.guest, self.hotel)

        result = self.service.create_order(booking.id, self.guest)

        sent = self.gateway.orders[0]
        self.assertEqual(sent["amount"], 236000)
        self.assertEqual(sent["currency"], "INR")
        self.assertEqual(sent["receipt"], f"booking_{booking.id}")
        self.assertEqual(
            sent["notes"],
            {"booking_id": str(booking.id), "user_id": str(self.guest.id), "hotel_id": str(self.hotel.id)},
        )
        self.assertEqual(result["key_id"], "rzp_test_fake")
        booking.refresh_from_db()
        self.assertEqual(booking.gateway_order_id, result["order_id"])

    def test_paid_booking_is_rejected(self) -> None:
        Booking.objects.filter(pk=self.booking.pk).update(payment_status=Booking.PaymentStatus.PAID)

        with self.assertRaises(AlreadyPaidError):
            self.service.create_order(self.booking.id, self.guest)
        self.assertEqual(self.gateway.orders, [])

    def test_cancelled_booking_is_rejected(self) -> None:
        Booking.objects.filter(pk=self.booking.pk).update(booking_status=Booking.Status.CANCELLED)

        with self.assertRaises(BookingCancelledError):
            self.service.create_order(self.booking.id, self.guest)

    def test_only_owner_can_pay(self) -> None:
        with self.assertRaises(AccessDeniedError):
            self.service.create_order(self.booking.id, make_user("stranger"))

    def test_unknown_booking(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.create_order(999999, self.guest)


class VerifyPaymentTests(ReconciliationTestCase):
    def test_captured_payment_confirms_booking(self) -> None:
        booking, payment = self.service.verify_payment(ORDER_ID, "pay_1", self.sign("pay_1"), self.guest)

        self.assertEqual(booking.payment_status, Booking.PaymentStatus.PAID)
        self.assertEqual(booking.booking_status, Booking.Status.CONFIRMED)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.gateway_payment_id, "pay_1")
        self.assertEqual(self.booking.booking_status, Booking.Status.CONFIRMED)
        self.assertEqual(
            describe_payment(payment, ORDER_ID),
            {"payment_id": "pay_1", "order_id": ORDER_ID, "amount": 2360.0, "status": "captured", "method": "card"},
        )

    def test_bad_signature_leaves_booking_untouched(self) -> None:
        with self.assertRaises(InvalidSignatureError):
            self.service.verify_payment(ORDER_ID, "pay_1", self.sign("pay_other"), self.guest)

        self.assertEqual(self.gateway.fetched, [])
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.PENDING)
        self.assertIsNone(self.booking.gateway_payment_id)

    def test_uncaptured_payment_is_marked_failed(self) -> None:
        self.gateway.payment_status = "failed"

        with self.assertRaises(PaymentVerificationFailedError):
            self.service.verify_payment(ORDER_ID, "pay_1", self.sign("pay_1"), self.guest)

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.FAILED)
        self.assertEqual(self.booking.booking_status, Booking.Status.PENDING)

    def test_uncaptured_payment_does_not_unpay_paid_booking(self) -> None:
        Booking.objects.filter(pk=self.booking.pk).update(
            payment_status=Booking.PaymentStatus.PAID,
            booking_status=Booking.Status.CONFIRMED,
        )
        self.gateway.payment_status = "authorized"

        with self.assertRaises(PaymentVerificationFailedError):
            self.service.verify_payment(ORDER_ID, "pay_2", self.sign("pay_2"), self.guest)

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.PAID)

    def test_other_users_cannot_verify(self) -> None:
        with self.assertRaises(AccessDeniedError):
            self.service.verify_payment(ORDER_ID, "pay_1", self.sign("pay_1"), make_user("stranger"))

    def test_missing_fields(self) -> None:
        with self.assertRaises(ValidationError):
            self.service.verify_payment(ORDER_ID, "", "sig", self.guest)

    def test_unknown_order(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.verify_payment("order_missing", "pay_1", self.sign("pay_1", "order_missing"), self.guest)


class WebhookTests(ReconciliationTestCase):
    def test_captured_webhook_is_idempotent(self) -> None:
        body = webhook_body("payment.captured")

        self.assertEqual(self.send_webhook(body), "captured")
        self.assertEqual(self.send_webhook(body), "captured")

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.PAID)
        self.assertEqual(self.booking.booking_status, Booking.Status.CONFIRMED)
        self.assertEqual(self.booking.gateway_payment_id, "pay_hook")

    def test_tampered_body_is_rejected(self) -> None:
        signature = compute_webhook_signature(webhook_body("payment.failed"), self.gateway.webhook_secret)

        with self.assertRaises(InvalidSignatureError):
            self.service.process_webhook(webhook_body("payment.captured"), signature)

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.PENDING)

    def test_failed_webhook_marks_payment_failed(self) -> None:
        self.assertEqual(self.send_webhook(webhook_body("payment.failed")), "failed")

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.FAILED)

    def test_unknown_order(self) -> None:
        self.assertEqual(self.send_webhook(webhook_body("payment.captured", order_id="order_x")), "unknown_order")

    def test_invalid_json_is_acknowledged(self) -> None:
        self.assertEqual(self.send_webhook(b"not json"), "ignored")

    def test_other_events_are_ignored(self) -> None:
        self.assertEqual(self.send_webhook(webhook_body("order.paid")), "ignored")

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.PENDING)


class ConvergenceTests(ReconciliationTestCase):
    def verify(self) -> None:
        self.service.verify_payment(ORDER_ID, "pay_1", self.sign("pay_1"), self.guest)

    def webhook(self) -> None:
        self.assertEqual(self.send_webhook(webhook_body("payment.captured", payment_id="pay_1")), "captured")

    def assert_paid_and_confirmed(self) -> None:
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.PAID)
        self.assertEqual(self.booking.booking_status, Booking.Status.CONFIRMED)
        self.assertEqual(self.booking.gateway_payment_id, "pay_1")

    def test_verify_then_webhook(self) -> None:
        self.verify()
        self.webhook()
        self.verify()
        self.webhook()

        self.assert_paid_and_confirmed()

    def test_webhook_then_verify(self) -> None:
        self.webhook()
        self.verify()
        self.webhook()
        self.verify()

        self.assert_paid_and_confirmed()
