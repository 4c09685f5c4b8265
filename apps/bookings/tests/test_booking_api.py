"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.bookings.tests.helpers import make_admin, make_booking, make_hotel, make_user


class BookingAPITestCase(APITestCase):
    def setUp(self) -> None:
        self.guest = make_user("guest")
        self.other_guest = make_user("other")
        self.admin = make_admin()
        self.hotel = make_hotel()
        self.client.force_authenticate(self.guest)
        self.list_url = reverse("booking-list")

    def _payload(self, check_in=None, nights: int = 2, **overrides) -> dict:
        check_in = check_in or timezone.now() + timedelta(days=10)
        payload = {
            "hotel_id": self.hotel.id,
            "check_in_date": check_in.isoformat(),
            "check_out_date": (check_in + timedelta(days=nights)).isoformat(),
            "room_type": "Deluxe",
            "number_of_rooms": 1,
            "guest_name": "Asha Verma",
            "guest_email": "asha@example.com",
            "guest_phone": "+91 98765 43210",
            "number_of_guests": 2,
        }
        payload.update(overrides)
        return payload


class BookingCreateTests(BookingAPITestCase):
    def test_guest_can_create_booking(self) -> None:
        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["message"], "Booking created successfully")
        booking = Booking.objects.get()
        self.assertEqual(booking.user, self.guest)
        self.assertEqual(booking.booking_status, Booking.Status.PENDING)
        self.assertEqual(booking.payment_status, Booking.PaymentStatus.PENDING)
        self.assertEqual(booking.number_of_nights, 2)
        self.assertEqual(booking.total_amount, Decimal("2000.00"))
        self.assertEqual(booking.tax_amount, Decimal("360.00"))
        self.assertEqual(booking.final_amount, Decimal("2360.00"))
        self.assertEqual(response.data["booking"]["final_amount"], "2360.00")

    def test_client_supplied_amounts_are_ignored(self) -> None:
        payload = self._payload(
            number_of_rooms=2,
            total_amount="1.00",
            tax_amount="0.00",
            final_amount="1.00",
            price_per_night="1.00",
        )

        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        booking = Booking.objects.get()
        self.assertEqual(booking.price_per_night, Decimal("1000.00"))
        self.assertEqual(booking.final_amount, Decimal("4720.00"))

    def test_capacity_exceeded(self) -> None:
        check_in = timezone.now() + timedelta(days=10)
        make_booking(self.other_guest, self.hotel, check_in=check_in, nights=3, number_of_rooms=8)

        response = self.client.post(
            self.list_url,
            self._payload(check_in + timedelta(days=1), nights=3, number_of_rooms=3),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "capacity_exceeded")
        self.assertEqual(response.data["message"], "Only 2 rooms available for selected dates")
        self.assertEqual(Booking.objects.count(), 1)

    def test_back_to_back_bookings_are_allowed(self) -> None:
        check_in = timezone.now() + timedelta(days=10)
        make_booking(self.other_guest, self.hotel, check_in=check_in, nights=3, number_of_rooms=10)

        response = self.client.post(
            self.list_url, self._payload(check_in + timedelta(days=3), nights=2), format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_check_in_in_the_past_is_rejected(self) -> None:
        response = self.client.post(
            self.list_url, self._payload(timezone.now() - timedelta(days=1)), format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "validation_error")

    def test_invalid_guest_details_are_rejected(self) -> None:
        response = self.client.post(
            self.list_url,
            self._payload(guest_name="R2-D2", guest_phone="call me", number_of_rooms=11),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertIn("guest_name", response.data["errors"])
        self.assertIn("guest_phone", response.data["errors"])
        self.assertIn("number_of_rooms", response.data["errors"])
        self.assertEqual(Booking.objects.count(), 0)

    def test_unknown_hotel(self) -> None:
        response = self.client.post(self.list_url, self._payload(hotel_id=9999), format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND, response.data)
        self.assertEqual(response.data["message"], "Hotel not found")

    def test_authentication_is_required(self) -> None:
        self.client.force_authenticate(None)

        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class BookingReadTests(BookingAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.own = [make_booking(self.guest, self.hotel) for _ in range(3)]
        self.foreign = make_booking(self.other_guest, self.hotel)

    def test_list_returns_only_own_bookings_with_pagination(self) -> None:
        response = self.client.get(self.list_url, {"limit": 2})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["bookings"]), 2)
        self.assertEqual(
            response.data["pagination"],
            {
                "currentPage": 1,
                "totalPages": 2,
                "totalBookings": 3,
                "hasNext": True,
                "hasPrev": False,
            },
        )

    def test_page_past_the_end_is_empty(self) -> None:
        response = self.client.get(self.list_url, {"page": 3})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["bookings"], [])
        self.assertEqual(
            response.data["pagination"],
            {
                "currentPage": 3,
                "totalPages": 1,
                "totalBookings": 3,
                "hasNext": False,
                "hasPrev": True,
            },
        )

    def test_invalid_page_number(self) -> None:
        response = self.client.get(self.list_url, {"page": "abc"})

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_sees_all_bookings(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.get(self.list_url)

        self.assertEqual(response.data["pagination"]["totalBookings"], 4)

    def test_list_filters(self) -> None:
        Booking.objects.filter(pk=self.own[0].pk).update(booking_status=Booking.Status.CONFIRMED)
        other_hotel = make_hotel(name="Hill Top")
        make_booking(self.guest, other_hotel)

        by_status = self.client.get(self.list_url, {"status": "Confirmed"})
        by_hotel = self.client.get(self.list_url, {"hotel": other_hotel.id})
        by_payment = self.client.get(self.list_url, {"payment_status": "Paid"})

        self.assertEqual([b["id"] for b in by_status.data["bookings"]], [self.own[0].id])
        self.assertEqual(by_hotel.data["pagination"]["totalBookings"], 1)
        self.assertEqual(by_payment.data["bookings"], [])

    def test_retrieve_own_booking(self) -> None:
        response = self.client.get(reverse("booking-detail", args=[self.own[0].id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["booking"]["id"], self.own[0].id)
        self.assertEqual(response.data["booking"]["hotel_name"], "Sea View Resort")

    def test_retrieve_foreign_booking_is_denied(self) -> None:
        response = self.client.get(reverse("booking-detail", args=[self.foreign.id]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, {"message": "Access denied", "code": "access_denied"})

    def test_retrieve_missing_booking(self) -> None:
        response = self.client.get(reverse("booking-detail", args=[999999]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["message"], "Booking not found")

    def test_my_bookings(self) -> None:
        self.client.force_authenticate(self.admin)
        make_booking(self.admin, self.hotel)

        response = self.client.get(reverse("booking-my-bookings"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["pagination"]["totalBookings"], 1)

    def test_my_bookings_status_filter(self) -> None:
        Booking.objects.filter(pk=self.own[1].pk).update(booking_status=Booking.Status.CONFIRMED)

        response = self.client.get(reverse("booking-my-bookings"), {"status": "Confirmed"})

        self.assertEqual([b["id"] for b in response.data["bookings"]], [self.own[1].id])


class BookingStatusTests(BookingAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.booking = make_booking(self.guest, self.hotel)

    def test_confirm_booking(self) -> None:
        response = self.client.patch(
            reverse("booking-update-status", args=[self.booking.id]), {"status": "Confirmed"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["message"], "Booking status updated successfully")
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.booking_status, Booking.Status.CONFIRMED)

    def test_invalid_transition(self) -> None:
        response = self.client.patch(
            reverse("booking-update-status", args=[self.booking.id]), {"status": "Completed"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_status")

    def test_unknown_status(self) -> None:
        response = self.client.patch(
            reverse("booking-update-status", args=[self.booking.id]), {"status": "Lost"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Invalid booking status")

    def test_foreign_booking_status_change_is_denied(self) -> None:
        self.client.force_authenticate(self.other_guest)

        response = self.client.patch(
            reverse("booking-update-status", args=[self.booking.id]), {"status": "Confirmed"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.booking_status, Booking.Status.PENDING)

    def test_paid_confirms_booking(self) -> None:
        response = self.client.patch(
            reverse("booking-update-payment", args=[self.booking.id]),
            {"payment_status": "Paid", "payment_id": "pay_manual_1"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["message"], "Payment status updated successfully")
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.PAID)
        self.assertEqual(self.booking.booking_status, Booking.Status.CONFIRMED)
        self.assertEqual(self.booking.gateway_payment_id, "pay_manual_1")

    def test_invalid_payment_transition(self) -> None:
        response = self.client.patch(
            reverse("booking-update-payment", args=[self.booking.id]),
            {"payment_status": "Refunded"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_duplicate_order_id_is_reported(self) -> None:
        other = make_booking(self.guest, self.hotel, gateway_order_id="order_taken")

        response = self.client.patch(
            reverse("booking-update-payment", args=[self.booking.id]),
            {"payment_status": "Failed", "order_id": other.gateway_order_id},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Duplicate field value entered")


class BookingCancelTests(BookingAPITestCase):
    def test_cancel_with_half_refund(self) -> None:
        booking = make_booking(self.guest, self.hotel, check_in=timezone.now() + timedelta(hours=30))

        response = self.client.delete(
            reverse("booking-detail", args=[booking.id]), {"reason": "Plans changed"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["message"], "Booking cancelled successfully")
        self.assertEqual(response.data["refund_amount"], "1180.00")
        booking.refresh_from_db()
        self.assertEqual(booking.booking_status, Booking.Status.CANCELLED)
        self.assertEqual(booking.refund_amount, Decimal("1180.00"))
        self.assertIsNotNone(booking.cancelled_at)

    def test_cancel_with_full_refund(self) -> None:
        booking = make_booking(self.guest, self.hotel, check_in=timezone.now() + timedelta(hours=72))

        response = self.client.delete(
            reverse("booking-detail", args=[booking.id]), {"reason": "Plans changed"}, format="json"
        )

        self.assertEqual(response.data["refund_amount"], "2360.00")

    def test_cancel_too_late(self) -> None:
        booking = make_booking(self.guest, self.hotel, check_in=timezone.now() + timedelta(hours=10))

        response = self.client.delete(
            reverse("booking-detail", args=[booking.id]), {"reason": "Plans changed"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("24 hours", response.data["message"])
        booking.refresh_from_db()
        self.assertEqual(booking.booking_status, Booking.Status.PENDING)

    def test_cancel_requires_reason(self) -> None:
        booking = make_booking(self.guest, self.hotel)

        response = self.client.delete(reverse("booking-detail", args=[booking.id]), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Cancellation reason is required")

    def test_admin_can_cancel_any_booking(self) -> None:
        booking = make_booking(self.other_guest, self.hotel)
        self.client.force_authenticate(self.admin)

        response = self.client.delete(
            reverse("booking-detail", args=[booking.id]), {"reason": "Overbooked"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)


class BookingStatsTests(BookingAPITestCase):
    def test_stats_are_admin_only(self) -> None:
        response = self.client.get(reverse("booking-stats"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_stats(self) -> None:
        make_booking(
            self.guest, self.hotel,
            booking_status=Booking.Status.CONFIRMED, payment_status=Booking.PaymentStatus.PAID,
        )
        make_booking(
            self.guest, self.hotel,
            booking_status=Booking.Status.CONFIRMED, payment_status=Booking.PaymentStatus.PAID,
            total_amount=Decimal("1000.00"), tax_amount=Decimal("180.00"),
        )
        make_booking(
            self.guest, self.hotel,
            booking_status=Booking.Status.CANCELLED, payment_status=Booking.PaymentStatus.PAID,
            refund_amount=Decimal("1180.00"),
        )
        make_booking(
            self.guest, self.hotel,
            booking_status=Booking.Status.CANCELLED, refund_amount=Decimal("500.00"),
        )
        make_booking(self.guest, self.hotel)
        self.client.force_authenticate(self.admin)

        response = self.client.get(reverse("booking-stats"))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        data = response.data
        self.assertEqual(data["total_bookings"], 5)
        self.assertEqual(
            data["bookings_by_status"],
            {"Pending": 1, "Confirmed": 2, "Cancelled": 2, "Completed": 0},
        )
        self.assertEqual(data["revenue"]["total_revenue"], Decimal("5900.00"))
        self.assertEqual(data["revenue"]["average_booking_value"], Decimal("1966.67"))
        self.assertEqual(data["revenue"]["total_refunds"], Decimal("1180.00"))
        now = timezone.localtime()
        self.assertEqual(
            data["monthly_trends"],
            [{"year": now.year, "month": now.month, "count": 5, "revenue": Decimal("5900.00")}],
        )

    def test_stats_date_window(self) -> None:
        make_booking(self.guest, self.hotel)
        self.client.force_authenticate(self.admin)
        tomorrow = timezone.localdate() + timedelta(days=1)

        response = self.client.get(reverse("booking-stats"), {"start_date": tomorrow.isoformat()})

        self.assertEqual(response.data["total_bookings"], 0)
        self.assertEqual(response.data["monthly_trends"], [])

    def test_stats_rejects_reversed_window(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.get(
            reverse("booking-stats"), {"start_date": "2030-02-01", "end_date": "2030-01-01"}
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
