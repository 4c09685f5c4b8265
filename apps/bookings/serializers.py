"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import GUEST_NAME_VALIDATOR, GUEST_PHONE_VALIDATOR, Booking


class BookingCreateSerializer(serializers.Serializer):
    """Booking request from a guest.

    Amounts are not accepted here; the server quotes them from the hotel price.
    """

    hotel_id = serializers.IntegerField(min_value=1)
    check_in_date = serializers.DateTimeField()
    check_out_date = serializers.DateTimeField()
    room_type = serializers.CharField(max_length=100)
    number_of_rooms = serializers.IntegerField(min_value=1, max_value=10)
    guest_name = serializers.CharField(max_length=150, validators=[GUEST_NAME_VALIDATOR])
    guest_email = serializers.EmailField()
    guest_phone = serializers.CharField(max_length=30, validators=[GUEST_PHONE_VALIDATOR])
    number_of_guests = serializers.IntegerField(min_value=1, max_value=20)
    special_requests = serializers.CharField(
        max_length=500, required=False, allow_blank=True, default=""
    )
    payment_method = serializers.CharField(
        max_length=50, required=False, allow_blank=True, default=""
    )

    def validate(self, attrs):  # type: ignore
        if attrs["check_in_date"] >= attrs["check_out_date"]:
            raise serializers.ValidationError("Check-out date must be after check-in date")
        return attrs


class BookingSerializer(serializers.ModelSerializer):
    """Full booking representation."""

    user_id = serializers.ReadOnlyField(source="user.id")
    hotel_id = serializers.ReadOnlyField(source="hotel.id")
    hotel_name = serializers.ReadOnlyField(source="hotel.name")
    hotel_location = serializers.ReadOnlyField(source="hotel.location")

    class Meta:
        model = Booking
        fields = [
            "id",
            "user_id",
            "hotel_id",
            "hotel_name",
            "hotel_location",
            "check_in_date",
            "check_out_date",
            "number_of_nights",
            "room_type",
            "number_of_rooms",
            "guest_name",
            "guest_email",
            "guest_phone",
            "number_of_guests",
            "special_requests",
            "price_per_night",
            "total_amount",
            "tax_amount",
            "final_amount",
            "payment_status",
            "payment_method",
            "gateway_order_id",
            "gateway_payment_id",
            "booking_status",
            "cancellation_reason",
            "cancelled_at",
            "refund_amount",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=16)
    cancellation_reason = serializers.CharField(
        max_length=500, required=False, allow_blank=True, default=""
    )


class PaymentStatusSerializer(serializers.Serializer):
    payment_status = serializers.CharField(max_length=16)
    payment_id = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    order_id = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")


class CancelBookingSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class VerifyPaymentSerializer(serializers.Serializer):
    razorpay_order_id = serializers.CharField(required=False, allow_blank=True, default="")
    razorpay_payment_id = serializers.CharField(required=False, allow_blank=True, default="")
    razorpay_signature = serializers.CharField(required=False, allow_blank=True, default="")


class StatsQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):  # type: ignore
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError("start_date must not be after end_date")
        return attrs
