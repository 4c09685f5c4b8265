"""Errors raised by the booking and payment flows.

Every error is a DRF ``APIException`` so views can let them propagate and the
project exception handler renders them as ``{"message": ..., "code": ...}``.
"""

from __future__ import annotations

from rest_framework import status  # type: ignore
from rest_framework.exceptions import APIException  # type: ignore


class BookingError(APIException):
    """Base class for booking/payment errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Booking request failed."
    default_code = "booking_error"


class ValidationError(BookingError):
    default_detail = "Invalid booking data."
    default_code = "validation_error"


class DuplicateFieldError(ValidationError):
    default_detail = "Duplicate field value entered"
    default_code = "duplicate_field"


class NotFoundError(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Booking not found"
    default_code = "not_found"


class AccessDeniedError(BookingError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied"
    default_code = "access_denied"


class InvalidStatusError(BookingError):
    default_detail = "Invalid booking status"
    default_code = "invalid_status"


class CapacityExceededError(BookingError):
    default_code = "capacity_exceeded"

    def __init__(self, available_rooms: int):
        self.available_rooms = max(available_rooms, 0)
        super().__init__(f"Only {self.available_rooms} rooms available for selected dates")


class AlreadyPaidError(BookingError):
    default_detail = "Booking is already paid"
    default_code = "already_paid"


class BookingCancelledError(BookingError):
    default_detail = "Cannot pay for cancelled booking"
    default_code = "booking_cancelled"


class InvalidSignatureError(BookingError):
    default_detail = "Invalid payment signature"
    default_code = "invalid_signature"


class PaymentVerificationFailedError(BookingError):
    default_detail = "Payment verification failed"
    default_code = "payment_verification_failed"


class GatewayError(BookingError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Payment gateway request failed"
    default_code = "gateway_error"


class GatewayTimeoutError(GatewayError):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    default_detail = "Payment gateway did not respond in time"
    default_code = "gateway_timeout"
