"""Guest email notifications for booking events."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.template.loader import render_to_string  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.html import strip_tags  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.models import Booking

logger = logging.getLogger(__name__)


def send_email_notification(recipient_email: str, subject: str, template_name: str, context: dict) -> bool:
    """
    Render an email template and send it, logging (not raising) delivery failures.

    Returns:
        bool: True if the email was handed to the backend
    """
    try:
        html_message = render_to_string(template_name, context)
        send_mail(
            subject=subject,
            message=strip_tags(html_message),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )
    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False

    logger.info(f"Email sent successfully to {recipient_email}: {subject}")
    return True


def _stay(booking: "Booking") -> str:
    check_in = timezone.localtime(booking.check_in_date)
    check_out = timezone.localtime(booking.check_out_date)
    return f"{check_in:%d.%m.%Y %H:%M} - {check_out:%d.%m.%Y %H:%M}"


def _context(booking: "Booking") -> dict:
    return {"booking": booking, "stay": _stay(booking), "currency": settings.BOOKING_CURRENCY}


def send_booking_confirmation_email(booking: "Booking") -> bool:
    return send_email_notification(
        booking.guest_email,
        f"Booking #{booking.pk} confirmed",
        "bookings/emails/booking_confirmed.html",
        _context(booking),
    )


def send_booking_cancelled_email(booking: "Booking") -> bool:
    return send_email_notification(
        booking.guest_email,
        f"Booking #{booking.pk} cancelled",
        "bookings/emails/booking_cancelled.html",
        _context(booking),
    )


def send_payment_failed_email(booking: "Booking") -> bool:
    return send_email_notification(
        booking.guest_email,
        f"Payment for booking #{booking.pk} failed",
        "bookings/emails/payment_failed.html",
        _context(booking),
    )
