"""Ownership checks for bookings."""

from __future__ import annotations

from apps.bookings.exceptions import AccessDeniedError


def is_admin(user) -> bool:
    return bool(user and (user.is_staff or user.is_superuser))


def ensure_can_access(booking, user) -> None:
    """Only the owner of a booking or an administrator may touch it."""

    if is_admin(user):
        return
    if booking.user_id != getattr(user, "pk", None):
        raise AccessDeniedError()
