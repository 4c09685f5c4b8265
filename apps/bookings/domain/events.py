"""
Booking Domain Events

Events that represent things that have happened to a booking.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from decimal import Decimal

from shared.domain.base import DomainEvent


# ===== Booking Events =====

@dataclass
class BookingCreated(DomainEvent):
    """
    Event: A new booking was created (Pending/Pending)

    Triggers:
    - Nothing yet; payment happens through create-order
    """
    booking_id: int
    hotel_id: int
    user_id: int
    final_amount: Decimal


@dataclass
class BookingConfirmed(DomainEvent):
    """
    Event: Booking moved to Confirmed

    Triggers:
    - Send booking confirmation to guest
    """
    booking_id: int
    hotel_id: int
    user_id: int


@dataclass
class BookingCompleted(DomainEvent):
    """Event: Stay finished (Confirmed -> Completed)"""
    booking_id: int
    hotel_id: int


@dataclass
class BookingCancelled(DomainEvent):
    """
    Event: Booking was cancelled

    Triggers:
    - Notify guest about the cancellation and refund amount
    """
    booking_id: int
    hotel_id: int
    reason: str
    refund_amount: Decimal
    old_status: str  # Status before cancellation


# ===== Payment Events =====

@dataclass
class PaymentCaptured(DomainEvent):
    """Event: Gateway reported the payment as captured"""
    booking_id: int
    payment_id: str


@dataclass
class PaymentFailed(DomainEvent):
    """
    Event: Gateway reported the payment as failed

    Triggers:
    - Tell the guest the payment did not go through
    """
    booking_id: int
