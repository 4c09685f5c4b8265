"""
Booking Queries

Read-side helpers used by the list and statistics endpoints.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from django.db.models import Avg, Count, Q, Sum
from django.db.models.functions import TruncMonth

from apps.bookings.models import Booking
from apps.bookings.permissions import is_admin

CENT = Decimal("0.01")


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENT, rounding=ROUND_HALF_UP)


def bookings_visible_to(user):
    """Administrators see every booking; everyone else only their own."""
    queryset = Booking.objects.select_related("hotel", "user")
    if is_admin(user):
        return queryset
    return queryset.filter(user=user)


def booking_statistics(start_date: Optional[date] = None, end_date: Optional[date] = None) -> dict:
    """
    Aggregate bookings created within the optional [start_date, end_date] window

    Revenue counts Paid bookings only; refunds are summed over cancelled
    bookings whose payment had been taken.
    """
    queryset = Booking.objects.all()
    if start_date:
        queryset = queryset.filter(created_at__date__gte=start_date)
    if end_date:
        queryset = queryset.filter(created_at__date__lte=end_date)

    paid = Q(payment_status=Booking.PaymentStatus.PAID)

    by_status = {
        row["booking_status"]: row["count"]
        for row in queryset.order_by().values("booking_status").annotate(count=Count("id"))
    }

    revenue = queryset.filter(paid).aggregate(
        total_revenue=Sum("final_amount"),
        average_booking_value=Avg("final_amount"),
    )

    refunds = queryset.filter(
        booking_status=Booking.Status.CANCELLED,
        payment_status__in=[Booking.PaymentStatus.PAID, Booking.PaymentStatus.REFUNDED],
    ).aggregate(total_refunds=Sum("refund_amount"))

    monthly = (
        queryset.annotate(month=TruncMonth("created_at"))
        .values("month")
        .annotate(
            count=Count("id"),
            revenue=Sum("final_amount", filter=paid),
        )
        .order_by("month")
    )

    return {
        "total_bookings": queryset.count(),
        "bookings_by_status": {
            status: by_status.get(status, 0) for status in Booking.Status.values
        },
        "revenue": {
            "total_revenue": _money(revenue["total_revenue"]),
            "average_booking_value": _money(revenue["average_booking_value"]),
            "total_refunds": _money(refunds["total_refunds"]),
        },
        "monthly_trends": [
            {
                "year": row["month"].year,
                "month": row["month"].month,
                "count": row["count"],
                "revenue": _money(row["revenue"]),
            }
            for row in monthly
        ],
    }
