"""Query filters for booking listings."""

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(field_name="booking_status", choices=Booking.Status.choices)
    payment_status = django_filters.ChoiceFilter(choices=Booking.PaymentStatus.choices)
    hotel = django_filters.NumberFilter(field_name="hotel_id")

    class Meta:
        model = Booking
        fields = ["status", "payment_status", "hotel"]
