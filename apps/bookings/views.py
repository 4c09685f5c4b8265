"""API views for the booking domain."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.payments.gateway import get_payment_gateway
from apps.payments.services import PaymentReconciliationService

from .application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    UpdateBookingStatusCommand,
    UpdateBookingStatusHandler,
    UpdatePaymentStatusCommand,
    UpdatePaymentStatusHandler,
)
from .application.queries import booking_statistics, bookings_visible_to
from .exceptions import AccessDeniedError, NotFoundError
from .filters import BookingFilterSet
from .models import Booking
from .pagination import BookingPagination
from .permissions import ensure_can_access, is_admin
from .serializers import (
    BookingCreateSerializer,
    BookingSerializer,
    BookingStatusSerializer,
    CancelBookingSerializer,
    PaymentStatusSerializer,
    StatsQuerySerializer,
)


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Create, browse and manage hotel bookings."""

    queryset = Booking.objects.select_related("hotel", "user").all()
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = BookingPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = BookingFilterSet
    lookup_value_regex = r"\d+"

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        return BookingSerializer

    def get_queryset(self):  # type: ignore
        return bookings_visible_to(self.request.user)

    def get_object(self):  # type: ignore
        try:
            booking = Booking.objects.select_related("hotel", "user").get(pk=self.kwargs["pk"])
        except Booking.DoesNotExist:
            raise NotFoundError()
        ensure_can_access(booking, self.request.user)
        return booking

    def _booking_response(self, message: str, booking: Booking, status_code=status.HTTP_200_OK, **extra):
        data = {"message": message, "booking": BookingSerializer(booking).data}
        data.update(extra)
        return Response(data, status=status_code)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = CreateBookingHandler().handle(
            CreateBookingCommand(user=request.user, **serializer.validated_data)
        )
        return self._booking_response(
            "Booking created successfully", booking, status.HTTP_201_CREATED
        )

    def retrieve(self, request, *args, **kwargs):  # type: ignore
        return Response({"booking": BookingSerializer(self.get_object()).data})

    def destroy(self, request, pk=None):  # type: ignore
        serializer = CancelBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = CancelBookingHandler().handle(
            CancelBookingCommand(
                booking_id=int(pk),
                user=request.user,
                reason=serializer.validated_data["reason"],
            )
        )
        return self._booking_response(
            "Booking cancelled successfully",
            booking,
            refund_amount=str(booking.refund_amount),
        )

    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request, pk=None):  # type: ignore
        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = UpdateBookingStatusHandler().handle(
            UpdateBookingStatusCommand(
                booking_id=int(pk),
                user=request.user,
                status=serializer.validated_data["status"],
                cancellation_reason=serializer.validated_data["cancellation_reason"],
            )
        )
        return self._booking_response("Booking status updated successfully", booking)

    @action(detail=True, methods=["patch"], url_path="payment")
    def update_payment(self, request, pk=None):  # type: ignore
        serializer = PaymentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = UpdatePaymentStatusHandler().handle(
            UpdatePaymentStatusCommand(
                booking_id=int(pk),
                user=request.user,
                **serializer.validated_data,
            )
        )
        return self._booking_response("Payment status updated successfully", booking)

    @action(detail=False, methods=["get"], url_path="my-bookings")
    def my_bookings(self, request):  # type: ignore
        queryset = Booking.objects.select_related("hotel").filter(user=request.user)
        booking_status = request.query_params.get("status")
        if booking_status:
            queryset = queryset.filter(booking_status=booking_status)

        page = self.paginate_queryset(queryset)
        serializer = BookingSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @action(detail=False, methods=["get"])
    def stats(self, request):  # type: ignore
        if not is_admin(request.user):
            raise AccessDeniedError("Access denied. Admin only.")

        serializer = StatsQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = booking_statistics(
            start_date=serializer.validated_data.get("start_date"),
            end_date=serializer.validated_data.get("end_date"),
        )
        return Response(data)

    @action(detail=True, methods=["post"], url_path="create-order")
    def create_order(self, request, pk=None):  # type: ignore
        service = PaymentReconciliationService(get_payment_gateway())
        order = service.create_order(int(pk), request.user)
        booking = order.pop("booking")
        return Response(
            {
                "message": "Payment order created successfully",
                **order,
                "booking": {
                    "id": booking.pk,
                    "guest_name": booking.guest_name,
                    "guest_email": booking.guest_email,
                    "guest_phone": booking.guest_phone,
                    "final_amount": str(booking.final_amount),
                },
            }
        )
