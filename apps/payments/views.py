"""Payment verification and gateway webhook endpoints."""

from __future__ import annotations

import logging

from django.http import JsonResponse  # type: ignore
from django.views.decorators.csrf import csrf_exempt  # type: ignore
from django.views.decorators.http import require_POST  # type: ignore
from rest_framework import permissions  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.exceptions import InvalidSignatureError
from apps.bookings.serializers import BookingSerializer, VerifyPaymentSerializer

from .gateway import get_payment_gateway
from .services import PaymentReconciliationService, describe_payment

logger = logging.getLogger(__name__)


class VerifyPaymentView(APIView):
    """Checkout result posted by the client after paying."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):  # type: ignore
        serializer = VerifyPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        service = PaymentReconciliationService(get_payment_gateway())
        booking, payment = service.verify_payment(
            data["razorpay_order_id"],
            data["razorpay_payment_id"],
            data["razorpay_signature"],
            request.user,
        )
        return Response(
            {
                "message": "Payment verified successfully",
                "booking": BookingSerializer(booking).data,
                "payment_details": describe_payment(payment, data["razorpay_order_id"]),
            }
        )


@csrf_exempt
@require_POST
def razorpay_webhook(request):
    """
    Server-to-server notification from Razorpay

    The signature is checked over the raw body before anything is parsed.
    """
    signature = request.headers.get("X-Razorpay-Signature", "")
    try:
        service = PaymentReconciliationService(get_payment_gateway())
        outcome = service.process_webhook(request.body, signature)
    except InvalidSignatureError:
        return JsonResponse({"message": "Invalid webhook signature"}, status=400)
    except Exception as e:
        logger.error(f"Webhook processing failed: {e}", exc_info=True)
        return JsonResponse({"message": "Webhook processing failed"}, status=500)

    logger.info(f"Razorpay webhook processed: {outcome}")
    return JsonResponse({"status": "ok"})
