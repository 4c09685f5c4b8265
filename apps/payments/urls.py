"""URL routing for payment endpoints (mounted under the bookings prefix)."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import VerifyPaymentView, razorpay_webhook

urlpatterns = [
    path("verify-payment/", VerifyPaymentView.as_view(), name="verify-payment"),
    path("webhook/", razorpay_webhook, name="razorpay-webhook"),
]
