"""
Razorpay payment gateway integration

Orders are created in minor units (paise). The gateway is resolved from the
PAYMENT_GATEWAY_CLASS setting so tests and local development can swap it.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import requests
from django.conf import settings
from django.utils.module_loading import import_string

from apps.bookings.exceptions import GatewayError, GatewayTimeoutError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayOrder:
    id: str
    amount: int
    currency: str
    receipt: str = ""
    status: str = "created"


@dataclass(frozen=True)
class GatewayPayment:
    id: str
    status: str
    order_id: str = ""
    amount: int = 0
    currency: str = ""
    method: str = ""
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_captured(self) -> bool:
        return self.status == "captured"


class PaymentGateway(ABC):
    """Operations the reconciliation service needs from a payment provider"""

    key_id: str = ""
    key_secret: str = ""
    webhook_secret: str = ""

    @abstractmethod
    def create_order(self, amount: int, currency: str, receipt: str, notes: dict) -> GatewayOrder:
        """Create an order for `amount` minor units"""

    @abstractmethod
    def fetch_payment(self, payment_id: str) -> GatewayPayment:
        """Fetch the current state of a payment"""


class RazorpayGateway(PaymentGateway):
    """Razorpay REST API over `requests` with HTTP basic auth"""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        webhook_secret: str = "",
        base_url: str = "https://api.razorpay.com/v1/",
        timeout: float = 10,
        session: requests.Session | None = None,
    ):
        self.key_id = key_id
        self.key_secret = key_secret
        self.webhook_secret = webhook_secret or key_secret
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = (key_id, key_secret)

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.Timeout as e:
            logger.error(f"Razorpay request timed out: {method} {path}: {e}")
            raise GatewayTimeoutError()
        except requests.exceptions.RequestException as e:
            logger.error(f"Razorpay request failed: {method} {path}: {e}")
            raise GatewayError(f"Payment gateway request failed: {e}")
        except ValueError as e:
            logger.error(f"Razorpay returned invalid JSON for {method} {path}: {e}")
            raise GatewayError("Payment gateway returned an invalid response")

    def create_order(self, amount: int, currency: str, receipt: str, notes: dict) -> GatewayOrder:
        logger.info(f"Creating Razorpay order {receipt}: {amount} {currency}")
        result = self._request(
            "POST",
            "orders",
            json={"amount": amount, "currency": currency, "receipt": receipt, "notes": notes},
        )
        return GatewayOrder(
            id=result["id"],
            amount=result.get("amount", amount),
            currency=result.get("currency", currency),
            receipt=result.get("receipt", receipt),
            status=result.get("status", "created"),
        )

    def fetch_payment(self, payment_id: str) -> GatewayPayment:
        logger.info(f"Fetching Razorpay payment {payment_id}")
        result = self._request("GET", f"payments/{payment_id}")
        return GatewayPayment(
            id=result.get("id", payment_id),
            status=result.get("status", ""),
            order_id=result.get("order_id") or "",
            amount=result.get("amount", 0),
            currency=result.get("currency", ""),
            method=result.get("method") or "",
            raw=result,
        )


class EmulatedGateway(PaymentGateway):
    """
    Local stand-in for Razorpay used in DEBUG without API keys

    Orders get random ids and every fetched payment reports as captured.
    """

    def __init__(self, key_id: str = "", key_secret: str = "", webhook_secret: str = ""):
        self.key_id = key_id or "rzp_test_emulated"
        self.key_secret = key_secret or "emulated-secret"
        self.webhook_secret = webhook_secret or self.key_secret

    def create_order(self, amount: int, currency: str, receipt: str, notes: dict) -> GatewayOrder:
        order = GatewayOrder(
            id=f"order_{uuid.uuid4().hex[:14]}",
            amount=amount,
            currency=currency,
            receipt=receipt,
        )
        logger.warning(f"Using emulated payment gateway, order {order.id} for {receipt}")
        return order

    def fetch_payment(self, payment_id: str) -> GatewayPayment:
        logger.warning(f"Using emulated payment gateway, payment {payment_id} reported captured")
        return GatewayPayment(id=payment_id, status="captured", method="emulated")


def build_default_gateway() -> PaymentGateway:
    key_id = getattr(settings, "RAZORPAY_KEY_ID", "")
    key_secret = getattr(settings, "RAZORPAY_KEY_SECRET", "")
    webhook_secret = getattr(settings, "RAZORPAY_WEBHOOK_SECRET", "")

    if settings.DEBUG and not key_id:
        return EmulatedGateway(key_id, key_secret, webhook_secret)

    return RazorpayGateway(
        key_id=key_id,
        key_secret=key_secret,
        webhook_secret=webhook_secret,
        base_url=getattr(settings, "RAZORPAY_API_BASE_URL", "https://api.razorpay.com/v1/"),
        timeout=getattr(settings, "PAYMENT_GATEWAY_TIMEOUT", 10),
    )


def get_payment_gateway() -> PaymentGateway:
    """Instantiate PAYMENT_GATEWAY_CLASS if configured, otherwise the default"""
    gateway_path = getattr(settings, "PAYMENT_GATEWAY_CLASS", "")
    if gateway_path:
        return import_string(gateway_path)()
    return build_default_gateway()
