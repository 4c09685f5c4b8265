"""HMAC-SHA256 signatures used by Razorpay."""

from __future__ import annotations

import hashlib
import hmac


def _sign(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def compute_payment_signature(order_id: str, payment_id: str, secret: str) -> str:
    """Signature the checkout returns to the client for `order_id|payment_id`."""

    return _sign(secret, f"{order_id}|{payment_id}".encode())


def compute_webhook_signature(raw_body: bytes, secret: str) -> str:
    """Signature over the exact webhook request body."""

    return _sign(secret, raw_body)


def verify_payment_signature(order_id: str, payment_id: str, signature: str, secret: str) -> bool:
    if not signature or not secret:
        return False
    expected = compute_payment_signature(order_id, payment_id, secret)
    return hmac.compare_digest(expected.encode(), signature.encode())


def verify_webhook_signature(raw_body: bytes, signature: str, secret: str) -> bool:
    if not signature or not secret:
        return False
    expected = compute_webhook_signature(raw_body, secret)
    return hmac.compare_digest(expected.encode(), signature.encode())
