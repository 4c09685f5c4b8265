"""
API Exception Handler

Renders every API error as ``{"message": ..., "code": ...}``. Serializer
validation errors additionally carry the per-field ``errors``.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from rest_framework import exceptions
from rest_framework.views import exception_handler

from apps.bookings.exceptions import DuplicateFieldError, ValidationError

logger = logging.getLogger(__name__)


def _first_message(detail) -> str:
    """Pick a human readable message out of a DRF error detail"""
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
        return ""
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ""
    return str(detail)


def _convert(exc):
    if isinstance(exc, IntegrityError):
        logger.warning(f"Integrity error: {exc}")
        return DuplicateFieldError()
    if isinstance(exc, DjangoValidationError):
        return ValidationError("; ".join(exc.messages))
    return exc


def api_exception_handler(exc, context):
    exc = _convert(exc)
    response = exception_handler(exc, context)

    if response is None:
        # Unexpected errors propagate to Django
        return None

    detail = getattr(exc, "detail", response.data)
    codes = exc.get_codes() if isinstance(exc, exceptions.APIException) else None

    body = {
        "message": _first_message(detail),
        "code": codes if isinstance(codes, str) else getattr(exc, "default_code", "error"),
    }
    if isinstance(exc, exceptions.ValidationError):
        body["message"] = _first_message(detail) or "Invalid input."
        body["errors"] = response.data

    response.data = body
    return response
