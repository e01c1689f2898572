# accounting/api/errors.py

"""
API ERROR NORMALIZATION

Canonical envelope for every core endpoint:
    success: {"success": true, ...}
    failure: {"success": false, "error": {"code": ..., "message": ...}}

Service exceptions carry their own stable `code`; the HTTP status is
chosen by exception family.
"""

from __future__ import annotations

import logging

from django.core.exceptions import PermissionDenied
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response

from accounting.services.exceptions import (
    AccountingServiceError,
    AuthenticationError,
    BusinessRuleError,
    IdempotencyError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first
_STATUS_BY_ERROR = (
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (IdempotencyError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (BusinessRuleError, status.HTTP_400_BAD_REQUEST),
    (PersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def error_response(*, code: str, message: str, http_status: int) -> Response:
    """
    Canonical API error response.
    """
    return Response(
        {"success": False, "error": {"code": code, "message": message}},
        status=http_status,
    )


def success_response(payload: dict, *, http_status: int = status.HTTP_200_OK) -> Response:
    return Response({"success": True, **payload}, status=http_status)


def service_error_response(exc: Exception) -> Response:
    if isinstance(exc, PermissionDenied):
        return error_response(
            code="PERMISSION_DENIED",
            message=str(exc) or "You do not have permission to perform this action.",
            http_status=status.HTTP_403_FORBIDDEN,
        )

    if isinstance(exc, DjangoValidationError):
        return error_response(
            code="VALIDATION_ERROR",
            message="; ".join(exc.messages),
            http_status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, AccountingServiceError):
        http_status = status.HTTP_400_BAD_REQUEST
        for error_class, mapped in _STATUS_BY_ERROR:
            if isinstance(exc, error_class):
                http_status = mapped
                break

        if http_status >= 500:
            logger.error("Service failure %s: %s", exc.code, exc.message)
            # Storage details stay in the logs
            return error_response(
                code=exc.code,
                message="The operation could not be completed. No changes were kept.",
                http_status=http_status,
            )

        return error_response(code=exc.code, message=exc.message or str(exc), http_status=http_status)

    raise exc


# Exceptions the views translate into the envelope
HANDLED_ERRORS = (AccountingServiceError, PermissionDenied, DjangoValidationError)
