# common/api.py

"""
API ERROR NORMALIZATION

Canonical error body shared by every dispute-engine endpoint:

    {"error": {"code": "...", "message": "..."}}

Views catch DisputeEngineError around service calls and hand it to
`domain_error_response()`; unexpected DatabaseError is logged by the view and
answered with `infrastructure_error_response()` (generic 503).
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

from common.exceptions import (
    AlreadyResolvedError,
    DisputeEngineError,
    DuplicateClaimError,
    DuplicateRefundError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    PenaltyExceedsDepositError,
    ValidationError,
)

# Order matters: first isinstance() match wins.
HTTP_STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (DuplicateClaimError, status.HTTP_409_CONFLICT),
    (DuplicateRefundError, status.HTTP_409_CONFLICT),
    (AlreadyResolvedError, status.HTTP_409_CONFLICT),
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (PenaltyExceedsDepositError, status.HTTP_400_BAD_REQUEST),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
)

INFRASTRUCTURE_ERROR_CODE = "SERVICE_UNAVAILABLE"
GENERIC_INFRASTRUCTURE_MESSAGE = "The service is temporarily unavailable. Please try again later."


def error_response(*, code: str, message: str, http_status: int):
    """
    Canonical API error response.
    """
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def http_status_for(exc: DisputeEngineError) -> int:
    for error_class, mapped in HTTP_STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return mapped
    return status.HTTP_400_BAD_REQUEST


def domain_error_response(exc: DisputeEngineError):
    return error_response(
        code=exc.code,
        message=exc.message,
        http_status=http_status_for(exc),
    )


def infrastructure_error_response():
    return error_response(
        code=INFRASTRUCTURE_ERROR_CODE,
        message=GENERIC_INFRASTRUCTURE_MESSAGE,
        http_status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )
