# common/exceptions.py

"""
DISPUTE ENGINE ERRORS

Centralized, typed failures for the violation / dispute / refund services.

DisputeEngineError means the caller's request is invalid for the current
data (4xx). Store failures are not wrapped: views catch Django's
DatabaseError and answer with the generic 503 from common.api.

Every domain error carries a stable machine `code` used by the API layer.
"""


class DisputeEngineError(Exception):
    """Base exception for all domain failures."""

    code = "DOMAIN_ERROR"

    def __init__(self, message: str = "", *, code: str | None = None):
        super().__init__(message)
        if code:
            self.code = code

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(DisputeEngineError):
    """Malformed input: penalty values, missing mandatory notes, bad evidence."""

    code = "VALIDATION_ERROR"


class ForbiddenError(DisputeEngineError):
    """Actor is not the owner of the case / order / refund, or lacks the role."""

    code = "FORBIDDEN"


class InvalidStateError(DisputeEngineError):
    """Operation is not permitted from the entity's current status."""

    code = "INVALID_STATE"


class NotFoundError(DisputeEngineError):
    code = "NOT_FOUND"


class DuplicateClaimError(DisputeEngineError):
    """An OrderItem already has an open violation case."""

    code = "DUPLICATE_CLAIM"


class DuplicateRefundError(DisputeEngineError):
    """A DepositRefund already exists for the order."""

    code = "DUPLICATE_REFUND"


class AlreadyResolvedError(DisputeEngineError):
    """An IssueResolution already exists for the violation."""

    code = "ALREADY_RESOLVED"


class PenaltyExceedsDepositError(DisputeEngineError):
    code = "PENALTY_EXCEEDS_DEPOSIT"

