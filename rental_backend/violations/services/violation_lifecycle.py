# violations/services/violation_lifecycle.py

"""
VIOLATION LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for RentalViolation entities.

    pending ──accept──────────────> customer_accepted   (terminal)
       │
       └──reject──> customer_rejected ──revise──> pending
                         │
                         └──escalate──> escalated ──admin──> resolved (terminal)

DESIGN PRINCIPLES:
- No database writes
- No side effects
- Single source of truth
"""

from common.exceptions import InvalidStateError
from violations.models import RentalViolation

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    RentalViolation.STATUS_CUSTOMER_ACCEPTED,
    RentalViolation.STATUS_RESOLVED,
}

ALLOWED_TRANSITIONS = {
    RentalViolation.STATUS_PENDING: {
        RentalViolation.STATUS_CUSTOMER_ACCEPTED,
        RentalViolation.STATUS_CUSTOMER_REJECTED,
    },
    RentalViolation.STATUS_CUSTOMER_REJECTED: {
        RentalViolation.STATUS_PENDING,
        RentalViolation.STATUS_ESCALATED,
    },
    RentalViolation.STATUS_ESCALATED: {
        RentalViolation.STATUS_RESOLVED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, violation: RentalViolation, target_status: str):
    if not can_transition(
        from_status=violation.status,
        to_status=target_status,
    ):
        raise InvalidStateError(
            f"Violation {violation.id} cannot transition from "
            f"'{violation.status}' to '{target_status}'"
        )


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATES
