# refunds/services/refund_lifecycle.py

"""
DEPOSIT REFUND LIFECYCLE DOMAIN RULES

    pending ──approve──> approved   (terminal: money has left)
       │
       └──reject──> rejected ──reopen──> pending

DESIGN PRINCIPLES:
- No database writes
- No side effects
- Single source of truth
"""

from common.exceptions import InvalidStateError
from refunds.models import DepositRefund

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    DepositRefund.STATUS_APPROVED,
}

ALLOWED_TRANSITIONS = {
    DepositRefund.STATUS_PENDING: {
        DepositRefund.STATUS_APPROVED,
        DepositRefund.STATUS_REJECTED,
    },
    DepositRefund.STATUS_REJECTED: {
        DepositRefund.STATUS_PENDING,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, refund: DepositRefund, target_status: str):
    if not can_transition(
        from_status=refund.status,
        to_status=target_status,
    ):
        raise InvalidStateError(
            f"Refund {refund.refund_code} cannot transition from "
            f"'{refund.status}' to '{target_status}'"
        )
