# orders/services/order_lifecycle.py

"""
ORDER LIFECYCLE DOMAIN RULES

Defines the allowed aggregate-status transitions for rental orders.

The dispute engine only drives the post-return segment; the earlier
transitions are listed so every write through this module is checked
against the same table.

DESIGN PRINCIPLES:
- No database writes
- No side effects
- Single source of truth
"""

from common.exceptions import InvalidStateError
from orders.models import Order

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Order.STATUS_RETURNED,
    Order.STATUS_CANCELLED,
}

# Orders that may still receive a new violation claim.
DISPUTABLE_STATES = {
    Order.STATUS_RETURNING,
    Order.STATUS_RETURNED_WITH_ISSUE,
}

ALLOWED_TRANSITIONS = {
    Order.STATUS_PENDING: {
        Order.STATUS_APPROVED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_APPROVED: {
        Order.STATUS_IN_TRANSIT,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_IN_TRANSIT: {
        Order.STATUS_IN_USE,
    },
    Order.STATUS_IN_USE: {
        Order.STATUS_RETURNING,
    },
    Order.STATUS_RETURNING: {
        Order.STATUS_RETURNED,
        Order.STATUS_RETURNED_WITH_ISSUE,
    },
    Order.STATUS_RETURNED_WITH_ISSUE: {
        Order.STATUS_RETURNED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, order: Order, target_status: str):
    if not can_transition(
        from_status=order.status,
        to_status=target_status,
    ):
        raise InvalidStateError(
            f"Order {order.order_code} cannot transition from "
            f"'{order.status}' to '{target_status}'"
        )


def is_disputable(order: Order) -> bool:
    return order.status in DISPUTABLE_STATES
