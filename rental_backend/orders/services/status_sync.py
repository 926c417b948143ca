# orders/services/status_sync.py

"""
ORDER STATUS SYNCHRONIZER

Keeps the order aggregate consistent with its violations:

    returned_with_issue  <=>  at least one violation on the order is open
    returned (post-issue) <=> every violation is customer_accepted or resolved

Entry points:
- reconcile_order_after_case_settled(): called inside the transaction that
  settled a case (customer accept / admin resolution).
- sync_resolved_order_statuses(): idempotent batch pass (management command
  + admin endpoint).
- resolve_order_with_violations(): single-order manual variant that reports
  WHY an order could not be resolved instead of raising.
- confirm_clean_return(): provider closes a return with no claims.

Every path locks the Order row first (select_for_update), the same lock
violation creation takes, so "all terminal" is never judged on a stale set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from django.db import transaction

from common.exceptions import ForbiddenError, InvalidStateError, NotFoundError
from orders.models import Order
from orders.services.order_lifecycle import validate_transition
from refunds.models import DepositRefund
from refunds.services.refund_calculator import calculate_deposit_refund
from violations.models import RentalViolation
from violations.services.violation_lifecycle import is_terminal

logger = logging.getLogger("orders")


@dataclass(frozen=True)
class OrderResolutionOutcome:
    resolved: bool
    reason: str
    refund: Optional[DepositRefund] = None


# ============================================================
# INTERNAL HELPERS
# ============================================================


def _lock_order(order_id) -> Order:
    try:
        return Order.objects.select_for_update().get(id=order_id)
    except Order.DoesNotExist as exc:
        raise NotFoundError(f"Order {order_id} not found") from exc


def _violation_counts(order: Order) -> tuple[int, int]:
    """(total, open) violations for the order, re-read from the database."""
    statuses = list(
        RentalViolation.objects
        .filter(order_item__order=order)
        .values_list("status", flat=True)
    )
    open_count = sum(1 for status in statuses if not is_terminal(status))
    return len(statuses), open_count


def _unmet_reason(order: Order) -> Optional[str]:
    if order.status != Order.STATUS_RETURNED_WITH_ISSUE:
        return (
            f"Order {order.order_code} is '{order.status}', "
            f"expected '{Order.STATUS_RETURNED_WITH_ISSUE}'"
        )

    total, open_count = _violation_counts(order)
    if total == 0:
        return f"Order {order.order_code} has no violations"
    if open_count:
        return (
            f"Order {order.order_code} still has {open_count} "
            f"of {total} violation(s) open"
        )
    return None


def _finalize_return(order: Order) -> DepositRefund:
    validate_transition(order=order, target_status=Order.STATUS_RETURNED)

    previous = order.status
    order.status = Order.STATUS_RETURNED
    order.save(update_fields=["status", "updated_at"])

    logger.info(
        "Order returned",
        extra={
            "order_id": str(order.id),
            "from_status": previous,
            "to_status": order.status,
        },
    )
    return calculate_deposit_refund(order=order)


# ============================================================
# RECONCILIATION
# ============================================================


@transaction.atomic
def reconcile_order_after_case_settled(*, order_id) -> bool:
    """
    Flip the order to `returned` (and create its refund) if the case that
    just settled was the last open one. Returns True when the order moved.
    """
    order = _lock_order(order_id)

    if _unmet_reason(order) is not None:
        return False

    _finalize_return(order)
    return True


def sync_resolved_order_statuses(*, dry_run: bool = False) -> int:
    """
    Batch pass over every `returned_with_issue` order.

    Each order is reconciled in its own transaction so one failure does not
    roll back the others. Re-running is a no-op for orders already synced.
    Returns the number of orders updated (or that would be, on dry run).
    """
    candidate_ids = list(
        Order.objects
        .filter(status=Order.STATUS_RETURNED_WITH_ISSUE)
        .values_list("id", flat=True)
    )

    updated = 0
    for order_id in candidate_ids:
        with transaction.atomic():
            order = _lock_order(order_id)
            if _unmet_reason(order) is not None:
                continue
            if not dry_run:
                _finalize_return(order)
        updated += 1

    logger.info(
        "Order status sync finished",
        extra={
            "candidates": len(candidate_ids),
            "updated": updated,
            "dry_run": dry_run,
        },
    )
    return updated


@transaction.atomic
def resolve_order_with_violations(order_id) -> OrderResolutionOutcome:
    order = _lock_order(order_id)

    reason = _unmet_reason(order)
    if reason is not None:
        logger.warning(
            "Order resolution refused",
            extra={"order_id": str(order.id), "reason": reason},
        )
        return OrderResolutionOutcome(resolved=False, reason=reason)

    refund = _finalize_return(order)
    return OrderResolutionOutcome(
        resolved=True,
        reason=f"Order {order.order_code} marked as returned",
        refund=refund,
    )


# ============================================================
# CLEAN RETURN
# ============================================================


@transaction.atomic
def confirm_clean_return(*, order_id, provider) -> DepositRefund:
    """
    Provider confirms every item came back without issues.
    `returning` -> `returned`, full deposit refund created as pending.
    """
    order = _lock_order(order_id)

    if order.provider_id != provider.id:
        raise ForbiddenError("Only the order's provider can confirm its return")

    if order.status != Order.STATUS_RETURNING:
        raise InvalidStateError(
            f"Order {order.order_code} is '{order.status}'; only returning orders "
            "can be confirmed as a clean return"
        )

    return _finalize_return(order)
