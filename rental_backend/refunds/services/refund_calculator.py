# refunds/services/refund_calculator.py

"""
DEPOSIT REFUND CALCULATOR

Purpose:
- Derive the refundable amount for an order once every violation on it has
  settled, and persist it as a single pending DepositRefund.

Money rule:
- total_penalty_amount is the sum of each settled case's OWN penalty_amount.
  Admin fine / compensation figures on an IssueResolution are a liability
  split between the parties and do not change the deposit deduction.
- refund_amount = max(0, original_deposit_amount - total_penalty_amount),
  rounded half-up to 2 decimal places.

Callers (orders.services.status_sync) hold the order row lock; this service
runs inside their transaction.
"""

import logging
from decimal import Decimal

from django.db import IntegrityError, transaction

from common.exceptions import DuplicateRefundError, InvalidStateError
from common.money import ZERO, money
from orders.models import Order
from refunds.models import DepositRefund
from violations.models import RentalViolation
from violations.services.violation_lifecycle import is_terminal

logger = logging.getLogger("refunds")


def compute_refund_amount(*, original_deposit, total_penalty) -> Decimal:
    return money(max(ZERO, money(original_deposit) - money(total_penalty)))


def total_settled_penalty(*, order: Order) -> Decimal:
    """
    Sum of penalties over the order's violations.

    Raises InvalidStateError while any case is still open.
    """
    total = ZERO
    open_count = 0

    for violation in RentalViolation.objects.filter(order_item__order=order):
        if not is_terminal(violation.status):
            open_count += 1
            continue
        total += Decimal(violation.penalty_amount)

    if open_count:
        raise InvalidStateError(
            f"Order {order.order_code} still has {open_count} open violation(s)"
        )

    return money(total)


@transaction.atomic
def calculate_deposit_refund(*, order: Order) -> DepositRefund:
    """
    Create the pending DepositRefund for an order.

    GUARANTEES:
    - Exactly one refund per order (unique order relation)
    - refund_amount >= 0
    - Money snapshots are never recalculated afterwards
    """

    # --------------------------------------------------
    # 1. DUPLICATE PROTECTION
    # --------------------------------------------------
    if DepositRefund.objects.filter(order=order).exists():
        raise DuplicateRefundError(
            f"Order {order.order_code} already has a deposit refund"
        )

    # --------------------------------------------------
    # 2. MONEY
    # --------------------------------------------------
    original = order.total_deposit_amount
    total_penalty = total_settled_penalty(order=order)
    refund_amount = compute_refund_amount(
        original_deposit=original,
        total_penalty=total_penalty,
    )

    # --------------------------------------------------
    # 3. PERSIST (constraint is the race guard)
    # --------------------------------------------------
    try:
        with transaction.atomic():
            refund = DepositRefund.objects.create(
                order=order,
                customer_id=order.customer_id,
                original_deposit_amount=original,
                total_penalty_amount=total_penalty,
                refund_amount=refund_amount,
                status=DepositRefund.STATUS_PENDING,
            )
    except IntegrityError as exc:
        raise DuplicateRefundError(
            f"Order {order.order_code} already has a deposit refund"
        ) from exc

    logger.info(
        "Deposit refund created",
        extra={
            "refund_id": str(refund.id),
            "order_id": str(order.id),
            "original_deposit_amount": str(original),
            "total_penalty_amount": str(total_penalty),
            "refund_amount": str(refund_amount),
        },
    )
    return refund
