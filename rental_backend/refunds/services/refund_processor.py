# refunds/services/refund_processor.py

"""
REFUND PROCESSOR (ADMIN WORKFLOW)

Purpose:
- Execute or reject a calculated deposit refund exactly once.
- Let a rejected refund be reopened for another review.

This service does NOT move money itself: the payout happens outside the
engine and is referenced by `external_transaction_id`.

Every transition re-reads the refund with select_for_update, so two admins
processing the same refund cannot both succeed.
"""

from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from common.exceptions import ForbiddenError, NotFoundError, ValidationError
from permissions.roles import (
    CAP_REFUND_PROCESS,
    ROLE_ADMIN,
    get_user_role,
    is_back_office,
    user_has_capability,
)
from refunds.models import DepositRefund
from refunds.services.refund_lifecycle import validate_transition
from users.models import BankAccount

logger = logging.getLogger("refunds")


# ============================================================
# LOOKUPS
# ============================================================


def refund_queryset():
    return DepositRefund.objects.select_related(
        "order",
        "customer",
        "refund_bank_account",
        "processed_by_admin",
    )


def _lock_refund(refund_id) -> DepositRefund:
    try:
        return DepositRefund.objects.select_for_update().get(id=refund_id)
    except DepositRefund.DoesNotExist as exc:
        raise NotFoundError(f"Refund {refund_id} not found") from exc


def get_refund_for_user(*, refund_id, user) -> DepositRefund:
    try:
        refund = refund_queryset().get(id=refund_id)
    except DepositRefund.DoesNotExist as exc:
        raise NotFoundError(f"Refund {refund_id} not found") from exc

    if not is_back_office(user) and refund.customer_id != user.id:
        raise ForbiddenError("You do not have access to this refund")
    return refund


def list_refunds_for_customer(user):
    """A provider renting someone else's item sees its refunds here too."""
    return refund_queryset().filter(customer=user)


def count_pending_refunds() -> int:
    return DepositRefund.objects.filter(status=DepositRefund.STATUS_PENDING).count()


def suggested_bank_account(refund: DepositRefund) -> Optional[BankAccount]:
    return (
        BankAccount.objects
        .for_user(refund.customer_id)
        .preferred_first()
        .first()
    )


# ============================================================
# PROCESS
# ============================================================


@transaction.atomic
def process_refund(
    *,
    refund_id,
    admin,
    is_approved: bool,
    bank_account_id=None,
    notes: str | None = None,
    external_transaction_id: str | None = None,
) -> DepositRefund:
    """
    Approve (pay out) or reject a pending refund.

    GUARANTEES:
    - Only pending refunds are processed
    - Approval always names the customer's own destination account
    - Rejection always carries a reason
    """

    # --------------------------------------------------
    # 1. AUTHORIZATION + LOCK
    # --------------------------------------------------
    if not user_has_capability(admin, CAP_REFUND_PROCESS):
        raise ForbiddenError("Only an admin can process refunds")

    refund = _lock_refund(refund_id)

    target = DepositRefund.STATUS_APPROVED if is_approved else DepositRefund.STATUS_REJECTED
    validate_transition(refund=refund, target_status=target)

    notes = (notes or "").strip()
    update_fields = ["status", "notes", "processed_by_admin", "processed_at"]

    # --------------------------------------------------
    # 2. DECISION-SPECIFIC RULES
    # --------------------------------------------------
    if is_approved:
        if not bank_account_id:
            raise ValidationError("A bank account is required to approve a refund")

        account = (
            BankAccount.objects
            .for_user(refund.customer_id)
            .filter(id=bank_account_id)
            .first()
        )
        if account is None:
            raise ValidationError("The bank account does not belong to the refund's customer")

        refund.refund_bank_account = account
        refund.external_transaction_id = (external_transaction_id or "").strip()
        update_fields += ["refund_bank_account", "external_transaction_id"]
    elif not notes:
        raise ValidationError("A reason is required to reject a refund")

    # --------------------------------------------------
    # 3. STATE TRANSITION
    # --------------------------------------------------
    previous = refund.status
    refund.status = target
    if notes:
        refund.notes = notes
    refund.processed_by_admin = admin
    refund.processed_at = timezone.now()
    refund.save(update_fields=update_fields)

    logger.info(
        "Deposit refund processed",
        extra={
            "refund_id": str(refund.id),
            "order_id": str(refund.order_id),
            "actor_id": str(admin.id),
            "from_status": previous,
            "to_status": refund.status,
            "refund_amount": str(refund.refund_amount),
        },
    )
    return refund


# ============================================================
# REOPEN
# ============================================================


@transaction.atomic
def reopen_refund(*, refund_id, actor) -> DepositRefund:
    """
    rejected -> pending. Previous notes stay for reference; processing
    fields are cleared.
    """
    refund = _lock_refund(refund_id)

    if get_user_role(actor) != ROLE_ADMIN and refund.customer_id != actor.id:
        raise ForbiddenError("You can only reopen your own refunds")

    validate_transition(refund=refund, target_status=DepositRefund.STATUS_PENDING)

    refund.status = DepositRefund.STATUS_PENDING
    refund.processed_by_admin = None
    refund.processed_at = None
    refund.refund_bank_account = None
    refund.external_transaction_id = ""
    refund.save(
        update_fields=[
            "status",
            "processed_by_admin",
            "processed_at",
            "refund_bank_account",
            "external_transaction_id",
        ]
    )

    logger.info(
        "Deposit refund reopened",
        extra={
            "refund_id": str(refund.id),
            "actor_id": str(actor.id),
            "from_status": DepositRefund.STATUS_REJECTED,
            "to_status": refund.status,
        },
    )
    return refund
