# disputes/services/resolution_service.py

"""
ADMIN RESOLUTION AUTHORITY

Purpose:
- Final arbiter for violations the parties could not settle.
- The ONLY path that moves a violation to `resolved`.

Rules:
- Only `escalated` violations can be resolved.
- One IssueResolution per violation (one-to-one; a racing duplicate fails at
  the constraint and surfaces as AlreadyResolvedError).
- The ruling never edits the violation's penalty_amount.
- Resolving may settle the last open case of an order; the order is
  reconciled in the same transaction.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, transaction

from common.exceptions import AlreadyResolvedError, NotFoundError, ValidationError
from common.money import MAX_AMOUNT, ZERO, money
from disputes.models import IssueResolution
from orders.services.status_sync import reconcile_order_after_case_settled
from violations.models import RentalViolation
from violations.services.penalty_rules import as_decimal, validate_penalty_amount
from violations.services.violation_lifecycle import validate_transition
from violations.services.violation_service import base_queryset, lock_violation

logger = logging.getLogger("disputes")

RESOLUTION_TYPES = {code for code, _label in IssueResolution.TYPE_CHOICES}


# ============================================================
# READS
# ============================================================


def get_pending_disputes():
    """Escalated violations, newest escalation first."""
    return (
        base_queryset()
        .filter(status=RentalViolation.STATUS_ESCALATED)
        .order_by("-escalated_at", "-created_at")
    )


def get_dispute_detail(*, violation_id) -> RentalViolation:
    try:
        return (
            base_queryset()
            .select_related("resolution", "resolution__processed_by_admin")
            .get(id=violation_id)
        )
    except RentalViolation.DoesNotExist as exc:
        raise NotFoundError(f"Violation {violation_id} not found") from exc


# ============================================================
# RULING AMOUNTS
# ============================================================


def _ruling_amounts(
    *,
    violation: RentalViolation,
    resolution_type: str,
    customer_fine_amount,
    provider_compensation_amount,
) -> tuple[Decimal, Decimal]:
    if resolution_type == IssueResolution.TYPE_UPHOLD_CLAIM:
        penalty = money(violation.penalty_amount)
        return penalty, penalty

    if resolution_type == IssueResolution.TYPE_REJECT_CLAIM:
        return ZERO, ZERO

    fine = as_decimal(customer_fine_amount, field="customer_fine_amount")
    compensation = as_decimal(provider_compensation_amount, field="provider_compensation_amount")
    if fine is None or compensation is None:
        raise ValidationError(
            "A compromise needs both customer_fine_amount and provider_compensation_amount"
        )

    compensation = money(compensation)
    if compensation < ZERO:
        raise ValidationError("provider_compensation_amount cannot be negative")
    if compensation > MAX_AMOUNT:
        raise ValidationError(f"provider_compensation_amount cannot exceed {MAX_AMOUNT}")

    # The fine is taken from the deposit held for the line.
    fine = validate_penalty_amount(fine, deposit_base=violation.deposit_amount)
    return fine, compensation


# ============================================================
# CREATE RESOLUTION
# ============================================================


@transaction.atomic
def create_resolution(
    *,
    violation_id,
    admin,
    resolution_type: str,
    reason: str,
    customer_fine_amount=None,
    provider_compensation_amount=None,
) -> IssueResolution:
    """
    GUARANTEES:
    - Violation must be escalated
    - At most one resolution per violation
    - Violation -> resolved, order reconciled atomically
    """

    # --------------------------------------------------
    # 1. LOCK + DUPLICATE PROTECTION
    # --------------------------------------------------
    violation = lock_violation(violation_id)

    if IssueResolution.objects.filter(violation=violation).exists():
        raise AlreadyResolvedError(f"Violation {violation.id} has already been resolved")

    # --------------------------------------------------
    # 2. LIFECYCLE + INPUT
    # --------------------------------------------------
    validate_transition(violation=violation, target_status=RentalViolation.STATUS_RESOLVED)

    if resolution_type not in RESOLUTION_TYPES:
        raise ValidationError(f"Unknown resolution type '{resolution_type}'")

    reason = (reason or "").strip()
    min_length = settings.DISPUTE_RESOLUTION_REASON_MIN_LENGTH
    if len(reason) < min_length:
        raise ValidationError(f"The resolution reason must be at least {min_length} characters")

    fine, compensation = _ruling_amounts(
        violation=violation,
        resolution_type=resolution_type,
        customer_fine_amount=customer_fine_amount,
        provider_compensation_amount=provider_compensation_amount,
    )

    # --------------------------------------------------
    # 3. IMMUTABLE RULING
    # --------------------------------------------------
    try:
        with transaction.atomic():
            resolution = IssueResolution.objects.create(
                violation=violation,
                resolution_type=resolution_type,
                customer_fine_amount=fine,
                provider_compensation_amount=compensation,
                reason=reason,
                resolution_status=IssueResolution.STATUS_COMPLETED,
                processed_by_admin=admin,
            )
    except IntegrityError as exc:
        raise AlreadyResolvedError(
            f"Violation {violation.id} has already been resolved"
        ) from exc

    # --------------------------------------------------
    # 4. CASE STATE
    # --------------------------------------------------
    violation.status = RentalViolation.STATUS_RESOLVED
    violation.save(update_fields=["status", "updated_at"])

    logger.info(
        "Dispute resolved",
        extra={
            "violation_id": str(violation.id),
            "resolution_id": str(resolution.id),
            "actor_id": str(admin.id),
            "resolution_type": resolution_type,
            "customer_fine_amount": str(fine),
            "provider_compensation_amount": str(compensation),
        },
    )

    # --------------------------------------------------
    # 5. ORDER RECONCILIATION
    # --------------------------------------------------
    reconcile_order_after_case_settled(order_id=violation.order_item.order_id)

    return resolution
