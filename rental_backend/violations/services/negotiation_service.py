# violations/services/negotiation_service.py

"""
COMPLIANCE NEGOTIATION

Customer accept / reject and escalation by either party.

    pending ──customer accepts──> customer_accepted  (penalty becomes final)
    pending ──customer rejects──> customer_rejected  (notes mandatory)
    customer_rejected ──either party escalates──> escalated

Two concurrent responses on the same case serialize on the row lock; the
loser sees the case already out of `pending` and gets InvalidStateError.

An accepted case may be the last open one on its order, so acceptance
reconciles the order in the same transaction.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from common.exceptions import ForbiddenError, ValidationError
from orders.services.status_sync import reconcile_order_after_case_settled
from violations.models import RentalViolation, ViolationEvidence
from violations.services.evidence_service import attach_evidence, normalize_evidence
from violations.services.violation_lifecycle import validate_transition
from violations.services.violation_service import lock_violation

logger = logging.getLogger("violations")


@transaction.atomic
def customer_respond(
    *,
    violation_id,
    customer,
    is_accepted: bool,
    notes: str | None = None,
    evidence=None,
) -> RentalViolation:
    """
    Customer accepts or rejects a pending violation.

    GUARANTEES:
    - Only the renter of the order can respond
    - Only one response per pending round
    - Rejection always carries the customer's explanation
    """

    # --------------------------------------------------
    # 1. LOCK + OWNERSHIP
    # --------------------------------------------------
    violation = lock_violation(violation_id)
    order = violation.order_item.order

    if order.customer_id != customer.id:
        raise ForbiddenError("Only the customer of this order can respond to the violation")

    # --------------------------------------------------
    # 2. LIFECYCLE
    # --------------------------------------------------
    target = (
        RentalViolation.STATUS_CUSTOMER_ACCEPTED
        if is_accepted
        else RentalViolation.STATUS_CUSTOMER_REJECTED
    )
    validate_transition(violation=violation, target_status=target)

    notes = (notes or "").strip()
    if not is_accepted and not notes:
        raise ValidationError("Please explain why the violation is rejected")

    entries = normalize_evidence(evidence)

    # --------------------------------------------------
    # 3. WRITE
    # --------------------------------------------------
    previous = violation.status
    violation.status = target
    violation.customer_notes = notes
    violation.customer_response_at = timezone.now()
    violation.save(
        update_fields=["status", "customer_notes", "customer_response_at", "updated_at"]
    )

    if entries:
        attach_evidence(
            violation=violation,
            entries=entries,
            uploaded_by=ViolationEvidence.UPLOADER_CUSTOMER,
            user=customer,
        )

    logger.info(
        "Customer responded to violation",
        extra={
            "violation_id": str(violation.id),
            "order_id": str(order.id),
            "actor_id": str(customer.id),
            "from_status": previous,
            "to_status": violation.status,
        },
    )

    # --------------------------------------------------
    # 4. ORDER RECONCILIATION
    # --------------------------------------------------
    if is_accepted:
        reconcile_order_after_case_settled(order_id=order.id)

    return violation


@transaction.atomic
def escalate(*, violation_id, actor, reason: str) -> RentalViolation:
    """
    Hand a rejected violation to admin arbitration. The reason is stored on
    the side of whoever escalated.
    """
    violation = lock_violation(violation_id)
    order = violation.order_item.order

    if actor.id == violation.provider_id:
        reason_field = "provider_escalation_reason"
    elif actor.id == order.customer_id:
        reason_field = "customer_escalation_reason"
    else:
        raise ForbiddenError("Only the parties of a violation can escalate it")

    validate_transition(violation=violation, target_status=RentalViolation.STATUS_ESCALATED)

    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("An escalation reason is required")

    setattr(violation, reason_field, reason)
    violation.status = RentalViolation.STATUS_ESCALATED
    violation.escalated_at = timezone.now()
    violation.save(update_fields=[reason_field, "status", "escalated_at", "updated_at"])

    logger.info(
        "Violation escalated",
        extra={
            "violation_id": str(violation.id),
            "actor_id": str(actor.id),
            "side": reason_field.split("_", 1)[0],
        },
    )
    return violation
