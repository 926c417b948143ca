# violations/services/violation_service.py

"""
VIOLATION SERVICE (PROVIDER SIDE + READ ACCESS)

Purpose:
- Providers raise claims against the lines of a returned order, revise them
  after a customer rejection, correct them, answer the customer and add
  evidence.
- Read helpers enforce who may see a case.

Concurrency:
- create_violations() locks the Order row first. The same lock is taken by
  the order status synchronizer, so a claim can never slip in while an order
  is being closed.
- Every per-case mutation re-reads the case with select_for_update.
- The partial unique constraint (one open case per order item) is the last
  line against duplicate claims racing each other.
"""

from __future__ import annotations

import logging
import uuid

from django.db import IntegrityError, transaction
from django.utils import timezone

from common.exceptions import (
    DuplicateClaimError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from orders.models import Order
from orders.services.order_lifecycle import is_disputable, validate_transition as validate_order_transition
from permissions.roles import is_back_office
from violations.models import OPEN_STATUSES, RentalViolation, ViolationEvidence
from violations.services.evidence_service import attach_evidence, normalize_evidence
from violations.services.penalty_rules import resolve_penalty, validate_percentage
from violations.services.violation_lifecycle import is_terminal, validate_transition

logger = logging.getLogger("violations")

VIOLATION_TYPES = {code for code, _label in RentalViolation.TYPE_CHOICES}

# Fields the customer has agreed to or disputed; frozen once they answer.
NEGOTIATED_FIELDS = (
    "violation_type",
    "damage_percentage",
    "penalty_percentage",
    "penalty_amount",
)

READ_RELATED = (
    "provider",
    "order_item",
    "order_item__order",
    "order_item__order__customer",
    "order_item__order__provider",
)


# ============================================================
# LOOKUPS
# ============================================================


def base_queryset():
    return (
        RentalViolation.objects
        .select_related(*READ_RELATED)
        .prefetch_related("evidence")
    )


def lock_violation(violation_id) -> RentalViolation:
    try:
        return (
            RentalViolation.objects
            .select_for_update(of=("self",))
            .select_related("order_item", "order_item__order")
            .get(id=violation_id)
        )
    except RentalViolation.DoesNotExist as exc:
        raise NotFoundError(f"Violation {violation_id} not found") from exc


def _ensure_owner(violation: RentalViolation, provider):
    if violation.provider_id != provider.id:
        raise ForbiddenError("Only the provider who raised this violation can change it")


def can_view_violation(user, violation: RentalViolation) -> bool:
    if is_back_office(user):
        return True
    order = violation.order_item.order
    return user.id in {violation.provider_id, order.customer_id, order.provider_id}


# ============================================================
# CREATE
# ============================================================


def _validate_claim(claim: dict, items_by_id: dict) -> dict:
    try:
        item_id = uuid.UUID(str(claim.get("order_item_id")))
    except ValueError as exc:
        raise ValidationError("order_item_id must be a valid id") from exc

    item = items_by_id.get(item_id)
    if item is None:
        raise ValidationError(
            f"Order item {claim.get('order_item_id')} does not belong to this order"
        )

    violation_type = claim.get("violation_type")
    if violation_type not in VIOLATION_TYPES:
        raise ValidationError(f"Unknown violation type '{violation_type}'")

    description = (claim.get("description") or "").strip()
    if not description:
        raise ValidationError("A violation needs a description")

    penalty_percentage, penalty_amount = resolve_penalty(
        deposit_base=item.deposit_amount,
        penalty_percentage=claim.get("penalty_percentage"),
        penalty_amount=claim.get("penalty_amount"),
    )

    evidence = normalize_evidence(claim.get("evidence"))
    if not evidence:
        raise ValidationError("Each violation needs at least one evidence file")

    return {
        "order_item": item,
        "violation_type": violation_type,
        "description": description,
        "damage_percentage": validate_percentage(
            claim.get("damage_percentage"), field="damage_percentage"
        ),
        "penalty_percentage": penalty_percentage,
        "penalty_amount": penalty_amount,
        "evidence": evidence,
    }


@transaction.atomic
def create_violations(*, order_id, provider, claims: list[dict]) -> list[RentalViolation]:
    """
    Raise one violation per claim against the lines of a returned order.

    Claim keys: order_item_id, violation_type, description, evidence
    (list of {file_url, file_type}), and optionally damage_percentage,
    penalty_percentage, penalty_amount.

    GUARANTEES:
    - All claims are created or none are
    - No order item ends up with two open violations
    - Order moves returning -> returned_with_issue
    """

    if not claims:
        raise ValidationError("At least one violation is required")

    # --------------------------------------------------
    # 1. LOCK ORDER + OWNERSHIP + STATE
    # --------------------------------------------------
    try:
        order = Order.objects.select_for_update().get(id=order_id)
    except Order.DoesNotExist as exc:
        raise NotFoundError(f"Order {order_id} not found") from exc

    if order.provider_id != provider.id:
        raise ForbiddenError("Only the order's provider can report violations")

    if not is_disputable(order):
        raise InvalidStateError(
            f"Order {order.order_code} is '{order.status}'; violations can only be "
            "reported while the order is returning or returned with issue"
        )

    # --------------------------------------------------
    # 2. VALIDATE EVERY CLAIM BEFORE WRITING
    # --------------------------------------------------
    items_by_id = {item.id: item for item in order.items.all()}
    validated = [_validate_claim(claim, items_by_id) for claim in claims]

    item_ids = [row["order_item"].id for row in validated]
    if len(set(item_ids)) != len(item_ids):
        raise DuplicateClaimError("The same order item appears in more than one claim")

    already_open = set(
        RentalViolation.objects
        .filter(order_item_id__in=item_ids, status__in=OPEN_STATUSES)
        .values_list("order_item_id", flat=True)
    )
    if already_open:
        names = ", ".join(sorted(items_by_id[i].product_name for i in already_open))
        raise DuplicateClaimError(f"An open violation already exists for: {names}")

    # --------------------------------------------------
    # 3. CREATE CASES + EVIDENCE
    # --------------------------------------------------
    created = []
    for row in validated:
        evidence = row.pop("evidence")
        try:
            with transaction.atomic():
                violation = RentalViolation.objects.create(provider=provider, **row)
        except IntegrityError as exc:
            raise DuplicateClaimError(
                f"An open violation already exists for {row['order_item'].product_name}"
            ) from exc

        attach_evidence(
            violation=violation,
            entries=evidence,
            uploaded_by=ViolationEvidence.UPLOADER_PROVIDER,
            user=provider,
        )
        created.append(violation)

    # --------------------------------------------------
    # 4. ORDER STATUS
    # --------------------------------------------------
    if order.status == Order.STATUS_RETURNING:
        validate_order_transition(order=order, target_status=Order.STATUS_RETURNED_WITH_ISSUE)
        order.status = Order.STATUS_RETURNED_WITH_ISSUE
        order.save(update_fields=["status", "updated_at"])

    logger.info(
        "Violations reported",
        extra={
            "order_id": str(order.id),
            "actor_id": str(provider.id),
            "violation_ids": [str(v.id) for v in created],
        },
    )
    return created


# ============================================================
# PROVIDER UPDATES
# ============================================================


def _apply_patch(violation: RentalViolation, patch: dict) -> list[str]:
    """
    Apply description / type / percentage / amount changes in place.
    Returns the changed field names.
    """
    changed = []

    if patch.get("description") is not None:
        description = patch["description"].strip()
        if not description:
            raise ValidationError("A violation needs a description")
        violation.description = description
        changed.append("description")

    if patch.get("violation_type") is not None:
        if patch["violation_type"] not in VIOLATION_TYPES:
            raise ValidationError(f"Unknown violation type '{patch['violation_type']}'")
        violation.violation_type = patch["violation_type"]
        changed.append("violation_type")

    if patch.get("damage_percentage") is not None:
        violation.damage_percentage = validate_percentage(
            patch["damage_percentage"], field="damage_percentage"
        )
        changed.append("damage_percentage")

    pct = patch.get("penalty_percentage")
    amount = patch.get("penalty_amount")
    if pct is not None or amount is not None:
        # A percentage on its own re-derives the amount.
        violation.penalty_percentage, violation.penalty_amount = resolve_penalty(
            deposit_base=violation.deposit_amount,
            penalty_percentage=pct,
            penalty_amount=amount,
        )
        changed += ["penalty_percentage", "penalty_amount"]

    return changed


@transaction.atomic
def revise_violation(*, violation_id, provider, **patch) -> RentalViolation:
    """
    Provider answers a rejection with a revised claim. The case goes back to
    pending and the customer's previous response is cleared.
    """
    violation = lock_violation(violation_id)
    _ensure_owner(violation, provider)
    validate_transition(violation=violation, target_status=RentalViolation.STATUS_PENDING)

    changed = _apply_patch(violation, patch)

    violation.status = RentalViolation.STATUS_PENDING
    violation.customer_notes = ""
    violation.customer_response_at = None
    violation.save(
        update_fields=[
            *changed,
            "status",
            "customer_notes",
            "customer_response_at",
            "updated_at",
        ]
    )

    logger.info(
        "Violation revised",
        extra={
            "violation_id": str(violation.id),
            "actor_id": str(provider.id),
            "from_status": RentalViolation.STATUS_CUSTOMER_REJECTED,
            "to_status": violation.status,
            "changed": changed,
        },
    )
    return violation


@transaction.atomic
def edit_violation(*, violation_id, provider, **patch) -> RentalViolation:
    """
    Correct a claim without touching its status. Settled cases are frozen.

    Penalty, type and damage figures can only change while the case is
    pending. Once the customer has answered, a new figure goes through
    revise_violation() so the customer sees it again.
    """
    violation = lock_violation(violation_id)
    _ensure_owner(violation, provider)

    if is_terminal(violation.status):
        raise InvalidStateError(
            f"Violation {violation.id} is '{violation.status}' and can no longer be edited"
        )

    locked = sorted(field for field in NEGOTIATED_FIELDS if patch.get(field) is not None)
    if locked and violation.status != RentalViolation.STATUS_PENDING:
        raise InvalidStateError(
            f"Violation {violation.id} is '{violation.status}'; "
            f"{', '.join(locked)} can only be edited before the customer responds"
        )

    changed = _apply_patch(violation, patch)
    if changed:
        violation.save(update_fields=[*changed, "updated_at"])

    logger.info(
        "Violation edited",
        extra={
            "violation_id": str(violation.id),
            "actor_id": str(provider.id),
            "changed": changed,
        },
    )
    return violation


@transaction.atomic
def provider_respond_to_customer(*, violation_id, provider, response: str) -> RentalViolation:
    violation = lock_violation(violation_id)
    _ensure_owner(violation, provider)

    if violation.status != RentalViolation.STATUS_CUSTOMER_REJECTED:
        raise InvalidStateError(
            "The provider can only respond after the customer has rejected the violation"
        )

    response = (response or "").strip()
    if not response:
        raise ValidationError("A response message is required")

    violation.provider_response_to_customer = response
    violation.provider_response_at = timezone.now()
    violation.save(
        update_fields=["provider_response_to_customer", "provider_response_at", "updated_at"]
    )

    logger.info(
        "Provider responded to customer",
        extra={"violation_id": str(violation.id), "actor_id": str(provider.id)},
    )
    return violation


@transaction.atomic
def add_evidence(*, violation_id, user, entries) -> list[ViolationEvidence]:
    violation = lock_violation(violation_id)
    order = violation.order_item.order

    if user.id == violation.provider_id:
        side = ViolationEvidence.UPLOADER_PROVIDER
    elif user.id == order.customer_id:
        side = ViolationEvidence.UPLOADER_CUSTOMER
    else:
        raise ForbiddenError("Only the parties of a violation can add evidence")

    if violation.status == RentalViolation.STATUS_RESOLVED:
        raise InvalidStateError("Evidence cannot be added to a resolved violation")

    normalized = normalize_evidence(entries)
    if not normalized:
        raise ValidationError("At least one evidence file is required")

    return attach_evidence(
        violation=violation,
        entries=normalized,
        uploaded_by=side,
        user=user,
    )


# ============================================================
# READS
# ============================================================


def get_violation_for_user(*, violation_id, user) -> RentalViolation:
    try:
        violation = base_queryset().get(id=violation_id)
    except RentalViolation.DoesNotExist as exc:
        raise NotFoundError(f"Violation {violation_id} not found") from exc

    if not can_view_violation(user, violation):
        raise ForbiddenError("You do not have access to this violation")
    return violation


def list_violations_for_order(*, order_id, user):
    try:
        order = Order.objects.get(id=order_id)
    except Order.DoesNotExist as exc:
        raise NotFoundError(f"Order {order_id} not found") from exc

    if not is_back_office(user) and user.id not in {order.customer_id, order.provider_id}:
        raise ForbiddenError("You do not have access to this order")

    return base_queryset().filter(order_item__order=order)


def list_violations_for_customer(user):
    return base_queryset().filter(order_item__order__customer=user)


def list_violations_for_provider(user):
    return base_queryset().filter(provider=user)
