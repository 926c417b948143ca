# violations/tests/test_violation_service.py

from __future__ import annotations

from decimal import Decimal

from django.test import TestCase, override_settings

from common.exceptions import (
    DuplicateClaimError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    PenaltyExceedsDepositError,
    ValidationError,
)
from orders.models import Order
from orders.tests.helpers import VIDEO_EVIDENCE, claim_for, make_order, make_user
from violations.models import RentalViolation, ViolationEvidence
from violations.services.negotiation_service import customer_respond, escalate
from violations.services.violation_service import (
    add_evidence,
    create_violations,
    edit_violation,
    get_violation_for_user,
    list_violations_for_customer,
    list_violations_for_order,
    list_violations_for_provider,
    provider_respond_to_customer,
    revise_violation,
)


class ViolationServiceTestBase(TestCase):
    def setUp(self):
        self.provider = make_user("provider@example.com", "provider")
        self.other_provider = make_user("other-provider@example.com", "provider")
        self.customer = make_user("customer@example.com", "customer")
        self.staff = make_user("staff@example.com", "staff")

        self.order = make_order(
            customer=self.customer,
            provider=self.provider,
            deposits=(Decimal("250000.00"), Decimal("250000.00")),
        )
        self.item_a, self.item_b = list(self.order.items.order_by("product_name"))

    def _create(self, item=None, **claim_kwargs):
        claim_kwargs.setdefault("penalty_amount", Decimal("80000"))
        [violation] = create_violations(
            order_id=self.order.id,
            provider=self.provider,
            claims=[claim_for(item or self.item_a, **claim_kwargs)],
        )
        return violation

    def _reject(self, violation, notes="The scratch was there before the rental"):
        return customer_respond(
            violation_id=violation.id,
            customer=self.customer,
            is_accepted=False,
            notes=notes,
        )


# ======================================================
# CREATE
# ======================================================


class CreateViolationsTests(ViolationServiceTestBase):
    """
    GUARANTEES:
    - One case per claim, evidence attached
    - Order flips returning -> returned_with_issue
    - Penalty ceiling enforced per line
    - No second open case on the same line
    """

    def test_creates_cases_and_flags_order(self):
        violations = create_violations(
            order_id=self.order.id,
            provider=self.provider,
            claims=[
                claim_for(self.item_a, penalty_amount=Decimal("80000")),
                claim_for(self.item_b, penalty_percentage=Decimal("40"), violation_type="late_return"),
            ],
        )

        self.assertEqual(len(violations), 2)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_RETURNED_WITH_ISSUE)

        late = RentalViolation.objects.get(order_item=self.item_b)
        self.assertEqual(late.penalty_amount, Decimal("100000.00"))
        self.assertEqual(late.status, RentalViolation.STATUS_PENDING)
        self.assertEqual(late.provider, self.provider)
        self.assertEqual(
            list(late.evidence.values_list("uploaded_by", flat=True)),
            [ViolationEvidence.UPLOADER_PROVIDER],
        )

    def test_second_batch_keeps_order_returned_with_issue(self):
        self._create(self.item_a)
        self._create(self.item_b)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_RETURNED_WITH_ISSUE)
        self.assertEqual(RentalViolation.objects.count(), 2)

    def test_duplicate_open_claim_is_rejected(self):
        self._create(self.item_a)

        with self.assertRaises(DuplicateClaimError):
            self._create(self.item_a)

        self.assertEqual(RentalViolation.objects.count(), 1)

    def test_same_item_twice_in_one_batch_is_rejected(self):
        with self.assertRaises(DuplicateClaimError):
            create_violations(
                order_id=self.order.id,
                provider=self.provider,
                claims=[
                    claim_for(self.item_a, penalty_amount=1000),
                    claim_for(self.item_a, penalty_amount=2000),
                ],
            )

        self.assertFalse(RentalViolation.objects.exists())

    def test_settled_case_does_not_block_a_new_claim(self):
        first = self._create(self.item_a)
        self._create(self.item_b)
        customer_respond(violation_id=first.id, customer=self.customer, is_accepted=True)

        again = self._create(self.item_a, penalty_amount=Decimal("1000"))

        self.assertEqual(again.status, RentalViolation.STATUS_PENDING)

    def test_penalty_above_line_deposit_is_rejected(self):
        with self.assertRaises(PenaltyExceedsDepositError):
            self._create(self.item_a, penalty_amount=Decimal("250000.01"))

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_RETURNING)

    def test_huge_penalty_is_a_validation_error(self):
        with self.assertRaises(ValidationError):
            self._create(self.item_a, penalty_amount="1e40")

        self.assertFalse(RentalViolation.objects.exists())

    def test_only_order_provider_can_report(self):
        with self.assertRaises(ForbiddenError):
            create_violations(
                order_id=self.order.id,
                provider=self.other_provider,
                claims=[claim_for(self.item_a, penalty_amount=1000)],
            )

    def test_returned_order_cannot_reopen_into_dispute(self):
        self.order.status = Order.STATUS_RETURNED
        self.order.save(update_fields=["status"])

        with self.assertRaises(InvalidStateError):
            self._create(self.item_a)

    def test_item_of_another_order_is_rejected(self):
        foreign = make_order(customer=self.customer, provider=self.provider)

        with self.assertRaises(ValidationError):
            create_violations(
                order_id=self.order.id,
                provider=self.provider,
                claims=[claim_for(foreign.items.get(), penalty_amount=1000)],
            )

    def test_evidence_is_mandatory(self):
        with self.assertRaises(ValidationError):
            self._create(self.item_a, evidence=[])

    def test_unknown_order(self):
        with self.assertRaises(NotFoundError):
            create_violations(
                order_id="00000000-0000-0000-0000-000000000000",
                provider=self.provider,
                claims=[claim_for(self.item_a)],
            )

    def test_empty_batch_is_rejected(self):
        with self.assertRaises(ValidationError):
            create_violations(order_id=self.order.id, provider=self.provider, claims=[])


# ======================================================
# REVISE / EDIT / RESPOND
# ======================================================


class ProviderUpdateTests(ViolationServiceTestBase):
    def test_revise_after_rejection_goes_back_to_pending(self):
        violation = self._create()
        self._reject(violation)

        revised = revise_violation(
            violation_id=violation.id,
            provider=self.provider,
            penalty_percentage=Decimal("20"),
            description="Only the lens hood is cracked",
        )

        self.assertEqual(revised.status, RentalViolation.STATUS_PENDING)
        self.assertEqual(revised.penalty_amount, Decimal("50000.00"))
        self.assertEqual(revised.description, "Only the lens hood is cracked")
        self.assertEqual(revised.customer_notes, "")
        self.assertIsNone(revised.customer_response_at)

    def test_revise_requires_rejection(self):
        violation = self._create()

        with self.assertRaises(InvalidStateError):
            revise_violation(violation_id=violation.id, provider=self.provider, penalty_amount=1000)

    def test_revise_keeps_deposit_ceiling(self):
        violation = self._create()
        self._reject(violation)

        with self.assertRaises(PenaltyExceedsDepositError):
            revise_violation(
                violation_id=violation.id,
                provider=self.provider,
                penalty_amount=Decimal("300000"),
            )

        violation.refresh_from_db()
        self.assertEqual(violation.status, RentalViolation.STATUS_CUSTOMER_REJECTED)

    def test_revise_by_non_owner_is_forbidden(self):
        violation = self._create()
        self._reject(violation)

        with self.assertRaises(ForbiddenError):
            revise_violation(violation_id=violation.id, provider=self.other_provider, penalty_amount=1)

    def test_edit_does_not_change_status(self):
        violation = self._create()

        edited = edit_violation(
            violation_id=violation.id,
            provider=self.provider,
            description="Lens cracked, typo fixed",
        )

        self.assertEqual(edited.status, RentalViolation.STATUS_PENDING)
        self.assertEqual(edited.description, "Lens cracked, typo fixed")
        self.assertEqual(edited.penalty_amount, Decimal("80000.00"))

    def test_edit_penalty_while_pending(self):
        violation = self._create()

        edited = edit_violation(
            violation_id=violation.id,
            provider=self.provider,
            penalty_amount=Decimal("60000"),
        )

        self.assertEqual(edited.penalty_amount, Decimal("60000.00"))
        self.assertEqual(edited.status, RentalViolation.STATUS_PENDING)

    def test_edit_penalty_on_escalated_case_is_blocked(self):
        violation = self._create()
        self._reject(violation)
        escalate(violation_id=violation.id, actor=self.customer, reason="The claim is too high")

        with self.assertRaises(InvalidStateError):
            edit_violation(
                violation_id=violation.id,
                provider=self.provider,
                penalty_amount=Decimal("250000"),
            )

        violation.refresh_from_db()
        self.assertEqual(violation.status, RentalViolation.STATUS_ESCALATED)
        self.assertEqual(violation.penalty_amount, Decimal("80000.00"))

    def test_edit_after_rejection_is_limited_to_the_description(self):
        violation = self._create()
        self._reject(violation)

        for patch in (
            {"penalty_percentage": Decimal("90")},
            {"violation_type": RentalViolation.TYPE_NOT_RETURNED},
            {"damage_percentage": Decimal("50")},
        ):
            with self.subTest(patch=patch), self.assertRaises(InvalidStateError):
                edit_violation(violation_id=violation.id, provider=self.provider, **patch)

        edited = edit_violation(
            violation_id=violation.id,
            provider=self.provider,
            description="Lens cracked near the mount",
        )

        self.assertEqual(edited.status, RentalViolation.STATUS_CUSTOMER_REJECTED)
        self.assertEqual(edited.description, "Lens cracked near the mount")
        self.assertEqual(edited.penalty_amount, Decimal("80000.00"))

    def test_edit_settled_case_is_blocked(self):
        violation = self._create()
        self._create(self.item_b)
        customer_respond(violation_id=violation.id, customer=self.customer, is_accepted=True)

        with self.assertRaises(InvalidStateError):
            edit_violation(violation_id=violation.id, provider=self.provider, description="Changed")

    def test_edit_by_non_owner_is_forbidden(self):
        violation = self._create()

        with self.assertRaises(ForbiddenError):
            edit_violation(violation_id=violation.id, provider=self.other_provider, description="x")

    def test_provider_response_after_rejection(self):
        violation = self._create()
        self._reject(violation)

        answered = provider_respond_to_customer(
            violation_id=violation.id,
            provider=self.provider,
            response="Check-out photos show an intact lens",
        )

        self.assertEqual(answered.status, RentalViolation.STATUS_CUSTOMER_REJECTED)
        self.assertEqual(answered.provider_response_to_customer, "Check-out photos show an intact lens")
        self.assertIsNotNone(answered.provider_response_at)

    def test_provider_response_needs_rejection(self):
        violation = self._create()

        with self.assertRaises(InvalidStateError):
            provider_respond_to_customer(violation_id=violation.id, provider=self.provider, response="Hi")


# ======================================================
# EVIDENCE
# ======================================================


class AddEvidenceTests(ViolationServiceTestBase):
    def test_both_parties_can_append(self):
        violation = self._create()

        add_evidence(violation_id=violation.id, user=self.customer, entries=[VIDEO_EVIDENCE])
        add_evidence(violation_id=violation.id, user=self.provider, entries=[VIDEO_EVIDENCE])

        sides = list(violation.evidence.values_list("uploaded_by", flat=True))
        self.assertEqual(sides.count(ViolationEvidence.UPLOADER_CUSTOMER), 1)
        self.assertEqual(sides.count(ViolationEvidence.UPLOADER_PROVIDER), 2)

    def test_outsider_cannot_append(self):
        violation = self._create()

        with self.assertRaises(ForbiddenError):
            add_evidence(violation_id=violation.id, user=self.other_provider, entries=[VIDEO_EVIDENCE])

    @override_settings(EVIDENCE_MAX_FILES_PER_CASE=2)
    def test_evidence_limit(self):
        violation = self._create()
        add_evidence(violation_id=violation.id, user=self.customer, entries=[VIDEO_EVIDENCE])

        with self.assertRaises(ValidationError):
            add_evidence(violation_id=violation.id, user=self.customer, entries=[VIDEO_EVIDENCE])

    def test_evidence_is_append_only(self):
        violation = self._create()
        evidence = violation.evidence.get()

        evidence.file_url = "https://cdn.example.com/other.png"
        with self.assertRaises(RuntimeError):
            evidence.save()
        with self.assertRaises(RuntimeError):
            evidence.delete()


# ======================================================
# READS
# ======================================================


class ViolationReadTests(ViolationServiceTestBase):
    def test_parties_and_back_office_can_read(self):
        violation = self._create()

        for user in (self.provider, self.customer, self.staff):
            with self.subTest(user=user.email):
                found = get_violation_for_user(violation_id=violation.id, user=user)
                self.assertEqual(found.id, violation.id)

    def test_outsider_cannot_read(self):
        violation = self._create()

        with self.assertRaises(ForbiddenError):
            get_violation_for_user(violation_id=violation.id, user=self.other_provider)

    def test_detail_money(self):
        violation = self._create()

        self.assertEqual(violation.deposit_amount, Decimal("250000.00"))
        self.assertEqual(violation.remaining_line_deposit, Decimal("170000.00"))

    def test_lists(self):
        self._create(self.item_a)
        self._create(self.item_b)

        self.assertEqual(list_violations_for_order(order_id=self.order.id, user=self.customer).count(), 2)
        self.assertEqual(list_violations_for_customer(self.customer).count(), 2)
        self.assertEqual(list_violations_for_provider(self.provider).count(), 2)
        self.assertEqual(list_violations_for_provider(self.other_provider).count(), 0)

        with self.assertRaises(ForbiddenError):
            list_violations_for_order(order_id=self.order.id, user=self.other_provider)
