# orders/tests/test_status_sync.py

from __future__ import annotations

from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from common.exceptions import ForbiddenError, InvalidStateError, NotFoundError
from orders.models import Order
from orders.services.status_sync import (
    confirm_clean_return,
    reconcile_order_after_case_settled,
    resolve_order_with_violations,
    sync_resolved_order_statuses,
)
from orders.tests.helpers import make_order, make_user
from refunds.models import DepositRefund
from violations.models import RentalViolation


def settle_case(item, provider, *, penalty, status=RentalViolation.STATUS_CUSTOMER_ACCEPTED):
    """A case row written straight to the table, as if it settled earlier."""
    return RentalViolation.objects.create(
        order_item=item,
        provider=provider,
        violation_type=RentalViolation.TYPE_DAMAGED,
        description="Scratched housing",
        penalty_percentage=Decimal("0.00"),
        penalty_amount=Decimal(penalty),
        status=status,
    )


class StatusSyncBase(TestCase):
    def setUp(self):
        self.provider = make_user("provider@example.com", "provider")
        self.customer = make_user("customer@example.com", "customer")

    def issue_order(self, deposits=(Decimal("500000.00"),)):
        return make_order(
            customer=self.customer,
            provider=self.provider,
            status=Order.STATUS_RETURNED_WITH_ISSUE,
            deposits=deposits,
        )


class SyncResolvedOrdersTests(StatusSyncBase):
    def test_sync_moves_settled_orders_and_is_idempotent(self):
        settled = self.issue_order()
        settle_case(settled.items.get(), self.provider, penalty="100000.00")

        still_open = self.issue_order()
        settle_case(
            still_open.items.get(),
            self.provider,
            penalty="50000.00",
            status=RentalViolation.STATUS_ESCALATED,
        )

        self.assertEqual(sync_resolved_order_statuses(), 1)
        self.assertEqual(sync_resolved_order_statuses(), 0)

        settled.refresh_from_db()
        still_open.refresh_from_db()
        self.assertEqual(settled.status, Order.STATUS_RETURNED)
        self.assertEqual(still_open.status, Order.STATUS_RETURNED_WITH_ISSUE)

        refund = DepositRefund.objects.get(order=settled)
        self.assertEqual(refund.total_penalty_amount, Decimal("100000.00"))
        self.assertEqual(refund.refund_amount, Decimal("400000.00"))
        self.assertFalse(DepositRefund.objects.filter(order=still_open).exists())

    def test_order_without_violations_is_left_alone(self):
        order = self.issue_order()

        self.assertEqual(sync_resolved_order_statuses(), 0)

        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_RETURNED_WITH_ISSUE)

    def test_dry_run_counts_without_writing(self):
        order = self.issue_order()
        settle_case(order.items.get(), self.provider, penalty="100000.00")

        self.assertEqual(sync_resolved_order_statuses(dry_run=True), 1)

        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_RETURNED_WITH_ISSUE)
        self.assertEqual(DepositRefund.objects.count(), 0)

    def test_management_command(self):
        order = self.issue_order()
        settle_case(order.items.get(), self.provider, penalty="100000.00")
        out = StringIO()

        call_command("sync_resolved_orders", stdout=out)

        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_RETURNED)
        self.assertIn("1 order(s) updated.", out.getvalue())

    def test_management_command_dry_run(self):
        order = self.issue_order()
        settle_case(order.items.get(), self.provider, penalty="100000.00")
        out = StringIO()

        call_command("sync_resolved_orders", "--dry-run", stdout=out)

        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_RETURNED_WITH_ISSUE)
        self.assertIn("1 order(s) would be updated.", out.getvalue())


class ReconcileTests(StatusSyncBase):
    def test_waits_for_the_last_open_case(self):
        order = self.issue_order(deposits=(Decimal("250000.00"), Decimal("250000.00")))
        first, second = order.items.order_by("product_name")
        settle_case(first, self.provider, penalty="80000.00")
        open_case = settle_case(
            second,
            self.provider,
            penalty="100000.00",
            status=RentalViolation.STATUS_CUSTOMER_REJECTED,
        )

        self.assertFalse(reconcile_order_after_case_settled(order_id=order.id))

        open_case.status = RentalViolation.STATUS_CUSTOMER_ACCEPTED
        open_case.save(update_fields=["status"])

        self.assertTrue(reconcile_order_after_case_settled(order_id=order.id))
        refund = DepositRefund.objects.get(order=order)
        self.assertEqual(refund.total_penalty_amount, Decimal("180000.00"))
        self.assertEqual(refund.refund_amount, Decimal("320000.00"))


class ResolveOrderTests(StatusSyncBase):
    def test_refuses_order_in_wrong_status(self):
        order = make_order(customer=self.customer, provider=self.provider)

        outcome = resolve_order_with_violations(order.id)

        self.assertFalse(outcome.resolved)
        self.assertIn("expected 'returned_with_issue'", outcome.reason)
        self.assertIsNone(outcome.refund)

    def test_refuses_order_with_open_cases(self):
        order = self.issue_order()
        settle_case(
            order.items.get(),
            self.provider,
            penalty="1.00",
            status=RentalViolation.STATUS_PENDING,
        )

        outcome = resolve_order_with_violations(order.id)

        self.assertFalse(outcome.resolved)
        self.assertIn("1 of 1 violation(s) open", outcome.reason)

    def test_refuses_order_without_cases(self):
        order = self.issue_order()

        outcome = resolve_order_with_violations(order.id)

        self.assertFalse(outcome.resolved)
        self.assertIn("has no violations", outcome.reason)

    def test_resolves_settled_order(self):
        order = self.issue_order()
        settle_case(
            order.items.get(),
            self.provider,
            penalty="500000.00",
            status=RentalViolation.STATUS_RESOLVED,
        )

        outcome = resolve_order_with_violations(order.id)

        self.assertTrue(outcome.resolved)
        self.assertEqual(outcome.refund.refund_amount, Decimal("0.00"))
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_RETURNED)

    def test_unknown_order(self):
        with self.assertRaises(NotFoundError):
            resolve_order_with_violations("00000000-0000-0000-0000-000000000000")


class CleanReturnTests(StatusSyncBase):
    def setUp(self):
        super().setUp()
        self.order = make_order(
            customer=self.customer,
            provider=self.provider,
            deposits=(Decimal("300000.00"), Decimal("200000.00")),
        )

    def test_full_deposit_is_refunded(self):
        refund = confirm_clean_return(order_id=self.order.id, provider=self.provider)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_RETURNED)
        self.assertEqual(refund.original_deposit_amount, Decimal("500000.00"))
        self.assertEqual(refund.total_penalty_amount, Decimal("0.00"))
        self.assertEqual(refund.refund_amount, Decimal("500000.00"))
        self.assertEqual(refund.status, DepositRefund.STATUS_PENDING)

    def test_only_the_orders_provider(self):
        other = make_user("other-provider@example.com", "provider")

        with self.assertRaises(ForbiddenError):
            confirm_clean_return(order_id=self.order.id, provider=other)

    def test_only_returning_orders(self):
        self.order.status = Order.STATUS_IN_USE
        self.order.save(update_fields=["status"])

        with self.assertRaises(InvalidStateError):
            confirm_clean_return(order_id=self.order.id, provider=self.provider)

    def test_api(self):
        client = APIClient()
        client.force_authenticate(self.provider)
        url = reverse("orders:confirm-clean-return", kwargs={"order_id": self.order.id})

        first = client.post(url)
        second = client.post(url)

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(first.data["refund_amount"], "500000.00")
        self.assertEqual(first.data["processing_state"], "unassigned")
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)
