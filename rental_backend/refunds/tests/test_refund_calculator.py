# refunds/tests/test_refund_calculator.py

from __future__ import annotations

from decimal import Decimal

from django.test import SimpleTestCase, TestCase

from common.exceptions import DuplicateRefundError, InvalidStateError
from orders.models import Order
from orders.tests.helpers import make_order, make_user
from refunds.models import DepositRefund
from refunds.services.refund_calculator import (
    calculate_deposit_refund,
    compute_refund_amount,
    total_settled_penalty,
)
from violations.models import RentalViolation


class ComputeRefundAmountTests(SimpleTestCase):
    def test_subtracts_penalty(self):
        self.assertEqual(
            compute_refund_amount(original_deposit="500000", total_penalty="180000"),
            Decimal("320000.00"),
        )

    def test_never_negative(self):
        self.assertEqual(
            compute_refund_amount(original_deposit="100000", total_penalty="150000"),
            Decimal("0.00"),
        )

    def test_rounds_half_up(self):
        self.assertEqual(
            compute_refund_amount(original_deposit="100.005", total_penalty="0"),
            Decimal("100.01"),
        )


class CalculateDepositRefundTests(TestCase):
    def setUp(self):
        self.provider = make_user("provider@example.com", "provider")
        self.customer = make_user("customer@example.com", "customer")
        self.order = make_order(
            customer=self.customer,
            provider=self.provider,
            status=Order.STATUS_RETURNED,
            deposits=(Decimal("250000.00"), Decimal("250000.00")),
        )

    def _case(self, item, penalty, status):
        return RentalViolation.objects.create(
            order_item=item,
            provider=self.provider,
            violation_type=RentalViolation.TYPE_LATE_RETURN,
            description="Returned two days late",
            penalty_percentage=Decimal("0.00"),
            penalty_amount=Decimal(penalty),
            status=status,
        )

    def test_snapshots_money_for_settled_cases(self):
        first, second = self.order.items.all()
        self._case(first, "80000.00", RentalViolation.STATUS_CUSTOMER_ACCEPTED)
        self._case(second, "100000.00", RentalViolation.STATUS_RESOLVED)

        refund = calculate_deposit_refund(order=self.order)

        self.assertEqual(refund.customer, self.customer)
        self.assertEqual(refund.status, DepositRefund.STATUS_PENDING)
        self.assertEqual(refund.original_deposit_amount, Decimal("500000.00"))
        self.assertEqual(refund.total_penalty_amount, Decimal("180000.00"))
        self.assertEqual(refund.refund_amount, Decimal("320000.00"))
        self.assertTrue(refund.refund_code.startswith("RF-"))

    def test_penalties_above_deposit_floor_at_zero(self):
        first, second = self.order.items.all()
        self._case(first, "250000.00", RentalViolation.STATUS_CUSTOMER_ACCEPTED)
        self._case(second, "250000.00", RentalViolation.STATUS_CUSTOMER_ACCEPTED)

        refund = calculate_deposit_refund(order=self.order)

        self.assertEqual(refund.refund_amount, Decimal("0.00"))

    def test_one_refund_per_order(self):
        calculate_deposit_refund(order=self.order)

        with self.assertRaises(DuplicateRefundError):
            calculate_deposit_refund(order=self.order)
        self.assertEqual(DepositRefund.objects.filter(order=self.order).count(), 1)

    def test_open_cases_block_the_refund(self):
        first, _ = self.order.items.all()
        self._case(first, "1000.00", RentalViolation.STATUS_ESCALATED)

        with self.assertRaises(InvalidStateError):
            total_settled_penalty(order=self.order)
        with self.assertRaises(InvalidStateError):
            calculate_deposit_refund(order=self.order)
        self.assertFalse(DepositRefund.objects.exists())
