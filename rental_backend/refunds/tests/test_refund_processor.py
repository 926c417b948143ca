# refunds/tests/test_refund_processor.py

from __future__ import annotations

from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from common.exceptions import ForbiddenError, InvalidStateError, ValidationError
from orders.services.status_sync import confirm_clean_return
from orders.tests.helpers import make_order, make_user
from refunds.models import DepositRefund
from refunds.services.refund_processor import process_refund, reopen_refund
from users.models import BankAccount


class RefundProcessorBase(TestCase):
    def setUp(self):
        self.admin = make_user("admin@example.com", "admin")
        self.staff = make_user("staff@example.com", "staff")
        self.provider = make_user("provider@example.com", "provider")
        self.customer = make_user("customer@example.com", "customer")

        order = make_order(customer=self.customer, provider=self.provider)
        self.refund = confirm_clean_return(order_id=order.id, provider=self.provider)

        self.account = BankAccount.objects.create(
            user=self.customer,
            bank_name="First Bank",
            account_number="0123456789",
            account_holder_name="Ada Customer",
            is_primary=True,
        )

    def reject(self, notes="Deposit already paid out by hand"):
        return process_refund(
            refund_id=self.refund.id,
            admin=self.admin,
            is_approved=False,
            notes=notes,
        )


class ProcessRefundTests(RefundProcessorBase):
    def test_approve_requires_bank_account(self):
        with self.assertRaises(ValidationError):
            process_refund(refund_id=self.refund.id, admin=self.admin, is_approved=True)

        self.refund.refresh_from_db()
        self.assertEqual(self.refund.status, DepositRefund.STATUS_PENDING)

    def test_approve_rejects_someone_elses_account(self):
        foreign = BankAccount.objects.create(
            user=self.provider,
            bank_name="Other Bank",
            account_number="999",
            account_holder_name="Pat Provider",
        )

        with self.assertRaises(ValidationError):
            process_refund(
                refund_id=self.refund.id,
                admin=self.admin,
                is_approved=True,
                bank_account_id=foreign.id,
            )

    def test_approve(self):
        refund = process_refund(
            refund_id=self.refund.id,
            admin=self.admin,
            is_approved=True,
            bank_account_id=self.account.id,
            external_transaction_id=" TX-42 ",
        )

        self.assertEqual(refund.status, DepositRefund.STATUS_APPROVED)
        self.assertEqual(refund.refund_bank_account, self.account)
        self.assertEqual(refund.external_transaction_id, "TX-42")
        self.assertEqual(refund.processed_by_admin, self.admin)
        self.assertIsNotNone(refund.processed_at)
        self.assertEqual(refund.processing_state, self.admin.id)
        self.assertEqual(refund.refund_amount, Decimal("500000.00"))

    def test_reject_requires_notes(self):
        with self.assertRaises(ValidationError):
            self.reject(notes="   ")

    def test_processed_only_once(self):
        self.reject()

        with self.assertRaises(InvalidStateError):
            process_refund(
                refund_id=self.refund.id,
                admin=self.admin,
                is_approved=True,
                bank_account_id=self.account.id,
            )

    def test_only_admin_processes(self):
        with self.assertRaises(ForbiddenError):
            process_refund(
                refund_id=self.refund.id,
                admin=self.staff,
                is_approved=False,
                notes="Not allowed",
            )


class ReopenRefundTests(RefundProcessorBase):
    def test_only_rejected_refunds(self):
        with self.assertRaises(InvalidStateError):
            reopen_refund(refund_id=self.refund.id, actor=self.admin)

    def test_reopen_clears_processing_and_keeps_notes(self):
        self.reject()

        refund = reopen_refund(refund_id=self.refund.id, actor=self.admin)

        self.assertEqual(refund.status, DepositRefund.STATUS_PENDING)
        self.assertIsNone(refund.processed_by_admin)
        self.assertIsNone(refund.processed_at)
        self.assertEqual(refund.processing_state, "unassigned")
        self.assertEqual(refund.notes, "Deposit already paid out by hand")

    def test_customer_reopens_own_refund(self):
        self.reject()

        refund = reopen_refund(refund_id=self.refund.id, actor=self.customer)

        self.assertEqual(refund.status, DepositRefund.STATUS_PENDING)

    def test_other_users_cannot_reopen(self):
        self.reject()
        stranger = make_user("stranger@example.com", "customer")

        with self.assertRaises(ForbiddenError):
            reopen_refund(refund_id=self.refund.id, actor=stranger)

    def test_reopened_refund_can_be_approved(self):
        self.reject()
        reopen_refund(refund_id=self.refund.id, actor=self.customer)

        refund = process_refund(
            refund_id=self.refund.id,
            admin=self.admin,
            is_approved=True,
            bank_account_id=self.account.id,
        )

        self.assertEqual(refund.status, DepositRefund.STATUS_APPROVED)


class RefundAPITests(RefundProcessorBase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()

    def test_back_office_list_filters_by_status(self):
        self.client.force_authenticate(self.staff)

        pending = self.client.get(reverse("refunds:all"), {"status": "pending"})
        approved = self.client.get(reverse("refunds:all"), {"status": "approved"})

        self.assertEqual(pending.status_code, status.HTTP_200_OK)
        self.assertEqual(pending.data["count"], 1)
        self.assertEqual(pending.data["results"][0]["refund_code"], self.refund.refund_code)
        self.assertEqual(approved.data["count"], 0)

    def test_customer_cannot_list_everything(self):
        self.client.force_authenticate(self.customer)

        response = self.client.get(reverse("refunds:all"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_pending_count(self):
        self.client.force_authenticate(self.staff)

        response = self.client.get(reverse("refunds:pending-count"))

        self.assertEqual(response.data, {"count": 1})

    def test_mine(self):
        self.client.force_authenticate(self.customer)
        mine = self.client.get(reverse("refunds:mine"))

        self.client.force_authenticate(self.provider)
        theirs = self.client.get(reverse("refunds:mine"))

        self.assertEqual(mine.data["count"], 1)
        self.assertEqual(theirs.data["count"], 0)

    def test_detail_suggests_primary_account(self):
        self.client.force_authenticate(self.customer)

        response = self.client.get(reverse("refunds:detail", kwargs={"refund_id": self.refund.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["suggested_bank_account"]["id"], str(self.account.id))
        self.assertEqual(response.data["violations"], [])

    def test_detail_store_failure_is_service_unavailable(self):
        self.client.force_authenticate(self.customer)

        with mock.patch("refunds.views.refund.get_refund_for_user", side_effect=DatabaseError):
            response = self.client.get(reverse("refunds:detail", kwargs={"refund_id": self.refund.id}))

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data["error"]["code"], "SERVICE_UNAVAILABLE")

    def test_detail_hidden_from_other_customers(self):
        stranger = make_user("stranger@example.com", "customer")
        self.client.force_authenticate(stranger)

        response = self.client.get(reverse("refunds:detail", kwargs={"refund_id": self.refund.id}))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_process_without_bank_account(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            reverse("refunds:process"),
            {"refund_id": str(self.refund.id), "is_approved": True},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "VALIDATION_ERROR")

    def test_process_and_reopen(self):
        self.client.force_authenticate(self.admin)
        rejected = self.client.post(
            reverse("refunds:process"),
            {"refund_id": str(self.refund.id), "is_approved": False, "notes": "Wrong account"},
            format="json",
        )
        self.assertEqual(rejected.status_code, status.HTTP_200_OK)
        self.assertEqual(rejected.data["status"], DepositRefund.STATUS_REJECTED)
        self.assertEqual(rejected.data["processing_state"], str(self.admin.id))

        self.client.force_authenticate(self.customer)
        reopened = self.client.post(reverse("refunds:reopen", kwargs={"refund_id": self.refund.id}))

        self.assertEqual(reopened.status_code, status.HTTP_200_OK)
        self.assertEqual(reopened.data["status"], DepositRefund.STATUS_PENDING)

    def test_staff_cannot_process(self):
        self.client.force_authenticate(self.staff)

        response = self.client.post(
            reverse("refunds:process"),
            {"refund_id": str(self.refund.id), "is_approved": False, "notes": "No"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
