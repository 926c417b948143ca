# refunds/models/deposit_refund.py

"""
DEPOSIT REFUND (ONE PER ORDER)

Created once every violation on an order is settled (or the order came back
clean). Money fields are snapshots taken at creation time and never
recalculated; the admin workflow only moves `status` and the processing
fields.

    refund_amount = max(0, original_deposit_amount - total_penalty_amount)
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q

from orders.models import Order
from users.models import BankAccount

User = settings.AUTH_USER_MODEL


class DepositRefund(models.Model):
    STATUS_PENDING = "pending"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
    ]

    PROCESSING_UNASSIGNED = "unassigned"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.OneToOneField(
        Order,
        on_delete=models.PROTECT,
        related_name="deposit_refund",
    )

    customer = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name="deposit_refunds",
        help_text="Renter the deposit is returned to.",
    )

    # ----------------------------
    # Money snapshots
    # ----------------------------
    original_deposit_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    total_penalty_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    refund_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
    )

    # ----------------------------
    # Processing
    # ----------------------------
    refund_bank_account = models.ForeignKey(
        BankAccount,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="deposit_refunds",
    )
    external_transaction_id = models.CharField(max_length=128, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    processed_by_admin = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="processed_deposit_refunds",
    )
    processed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="deposit_refund_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(refund_amount__gte=0),
                name="deposit_refund_amount_non_negative",
            ),
        ]

    @property
    def refund_code(self) -> str:
        return f"RF-{str(self.id)[:8].upper()}"

    @property
    def processing_state(self):
        """
        "unassigned" until an admin processes the refund, otherwise the
        admin's id.
        """
        if self.processed_by_admin_id is None:
            return self.PROCESSING_UNASSIGNED
        return self.processed_by_admin_id

    def __str__(self):
        return f"{self.refund_code} | {self.status} | {self.refund_amount}"
