# violations/models/violation.py

"""
RENTAL VIOLATION (ONE CLAIM AGAINST ONE RETURNED ORDER LINE)

A provider raises a violation when an item comes back damaged, late or not
at all. The case then moves through its own negotiation lifecycle
(see violations/services/violation_lifecycle.py), independent of sibling
cases on the same order.

Invariants backed by the database:
- 0 <= penalty_amount (check constraint); the upper bound (item deposit) is
  enforced by the services because it depends on the order line.
- At most one OPEN case per order item (partial unique constraint).
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q

from common.money import ZERO, money
from orders.models import OrderItem

User = settings.AUTH_USER_MODEL

# Non-terminal statuses; an order item may carry at most one case in these.
OPEN_STATUSES = ("pending", "customer_rejected", "escalated")


class RentalViolation(models.Model):
    # ----------------------------
    # Violation types
    # ----------------------------
    TYPE_DAMAGED = "damaged"
    TYPE_LATE_RETURN = "late_return"
    TYPE_NOT_RETURNED = "not_returned"

    TYPE_CHOICES = [
        (TYPE_DAMAGED, "Damaged"),
        (TYPE_LATE_RETURN, "Late return"),
        (TYPE_NOT_RETURNED, "Not returned"),
    ]

    # ----------------------------
    # Status
    # ----------------------------
    STATUS_PENDING = "pending"
    STATUS_CUSTOMER_ACCEPTED = "customer_accepted"
    STATUS_CUSTOMER_REJECTED = "customer_rejected"
    STATUS_ESCALATED = "escalated"
    STATUS_RESOLVED = "resolved"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Awaiting customer response"),
        (STATUS_CUSTOMER_ACCEPTED, "Accepted by customer"),
        (STATUS_CUSTOMER_REJECTED, "Rejected by customer"),
        (STATUS_ESCALATED, "Escalated to admin"),
        (STATUS_RESOLVED, "Resolved by admin"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_item = models.ForeignKey(
        OrderItem,
        on_delete=models.PROTECT,
        related_name="violations",
    )

    provider = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name="reported_violations",
        help_text="Provider who raised the claim (case owner).",
    )

    violation_type = models.CharField(max_length=32, choices=TYPE_CHOICES)
    description = models.TextField()

    damage_percentage = models.DecimalField(
        max_digits=5, decimal_places=2, null=True, blank=True
    )
    penalty_percentage = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("0.00")
    )
    penalty_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    status = models.CharField(
        max_length=32,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
    )

    # ----------------------------
    # Customer side
    # ----------------------------
    customer_notes = models.TextField(blank=True, default="")
    customer_response_at = models.DateTimeField(null=True, blank=True)
    customer_escalation_reason = models.TextField(blank=True, default="")

    # ----------------------------
    # Provider side
    # ----------------------------
    provider_response_to_customer = models.TextField(blank=True, default="")
    provider_response_at = models.DateTimeField(null=True, blank=True)
    provider_escalation_reason = models.TextField(blank=True, default="")

    escalated_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="violation_status_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["order_item"],
                condition=Q(status__in=OPEN_STATUSES),
                name="uniq_open_violation_per_order_item",
            ),
            models.CheckConstraint(
                condition=Q(penalty_amount__gte=0),
                name="violation_penalty_amount_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(penalty_percentage__gte=0) & Q(penalty_percentage__lte=100),
                name="violation_penalty_percentage_range",
            ),
        ]

    # ======================================================
    # Derived values
    # ======================================================

    @property
    def order(self):
        return self.order_item.order

    @property
    def customer(self):
        return self.order_item.order.customer

    @property
    def deposit_amount(self) -> Decimal:
        """Deposit attributable to the claimed line; the penalty ceiling."""
        return self.order_item.deposit_amount

    @property
    def remaining_line_deposit(self) -> Decimal:
        """Line deposit left after this penalty. Not the order refund."""
        return money(max(ZERO, self.deposit_amount - Decimal(self.penalty_amount)))

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    def __str__(self):
        return f"{self.get_violation_type_display()} | {self.order_item} | {self.status}"
