# orders/models/order.py

"""
ORDER AGGREGATE (EXTERNAL, REFERENCED NOT OWNED)

The happy-path lifecycle (pending -> approved -> in_transit -> in_use ->
returning) is driven by the wider marketplace. The dispute engine only ever
writes `status` on the segment after the items come back:

    returning            -> returned_with_issue   (first violation reported)
    returning            -> returned              (clean return confirmed)
    returned_with_issue  -> returned              (every violation settled)
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models

from common.money import ZERO, money

User = settings.AUTH_USER_MODEL


class Order(models.Model):
    STATUS_PENDING = "pending"
    STATUS_APPROVED = "approved"
    STATUS_IN_TRANSIT = "in_transit"
    STATUS_IN_USE = "in_use"
    STATUS_RETURNING = "returning"
    STATUS_RETURNED = "returned"
    STATUS_RETURNED_WITH_ISSUE = "returned_with_issue"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_IN_TRANSIT, "In transit"),
        (STATUS_IN_USE, "In use"),
        (STATUS_RETURNING, "Returning"),
        (STATUS_RETURNED, "Returned"),
        (STATUS_RETURNED_WITH_ISSUE, "Returned with issue"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    customer = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name="rental_orders",
        help_text="Renter. May itself be a provider renting someone else's item.",
    )

    provider = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name="provided_orders",
    )

    status = models.CharField(
        max_length=32,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
    )

    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    rental_start = models.DateTimeField(null=True, blank=True)
    rental_end = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="order_status_idx"),
            models.Index(fields=["created_at"], name="order_created_at_idx"),
        ]

    @property
    def order_code(self) -> str:
        return f"ORD-{str(self.id)[:8].upper()}"

    @property
    def total_deposit_amount(self) -> Decimal:
        """
        Original security deposit held for the whole order (sum of line deposits).
        """
        total = ZERO
        for item in self.items.all():
            total += item.deposit_amount
        return money(total)

    def __str__(self):
        return f"{self.order_code} | {self.status}"
