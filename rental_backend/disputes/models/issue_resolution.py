# disputes/models/issue_resolution.py

"""
ISSUE RESOLUTION (IMMUTABLE)

The admin's binding ruling on an escalated violation.

- Exactly one per violation (one-to-one).
- Created once. Never updated. Never deleted. A correction needs a new case.
- customer_fine_amount / provider_compensation_amount split liability
  between the parties; they do NOT change the violation's penalty_amount,
  which is what the deposit refund deducts.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from violations.models import RentalViolation

User = settings.AUTH_USER_MODEL


class IssueResolution(models.Model):
    TYPE_UPHOLD_CLAIM = "uphold_claim"
    TYPE_REJECT_CLAIM = "reject_claim"
    TYPE_COMPROMISE = "compromise"

    TYPE_CHOICES = [
        (TYPE_UPHOLD_CLAIM, "Claim upheld"),
        (TYPE_REJECT_CLAIM, "Claim rejected"),
        (TYPE_COMPROMISE, "Compromise"),
    ]

    STATUS_COMPLETED = "completed"

    STATUS_CHOICES = [
        (STATUS_COMPLETED, "Completed"),
    ]

    PROCESSING_UNASSIGNED = "unassigned"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    violation = models.OneToOneField(
        RentalViolation,
        on_delete=models.PROTECT,
        related_name="resolution",
    )

    resolution_type = models.CharField(max_length=32, choices=TYPE_CHOICES)

    customer_fine_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    provider_compensation_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    reason = models.TextField()

    resolution_status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_COMPLETED,
    )

    processed_by_admin = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        related_name="issue_resolutions",
    )
    processed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-processed_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(customer_fine_amount__gte=0) & Q(provider_compensation_amount__gte=0),
                name="issue_resolution_amounts_non_negative",
            ),
        ]

    @property
    def processing_state(self):
        if self.processed_by_admin_id is None:
            return self.PROCESSING_UNASSIGNED
        return self.processed_by_admin_id

    # ======================================================
    # IMMUTABILITY
    # ======================================================

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError("IssueResolution records are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError("IssueResolution records cannot be deleted")

    def __str__(self):
        return f"{self.get_resolution_type_display()} | {self.violation_id}"
