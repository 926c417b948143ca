# users/models/bank_account.py

"""
BANK ACCOUNT REGISTRY (EXTERNAL COLLABORATOR)

Refund destinations. The engine only reads these rows:
- to suggest the customer's primary account on refund detail
- to verify that an approved refund pays into the refund owner's account
"""

import uuid

from django.conf import settings
from django.db import models

User = settings.AUTH_USER_MODEL


class BankAccountQuerySet(models.QuerySet):
    def for_user(self, user_id):
        return self.filter(user_id=user_id)

    def preferred_first(self):
        return self.order_by("-is_primary", "created_at")


class BankAccount(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="bank_accounts",
    )

    bank_name = models.CharField(max_length=120)
    account_number = models.CharField(max_length=64)
    account_holder_name = models.CharField(max_length=150)
    routing_number = models.CharField(max_length=64, blank=True)

    is_primary = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    objects = BankAccountQuerySet.as_manager()

    class Meta:
        ordering = ["-is_primary", "created_at"]

    def __str__(self):
        return f"{self.bank_name} | {self.account_number}"
