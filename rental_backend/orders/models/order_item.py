# orders/models/order_item.py

import uuid
from decimal import Decimal

from django.db import models

from common.money import money

from .order import Order


class OrderItem(models.Model):
    """
    One rented line of an order.

    The deposit attributable to the line (deposit_per_unit x quantity) is the
    ceiling for any penalty claimed against it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
    )

    # Catalog is an external collaborator: keep a reference + display snapshot.
    product_id = models.UUIDField()
    product_name = models.CharField(max_length=255)
    product_image_url = models.URLField(max_length=500, blank=True)

    deposit_per_unit = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    quantity = models.PositiveIntegerField(default=1)

    class Meta:
        ordering = ["product_name"]

    @property
    def deposit_amount(self) -> Decimal:
        return money(Decimal(self.deposit_per_unit) * int(self.quantity))

    def __str__(self):
        return f"{self.product_name} x{self.quantity}"
