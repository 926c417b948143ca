# orders/tests/helpers.py

"""
Shared fixtures for the dispute engine tests.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.contrib.auth import get_user_model

from orders.models import Order, OrderItem

User = get_user_model()

IMAGE_EVIDENCE = {"file_url": "https://cdn.example.com/evidence/scratch.jpg", "file_type": "image"}
VIDEO_EVIDENCE = {"file_url": "https://cdn.example.com/evidence/unboxing.mp4", "file_type": "video"}


def make_user(email: str, role: str):
    return User.objects.create_user(email=email, password="pass", role=role)


def make_order(
    *,
    customer,
    provider,
    status: str = Order.STATUS_RETURNING,
    deposits=(Decimal("500000.00"),),
) -> Order:
    """
    One order line per entry in `deposits` (quantity 1 each).
    """
    order = Order.objects.create(customer=customer, provider=provider, status=status)
    for index, deposit in enumerate(deposits, start=1):
        OrderItem.objects.create(
            order=order,
            product_id=uuid.uuid4(),
            product_name=f"Camera kit {index}",
            deposit_per_unit=Decimal(deposit),
            quantity=1,
        )
    return order


def claim_for(item, *, penalty_amount=None, penalty_percentage=None, **overrides) -> dict:
    claim = {
        "order_item_id": item.id,
        "violation_type": "damaged",
        "description": "Lens cracked on return",
        "penalty_amount": penalty_amount,
        "penalty_percentage": penalty_percentage,
        "evidence": [IMAGE_EVIDENCE],
    }
    claim.update(overrides)
    return claim
