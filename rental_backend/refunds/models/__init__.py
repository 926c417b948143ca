# refunds/models/__init__.py

from .deposit_refund import DepositRefund

__all__ = [
    "DepositRefund",
]
