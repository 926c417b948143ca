# refunds/serializers/__init__.py

from .refund import (
    DepositRefundDetailSerializer,
    DepositRefundSerializer,
    ProcessRefundSerializer,
    RefundViolationSummarySerializer,
)

__all__ = [
    "DepositRefundDetailSerializer",
    "DepositRefundSerializer",
    "ProcessRefundSerializer",
    "RefundViolationSummarySerializer",
]
