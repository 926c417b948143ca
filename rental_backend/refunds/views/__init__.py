# refunds/views/__init__.py

from .refund import (
    MyRefundsView,
    PendingRefundCountView,
    ProcessRefundView,
    RefundDetailView,
    RefundListView,
    ReopenRefundView,
)

__all__ = [
    "MyRefundsView",
    "PendingRefundCountView",
    "ProcessRefundView",
    "RefundDetailView",
    "RefundListView",
    "ReopenRefundView",
]
