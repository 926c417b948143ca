# disputes/views/__init__.py

from .dispute import (
    CreateResolutionView,
    DisputeDetailView,
    PendingDisputesView,
    ResolveOrderView,
    SyncOrderStatusView,
)

__all__ = [
    "CreateResolutionView",
    "DisputeDetailView",
    "PendingDisputesView",
    "ResolveOrderView",
    "SyncOrderStatusView",
]
