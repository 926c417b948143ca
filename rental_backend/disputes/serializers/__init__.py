# disputes/serializers/__init__.py

from .resolution import (
    CreateResolutionSerializer,
    DisputeDetailSerializer,
    DisputeListItemSerializer,
    IssueResolutionSerializer,
    OrderResolutionOutcomeSerializer,
)

__all__ = [
    "CreateResolutionSerializer",
    "DisputeDetailSerializer",
    "DisputeListItemSerializer",
    "IssueResolutionSerializer",
    "OrderResolutionOutcomeSerializer",
]
