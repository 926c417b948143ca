# violations/views/__init__.py

from .violation import (
    CustomerViolationsView,
    OrderViolationsView,
    ProviderResponseView,
    ProviderViolationsView,
    ViolationCreateView,
    ViolationDetailView,
    ViolationEscalateView,
    ViolationEvidenceView,
    ViolationRespondView,
)

__all__ = [
    "CustomerViolationsView",
    "OrderViolationsView",
    "ProviderResponseView",
    "ProviderViolationsView",
    "ViolationCreateView",
    "ViolationDetailView",
    "ViolationEscalateView",
    "ViolationEvidenceView",
    "ViolationRespondView",
]
