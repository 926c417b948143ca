# violations/api/urls.py

"""
VIOLATION API URLS

Explicit non-id routes (order/, customer/, provider/) are registered BEFORE
the <uuid> routes.
"""

from django.urls import path

from violations.views import (
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

app_name = "violations"

urlpatterns = [
    path("", ViolationCreateView.as_view(), name="create"),
    path("order/<uuid:order_id>/", OrderViolationsView.as_view(), name="by-order"),
    path("customer/mine/", CustomerViolationsView.as_view(), name="customer-mine"),
    path("provider/mine/", ProviderViolationsView.as_view(), name="provider-mine"),
    path("<uuid:violation_id>/", ViolationDetailView.as_view(), name="detail"),
    path("<uuid:violation_id>/respond/", ViolationRespondView.as_view(), name="respond"),
    path("<uuid:violation_id>/escalate/", ViolationEscalateView.as_view(), name="escalate"),
    path(
        "<uuid:violation_id>/provider-response/",
        ProviderResponseView.as_view(),
        name="provider-response",
    ),
    path("<uuid:violation_id>/evidence/", ViolationEvidenceView.as_view(), name="evidence"),
]
