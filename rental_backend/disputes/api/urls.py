# disputes/api/urls.py

from django.urls import path

from disputes.views import (
    CreateResolutionView,
    DisputeDetailView,
    PendingDisputesView,
    ResolveOrderView,
    SyncOrderStatusView,
)

app_name = "disputes"

urlpatterns = [
    path("pending/", PendingDisputesView.as_view(), name="pending"),
    path("resolve/", CreateResolutionView.as_view(), name="resolve"),
    path("sync-order-status/", SyncOrderStatusView.as_view(), name="sync-order-status"),
    path("orders/<uuid:order_id>/resolve/", ResolveOrderView.as_view(), name="resolve-order"),
    path("<uuid:violation_id>/", DisputeDetailView.as_view(), name="detail"),
]
