# refunds/api/urls.py

from django.urls import path

from refunds.views import (
    MyRefundsView,
    PendingRefundCountView,
    ProcessRefundView,
    RefundDetailView,
    RefundListView,
    ReopenRefundView,
)

app_name = "refunds"

urlpatterns = [
    path("all/", RefundListView.as_view(), name="all"),
    path("mine/", MyRefundsView.as_view(), name="mine"),
    path("process/", ProcessRefundView.as_view(), name="process"),
    path("pending/count/", PendingRefundCountView.as_view(), name="pending-count"),
    path("<uuid:refund_id>/", RefundDetailView.as_view(), name="detail"),
    path("<uuid:refund_id>/reopen/", ReopenRefundView.as_view(), name="reopen"),
]
