# refunds/admin.py

from django.contrib import admin

from refunds.models import DepositRefund


@admin.register(DepositRefund)
class DepositRefundAdmin(admin.ModelAdmin):
    list_display = (
        "refund_code",
        "order",
        "customer",
        "original_deposit_amount",
        "total_penalty_amount",
        "refund_amount",
        "status",
        "created_at",
    )
    list_filter = ("status",)
    search_fields = ("id", "customer__email", "external_transaction_id")
    readonly_fields = (
        "order",
        "customer",
        "original_deposit_amount",
        "total_penalty_amount",
        "refund_amount",
        "status",
        "processed_by_admin",
        "processed_at",
    )
