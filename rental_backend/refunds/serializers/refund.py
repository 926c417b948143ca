# refunds/serializers/refund.py

from rest_framework import serializers

from refunds.models import DepositRefund
from refunds.services.refund_processor import suggested_bank_account
from users.serializers import BankAccountSerializer
from violations.models import RentalViolation


# ---------------- COMMANDS ----------------
class ProcessRefundSerializer(serializers.Serializer):
    """
    Input for approve / reject. Business rules (bank account mandatory on
    approval, reason mandatory on rejection) live in the service.
    """

    refund_id = serializers.UUIDField()
    is_approved = serializers.BooleanField()
    bank_account_id = serializers.UUIDField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    external_transaction_id = serializers.CharField(
        required=False, allow_blank=True, max_length=128
    )


# ---------------- OUTPUT ----------------
class RefundViolationSummarySerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="order_item.product_name", read_only=True)
    violation_type_display = serializers.CharField(
        source="get_violation_type_display", read_only=True
    )
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = RentalViolation
        fields = [
            "id",
            "product_name",
            "violation_type",
            "violation_type_display",
            "penalty_amount",
            "status",
            "status_display",
        ]
        read_only_fields = fields


class DepositRefundSerializer(serializers.ModelSerializer):
    refund_code = serializers.CharField(read_only=True)
    order_code = serializers.CharField(source="order.order_code", read_only=True)
    customer_email = serializers.EmailField(source="customer.email", read_only=True)
    customer_name = serializers.CharField(source="customer.display_name", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    refund_bank_account = BankAccountSerializer(read_only=True)
    processing_state = serializers.SerializerMethodField()

    class Meta:
        model = DepositRefund
        fields = [
            "id",
            "refund_code",
            "order",
            "order_code",
            "customer",
            "customer_email",
            "customer_name",
            "original_deposit_amount",
            "total_penalty_amount",
            "refund_amount",
            "status",
            "status_display",
            "refund_bank_account",
            "external_transaction_id",
            "notes",
            "processing_state",
            "processed_by_admin",
            "processed_at",
            "created_at",
        ]
        read_only_fields = fields

    def get_processing_state(self, obj) -> str:
        return str(obj.processing_state)


class DepositRefundDetailSerializer(DepositRefundSerializer):
    violations = serializers.SerializerMethodField()
    suggested_bank_account = serializers.SerializerMethodField()

    class Meta(DepositRefundSerializer.Meta):
        fields = DepositRefundSerializer.Meta.fields + [
            "violations",
            "suggested_bank_account",
        ]
        read_only_fields = fields

    def get_violations(self, obj):
        rows = (
            RentalViolation.objects
            .filter(order_item__order_id=obj.order_id)
            .select_related("order_item")
        )
        return RefundViolationSummarySerializer(rows, many=True).data

    def get_suggested_bank_account(self, obj):
        account = suggested_bank_account(obj)
        if account is None:
            return None
        return BankAccountSerializer(account).data
