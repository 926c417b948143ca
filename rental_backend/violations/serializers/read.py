# violations/serializers/read.py

from rest_framework import serializers

from violations.models import RentalViolation, ViolationEvidence


class ViolationEvidenceSerializer(serializers.ModelSerializer):
    class Meta:
        model = ViolationEvidence
        fields = [
            "id",
            "file_url",
            "file_type",
            "uploaded_by",
            "uploaded_at",
        ]
        read_only_fields = fields


class ViolationSerializer(serializers.ModelSerializer):
    """
    Read model for one violation, including the money the claimed line puts
    at stake (deposit held and what is left of it after the penalty).
    """

    order_id = serializers.UUIDField(source="order_item.order_id", read_only=True)
    order_code = serializers.CharField(source="order_item.order.order_code", read_only=True)
    product_name = serializers.CharField(source="order_item.product_name", read_only=True)
    provider_id = serializers.UUIDField(read_only=True)
    customer_id = serializers.UUIDField(source="order_item.order.customer_id", read_only=True)
    violation_type_display = serializers.CharField(
        source="get_violation_type_display", read_only=True
    )
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    deposit_amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    remaining_line_deposit = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    evidence = ViolationEvidenceSerializer(many=True, read_only=True)

    class Meta:
        model = RentalViolation
        fields = [
            "id",
            "order_id",
            "order_code",
            "order_item",
            "product_name",
            "provider_id",
            "customer_id",
            "violation_type",
            "violation_type_display",
            "description",
            "damage_percentage",
            "penalty_percentage",
            "penalty_amount",
            "deposit_amount",
            "remaining_line_deposit",
            "status",
            "status_display",
            "customer_notes",
            "customer_response_at",
            "customer_escalation_reason",
            "provider_response_to_customer",
            "provider_response_at",
            "provider_escalation_reason",
            "escalated_at",
            "evidence",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ViolationWithItemSerializer(ViolationSerializer):
    """Adds the rented line's product snapshot for order-level screens."""

    product_id = serializers.UUIDField(source="order_item.product_id", read_only=True)
    product_image_url = serializers.CharField(
        source="order_item.product_image_url", read_only=True
    )
    quantity = serializers.IntegerField(source="order_item.quantity", read_only=True)
    deposit_per_unit = serializers.DecimalField(
        source="order_item.deposit_per_unit",
        max_digits=12,
        decimal_places=2,
        read_only=True,
    )

    class Meta(ViolationSerializer.Meta):
        fields = ViolationSerializer.Meta.fields + [
            "product_id",
            "product_image_url",
            "quantity",
            "deposit_per_unit",
        ]
        read_only_fields = fields
