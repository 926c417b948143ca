# disputes/serializers/resolution.py

from rest_framework import serializers

from disputes.models import IssueResolution
from violations.models import ViolationEvidence
from violations.serializers import ViolationEvidenceSerializer, ViolationSerializer


# ---------------- COMMANDS ----------------
class CreateResolutionSerializer(serializers.Serializer):
    violation_id = serializers.UUIDField()
    resolution_type = serializers.ChoiceField(choices=IssueResolution.TYPE_CHOICES)
    reason = serializers.CharField()
    customer_fine_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    provider_compensation_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )


# ---------------- OUTPUT ----------------
class IssueResolutionSerializer(serializers.ModelSerializer):
    resolution_type_display = serializers.CharField(
        source="get_resolution_type_display", read_only=True
    )
    processed_by_admin_email = serializers.EmailField(
        source="processed_by_admin.email", read_only=True, default=None
    )

    class Meta:
        model = IssueResolution
        fields = [
            "id",
            "violation",
            "resolution_type",
            "resolution_type_display",
            "customer_fine_amount",
            "provider_compensation_amount",
            "reason",
            "resolution_status",
            "processed_by_admin",
            "processed_by_admin_email",
            "processed_at",
        ]
        read_only_fields = fields


class DisputeListItemSerializer(ViolationSerializer):
    """
    Escalated violation as the admin queue shows it: who is arguing and what
    the provider asks for.
    """

    provider_email = serializers.EmailField(source="provider.email", read_only=True)
    provider_name = serializers.CharField(source="provider.display_name", read_only=True)
    customer_email = serializers.EmailField(
        source="order_item.order.customer.email", read_only=True
    )
    customer_name = serializers.CharField(
        source="order_item.order.customer.display_name", read_only=True
    )
    requested_compensation = serializers.DecimalField(
        source="penalty_amount", max_digits=12, decimal_places=2, read_only=True
    )

    class Meta(ViolationSerializer.Meta):
        fields = ViolationSerializer.Meta.fields + [
            "provider_email",
            "provider_name",
            "customer_email",
            "customer_name",
            "requested_compensation",
        ]
        read_only_fields = fields


class DisputeDetailSerializer(DisputeListItemSerializer):
    provider_evidence = serializers.SerializerMethodField()
    customer_evidence = serializers.SerializerMethodField()
    resolution = serializers.SerializerMethodField()

    class Meta(DisputeListItemSerializer.Meta):
        fields = DisputeListItemSerializer.Meta.fields + [
            "provider_evidence",
            "customer_evidence",
            "resolution",
        ]
        read_only_fields = fields

    def _evidence_from(self, obj, side):
        rows = [e for e in obj.evidence.all() if e.uploaded_by == side]
        return ViolationEvidenceSerializer(rows, many=True).data

    def get_provider_evidence(self, obj):
        return self._evidence_from(obj, ViolationEvidence.UPLOADER_PROVIDER)

    def get_customer_evidence(self, obj):
        return self._evidence_from(obj, ViolationEvidence.UPLOADER_CUSTOMER)

    def get_resolution(self, obj):
        try:
            resolution = obj.resolution
        except IssueResolution.DoesNotExist:
            return None
        return IssueResolutionSerializer(resolution).data


class OrderResolutionOutcomeSerializer(serializers.Serializer):
    resolved = serializers.BooleanField()
    reason = serializers.CharField()
    refund_id = serializers.UUIDField(allow_null=True)
