# violations/serializers/command.py

"""
Command serializers for violation endpoints.

These serializers do NOT touch the database. They only shape input for the
services, which own every business rule (ceilings, ownership, lifecycle).
"""

from rest_framework import serializers

from violations.models import RentalViolation, ViolationEvidence


class EvidenceInputSerializer(serializers.Serializer):
    file_url = serializers.URLField(max_length=500)
    file_type = serializers.ChoiceField(choices=ViolationEvidence.FILE_TYPE_CHOICES)


class ViolationClaimSerializer(serializers.Serializer):
    order_item_id = serializers.UUIDField()
    violation_type = serializers.ChoiceField(choices=RentalViolation.TYPE_CHOICES)
    description = serializers.CharField()
    damage_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, allow_null=True
    )
    penalty_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, allow_null=True
    )
    penalty_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    evidence = EvidenceInputSerializer(many=True, allow_empty=False)


class CreateViolationsSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    violations = ViolationClaimSerializer(many=True, allow_empty=False)


class ViolationPatchSerializer(serializers.Serializer):
    violation_type = serializers.ChoiceField(
        choices=RentalViolation.TYPE_CHOICES, required=False
    )
    description = serializers.CharField(required=False)
    damage_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, allow_null=True
    )
    penalty_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, allow_null=True
    )
    penalty_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )


class CustomerRespondSerializer(serializers.Serializer):
    is_accepted = serializers.BooleanField()
    notes = serializers.CharField(required=False, allow_blank=True)
    evidence = EvidenceInputSerializer(many=True, required=False)


class EscalateSerializer(serializers.Serializer):
    reason = serializers.CharField()


class ProviderResponseSerializer(serializers.Serializer):
    response = serializers.CharField()


class AddEvidenceSerializer(serializers.Serializer):
    evidence = EvidenceInputSerializer(many=True, allow_empty=False)
