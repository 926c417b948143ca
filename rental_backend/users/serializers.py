# users/serializers.py

from rest_framework import serializers

from users.models import BankAccount


class BankAccountSerializer(serializers.ModelSerializer):
    class Meta:
        model = BankAccount
        fields = [
            "id",
            "bank_name",
            "account_number",
            "account_holder_name",
            "routing_number",
            "is_primary",
        ]
        read_only_fields = fields
