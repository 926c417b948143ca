# users/views/me.py

from drf_spectacular.utils import extend_schema
from rest_framework import serializers
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from users.serializers import BankAccountSerializer


# ---------------------------
# SERIALIZER
# ---------------------------


class MeSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    email = serializers.EmailField()
    full_name = serializers.CharField()
    role = serializers.CharField()
    bank_accounts = BankAccountSerializer(many=True)


# ---------------------------
# VIEW
# ---------------------------


class MeView(APIView):
    """
    Caller identity + role as seen by the dispute engine, plus the refund
    destinations registered for the caller.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = MeSerializer

    @extend_schema(
        responses={200: MeSerializer},
        description="Get current authenticated user profile",
    )
    def get(self, request):
        user = request.user

        return Response(
            {
                "id": user.id,
                "email": user.email,
                "full_name": user.full_name,
                "role": user.role,
                "bank_accounts": BankAccountSerializer(
                    user.bank_accounts.preferred_first(), many=True
                ).data,
            }
        )
