# refunds/views/refund.py

"""
DEPOSIT REFUND API

Admin:
- GET  /api/refunds/all/?status=pending|approved|rejected
- POST /api/refunds/process/
- GET  /api/refunds/pending/count/

Owner (customer, or provider renting as a customer) or back office:
- GET  /api/refunds/<id>/
- GET  /api/refunds/mine/
- POST /api/refunds/<id>/reopen/
"""

import logging

from django.db import DatabaseError
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import generics
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.api import domain_error_response, infrastructure_error_response
from common.exceptions import DisputeEngineError
from permissions.roles import (
    CAP_REFUND_PROCESS,
    CAP_REFUND_REOPEN,
    CAP_REFUND_VIEW_ALL,
    CAP_REFUND_VIEW_OWN,
    HasAnyCapability,
    HasCapability,
)
from refunds.serializers import (
    DepositRefundDetailSerializer,
    DepositRefundSerializer,
    ProcessRefundSerializer,
)
from refunds.services.refund_processor import (
    count_pending_refunds,
    get_refund_for_user,
    list_refunds_for_customer,
    process_refund,
    refund_queryset,
    reopen_refund,
)

logger = logging.getLogger("refunds")


class RefundListView(generics.ListAPIView):
    """
    All refund requests for the back office, newest first.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REFUND_VIEW_ALL
    serializer_class = DepositRefundSerializer
    filterset_fields = ["status"]

    def get_queryset(self):
        return refund_queryset()

    @extend_schema(tags=["Refunds"])
    def get(self, request, *args, **kwargs):
        try:
            return super().get(request, *args, **kwargs)
        except DatabaseError:
            logger.exception("Refund list read failed")
            return infrastructure_error_response()


class MyRefundsView(generics.ListAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REFUND_VIEW_OWN
    serializer_class = DepositRefundSerializer
    filterset_fields = ["status"]

    def get_queryset(self):
        return list_refunds_for_customer(self.request.user)

    @extend_schema(tags=["Refunds"])
    def get(self, request, *args, **kwargs):
        try:
            return super().get(request, *args, **kwargs)
        except DatabaseError:
            logger.exception("Refund list read failed")
            return infrastructure_error_response()


class RefundDetailView(APIView):
    permission_classes = [IsAuthenticated, HasAnyCapability]
    required_any_capabilities = {CAP_REFUND_VIEW_ALL, CAP_REFUND_VIEW_OWN}

    @extend_schema(
        tags=["Refunds"],
        responses={
            200: DepositRefundDetailSerializer,
            403: OpenApiResponse(description="Not your refund"),
            404: OpenApiResponse(description="Refund not found"),
        },
    )
    def get(self, request, refund_id):
        try:
            refund = get_refund_for_user(refund_id=refund_id, user=request.user)
            data = DepositRefundDetailSerializer(refund).data
        except DisputeEngineError as exc:
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Refund detail read failed")
            return infrastructure_error_response()

        return Response(data)


class ProcessRefundView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REFUND_PROCESS

    @extend_schema(
        tags=["Refunds"],
        request=ProcessRefundSerializer,
        responses={
            200: DepositRefundSerializer,
            400: OpenApiResponse(description="Missing bank account / rejection reason"),
            404: OpenApiResponse(description="Refund not found"),
            409: OpenApiResponse(description="Refund is not pending"),
            503: OpenApiResponse(description="Service unavailable"),
        },
        description="Approve (pay out) or reject a pending deposit refund.",
    )
    def post(self, request):
        serializer = ProcessRefundSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            refund = process_refund(
                refund_id=data["refund_id"],
                admin=request.user,
                is_approved=data["is_approved"],
                bank_account_id=data.get("bank_account_id"),
                notes=data.get("notes"),
                external_transaction_id=data.get("external_transaction_id"),
            )
        except DisputeEngineError as exc:
            logger.warning(
                "Refund processing rejected",
                extra={"refund_id": str(data["refund_id"]), "code": exc.code},
            )
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Refund processing failed")
            return infrastructure_error_response()

        return Response(DepositRefundSerializer(refund).data)


class ReopenRefundView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REFUND_REOPEN

    @extend_schema(
        tags=["Refunds"],
        request=None,
        responses={
            200: DepositRefundSerializer,
            403: OpenApiResponse(description="Not your refund"),
            404: OpenApiResponse(description="Refund not found"),
            409: OpenApiResponse(description="Refund is not rejected"),
        },
    )
    def post(self, request, refund_id):
        try:
            refund = reopen_refund(refund_id=refund_id, actor=request.user)
        except DisputeEngineError as exc:
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Refund reopen failed")
            return infrastructure_error_response()

        return Response(DepositRefundSerializer(refund).data)


class PendingRefundCountView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REFUND_VIEW_ALL

    @extend_schema(
        tags=["Refunds"],
        responses={200: {"type": "object", "properties": {"count": {"type": "integer"}}}},
    )
    def get(self, request):
        try:
            count = count_pending_refunds()
        except DatabaseError:
            logger.exception("Pending refund count failed")
            return infrastructure_error_response()

        return Response({"count": count})
