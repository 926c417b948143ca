# disputes/views/dispute.py

"""
DISPUTE (ADMIN ARBITRATION) API

- GET  /api/disputes/pending/                      escalated queue
- GET  /api/disputes/<violation_id>/               full case file
- POST /api/disputes/resolve/                      binding ruling (admin)
- POST /api/disputes/sync-order-status/            batch reconciliation
- POST /api/disputes/orders/<order_id>/resolve/    single order reconciliation
"""

import logging

from django.db import DatabaseError
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.api import domain_error_response, infrastructure_error_response
from common.exceptions import DisputeEngineError
from disputes.serializers import (
    CreateResolutionSerializer,
    DisputeDetailSerializer,
    DisputeListItemSerializer,
    IssueResolutionSerializer,
    OrderResolutionOutcomeSerializer,
)
from disputes.services.resolution_service import (
    create_resolution,
    get_dispute_detail,
    get_pending_disputes,
)
from orders.services.status_sync import (
    resolve_order_with_violations,
    sync_resolved_order_statuses,
)
from permissions.roles import (
    CAP_DISPUTE_RESOLVE,
    CAP_ORDER_RECONCILE,
    CAP_VIOLATION_VIEW_ALL,
    HasCapability,
)

logger = logging.getLogger("disputes")


class PendingDisputesView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_VIOLATION_VIEW_ALL

    @extend_schema(tags=["Disputes"], responses={200: DisputeListItemSerializer(many=True)})
    def get(self, request):
        try:
            data = DisputeListItemSerializer(get_pending_disputes(), many=True).data
        except DatabaseError:
            logger.exception("Pending disputes read failed")
            return infrastructure_error_response()

        return Response(data)


class DisputeDetailView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_VIOLATION_VIEW_ALL

    @extend_schema(
        tags=["Disputes"],
        responses={
            200: DisputeDetailSerializer,
            404: OpenApiResponse(description="Violation not found"),
        },
    )
    def get(self, request, violation_id):
        try:
            violation = get_dispute_detail(violation_id=violation_id)
            data = DisputeDetailSerializer(violation).data
        except DisputeEngineError as exc:
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Dispute detail read failed")
            return infrastructure_error_response()

        return Response(data)


class CreateResolutionView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_DISPUTE_RESOLVE

    @extend_schema(
        tags=["Disputes"],
        request=CreateResolutionSerializer,
        responses={
            201: IssueResolutionSerializer,
            400: OpenApiResponse(description="Validation error"),
            404: OpenApiResponse(description="Violation not found"),
            409: OpenApiResponse(description="Not escalated / already resolved"),
            503: OpenApiResponse(description="Service unavailable"),
        },
        description="Issue the binding ruling on an escalated violation.",
    )
    def post(self, request):
        serializer = CreateResolutionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            resolution = create_resolution(
                violation_id=data["violation_id"],
                admin=request.user,
                resolution_type=data["resolution_type"],
                reason=data["reason"],
                customer_fine_amount=data.get("customer_fine_amount"),
                provider_compensation_amount=data.get("provider_compensation_amount"),
            )
        except DisputeEngineError as exc:
            logger.warning(
                "Dispute resolution rejected",
                extra={"violation_id": str(data["violation_id"]), "code": exc.code},
            )
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Dispute resolution failed")
            return infrastructure_error_response()

        return Response(
            IssueResolutionSerializer(resolution).data,
            status=status.HTTP_201_CREATED,
        )


class SyncOrderStatusView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDER_RECONCILE

    @extend_schema(
        tags=["Disputes"],
        request=None,
        responses={
            200: {"type": "object", "properties": {"updated_count": {"type": "integer"}}},
        },
    )
    def post(self, request):
        try:
            updated = sync_resolved_order_statuses()
        except DisputeEngineError as exc:
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Order status sync failed")
            return infrastructure_error_response()

        return Response({"updated_count": updated})


class ResolveOrderView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDER_RECONCILE

    @extend_schema(
        tags=["Disputes"],
        request=None,
        responses={
            200: OrderResolutionOutcomeSerializer,
            404: OpenApiResponse(description="Order not found"),
            409: OrderResolutionOutcomeSerializer,
        },
    )
    def post(self, request, order_id):
        try:
            outcome = resolve_order_with_violations(order_id)
        except DisputeEngineError as exc:
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Order resolution failed")
            return infrastructure_error_response()

        body = OrderResolutionOutcomeSerializer(
            {
                "resolved": outcome.resolved,
                "reason": outcome.reason,
                "refund_id": outcome.refund.id if outcome.refund else None,
            }
        ).data
        return Response(
            body,
            status=status.HTTP_200_OK if outcome.resolved else status.HTTP_409_CONFLICT,
        )
