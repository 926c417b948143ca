# orders/views/clean_return.py

import logging

from django.db import DatabaseError
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.api import domain_error_response, infrastructure_error_response
from common.exceptions import DisputeEngineError
from orders.services.status_sync import confirm_clean_return
from permissions.roles import CAP_VIOLATION_REPORT, HasCapability
from refunds.serializers import DepositRefundSerializer

logger = logging.getLogger("orders")


class ConfirmCleanReturnView(APIView):
    """
    Provider confirms a returning order came back without issues.
    The full deposit is queued for refund.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_VIOLATION_REPORT

    @extend_schema(
        tags=["Orders"],
        request=None,
        responses={
            201: DepositRefundSerializer,
            403: OpenApiResponse(description="Not the order's provider"),
            404: OpenApiResponse(description="Order not found"),
            409: OpenApiResponse(description="Order is not returning / refund exists"),
        },
    )
    def post(self, request, order_id):
        try:
            refund = confirm_clean_return(order_id=order_id, provider=request.user)
        except DisputeEngineError as exc:
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Clean return confirmation failed")
            return infrastructure_error_response()

        return Response(DepositRefundSerializer(refund).data, status=status.HTTP_201_CREATED)
