# violations/views/violation.py

"""
VIOLATION API

Provider:
- POST  /api/violations/                          report claims for an order
- PUT   /api/violations/<id>/                     revise after rejection
- PATCH /api/violations/<id>/                     correct without status change
- POST  /api/violations/<id>/provider-response/   answer the customer

Customer:
- POST  /api/violations/<id>/respond/             accept / reject

Either party:
- POST  /api/violations/<id>/escalate/
- POST  /api/violations/<id>/evidence/
- GET   /api/violations/<id>/
- GET   /api/violations/order/<order_id>/         (?detail=1 adds product data)
- GET   /api/violations/customer/mine/
- GET   /api/violations/provider/mine/
"""

import logging

from django.db import DatabaseError
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.api import domain_error_response, infrastructure_error_response
from common.exceptions import DisputeEngineError
from permissions.roles import (
    CAP_VIOLATION_ESCALATE,
    CAP_VIOLATION_REPORT,
    CAP_VIOLATION_RESPOND,
    HasCapability,
)
from violations.serializers import (
    AddEvidenceSerializer,
    CreateViolationsSerializer,
    CustomerRespondSerializer,
    EscalateSerializer,
    ProviderResponseSerializer,
    ViolationEvidenceSerializer,
    ViolationPatchSerializer,
    ViolationSerializer,
    ViolationWithItemSerializer,
)
from violations.services.negotiation_service import customer_respond, escalate
from violations.services.violation_service import (
    add_evidence,
    create_violations,
    edit_violation,
    get_violation_for_user,
    list_violations_for_customer,
    list_violations_for_order,
    list_violations_for_provider,
    provider_respond_to_customer,
    revise_violation,
)

logger = logging.getLogger("violations")

ERROR_RESPONSES = {
    400: OpenApiResponse(description="Validation error / penalty exceeds deposit"),
    403: OpenApiResponse(description="Not a party of this violation"),
    404: OpenApiResponse(description="Violation or order not found"),
    409: OpenApiResponse(description="Invalid state / duplicate claim"),
    503: OpenApiResponse(description="Service unavailable"),
}


# ======================================================
# CREATE
# ======================================================


class ViolationCreateView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_VIOLATION_REPORT

    @extend_schema(
        tags=["Violations"],
        request=CreateViolationsSerializer,
        responses={201: ViolationSerializer(many=True), **ERROR_RESPONSES},
        description="Report one violation per returned order line (provider).",
    )
    def post(self, request):
        serializer = CreateViolationsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            violations = create_violations(
                order_id=data["order_id"],
                provider=request.user,
                claims=data["violations"],
            )
        except DisputeEngineError as exc:
            logger.warning(
                "Violation report rejected",
                extra={"actor_id": str(request.user.id), "code": exc.code},
            )
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Violation report failed")
            return infrastructure_error_response()

        return Response(
            {
                "violation_ids": [str(v.id) for v in violations],
                "violations": ViolationSerializer(violations, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )


# ======================================================
# DETAIL / REVISE / EDIT
# ======================================================


class ViolationDetailView(APIView):
    permission_classes = [IsAuthenticated]
    required_capability = None

    def get_permissions(self):
        if self.request.method in ("PUT", "PATCH"):
            self.required_capability = CAP_VIOLATION_REPORT
            return [IsAuthenticated(), HasCapability()]
        return [IsAuthenticated()]

    @extend_schema(
        tags=["Violations"],
        responses={200: ViolationSerializer, **ERROR_RESPONSES},
    )
    def get(self, request, violation_id):
        try:
            violation = get_violation_for_user(violation_id=violation_id, user=request.user)
            data = ViolationSerializer(violation).data
        except DisputeEngineError as exc:
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Violation read failed")
            return infrastructure_error_response()

        return Response(data)

    def _update(self, request, violation_id, service):
        serializer = ViolationPatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            violation = service(
                violation_id=violation_id,
                provider=request.user,
                **serializer.validated_data,
            )
        except DisputeEngineError as exc:
            logger.warning(
                "Violation update rejected",
                extra={"violation_id": str(violation_id), "code": exc.code},
            )
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Violation update failed")
            return infrastructure_error_response()

        return Response(ViolationSerializer(violation).data)

    @extend_schema(
        tags=["Violations"],
        request=ViolationPatchSerializer,
        responses={200: ViolationSerializer, **ERROR_RESPONSES},
        description="Revise a rejected violation; it goes back to the customer.",
    )
    def put(self, request, violation_id):
        return self._update(request, violation_id, revise_violation)

    @extend_schema(
        tags=["Violations"],
        request=ViolationPatchSerializer,
        responses={200: ViolationSerializer, **ERROR_RESPONSES},
        description="Correct an open violation without changing its status.",
    )
    def patch(self, request, violation_id):
        return self._update(request, violation_id, edit_violation)


# ======================================================
# NEGOTIATION
# ======================================================


class ViolationRespondView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_VIOLATION_RESPOND

    @extend_schema(
        tags=["Violations"],
        request=CustomerRespondSerializer,
        responses={200: ViolationSerializer, **ERROR_RESPONSES},
        description="Customer accepts or rejects a pending violation.",
    )
    def post(self, request, violation_id):
        serializer = CustomerRespondSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            violation = customer_respond(
                violation_id=violation_id,
                customer=request.user,
                is_accepted=data["is_accepted"],
                notes=data.get("notes"),
                evidence=data.get("evidence"),
            )
        except DisputeEngineError as exc:
            logger.warning(
                "Customer response rejected",
                extra={"violation_id": str(violation_id), "code": exc.code},
            )
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Customer response failed")
            return infrastructure_error_response()

        return Response(ViolationSerializer(violation).data)


class ViolationEscalateView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_VIOLATION_ESCALATE

    @extend_schema(
        tags=["Violations"],
        request=EscalateSerializer,
        responses={200: ViolationSerializer, **ERROR_RESPONSES},
    )
    def post(self, request, violation_id):
        serializer = EscalateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            violation = escalate(
                violation_id=violation_id,
                actor=request.user,
                reason=serializer.validated_data["reason"],
            )
        except DisputeEngineError as exc:
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Escalation failed")
            return infrastructure_error_response()

        return Response(ViolationSerializer(violation).data)


class ProviderResponseView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_VIOLATION_REPORT

    @extend_schema(
        tags=["Violations"],
        request=ProviderResponseSerializer,
        responses={200: ViolationSerializer, **ERROR_RESPONSES},
    )
    def post(self, request, violation_id):
        serializer = ProviderResponseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            violation = provider_respond_to_customer(
                violation_id=violation_id,
                provider=request.user,
                response=serializer.validated_data["response"],
            )
        except DisputeEngineError as exc:
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Provider response failed")
            return infrastructure_error_response()

        return Response(ViolationSerializer(violation).data)


class ViolationEvidenceView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["Violations"],
        request=AddEvidenceSerializer,
        responses={201: ViolationEvidenceSerializer(many=True), **ERROR_RESPONSES},
    )
    def post(self, request, violation_id):
        serializer = AddEvidenceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            created = add_evidence(
                violation_id=violation_id,
                user=request.user,
                entries=serializer.validated_data["evidence"],
            )
        except DisputeEngineError as exc:
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Adding evidence failed")
            return infrastructure_error_response()

        return Response(
            ViolationEvidenceSerializer(created, many=True).data,
            status=status.HTTP_201_CREATED,
        )


# ======================================================
# LISTS
# ======================================================


class OrderViolationsView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["Violations"],
        parameters=[
            OpenApiParameter(
                name="detail",
                type=bool,
                required=False,
                description="Include the rented product snapshot for each line",
            )
        ],
        responses={200: ViolationWithItemSerializer(many=True), **ERROR_RESPONSES},
    )
    def get(self, request, order_id):
        detail = (request.query_params.get("detail") or "").lower() in ("1", "true", "yes")
        serializer_class = ViolationWithItemSerializer if detail else ViolationSerializer

        try:
            violations = list_violations_for_order(order_id=order_id, user=request.user)
            data = serializer_class(violations, many=True).data
        except DisputeEngineError as exc:
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Order violations read failed")
            return infrastructure_error_response()

        return Response(data)


class CustomerViolationsView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Violations"], responses={200: ViolationSerializer(many=True)})
    def get(self, request):
        try:
            data = ViolationWithItemSerializer(
                list_violations_for_customer(request.user), many=True
            ).data
        except DatabaseError:
            logger.exception("Customer violations read failed")
            return infrastructure_error_response()

        return Response(data)


class ProviderViolationsView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_VIOLATION_REPORT

    @extend_schema(tags=["Violations"], responses={200: ViolationSerializer(many=True)})
    def get(self, request):
        try:
            data = ViolationWithItemSerializer(
                list_violations_for_provider(request.user), many=True
            ).data
        except DatabaseError:
            logger.exception("Provider violations read failed")
            return infrastructure_error_response()

        return Response(data)
