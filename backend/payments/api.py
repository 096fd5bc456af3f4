from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsAdmin
from core import errors
from core.serializers import DateRangeQuerySerializer

from .serializers import (
    PaymentListQuerySerializer,
    PaymentSerializer,
    PaymentStatsSerializer,
    RefundDecisionSerializer,
    RefundRequestSerializer,
)
from .services import PaymentProcessor


class PaymentViewSet(viewsets.ViewSet):
    """A customer's own payment history and refund requests."""

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"[0-9]+"

    def get_permissions(self):
        if self.action == "methods":
            return [AllowAny()]
        return super().get_permissions()

    def list(self, request):
        query = PaymentListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        payments = PaymentProcessor().list(
            payer_id=request.user.id,
            status=query.validated_data.get("status") or None,
            method=query.validated_data.get("method") or None,
            limit=query.validated_data["limit"],
            offset=query.validated_data["offset"],
        )
        return Response(PaymentSerializer(payments, many=True).data)

    def retrieve(self, request, pk=None):
        payment = PaymentProcessor().get(int(pk))
        if payment.payer_id != request.user.id and not request.user.is_admin:
            raise errors.Forbidden("Not authorized.")
        return Response(PaymentSerializer(payment).data)

    @action(detail=True, methods=["post"])
    def refund(self, request, pk=None):
        serializer = RefundRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = PaymentProcessor().request_refund(int(pk), request.user.id, serializer.validated_data["reason"])
        return Response({"message": "Refund request submitted", "payment": PaymentSerializer(payment).data})

    @action(detail=False, methods=["get"])
    def methods(self, request):
        return Response(PaymentProcessor().methods())


class AdminPaymentViewSet(viewsets.ViewSet):
    """Platform-wide payment listing, statistics and refund decisions."""

    permission_classes = [IsAdmin]
    lookup_value_regex = r"[0-9]+"

    def list(self, request):
        query = PaymentListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        payments = PaymentProcessor().list(
            status=query.validated_data.get("status") or None,
            method=query.validated_data.get("method") or None,
            limit=query.validated_data["limit"],
            offset=query.validated_data["offset"],
        )
        return Response(PaymentSerializer(payments, many=True).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        query = DateRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        stats = PaymentProcessor().stats(
            start_date=query.validated_data.get("start_date"),
            end_date=query.validated_data.get("end_date"),
        )
        return Response(PaymentStatsSerializer(stats).data)

    @action(detail=True, methods=["post"])
    def refund(self, request, pk=None):
        serializer = RefundDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        approved = serializer.validated_data["approved"]
        payment = PaymentProcessor().process_refund(int(pk), approved)
        return Response(
            {
                "message": "Refund approved" if approved else "Refund rejected",
                "payment": PaymentSerializer(payment).data,
            }
        )
