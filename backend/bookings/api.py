from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsMerchantOrAdmin
from core import errors
from core.records import Actor
from core.serializers import PageQuerySerializer
from payments.serializers import (
    PaymentListQuerySerializer,
    PaymentRequestSerializer,
    PaymentResultSerializer,
    PaymentSerializer,
)
from payments.services import PaymentProcessor

from .serializers import BookingCreateSerializer, BookingSerializer, BookingStatusSerializer
from .services.lifecycle import BookingService


def can_view_booking(booking, actor: Actor) -> bool:
    if actor.is_admin or booking.customer_id == actor.id:
        return True
    return actor.is_merchant and booking.merchant_id == actor.id


class BookingViewSet(viewsets.ViewSet):
    """Bookings are read and written through ``BookingService`` rather than a queryset."""

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"[0-9]+"

    def get_permissions(self):
        if self.action == "set_status":
            return [IsMerchantOrAdmin()]
        return super().get_permissions()

    def _actor(self) -> Actor:
        return Actor.from_user(self.request.user)

    def _visible_booking(self, pk):
        booking = BookingService().get(int(pk))
        if not can_view_booking(booking, self._actor()):
            raise errors.Forbidden("Not authorized to view this booking.")
        return booking

    def list(self, request):
        query = PageQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        actor = self._actor()
        scope = {}
        if actor.is_merchant:
            scope["merchant_id"] = actor.id
        elif not actor.is_admin:
            scope["customer_id"] = actor.id
        bookings = BookingService().list(
            status=query.validated_data.get("status") or None,
            limit=query.validated_data.get("limit"),
            offset=query.validated_data["offset"],
            **scope,
        )
        return Response(BookingSerializer(bookings, many=True).data)

    def create(self, request):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        booking = BookingService().create(
            data["property_id"],
            data["check_in"],
            data["check_out"],
            data["guests"],
            self._actor(),
            special_requests=data.get("special_requests", ""),
        )
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        return Response(BookingSerializer(self._visible_booking(pk)).data)

    @action(detail=True, methods=["put", "patch"], url_path="status")
    def set_status(self, request, pk=None):
        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = BookingService().update_status(int(pk), serializer.validated_data["status"], self._actor())
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        booking = BookingService().cancel(int(pk), self._actor())
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"])
    def pay(self, request, pk=None):
        serializer = PaymentRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = PaymentProcessor().process(int(pk), request.user.id, serializer.validated_data)
        payload = PaymentResultSerializer(result).data
        payload["booking"] = BookingSerializer(BookingService().get(int(pk))).data
        return Response(
            payload,
            status=status.HTTP_200_OK if result.success else status.HTTP_400_BAD_REQUEST,
        )

    @action(detail=True, methods=["get"])
    def payments(self, request, pk=None):
        booking = self._visible_booking(pk)
        query = PaymentListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        payments = PaymentProcessor().list(
            booking_id=booking.id,
            status=query.validated_data.get("status") or None,
            method=query.validated_data.get("method") or None,
            limit=query.validated_data["limit"],
            offset=query.validated_data["offset"],
        )
        return Response(PaymentSerializer(payments, many=True).data)
