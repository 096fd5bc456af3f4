import logging

from django.db.models import Q
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.permissions import IsAdmin, IsMerchantOrAdmin, IsOwnerOrAdmin
from availability.serializers import AvailabilityQuerySerializer, AvailabilityQuoteSerializer
from availability.services.checker import AvailabilityChecker
from core import errors

from .filters import PropertyFilter
from .models import Property
from .serializers import PropertySerializer

logger = logging.getLogger(__name__)

FEATURED_LIMIT = 6


class PropertyViewSet(viewsets.ModelViewSet):
    serializer_class = PropertySerializer
    filterset_class = PropertyFilter
    search_fields = ["name", "location", "description"]
    ordering_fields = ["price_per_night", "created_at", "max_guests", "bedrooms"]

    def get_permissions(self):
        if self.action in {"list", "retrieve", "featured", "availability"}:
            return [permissions.AllowAny()]
        if self.action == "create":
            return [IsMerchantOrAdmin()]
        if self.action in {"approve", "reject"}:
            return [IsAdmin()]
        return [permissions.IsAuthenticated(), IsOwnerOrAdmin()]

    def get_queryset(self):
        user = self.request.user
        queryset = Property.objects.select_related("merchant")
        active = Q(status=Property.Status.ACTIVE)
        is_admin = user.is_authenticated and user.is_admin
        is_merchant = user.is_authenticated and user.is_merchant

        if self.action == "availability":
            return queryset
        if self.action == "list":
            if is_admin and self.request.query_params.get("status"):
                return queryset
            if is_merchant and self.request.query_params.get("status"):
                return queryset.filter(merchant=user)
            return queryset.filter(active)
        if is_admin:
            return queryset
        if is_merchant:
            return queryset.filter(active | Q(merchant=user))
        return queryset.filter(active)

    def perform_create(self, serializer):
        prop = serializer.save(merchant=self.request.user, status=Property.Status.PENDING)
        logger.info("Property %s created by user %s", prop.id, self.request.user.id)

    def perform_destroy(self, instance):
        if instance.bookings.exists():
            raise errors.Conflict("Property has bookings and cannot be deleted.")
        logger.info("Property %s deleted by user %s", instance.id, self.request.user.id)
        instance.delete()

    @action(detail=False, methods=["get"])
    def featured(self, request):
        try:
            limit = max(1, min(int(request.query_params.get("limit", FEATURED_LIMIT)), 50))
        except ValueError:
            limit = FEATURED_LIMIT
        queryset = (
            Property.objects.select_related("merchant")
            .filter(status=Property.Status.ACTIVE)
            .order_by("-created_at", "id")[:limit]
        )
        return Response(self.get_serializer(queryset, many=True).data)

    @action(detail=True, methods=["get"])
    def availability(self, request, pk=None):
        prop = self.get_object()
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        quote = AvailabilityChecker().check(
            prop.id,
            query.validated_data["check_in"],
            query.validated_data["check_out"],
        )
        return Response(AvailabilityQuoteSerializer(quote).data)

    def _set_status(self, request, new_status):
        prop = self.get_object()
        prop.status = new_status
        prop.save(update_fields=["status", "updated_at"])
        logger.info("Property %s marked %s by admin %s", prop.id, new_status, request.user.id)
        return Response(self.get_serializer(prop).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        return self._set_status(request, Property.Status.ACTIVE)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        return self._set_status(request, Property.Status.REJECTED)
