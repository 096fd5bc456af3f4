from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdmin, IsMerchant
from accounts.serializers import UserSerializer
from bookings.serializers import BookingSerializer, BookingStatsSerializer
from bookings.services.lifecycle import BookingService
from core.serializers import DateRangeQuerySerializer, PageQuerySerializer
from payments.serializers import PaymentStatsSerializer
from properties.models import Property
from properties.serializers import PropertySerializer

from .services import merchant_dashboard, platform_analytics

User = get_user_model()


class PropertyStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    active = serializers.IntegerField()
    pending = serializers.IntegerField()
    rejected = serializers.IntegerField()


class UserBreakdownSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    breakdown = serializers.DictField(child=serializers.IntegerField())


class AnalyticsSerializer(serializers.Serializer):
    properties = PropertyStatsSerializer()
    bookings = BookingStatsSerializer()
    payments = PaymentStatsSerializer()
    users = UserBreakdownSerializer()


class MerchantStatsSerializer(serializers.Serializer):
    properties = PropertyStatsSerializer()
    bookings = BookingStatsSerializer()


class UserDirectoryQuerySerializer(PageQuerySerializer):
    role = serializers.ChoiceField(choices=User.ROLES, required=False)


def _date_range(request):
    query = DateRangeQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    return query.validated_data.get("start_date"), query.validated_data.get("end_date")


class AdminUsersView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request, *args, **kwargs):
        query = UserDirectoryQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        users = User.objects.order_by("-date_joined", "-id")
        role = query.validated_data.get("role")
        if role:
            users = users.filter(role=role)
        offset = query.validated_data["offset"]
        limit = query.validated_data.get("limit") or 50
        return Response(UserSerializer(users[offset:offset + limit], many=True).data)


class AdminAnalyticsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request, *args, **kwargs):
        start_date, end_date = _date_range(request)
        return Response(AnalyticsSerializer(platform_analytics(start_date, end_date)).data)


class AdminBookingsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request, *args, **kwargs):
        query = PageQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        bookings = BookingService().list(
            status=query.validated_data.get("status") or None,
            limit=query.validated_data.get("limit"),
            offset=query.validated_data["offset"],
        )
        return Response(BookingSerializer(bookings, many=True).data)


class MerchantPropertiesView(APIView):
    permission_classes = [IsMerchant]

    def get(self, request, *args, **kwargs):
        query = PageQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        properties = Property.objects.select_related("merchant").filter(merchant=request.user)
        status_filter = query.validated_data.get("status")
        if status_filter:
            properties = properties.filter(status=status_filter)
        offset = query.validated_data["offset"]
        limit = query.validated_data.get("limit") or 50
        serializer = PropertySerializer(
            properties[offset:offset + limit],
            many=True,
            context={"request": request},
        )
        return Response(serializer.data)


class MerchantBookingsView(APIView):
    permission_classes = [IsMerchant]

    def get(self, request, *args, **kwargs):
        query = PageQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        bookings = BookingService().list(
            merchant_id=request.user.id,
            status=query.validated_data.get("status") or None,
            limit=query.validated_data.get("limit"),
            offset=query.validated_data["offset"],
        )
        return Response(BookingSerializer(bookings, many=True).data)


class MerchantStatsView(APIView):
    permission_classes = [IsMerchant]

    def get(self, request, *args, **kwargs):
        start_date, end_date = _date_range(request)
        return Response(MerchantStatsSerializer(merchant_dashboard(request.user.id, start_date, end_date)).data)
