from rest_framework import serializers


class BookingSerializer(serializers.Serializer):
    """Read shape for ``BookingRecord``."""

    id = serializers.IntegerField()
    property_id = serializers.IntegerField()
    property_name = serializers.CharField()
    customer_id = serializers.IntegerField()
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    nights = serializers.IntegerField()
    guests = serializers.IntegerField()
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()
    status = serializers.CharField()
    payment_status = serializers.CharField()
    payment_id = serializers.IntegerField(allow_null=True)
    payment_method = serializers.CharField(allow_blank=True)
    special_requests = serializers.CharField(allow_blank=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class BookingCreateSerializer(serializers.Serializer):
    property_id = serializers.IntegerField(min_value=1)
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    guests = serializers.IntegerField(min_value=1, default=1)
    special_requests = serializers.CharField(required=False, allow_blank=True, max_length=2000, default="")


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.CharField()


class BookingStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    pending = serializers.IntegerField()
    confirmed = serializers.IntegerField()
