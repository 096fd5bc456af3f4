from rest_framework import serializers


class AvailabilityQuerySerializer(serializers.Serializer):
    """Query-string shape for availability lookups; ordering of the dates is checked by the checker."""

    check_in = serializers.DateField()
    check_out = serializers.DateField()


class PropertyAvailabilityQuerySerializer(AvailabilityQuerySerializer):
    property_id = serializers.IntegerField(min_value=1)


class AvailabilityQuoteSerializer(serializers.Serializer):
    property_id = serializers.IntegerField(source="property.id")
    property_name = serializers.CharField(source="property.name")
    available = serializers.BooleanField()
    nights = serializers.IntegerField()
    price_per_night = serializers.DecimalField(
        source="property.price_per_night",
        max_digits=10,
        decimal_places=2,
    )
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField(source="property.currency")
