from rest_framework import serializers

from .models import Property


class PropertySerializer(serializers.ModelSerializer):
    merchant_name = serializers.SerializerMethodField()

    class Meta:
        model = Property
        fields = [
            "id",
            "merchant",
            "merchant_name",
            "name",
            "description",
            "location",
            "address",
            "bedrooms",
            "bathrooms",
            "max_guests",
            "price_per_night",
            "currency",
            "amenities",
            "images",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "merchant", "merchant_name", "created_at", "updated_at"]

    def get_fields(self):
        fields = super().get_fields()
        request = self.context.get("request")
        user = getattr(request, "user", None)
        if not (user and user.is_authenticated and user.is_admin):
            fields["status"].read_only = True
        return fields

    def get_merchant_name(self, obj) -> str:
        merchant = obj.merchant
        return merchant.display_name or merchant.get_full_name() or merchant.email

    def validate_amenities(self, value):
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise serializers.ValidationError("Amenities must be a list of strings.")
        return value

    def validate_images(self, value):
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise serializers.ValidationError("Images must be a list of URLs.")
        return value

    def validate_currency(self, value: str) -> str:
        return value.upper()

    def validate(self, attrs):
        instance = self.instance
        if instance is not None and instance.bookings.exists():
            locked = sorted(
                name
                for name, value in attrs.items()
                if name not in Property.EDITABLE_WHEN_BOOKED and getattr(instance, name) != value
            )
            if locked:
                raise serializers.ValidationError(
                    {name: "Cannot be changed once the property has bookings." for name in locked}
                )
        return attrs
