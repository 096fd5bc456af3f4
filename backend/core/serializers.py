from rest_framework import serializers


class PageQuerySerializer(serializers.Serializer):
    """``limit``/``offset``/``status`` query parameters shared by the list endpoints."""

    limit = serializers.IntegerField(min_value=1, max_value=200, required=False)
    offset = serializers.IntegerField(min_value=0, required=False, default=0)
    status = serializers.CharField(required=False, allow_blank=True)


class DateRangeQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and end < start:
            raise serializers.ValidationError({"end_date": "End date must not precede start date."})
        return attrs
