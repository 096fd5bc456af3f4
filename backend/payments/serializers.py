from rest_framework import serializers


class PaymentSerializer(serializers.Serializer):
    """Read shape for ``PaymentRecord``."""

    id = serializers.IntegerField()
    booking_id = serializers.IntegerField()
    payer_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()
    method = serializers.CharField()
    status = serializers.CharField()
    transaction_id = serializers.CharField(allow_blank=True)
    gateway_response = serializers.DictField()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class PaymentRequestSerializer(serializers.Serializer):
    """Checkout payload; only the fields relevant to the chosen method are used by its gateway."""

    method = serializers.CharField(required=False, allow_blank=True, default="")
    card_number = serializers.CharField(required=False, allow_blank=True, max_length=32)
    card_holder = serializers.CharField(required=False, allow_blank=True, max_length=120)
    expiry = serializers.CharField(required=False, allow_blank=True, max_length=7)
    cvv = serializers.CharField(required=False, allow_blank=True, max_length=4, write_only=True)
    paypal_email = serializers.EmailField(required=False, allow_blank=True)
    account_number = serializers.CharField(required=False, allow_blank=True, max_length=34)
    payment_method_id = serializers.CharField(required=False, allow_blank=True, max_length=255)


class PaymentResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    payment = PaymentSerializer(allow_null=True)


class RefundRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=1000, default="")


class RefundDecisionSerializer(serializers.Serializer):
    approved = serializers.BooleanField()


class PaymentListQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=200, required=False, default=50)
    offset = serializers.IntegerField(min_value=0, required=False, default=0)
    status = serializers.CharField(required=False, allow_blank=True)
    method = serializers.CharField(required=False, allow_blank=True)


class PaymentStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    completed = serializers.IntegerField()
    completed_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    pending = serializers.IntegerField()
    pending_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    failed = serializers.IntegerField()
    refund_pending = serializers.IntegerField()
    refunded = serializers.IntegerField()
