from decimal import Decimal

from rest_framework import serializers


class OrderQuerySerializer(serializers.Serializer):
    """Filters of the admin order list; only the ones given are forwarded"""
    page = serializers.IntegerField(required=False, min_value=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100)
    status = serializers.CharField(required=False, allow_blank=True)
    payment_status = serializers.CharField(required=False, allow_blank=True)
    is_preorder = serializers.BooleanField(required=False, allow_null=True, default=None)
    search = serializers.CharField(required=False, allow_blank=True)

    def to_backend(self):
        params = {}
        for key, value in self.validated_data.items():
            if value is None or value == '':
                continue
            params[key] = str(value).lower() if isinstance(value, bool) else value
        return params


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=50)
    note = serializers.CharField(required=False, allow_blank=True, max_length=500)

    def validate_status(self, value):
        allowed = self.context.get('allowed_statuses') or []
        if allowed and value not in allowed:
            raise serializers.ValidationError(f"Unknown order status '{value}'.")
        return value


class PaymentStatusSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=50)

    def validate_status(self, value):
        allowed = self.context.get('allowed_statuses') or []
        if allowed and value not in allowed:
            raise serializers.ValidationError(f"Unknown payment status '{value}'.")
        return value


class RefundSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    reason = serializers.CharField(max_length=500)
    restock = serializers.BooleanField(required=False, default=False)

    def validate_amount(self, value):
        refundable = self.context.get('refundable')
        if refundable is not None and value > refundable:
            raise serializers.ValidationError(
                f"Refund amount exceeds the refundable balance of {refundable}."
            )
        return value

    def to_backend(self):
        data = self.validated_data
        return {'amount': float(data['amount']), 'reason': data['reason'], 'restock': data['restock']}
