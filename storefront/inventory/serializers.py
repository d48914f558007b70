from rest_framework import serializers

ADJUST_ADD = 'add'
ADJUST_DEDUCT = 'deduct'

DEFAULT_REASONS = {
    ADJUST_ADD: 'Manual Restock',
    ADJUST_DEDUCT: 'Manual Deduction',
}


class StockAdjustmentSerializer(serializers.Serializer):
    """Manual stock adjustment of a product or one of its variants"""
    productId = serializers.CharField(required=False, allow_blank=True)
    variantId = serializers.CharField(required=False, allow_blank=True)
    type = serializers.ChoiceField(choices=[ADJUST_ADD, ADJUST_DEDUCT])
    amount = serializers.IntegerField(min_value=1)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate(self, data):
        if not data.get('productId') and not data.get('variantId'):
            raise serializers.ValidationError('Either productId or variantId is required.')
        return data

    def to_backend(self):
        """Payload for /admin/inventory/adjust"""
        data = self.validated_data
        payload = {}
        if data.get('variantId'):
            payload['variantId'] = data['variantId']
        else:
            payload['productId'] = data['productId']
        amount = data['amount']
        payload['changeAmount'] = amount if data['type'] == ADJUST_ADD else -amount
        payload['reason'] = (data.get('reason') or '').strip() or DEFAULT_REASONS[data['type']]
        return payload


class InventoryLogQuerySerializer(serializers.Serializer):
    productId = serializers.CharField(required=False)
    variantId = serializers.CharField(required=False)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=200, default=20)

    def validate(self, data):
        if not data.get('productId') and not data.get('variantId'):
            raise serializers.ValidationError('Either productId or variantId is required.')
        return data


class ThresholdSerializer(serializers.Serializer):
    lowStockThreshold = serializers.IntegerField(min_value=0)
