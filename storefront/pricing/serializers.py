from rest_framework import serializers
from rest_framework.settings import ISO_8601

COUPON_PERCENTAGE = 'percentage'
COUPON_FIXED = 'fixed'


class OptionalDateTimeField(serializers.DateTimeField):
    """Accepts dates or datetimes; a blank value clears the field"""

    def __init__(self, **kwargs):
        kwargs.setdefault('input_formats', [ISO_8601, '%Y-%m-%d'])
        kwargs.setdefault('required', False)
        kwargs.setdefault('allow_null', True)
        super().__init__(**kwargs)

    def to_internal_value(self, value):
        if value in ('', None):
            return None
        return super().to_internal_value(value)


class CouponSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    type = serializers.ChoiceField(choices=[COUPON_PERCENTAGE, COUPON_FIXED], default=COUPON_PERCENTAGE)
    value = serializers.FloatField()
    minSpend = serializers.FloatField(min_value=0, default=0)
    usageLimit = serializers.IntegerField(min_value=0, default=0)
    startAt = OptionalDateTimeField()
    expiresAt = OptionalDateTimeField()
    isActive = serializers.BooleanField(required=False, default=True)

    def validate_code(self, value):
        code = value.strip().upper()
        if not code:
            raise serializers.ValidationError('Coupon code cannot be blank.')
        if ' ' in code:
            raise serializers.ValidationError('Coupon code cannot contain spaces.')
        return code

    def validate_value(self, value):
        if value <= 0:
            raise serializers.ValidationError('Value must be greater than zero.')
        return value

    def validate(self, data):
        if data.get('type') == COUPON_PERCENTAGE and data.get('value', 0) > 100:
            raise serializers.ValidationError({'value': 'A percentage discount cannot exceed 100.'})

        start_at, expires_at = data.get('startAt'), data.get('expiresAt')
        if start_at and expires_at and start_at >= expires_at:
            raise serializers.ValidationError({'expiresAt': 'Expiry must be after the start date.'})
        return data

    def to_backend(self):
        payload = dict(self.validated_data)
        for field in ('startAt', 'expiresAt'):
            if field in payload:
                payload[field] = payload[field].isoformat() if payload[field] else None
        return payload
