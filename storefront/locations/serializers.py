from rest_framework import serializers


class ShippingZoneSerializer(serializers.Serializer):
    key = serializers.SlugField(max_length=64)
    label = serializers.CharField(max_length=255)
    cost = serializers.FloatField(min_value=0)
    isActive = serializers.BooleanField(required=False, default=True)
