from rest_framework import serializers

from .stats import DateRangeError, resolve_date_range


class DateRangeSerializer(serializers.Serializer):
    start = serializers.DateField(required=False, allow_null=True, default=None)
    end = serializers.DateField(required=False, allow_null=True, default=None)

    def validate(self, data):
        try:
            data['start'], data['end'] = resolve_date_range(data.get('start'), data.get('end'))
        except DateRangeError as e:
            raise serializers.ValidationError({'start': str(e)})
        return data
