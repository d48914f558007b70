from rest_framework import serializers


class ProfileSerializer(serializers.Serializer):
    firstName = serializers.CharField(max_length=100)
    lastName = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')


class AddressSerializer(serializers.Serializer):
    """Saved delivery address of a customer"""
    label = serializers.CharField(max_length=50)
    firstName = serializers.CharField(max_length=100)
    lastName = serializers.CharField(max_length=100, required=False, allow_blank=True)
    contactEmail = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(max_length=20)
    deliveryZone = serializers.CharField(max_length=64, required=False, allow_blank=True)
    division = serializers.CharField(max_length=100)
    district = serializers.CharField(max_length=100)
    thana = serializers.CharField(max_length=100)
    addressLine = serializers.CharField(max_length=500)
    landmark = serializers.CharField(max_length=255, required=False, allow_blank=True)
    postalCode = serializers.CharField(max_length=20, required=False, allow_blank=True)
    isDefault = serializers.BooleanField(required=False)

    def validate_phone(self, value):
        phone = value.strip()
        digits = phone[1:] if phone.startswith('+') else phone
        if not digits.replace(' ', '').replace('-', '').isdigit():
            raise serializers.ValidationError('Enter a valid phone number.')
        return phone
