from rest_framework import serializers


class CartItemSerializer(serializers.Serializer):
    productId = serializers.CharField()
    quantity = serializers.IntegerField(min_value=1, required=False, default=1)


class CartQuantitySerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


class WishlistItemSerializer(serializers.Serializer):
    productId = serializers.CharField()


class CheckoutAddressSerializer(serializers.Serializer):
    """Shipping address as typed at checkout"""
    firstName = serializers.CharField(max_length=100)
    lastName = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(max_length=20)
    address = serializers.CharField(max_length=500)
    division = serializers.CharField(max_length=100)
    district = serializers.CharField(max_length=100)
    thana = serializers.CharField(max_length=100)
    zip = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    deliveryLocation = serializers.CharField(required=False, allow_blank=True)


class CheckoutSerializer(serializers.Serializer):
    address = CheckoutAddressSerializer()
    addressId = serializers.CharField(required=False, allow_blank=True)
    label = serializers.CharField(required=False, allow_blank=True, default='Home')
    saveAddress = serializers.BooleanField(required=False, default=False)
    isEdited = serializers.BooleanField(required=False, default=False)
    paymentTrxId = serializers.CharField(required=False, allow_blank=True)
    paymentProvider = serializers.CharField(required=False, allow_blank=True)
    paymentPhone = serializers.CharField(required=False, allow_blank=True)
