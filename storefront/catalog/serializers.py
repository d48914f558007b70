from rest_framework import serializers

from .category_tree import REORDER_ACTIONS
from .shop import SORT_CHOICES

STOCK_STATUS_CHOICES = ['in_stock', 'out_of_stock', 'pre_order']


class ShopQuerySerializer(serializers.Serializer):
    """Query string of the shop and category listings"""
    page = serializers.IntegerField(required=False, min_value=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100)
    sort = serializers.ChoiceField(choices=SORT_CHOICES, required=False)
    category = serializers.CharField(required=False, allow_blank=True)
    minPrice = serializers.FloatField(required=False, min_value=0)
    maxPrice = serializers.FloatField(required=False, min_value=0)
    inStock = serializers.BooleanField(required=False)
    search = serializers.CharField(required=False, allow_blank=True)

    def validate(self, data):
        min_price = data.get('minPrice')
        max_price = data.get('maxPrice')
        if min_price is not None and max_price is not None and min_price > max_price:
            raise serializers.ValidationError({'minPrice': 'Must not exceed maxPrice.'})
        return data


class SearchQuerySerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True, default='')
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=20)


class ReviewSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField()

    def validate_comment(self, value):
        if not value.strip():
            raise serializers.ValidationError("Comment cannot be empty.")
        return value.strip()


class ProductFAQSerializer(serializers.Serializer):
    question = serializers.CharField()
    answer = serializers.CharField()


class ProductVerdictSerializer(serializers.Serializer):
    summary = serializers.CharField(allow_blank=True)
    pros = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    cons = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    rating = serializers.FloatField(required=False, allow_null=True, min_value=1, max_value=5)


class ProductSerializer(serializers.Serializer):
    """Admin product payload, coerced before it is sent to the backend"""
    name = serializers.CharField(max_length=255)
    slug = serializers.SlugField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    basePrice = serializers.FloatField(min_value=0)
    salePrice = serializers.FloatField(min_value=0, required=False, allow_null=True)
    stock = serializers.IntegerField(min_value=0, required=False, default=0)
    lowStockThreshold = serializers.IntegerField(min_value=0, required=False, default=5)
    stockStatus = serializers.ChoiceField(choices=STOCK_STATUS_CHOICES, required=False, default='in_stock')
    sku = serializers.CharField(required=False, allow_blank=True)
    categoryIds = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    images = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    variants = serializers.ListField(child=serializers.DictField(), required=False, default=list)
    isActive = serializers.BooleanField(required=False, default=True)
    isFeatured = serializers.BooleanField(required=False, default=False)
    isNew = serializers.BooleanField(required=False, default=False)
    metaTitle = serializers.CharField(required=False, allow_blank=True)
    metaDescription = serializers.CharField(required=False, allow_blank=True)
    keywords = serializers.CharField(required=False, allow_blank=True)
    ogImage = serializers.CharField(required=False, allow_blank=True)
    specs = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False)
    faqs = ProductFAQSerializer(many=True, required=False)
    verdict = ProductVerdictSerializer(required=False, allow_null=True)

    def validate(self, data):
        base_price = data.get('basePrice')
        sale_price = data.get('salePrice')
        if sale_price and base_price is not None and sale_price > base_price:
            raise serializers.ValidationError({'salePrice': 'Sale price cannot exceed base price.'})
        return data


class ProductStatusSerializer(serializers.Serializer):
    isActive = serializers.BooleanField()


class BulkDeleteSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.CharField(), allow_empty=False)


class CategorySerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    slug = serializers.SlugField(max_length=255)
    parentId = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    icon = serializers.CharField(required=False, allow_blank=True)
    image = serializers.CharField(required=False, allow_blank=True)
    isActive = serializers.BooleanField(required=False, default=True)
    isFeatured = serializers.BooleanField(required=False, default=False)
    showInNav = serializers.BooleanField(required=False, default=True)
    metaTitle = serializers.CharField(required=False, allow_blank=True)
    metaDescription = serializers.CharField(required=False, allow_blank=True)
    keywords = serializers.CharField(required=False, allow_blank=True)

    def validate_parentId(self, value):
        return value or None


class DraftActionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=sorted(REORDER_ACTIONS))
    id = serializers.CharField()


class ReorderItemSerializer(serializers.Serializer):
    id = serializers.CharField()
    depth = serializers.IntegerField(min_value=0)


class ReorderSerializer(serializers.Serializer):
    items = ReorderItemSerializer(many=True, allow_empty=False)


class CollectionSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    slug = serializers.SlugField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    image = serializers.CharField(required=False, allow_blank=True)
    story = serializers.CharField(required=False, allow_blank=True)
    isActive = serializers.BooleanField(required=False, default=True)
    metaTitle = serializers.CharField(required=False, allow_blank=True)
    metaDescription = serializers.CharField(required=False, allow_blank=True)
    keywords = serializers.CharField(required=False, allow_blank=True)
    ogImage = serializers.CharField(required=False, allow_blank=True)


class CollectionProductSerializer(serializers.Serializer):
    productId = serializers.CharField()
    action = serializers.ChoiceField(choices=['add', 'remove'])
