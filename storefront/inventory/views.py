import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from storefront.core.api_client import BackendClient
from storefront.core.cache_signals import notify_changed
from storefront.core.permissions import IsBackendAdmin
from storefront.core.utils import log_admin_action
from .serializers import InventoryLogQuerySerializer, StockAdjustmentSerializer, ThresholdSerializer
from .stock import annotate_stock_levels, products_from_listing

logger = logging.getLogger('storefront.inventory')


@api_view(['GET'])
@permission_classes([IsBackendAdmin])
def inventory_list(request):
    """Products with their stock level (out_of_stock, low, ok)"""
    params = {'limit': 100}
    search = request.query_params.get('search', '').strip()
    if search:
        params['search'] = search

    with BackendClient.for_request(request) as client:
        data = client.get('/admin/products', params=params)

    return Response(annotate_stock_levels(products_from_listing(data)))


@api_view(['POST'])
@permission_classes([IsBackendAdmin])
def inventory_adjust(request):
    """Add or deduct stock manually"""
    serializer = StockAdjustmentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    payload = serializer.to_backend()
    with BackendClient.for_request(request) as client:
        data = client.post('/admin/inventory/adjust', json=payload)

    target = payload.get('variantId') or payload.get('productId')
    logger.info(f"Stock of {target} changed by {payload['changeAmount']} ({payload['reason']})")
    log_admin_action(request, 'stock_adjust', 'inventory', target, changes=payload)
    notify_changed('inventory')
    return Response(data if data is not None else payload)


@api_view(['GET'])
@permission_classes([IsBackendAdmin])
def inventory_logs(request):
    """Stock movement history of a product or variant"""
    serializer = InventoryLogQuerySerializer(data=request.query_params)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    params = {key: value for key, value in serializer.validated_data.items() if value}
    with BackendClient.for_request(request) as client:
        data = client.get('/admin/inventory/logs', params=params)
    return Response(data if data is not None else [])


@api_view(['PATCH'])
@permission_classes([IsBackendAdmin])
def variant_threshold(request, pk):
    """Change the low stock alert threshold of a variant"""
    serializer = ThresholdSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with BackendClient.for_request(request) as client:
        data = client.put(f'/admin/products/variants/{pk}', json=serializer.validated_data)

    log_admin_action(request, 'update', 'variant', pk, changes=serializer.validated_data)
    notify_changed('inventory')
    return Response(data if data is not None else serializer.validated_data)
