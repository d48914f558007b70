from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from storefront.core.api_client import BackendClient
from storefront.core.cache_signals import notify_changed
from storefront.core.permissions import IsBackendAdmin
from storefront.core.utils import log_admin_action
from .serializers import ShippingZoneSerializer


# Shipping zone views
@api_view(['GET', 'POST'])
@permission_classes([IsBackendAdmin])
def shipping_zone_list_create(request):
    """List all shipping zones or create a new zone"""
    with BackendClient.for_request(request) as client:
        if request.method == 'GET':
            data = client.get('/admin/config/shipping-zones')
            return Response(data if data is not None else [])

        serializer = ShippingZoneSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        zone = client.post('/admin/config/shipping-zones', json=serializer.validated_data)

    zone_id = zone.get('id') if isinstance(zone, dict) else None
    log_admin_action(request, 'create', 'shipping_zone', zone_id, changes=serializer.validated_data)
    notify_changed('shipping_zone')
    return Response(zone, status=status.HTTP_201_CREATED)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsBackendAdmin])
def shipping_zone_detail(request, pk):
    """Update or delete a shipping zone"""
    with BackendClient.for_request(request) as client:
        if request.method == 'PATCH':
            serializer = ShippingZoneSerializer(data=request.data, partial=True)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
            zone = client.patch(f'/admin/config/shipping-zones/{pk}', json={'id': pk, **serializer.validated_data})
            log_admin_action(request, 'update', 'shipping_zone', pk, changes=serializer.validated_data)
            notify_changed('shipping_zone')
            return Response(zone)

        client.delete(f'/admin/config/shipping-zones/{pk}')

    log_admin_action(request, 'delete', 'shipping_zone', pk)
    notify_changed('shipping_zone')
    return Response(status=status.HTTP_204_NO_CONTENT)
