import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from storefront.core.api_client import BackendClient
from storefront.core.cache_signals import notify_changed
from storefront.core.permissions import IsBackendAdmin
from storefront.core.utils import log_admin_action
from .coupons import coupon_state, coupons_from_listing
from .serializers import CouponSerializer

logger = logging.getLogger('storefront.pricing')


# Coupon views
@api_view(['GET', 'POST'])
@permission_classes([IsBackendAdmin])
def coupon_list_create(request):
    """List all coupons or create a new coupon"""
    with BackendClient.for_request(request) as client:
        if request.method == 'GET':
            data = client.get('/admin/coupons', params={'limit': 100})
            coupons = [{**coupon, 'state': coupon_state(coupon)} for coupon in coupons_from_listing(data)]
            return Response(coupons)

        serializer = CouponSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        payload = serializer.to_backend()
        coupon = client.post('/admin/coupons', json=payload)

    coupon_id = coupon.get('id') if isinstance(coupon, dict) else None
    logger.info(f"Coupon {payload['code']} created")
    log_admin_action(request, 'create', 'coupon', coupon_id, changes=payload)
    notify_changed('coupon')
    return Response(coupon if coupon is not None else payload, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsBackendAdmin])
def coupon_detail(request, pk):
    """Replace or delete a coupon"""
    with BackendClient.for_request(request) as client:
        if request.method == 'DELETE':
            client.delete(f'/admin/coupons/{pk}')
            log_admin_action(request, 'delete', 'coupon', pk)
            notify_changed('coupon')
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = CouponSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        payload = serializer.to_backend()
        coupon = client.put(f'/admin/coupons/{pk}', json=payload)

    log_admin_action(request, 'update', 'coupon', pk, changes=payload)
    notify_changed('coupon')
    return Response(coupon if coupon is not None else payload)
