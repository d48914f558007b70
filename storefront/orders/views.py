import logging
from decimal import Decimal

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from storefront.core.api_client import BackendClient
from storefront.core.cache_signals import notify_changed
from storefront.core.exceptions import BackendAPIError, BackendNotFound
from storefront.core.permissions import IsBackendAdmin
from storefront.core.system_config import get_system_config
from storefront.core.utils import log_admin_action
from .progress import order_progress
from .serializers import OrderQuerySerializer, OrderStatusSerializer, PaymentStatusSerializer, RefundSerializer

logger = logging.getLogger('storefront.orders')


def _order_history(client, pk):
    try:
        data = client.get(f'/admin/orders/{pk}/history')
    except BackendAPIError as e:
        logger.warning(f"Could not load history of order {pk}: {e}")
        return []
    return data if isinstance(data, list) else []


def refundable_amount(order):
    """Paid minus already refunded, never below zero"""
    paid = Decimal(str(order.get('paidAmount') or 0))
    refunded = Decimal(str(order.get('refundedAmount') or 0))
    return max(paid - refunded, Decimal('0')).quantize(Decimal('0.01'))


@api_view(['GET'])
@permission_classes([IsBackendAdmin])
def order_list(request):
    """Paginated orders, filtered by status, payment status, pre-order flag and search"""
    serializer = OrderQuerySerializer(data=request.query_params)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with BackendClient.for_request(request) as client:
        data = client.get('/admin/orders', params=serializer.to_backend())
    return Response(data if data is not None else {'data': [], 'total': 0})


@api_view(['GET'])
@permission_classes([IsBackendAdmin])
def order_detail(request, pk):
    """Order with its fulfilment progress and status history"""
    with BackendClient.for_request(request) as client:
        order = client.get(f'/admin/orders/{pk}')
        if not order:
            return Response({'error': 'Order not found'}, status=status.HTTP_404_NOT_FOUND)
        history = _order_history(client, pk)

    return Response({
        'order': order,
        'progress': order_progress(order.get('status')),
        'history': history,
    })


@api_view(['PATCH'])
@permission_classes([IsBackendAdmin])
def order_status(request, pk):
    with BackendClient.for_request(request) as client:
        allowed = get_system_config(client).get('orderStatuses')
        serializer = OrderStatusSerializer(data=request.data, context={'allowed_statuses': allowed})
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = client.patch(f'/admin/orders/{pk}/status', json=serializer.validated_data)

    logger.info(f"Order {pk} moved to {serializer.validated_data['status']}")
    log_admin_action(request, 'status_change', 'order', pk, changes=serializer.validated_data)
    notify_changed('order')
    return Response(data if data is not None else serializer.validated_data)


@api_view(['PATCH'])
@permission_classes([IsBackendAdmin])
def order_payment_status(request, pk):
    with BackendClient.for_request(request) as client:
        allowed = get_system_config(client).get('paymentStatuses')
        serializer = PaymentStatusSerializer(data=request.data, context={'allowed_statuses': allowed})
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = client.patch(f'/admin/orders/{pk}/payment-status', json=serializer.validated_data)

    log_admin_action(request, 'payment_status_change', 'order', pk, changes=serializer.validated_data)
    notify_changed('order')
    return Response(data if data is not None else serializer.validated_data)


@api_view(['POST'])
@permission_classes([IsBackendAdmin])
def order_verify_payment(request, pk):
    """Confirm the pre-order deposit of an order"""
    with BackendClient.for_request(request) as client:
        data = client.post(f'/admin/orders/{pk}/verify-payment')

    log_admin_action(request, 'verify_payment', 'order', pk)
    notify_changed('order')
    return Response(data if data is not None else {'success': True})


@api_view(['POST'])
@permission_classes([IsBackendAdmin])
def order_refund(request, pk):
    """
    Refund part or all of what was paid.

    The amount is checked against paidAmount - refundedAmount when the order
    can be loaded; otherwise the backend has the final word.
    """
    with BackendClient.for_request(request) as client:
        refundable = None
        try:
            order = client.get(f'/admin/orders/{pk}')
            if isinstance(order, dict):
                refundable = refundable_amount(order)
        except BackendNotFound:
            return Response({'error': 'Order not found'}, status=status.HTTP_404_NOT_FOUND)
        except BackendAPIError as e:
            logger.warning(f"Refund of order {pk} without balance check: {e}")

        serializer = RefundSerializer(data=request.data, context={'refundable': refundable})
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        payload = serializer.to_backend()
        data = client.post(f'/admin/orders/{pk}/refund', json=payload)

    logger.info(f"Refunded {payload['amount']} on order {pk}")
    log_admin_action(request, 'refund', 'order', pk, changes=payload)
    notify_changed('order')
    return Response(data if data is not None else payload)


@api_view(['GET'])
@permission_classes([IsBackendAdmin])
def order_history(request, pk):
    with BackendClient.for_request(request) as client:
        data = client.get(f'/admin/orders/{pk}/history')
    return Response(data if data is not None else [])
