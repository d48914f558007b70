import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from storefront.core.api_client import BackendClient
from storefront.core.authentication import forget_current_user
from storefront.core.exceptions import BackendAPIError
from storefront.core.permissions import IsBackendAdmin
from .serializers import AddressSerializer, ProfileSerializer

logger = logging.getLogger('storefront.parties')


@api_view(['GET'])
@permission_classes([IsBackendAdmin])
def customer_list(request):
    """Registered customers"""
    with BackendClient.for_request(request) as client:
        data = client.get('/admin/users', params=request.query_params.dict() or None)

    if isinstance(data, dict):
        data = data.get('users') or data.get('data') or []
    return Response(data or [])


# Profile views
@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def profile(request):
    """Update name and phone of the signed-in customer"""
    serializer = ProfileSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with BackendClient.for_request(request) as client:
        data = client.put('/user/profile', json=serializer.validated_data)

    # /auth/me answers are cached per token
    forget_current_user(request.auth)
    logger.info(f"Profile updated for {request.user}")
    return Response(data if data is not None else serializer.validated_data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def profile_orders(request):
    """Order history of the signed-in customer; empty when it cannot be loaded"""
    with BackendClient.for_request(request) as client:
        try:
            data = client.get('/orders')
        except BackendAPIError as e:
            logger.warning(f"Could not load orders of {request.user}: {e}")
            return Response([])

    if isinstance(data, dict):
        data = data.get('data') or data.get('orders') or []
    return Response(data or [])


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def address_list_create(request):
    """Saved addresses, or add a new one"""
    with BackendClient.for_request(request) as client:
        if request.method == 'GET':
            data = client.get('/user/addresses')
            return Response(data if isinstance(data, list) else [])

        serializer = AddressSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        address = client.post('/user/addresses', json=serializer.validated_data)

    return Response(address if address is not None else serializer.validated_data,
                    status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def address_detail(request, pk):
    """Edit or delete a saved address"""
    with BackendClient.for_request(request) as client:
        if request.method == 'DELETE':
            client.delete(f'/user/addresses/{pk}')
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = AddressSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        address = client.put(f'/user/addresses/{pk}', json=serializer.validated_data)

    return Response(address if address is not None else serializer.validated_data)
