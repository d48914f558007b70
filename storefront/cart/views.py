import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from storefront.core.api_client import BackendClient
from storefront.core.exceptions import BackendAPIError
from storefront.core.system_config import get_shipping_zones
from .checkout import CheckoutError, CheckoutFlow, CheckoutStatus
from .serializers import CartItemSerializer, CartQuantitySerializer, CheckoutSerializer, WishlistItemSerializer
from .services import (
    CART_SYNCED_SESSION_KEY, add_to_cart, cart_summary, clear_cart,
    current_cart, empty_cart, find_line, remove_from_cart, update_quantity,
)

logger = logging.getLogger('storefront.cart')


def _cart_client(request):
    """Client carrying the token of signed-in visitors, anonymous otherwise"""
    if request.user and request.user.is_authenticated:
        return BackendClient.for_request(request)
    return BackendClient()


# Cart views
@api_view(['GET', 'DELETE'])
@permission_classes([AllowAny])
def cart_detail(request):
    """Current cart, or clear it"""
    with _cart_client(request) as client:
        if request.method == 'DELETE':
            empty_cart(request.session, client)
            return Response(status=status.HTTP_204_NO_CONTENT)
        lines = current_cart(request.session, client)
    return Response(cart_summary(lines))


@api_view(['POST'])
@permission_classes([AllowAny])
def cart_items(request):
    """Add a product to the cart"""
    serializer = CartItemSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    product_id = serializer.validated_data['productId']
    with _cart_client(request) as client:
        current_cart(request.session, client)
        product = client.get(f'/product/{product_id}')
        if not product:
            return Response({'error': 'Product not found'}, status=status.HTTP_404_NOT_FOUND)
        lines = add_to_cart(request.session, client, product, serializer.validated_data['quantity'])

    return Response(cart_summary(lines), status=status.HTTP_201_CREATED)


@api_view(['PATCH', 'DELETE'])
@permission_classes([AllowAny])
def cart_item_detail(request, product_id):
    """Change the quantity of a cart line or remove it"""
    with _cart_client(request) as client:
        lines = current_cart(request.session, client)
        if not find_line(lines, product_id):
            return Response({'error': 'Cart item not found'}, status=status.HTTP_404_NOT_FOUND)

        if request.method == 'DELETE':
            lines = remove_from_cart(request.session, client, product_id)
            return Response(cart_summary(lines))

        serializer = CartQuantitySerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        lines = update_quantity(request.session, client, product_id, serializer.validated_data['quantity'])

    return Response(cart_summary(lines))


# Wishlist views
def _wishlist_items(client):
    data = client.get('/wishlist')
    return (data.get('items') or []) if isinstance(data, dict) else []


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def wishlist_list_create(request):
    """Wishlist of the signed-in visitor, or add a product to it"""
    with BackendClient.for_request(request) as client:
        if request.method == 'GET':
            return Response({'items': _wishlist_items(client)})

        serializer = WishlistItemSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = client.post('/wishlist', json=serializer.validated_data)

    logger.info(f"{request.user} added {serializer.validated_data['productId']} to wishlist")
    return Response(data if data is not None else serializer.validated_data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def wishlist_item(request, product_id):
    """Whether a product is wishlisted, or remove it"""
    with BackendClient.for_request(request) as client:
        if request.method == 'DELETE':
            client.delete(f'/wishlist/{product_id}')
            return Response(status=status.HTTP_204_NO_CONTENT)

        items = _wishlist_items(client)

    in_wishlist = any(
        (item.get('product') or {}).get('id') == product_id or item.get('productId') == product_id
        for item in items
    )
    return Response({'inWishlist': in_wishlist})


# Checkout
def _saved_addresses(client):
    try:
        data = client.get('/user/addresses')
    except BackendAPIError as e:
        logger.warning(f"Could not load saved addresses: {e}")
        return []
    return data if isinstance(data, list) else []


def _remember_address(client, data, saved_addresses):
    """Save a new address or update an edited one; failures never block checkout"""
    address = data['address']
    body = {
        'label': data.get('label') or 'Home',
        'firstName': address['firstName'],
        'phone': address['phone'],
        'addressLine': address['address'],
        'division': address['division'],
        'district': address['district'],
        'thana': address['thana'],
        'postalCode': address.get('zip', ''),
    }
    address_id = data.get('addressId')
    try:
        if not address_id and data.get('saveAddress'):
            body['isDefault'] = len(saved_addresses) == 0
            client.post('/user/addresses', json=body)
        elif address_id and data.get('isEdited'):
            client.put(f'/user/addresses/{address_id}', json=body)
    except BackendAPIError as e:
        logger.warning(f"Failed to save checkout address: {e}")


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def checkout(request):
    """
    Checkout of the current cart.

    GET describes the checkout (items, totals, zones, deposit, saved addresses).
    POST places the order and clears the cart.
    """
    with BackendClient.for_request(request) as client:
        flow = CheckoutFlow(get_shipping_zones(client))
        flow.load(current_cart(request.session, client))

        if request.method == 'GET':
            data = flow.to_dict(request.query_params.get('deliveryLocation'))
            data['addresses'] = _saved_addresses(client) if flow.status == CheckoutStatus.READY else []
            return Response(data)

        if flow.status != CheckoutStatus.READY:
            return Response({'status': flow.status, 'error': flow.error}, status=status.HTTP_400_BAD_REQUEST)

        serializer = CheckoutSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data

        address = dict(data['address'])
        if not address.get('email'):
            address['email'] = request.user.email

        if data.get('saveAddress') or data.get('isEdited'):
            _remember_address(client, data, _saved_addresses(client))

        try:
            order = flow.submit(client, address, data)
        except CheckoutError as e:
            return Response({'status': flow.status, 'error': e.message}, status=e.status_code)

    clear_cart(request.session)
    request.session[CART_SYNCED_SESSION_KEY] = False
    logger.info(f"Checkout completed for {request.user}")
    return Response({'status': flow.status, 'order': order}, status=status.HTTP_201_CREATED)
