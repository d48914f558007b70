import logging

from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from .api_client import BackendClient, get_request_token
from .authentication import BackendUser, forget_current_user
from .exceptions import BackendAPIError
from .permissions import IsBackendAdmin
from .serializers import GoogleLoginSerializer, UploadSerializer, UserSerializer
from .system_config import get_system_config
from .utils import log_admin_action, store_session_token

logger = logging.getLogger('storefront.core')


@api_view(['POST'])
@permission_classes([AllowAny])
def google_login(request):
    """Exchange a Google token for a backend session token"""
    serializer = GoogleLoginSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with BackendClient() as client:
        data = client.post('/auth/google', json={'idToken': serializer.validated_data['idToken']})

    token = (data or {}).get('token') or (data or {}).get('accessToken')
    if not token:
        logger.error("Backend login answered without a token")
        return Response({'error': 'Login failed'}, status=status.HTTP_502_BAD_GATEWAY)

    store_session_token(request, token)

    user_data = data.get('user')
    with BackendClient(token=token) as client:
        if not user_data:
            user_data = client.get('/auth/me')

        # Guest cart becomes the user's server cart
        from storefront.cart.services import merge_guest_cart
        merge_guest_cart(request.session, client)

    user = BackendUser(user_data)
    logger.info(f"User {user} logged in")
    return Response({'user': user.to_dict(), 'token': token})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get the current user as the backend sees it"""
    return Response(UserSerializer(request.user).data)


@api_view(['POST'])
@permission_classes([AllowAny])
def logout(request):
    """End the backend session and drop everything stored for this visitor"""
    token = get_request_token(request._request)
    if token:
        try:
            with BackendClient(token=token) as client:
                client.post('/auth/logout')
        except BackendAPIError as e:
            # Local logout still happens
            logger.warning(f"Backend logout failed: {e}")
        forget_current_user(token)

    request.session.flush()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsBackendAdmin])
@parser_classes([MultiPartParser, FormParser])
def upload(request):
    """Validate an image and forward it to the backend's /upload"""
    serializer = UploadSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    uploaded = serializer.validated_data['file']
    files = {'file': (uploaded.name, uploaded.read(), uploaded.content_type or 'application/octet-stream')}

    with BackendClient.for_request(request) as client:
        data = client.request('POST', '/upload', files=files)

    url = (data or {}).get('url') if isinstance(data, dict) else None
    if not url:
        logger.error(f"Upload of {uploaded.name} returned no URL")
        return Response({'error': 'Upload failed'}, status=status.HTTP_502_BAD_GATEWAY)

    log_admin_action(request, 'upload', 'media', changes={'name': uploaded.name, 'url': url})
    return Response({'url': url}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([AllowAny])
def system_config(request):
    """Order/payment enums and shipping zones"""
    with BackendClient() as client:
        return Response(get_system_config(client))
