import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from storefront.core.api_client import BackendClient
from storefront.core.cache_signals import notify_changed
from storefront.core.cache_utils import CONTENT_CACHE_TTL, get_content_cache_key, get_or_fetch
from storefront.core.permissions import IsBackendAdmin
from storefront.core.utils import log_admin_action
from .serializers import CONTENT_KEYS, POLICY_KEYS, get_content_serializer

logger = logging.getLogger('storefront.content')


def _unknown_key(key):
    return Response({'error': f"Unknown content key '{key}'"}, status=status.HTTP_404_NOT_FOUND)


@api_view(['GET'])
@permission_classes([AllowAny])
def content_detail(request, key):
    """Published CMS block"""
    if key not in CONTENT_KEYS:
        return _unknown_key(key)

    with BackendClient() as client:
        data = get_or_fetch(get_content_cache_key(key), CONTENT_CACHE_TTL,
                            lambda: client.get(f'/content/{key}'))
    if data is None:
        return Response({'error': 'Content not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(data)


@api_view(['PUT'])
@permission_classes([IsBackendAdmin])
def admin_content_update(request, key):
    """Replace a CMS block; structured keys are validated first"""
    if key not in CONTENT_KEYS:
        return _unknown_key(key)
    if not isinstance(request.data, dict):
        return Response({'error': 'Content must be a JSON object'}, status=status.HTTP_400_BAD_REQUEST)

    serializer_class = get_content_serializer(key)
    if serializer_class is None:
        payload = dict(request.data)
    else:
        serializer = serializer_class(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        payload = dict(serializer.validated_data)

    if key in POLICY_KEYS:
        payload['lastUpdated'] = timezone.now().isoformat()

    with BackendClient.for_request(request) as client:
        data = client.put(f'/admin/content/{key}', json=payload)

    logger.info(f"Content {key} updated")
    log_admin_action(request, 'update', 'content', key)
    notify_changed('content', key=key)
    return Response(data if data is not None else payload)
