from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from storefront.core.api_client import BackendClient
from storefront.core.permissions import IsBackendAdmin
from .serializers import DateRangeSerializer
from .stats import SECTIONS, get_dashboard, get_section


@api_view(['GET'])
@permission_classes([IsBackendAdmin])
def dashboard(request):
    """KPIs, daily sales, low stock, top products, top customers and retention"""
    serializer = DateRangeSerializer(data=request.query_params)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    start, end = serializer.validated_data['start'], serializer.validated_data['end']
    with BackendClient.for_request(request) as client:
        data = get_dashboard(client, start, end)
    return Response(data)


@api_view(['GET'])
@permission_classes([IsBackendAdmin])
def stats_section(request, section):
    """One dashboard section"""
    if section not in SECTIONS:
        return Response({'error': f"Unknown report '{section}'"}, status=status.HTTP_404_NOT_FOUND)

    serializer = DateRangeSerializer(data=request.query_params)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    start, end = serializer.validated_data['start'], serializer.validated_data['end']
    with BackendClient.for_request(request) as client:
        data = get_section(client, section, start, end)
    return Response(data)
