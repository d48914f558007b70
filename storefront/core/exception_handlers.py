"""
DRF exception handler that also turns backend errors into JSON responses.

The backend client must not import this module.
"""
import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from .exceptions import BackendAPIError, response_status_for

logger = logging.getLogger(__name__)


def backend_exception_handler(exc, context):
    """DRF exception handler that also understands BackendAPIError"""
    if isinstance(exc, BackendAPIError):
        view = context.get('view')
        view_name = view.__class__.__name__ if view else 'unknown'
        response_status = response_status_for(exc)
        if response_status >= 500:
            logger.error(f"Backend error in {view_name}: {exc}")
        else:
            logger.warning(f"Backend rejected request in {view_name}: {exc}")
        return Response({'error': exc.message}, status=response_status)

    return exception_handler(exc, context)
