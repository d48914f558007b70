"""Utility functions for request handling and audit logging"""
import logging

audit_logger = logging.getLogger('storefront.audit')


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def log_admin_action(request=None, action=None, resource=None, object_id=None, changes=None):
    """
    Write an audit line for an admin mutation

    Args:
        request: DRF/Django request (for user and IP)
        action: Action type (create, update, delete, reorder, status_change, ...)
        resource: Name of the backend resource acted upon
        object_id: ID of the object, if any
        changes: Dictionary describing the change
    """
    if not action or not resource:
        audit_logger.warning(
            f"Audit log skipped: missing required fields (action={action}, resource={resource})"
        )
        return

    user = getattr(request, 'user', None) if request else None
    who = str(user) if user is not None and getattr(user, 'is_authenticated', False) else 'anonymous'
    audit_logger.info(
        "%s %s %s by %s from %s %s",
        action, resource, object_id or '-', who, get_client_ip(request) or '-', changes or {},
    )


def store_session_token(request, token):
    """Remember the backend token for browser visitors"""
    request.session['token'] = token
    request.session.cycle_key()

