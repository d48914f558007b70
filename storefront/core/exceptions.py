"""
Errors raised while talking to the backend API.

The DRF handler that turns them into responses lives in exception_handlers.
"""

from rest_framework import status


class BackendAPIError(Exception):
    """The backend answered with an error status (or could not be reached)"""

    default_message = 'Backend request failed'

    def __init__(self, status_code=None, message=None, payload=None):
        self.status_code = status_code
        self.message = message or self.default_message
        self.payload = payload
        super().__init__(self.message)

    def __str__(self):
        if self.status_code:
            return f"{self.status_code}: {self.message}"
        return self.message


class BackendUnavailable(BackendAPIError):
    default_message = 'Backend service is unavailable'


class BackendAuthError(BackendAPIError):
    default_message = 'Authentication with backend failed'


class BackendNotFound(BackendAPIError):
    default_message = 'Resource not found'


def error_for_status(status_code, message=None, payload=None):
    """Pick the exception class matching a backend status code"""
    if status_code == 401:
        return BackendAuthError(status_code, message, payload)
    if status_code == 404:
        return BackendNotFound(status_code, message, payload)
    return BackendAPIError(status_code, message, payload)


def response_status_for(exc):
    """Map a backend error to the status code returned to our caller"""
    if isinstance(exc, BackendUnavailable):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if exc.status_code is None:
        return status.HTTP_502_BAD_GATEWAY
    if exc.status_code >= 500:
        return status.HTTP_502_BAD_GATEWAY
    return exc.status_code
