"""
Authentication against the backend API.

The storefront does not own users: a visitor is whoever the backend says
the bearer token belongs to (``GET /auth/me``).
"""
import logging

from django.core.cache import cache
from rest_framework import authentication, exceptions

from .api_client import BackendClient, get_request_token
from .cache_utils import CURRENT_USER_CACHE_TTL, get_current_user_cache_key
from .exceptions import BackendAPIError, BackendAuthError

logger = logging.getLogger(__name__)


class BackendUser:
    """User record resolved from the backend (not a Django model)"""

    is_authenticated = True
    is_anonymous = False

    def __init__(self, data):
        self.data = dict(data or {})
        self.id = self.data.get('id')
        self.email = self.data.get('email', '')
        self.first_name = self.data.get('firstName') or ''
        self.last_name = self.data.get('lastName') or ''
        self.avatar = self.data.get('avatar')
        self.role = self.data.get('role', 'customer')
        self.phone = self.data.get('phone')

    @property
    def is_admin(self):
        return self.role == 'admin'

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self):
        return {**self.data, 'isAdmin': self.is_admin}

    def __str__(self):
        return self.email or str(self.id)


def fetch_current_user(token):
    """Resolve a token to the backend user payload (cached per token)"""
    cache_key = get_current_user_cache_key(token)
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    with BackendClient(token=token) as client:
        data = client.get('/auth/me')
    if data:
        cache.set(cache_key, data, CURRENT_USER_CACHE_TTL)
    return data


def forget_current_user(token):
    if token:
        cache.delete(get_current_user_cache_key(token))


class BackendTokenAuthentication(authentication.BaseAuthentication):
    """
    Bearer token authentication resolved by the backend.

    The token comes from the Authorization header or, for browser visitors,
    from the session (set at login). A rejected session token is dropped and
    the visitor carries on anonymously.
    """

    keyword = 'Bearer'

    def authenticate(self, request):
        token = get_request_token(request._request)
        if not token:
            return None

        # Only a rejected token is an authentication failure.
        try:
            data = fetch_current_user(token)
        except BackendAPIError as e:
            if not isinstance(e, BackendAuthError) and e.status_code != 403:
                raise
            if self._drop_session_token(request, token):
                return None
            raise exceptions.AuthenticationFailed('Token is invalid or expired.')

        if not data:
            raise exceptions.AuthenticationFailed('Token is invalid or expired.')

        return BackendUser(data), token

    def authenticate_header(self, request):
        return self.keyword

    @staticmethod
    def _drop_session_token(request, token):
        """Forget a rejected session token; True when the token came from the session"""
        django_request = request._request
        if django_request.META.get('HTTP_AUTHORIZATION', '').lower().startswith('bearer '):
            return False
        session = getattr(django_request, 'session', None)
        if session is None or session.get('token') != token:
            return False
        session.pop('token', None)
        logger.info("Removed expired token from session")
        return True
