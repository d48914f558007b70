"""
Backend API Client

Shared client for the commerce backend REST API (``/api/v1``).
Handles authentication, retries for idempotent reads, and error mapping.
"""
import logging
import time
from typing import Any, Dict, Optional

import requests
from django.conf import settings

from .exceptions import BackendUnavailable, error_for_status

logger = logging.getLogger(__name__)

API_PREFIX = '/api/v1'


def get_api_url(endpoint: str) -> str:
    """
    Build an absolute backend URL for an endpoint.

    The configured base may or may not already include ``/api/v1``;
    both ``http://host`` and ``http://host/api/v1`` resolve the same way.
    """
    base = (settings.BACKEND_API_URL or '').rstrip('/')
    clean_base = base if base.endswith(API_PREFIX) else f"{base}{API_PREFIX}"
    safe_endpoint = endpoint if endpoint.startswith('/') else f"/{endpoint}"
    return f"{clean_base}{safe_endpoint}"


def get_request_token(request) -> Optional[str]:
    """Bearer token of the current visitor: Authorization header first, then session"""
    if request is None:
        return None
    auth_header = request.META.get('HTTP_AUTHORIZATION', '')
    if auth_header.lower().startswith('bearer '):
        token = auth_header[7:].strip()
        if token:
            return token
    session = getattr(request, 'session', None)
    if session is not None:
        return session.get('token')
    return None


class BackendClient:
    """
    Client for the backend API.

    Handles:
    - Bearer token authentication
    - Retries (GET only) on rate limiting and gateway errors
    - Mapping error statuses to BackendAPIError subclasses

    Usage:
        client = BackendClient(token="...")
        products = client.get("/products", params={"limit": 12})
    """

    RETRYABLE_STATUS_CODES = {429, 502, 503, 504}
    MAX_RETRY_DELAY = 10

    def __init__(self, token: Optional[str] = None, timeout: Optional[int] = None,
                 max_retries: Optional[int] = None):
        self.token = token
        self.timeout = timeout or settings.BACKEND_API_TIMEOUT
        self.max_retries = max_retries if max_retries is not None else settings.BACKEND_API_MAX_RETRIES

        self.session = requests.Session()
        self.session.headers.update({'Accept': 'application/json'})
        if token:
            self.session.headers['Authorization'] = f'Bearer {token}'

    @classmethod
    def for_request(cls, request, **kwargs):
        """Client carrying the token of whoever made ``request``"""
        return cls(token=get_request_token(request), **kwargs)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.session.close()

    def close(self):
        self.session.close()

    def request(self, method: str, endpoint: str, params: Optional[Dict] = None,
                json: Any = None, files: Optional[Dict] = None,
                timeout: Optional[int] = None) -> Any:
        """
        Make a request against the backend.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE)
            endpoint: API endpoint relative to /api/v1 (e.g. "/products")
            params: Query string parameters
            json: JSON request body
            files: Multipart files (for uploads)
            timeout: Request timeout in seconds

        Returns:
            Decoded JSON, raw text for non-JSON bodies, or None for empty bodies

        Raises:
            BackendUnavailable: the backend could not be reached
            BackendAPIError: the backend answered with status >= 400
        """
        method = method.upper()
        url = get_api_url(endpoint)
        timeout = timeout or self.timeout
        attempts = self.max_retries + 1 if method == 'GET' else 1

        for attempt in range(attempts):
            try:
                response = self.session.request(
                    method, url, params=params, json=json, files=files, timeout=timeout
                )
            except requests.exceptions.Timeout:
                logger.error("Backend timeout: %s %s", method, endpoint)
                raise BackendUnavailable(message='Backend request timed out')
            except requests.exceptions.RequestException as e:
                logger.error("Backend request failed: %s %s (%s)", method, endpoint, e)
                raise BackendUnavailable()

            if response.status_code in self.RETRYABLE_STATUS_CODES and attempt < attempts - 1:
                retry_after = self._retry_delay(response, attempt)
                logger.warning("HTTP %d on %s %s, retry %d/%d in %ds...",
                               response.status_code, method, endpoint, attempt + 1,
                               self.max_retries, retry_after)
                time.sleep(retry_after)
                continue

            if response.status_code >= 400:
                payload = self._decode(response)
                message = self._error_message(response, payload)
                logger.debug("Backend error %d on %s %s: %s",
                              response.status_code, method, endpoint, message)
                raise error_for_status(response.status_code, message, payload)

            return self._decode(response)

    def get(self, endpoint, params=None, **kwargs):
        return self.request('GET', endpoint, params=params, **kwargs)

    def post(self, endpoint, json=None, **kwargs):
        return self.request('POST', endpoint, json=json, **kwargs)

    def put(self, endpoint, json=None, **kwargs):
        return self.request('PUT', endpoint, json=json, **kwargs)

    def patch(self, endpoint, json=None, **kwargs):
        return self.request('PATCH', endpoint, json=json, **kwargs)

    def delete(self, endpoint, **kwargs):
        return self.request('DELETE', endpoint, **kwargs)

    @classmethod
    def _retry_delay(cls, response, attempt):
        try:
            delay = int(response.headers.get('Retry-After', 2 ** attempt))
        except (TypeError, ValueError):
            delay = 2 ** attempt
        return max(0, min(delay, cls.MAX_RETRY_DELAY))

    @staticmethod
    def _decode(response):
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    @staticmethod
    def _error_message(response, payload):
        if isinstance(payload, dict):
            for key in ('message', 'error', 'detail'):
                if payload.get(key):
                    return str(payload[key])
        text = (response.text or '').strip()
        return text[:200] if text else None
