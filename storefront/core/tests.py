"""
Test suite for the core module
Tests: backend client, token authentication, login/logout, uploads, system config, cache invalidation
"""
import io
import os
import struct
import subprocess
import sys
import zlib
from unittest import mock

import requests
from django.conf import settings
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from PIL import Image
from rest_framework import status

from .api_client import BackendClient, get_api_url
from .cache_signals import notify_changed
from .cache_utils import CATEGORY_TREE_KEY, SYSTEM_CONFIG_KEY, get_content_cache_key
from .exception_handlers import backend_exception_handler
from .exceptions import BackendAPIError, BackendAuthError, BackendNotFound, BackendUnavailable
from .test_utils import CUSTOMER_TOKEN, BackendTestCase, TestDataFactory


def fake_response(status_code=200, payload=None, text='', headers=None):
    response = mock.Mock()
    response.status_code = status_code
    response.headers = headers or {}
    if payload is not None:
        response.json.return_value = payload
        response.content = b'{}'
        response.text = str(payload)
    else:
        response.json.side_effect = ValueError('No JSON')
        response.content = text.encode()
        response.text = text
    return response


def huge_png(width=60000, height=60000):
    """A tiny PNG file whose header claims enormous dimensions"""
    def chunk(kind, data):
        body = kind + data
        return struct.pack('>I', len(data)) + body + struct.pack('>I', zlib.crc32(body) & 0xffffffff)

    header = struct.pack('>IIBBBBB', width, height, 8, 2, 0, 0, 0)
    data = (
        b'\x89PNG\r\n\x1a\n'
        + chunk(b'IHDR', header)
        + chunk(b'IDAT', zlib.compress(b'\x00' * 64))
        + chunk(b'IEND', b'')
    )
    return SimpleUploadedFile('huge.png', data, content_type='image/png')


class ApiUrlTests(TestCase):
    """Test backend URL resolution"""

    @override_settings(BACKEND_API_URL='http://api.example.com')
    def test_prefix_added(self):
        self.assertEqual(get_api_url('/products'), 'http://api.example.com/api/v1/products')

    @override_settings(BACKEND_API_URL='http://api.example.com/api/v1/')
    def test_prefix_not_duplicated(self):
        self.assertEqual(get_api_url('products'), 'http://api.example.com/api/v1/products')


@override_settings(BACKEND_API_URL='http://api.example.com', BACKEND_API_MAX_RETRIES=2)
class BackendClientTests(TestCase):
    """Test request handling of the backend client"""

    def setUp(self):
        self.client_ = BackendClient(token='abc')
        self.request = mock.patch.object(self.client_.session, 'request').start()
        self.sleep = mock.patch('storefront.core.api_client.time.sleep').start()
        self.addCleanup(mock.patch.stopall)

    def test_bearer_header(self):
        self.assertEqual(self.client_.session.headers['Authorization'], 'Bearer abc')
        self.assertNotIn('Authorization', BackendClient().session.headers)

    def test_json_response(self):
        self.request.return_value = fake_response(200, {'id': 1})
        self.assertEqual(self.client_.get('/product/1'), {'id': 1})
        args, kwargs = self.request.call_args
        self.assertEqual(args, ('GET', 'http://api.example.com/api/v1/product/1'))

    def test_empty_response(self):
        self.request.return_value = fake_response(204)
        self.assertIsNone(self.client_.delete('/cart/1'))

    def test_get_retries_on_gateway_errors(self):
        self.request.side_effect = [
            fake_response(503, text='busy', headers={'Retry-After': '1'}),
            fake_response(502, text='bad gateway'),
            fake_response(200, {'ok': True}),
        ]
        self.assertEqual(self.client_.get('/products'), {'ok': True})
        self.assertEqual(self.request.call_count, 3)
        self.assertEqual([c.args[0] for c in self.sleep.call_args_list], [1, 2])

    def test_retry_after_is_capped(self):
        self.request.side_effect = [
            fake_response(429, text='slow down', headers={'Retry-After': '120'}),
            fake_response(200, {'ok': True}),
        ]
        self.assertEqual(self.client_.get('/products'), {'ok': True})
        self.sleep.assert_called_once_with(BackendClient.MAX_RETRY_DELAY)

    def test_post_is_not_retried(self):
        self.request.return_value = fake_response(503, text='busy')
        with self.assertRaises(BackendAPIError) as ctx:
            self.client_.post('/checkout', json={})
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(self.request.call_count, 1)

    def test_error_mapping(self):
        self.request.return_value = fake_response(401, {'message': 'Token expired'})
        with self.assertRaises(BackendAuthError) as ctx:
            self.client_.get('/auth/me')
        self.assertEqual(ctx.exception.message, 'Token expired')

        self.request.return_value = fake_response(404, {'error': 'Not here'})
        with self.assertRaises(BackendNotFound):
            self.client_.get('/product/x')

        self.request.return_value = fake_response(400, text='x' * 500)
        with self.assertRaises(BackendAPIError) as ctx:
            self.client_.post('/cart')
        self.assertEqual(len(ctx.exception.message), 200)

    def test_network_failure(self):
        self.request.side_effect = requests.exceptions.ConnectionError('refused')
        with self.assertRaises(BackendUnavailable):
            self.client_.get('/products')


class AuthenticationTests(BackendTestCase):
    """Test token authentication against /auth/me"""

    def test_me_requires_token(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me(self):
        self.as_admin()
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], self.admin['email'])
        self.assertTrue(response.data['isAdmin'])

    def test_current_user_is_cached(self):
        self.as_customer()
        self.client.get('/api/v1/auth/me/')
        self.client.get('/api/v1/auth/me/')
        self.assertEqual(len(self.backend.calls_to('GET', '/auth/me')), 1)

    def test_invalid_token(self):
        self.client.authenticate_token('stale-token')
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def set_session_token(self, token):
        session = self.client.session
        session['token'] = token
        session.save()

    def test_expired_session_token_browses_anonymously(self):
        self.backend.on('GET', '/config/enums', {'orderStatuses': ['pending']})
        self.set_session_token('stale-token')
        response = self.client.get('/api/v1/config/enums/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn('token', self.client.session)

        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_session_token_rejected_with_403(self):
        self.backend.on('GET', '/config/enums', {'orderStatuses': []})
        self.backend.fail('GET', '/auth/me', 403, 'Forbidden')
        self.set_session_token(CUSTOMER_TOKEN)
        response = self.client.get('/api/v1/config/enums/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn('token', self.client.session)

    def test_backend_down_during_authentication(self):
        self.backend.on('GET', '/config/enums', {'orderStatuses': []})
        self.backend.on('GET', '/auth/me', BackendUnavailable)
        self.as_customer()
        response = self.client.get('/api/v1/config/enums/')
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertIn('error', response.data)

    def test_backend_error_during_authentication(self):
        self.backend.fail('GET', '/auth/me', 500, 'boom')
        self.set_session_token(CUSTOMER_TOKEN)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(self.client.session['token'], CUSTOMER_TOKEN)


class LoginLogoutTests(BackendTestCase):
    """Test Google login, guest cart merge and logout"""

    def setUp(self):
        super().setUp()
        self.product = TestDataFactory.create_product('Lamp', base_price=500, id='p1')
        self.backend.on('GET', '/product/p1', self.product)
        self.backend.on('POST', '/auth/google', {'token': CUSTOMER_TOKEN, 'user': self.customer})
        self.backend.on('POST', '/cart', {'success': True})
        self.backend.on('GET', '/cart', {'items': [{'product': self.product, 'quantity': 3}]})
        self.backend.on('POST', '/auth/logout', None)

    def test_login_requires_id_token(self):
        response = self.client.post('/api/v1/auth/google/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login_merges_guest_cart(self):
        self.client.post('/api/v1/cart/items/', {'productId': 'p1', 'quantity': 2}, format='json')

        response = self.client.post('/api/v1/auth/google/', {'idToken': 'google-id-token'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['token'], CUSTOMER_TOKEN)
        self.assertFalse(response.data['user']['isAdmin'])

        merged = self.backend.calls_to('POST', '/cart')
        self.assertEqual(merged[0]['json'], {'productId': 'p1', 'quantity': 2})
        self.assertEqual(merged[0]['token'], CUSTOMER_TOKEN)

        # Session token authenticates the following requests
        response = self.client.get('/api/v1/cart/')
        self.assertEqual(response.data['count'], 3)

    def test_logout_clears_session(self):
        self.client.post('/api/v1/auth/google/', {'idToken': 'google-id-token'}, format='json')
        response = self.client.post('/api/v1/auth/logout/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(len(self.backend.calls_to('POST', '/auth/logout')), 1)

        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_logout_survives_backend_failure(self):
        self.backend.fail('POST', '/auth/logout', 500, 'boom')
        self.as_customer()
        response = self.client.post('/api/v1/auth/logout/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)


class UploadTests(BackendTestCase):
    """Test image uploads"""

    def image_file(self, name='photo.png'):
        buffer = io.BytesIO()
        Image.new('RGB', (4, 4), color='red').save(buffer, format='PNG')
        return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')

    def test_upload_requires_admin(self):
        self.as_customer()
        response = self.client.post('/api/v1/upload/', {'file': self.image_file()}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_upload_image(self):
        self.as_admin()
        self.backend.on('POST', '/upload', {'url': 'https://cdn.example.com/photo.png'})
        response = self.client.post('/api/v1/upload/', {'file': self.image_file()}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data, {'url': 'https://cdn.example.com/photo.png'})
        self.assertIn('file', self.backend.calls_to('POST', '/upload')[0]['files'])

    def test_rejects_non_image(self):
        self.as_admin()
        bogus = SimpleUploadedFile('notes.png', b'not an image', content_type='image/png')
        response = self.client.post('/api/v1/upload/', {'file': bogus}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.backend.calls_to('POST', '/upload'), [])

    @override_settings(UPLOAD_MAX_BYTES=10)
    def test_rejects_large_file(self):
        self.as_admin()
        response = self.client.post('/api/v1/upload/', {'file': self.image_file()}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_rejects_decompression_bomb(self):
        self.as_admin()
        response = self.client.post('/api/v1/upload/', {'file': huge_png()}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('file', response.data)
        self.assertEqual(self.backend.calls_to('POST', '/upload'), [])


class SystemConfigTests(BackendTestCase):
    """Test the cached system enums"""

    def test_enums_cached(self):
        self.backend.on('GET', '/config/enums', {'orderStatuses': ['pending']})
        self.client.get('/api/v1/config/enums/')
        response = self.client.get('/api/v1/config/enums/')
        self.assertEqual(response.data['orderStatuses'], ['pending'])
        self.assertEqual(response.data['shippingZones'], [])
        self.assertEqual(len(self.backend.calls_to('GET', '/config/enums')), 1)

    def test_backend_down(self):
        self.backend.on('GET', '/config/enums', BackendUnavailable)
        response = self.client.get('/api/v1/config/enums/')
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertIn('error', response.data)


class CacheSignalTests(TestCase):
    """Test cache invalidation on resource changes"""

    def setUp(self):
        cache.clear()

    def test_invalidation(self):
        cache.set(CATEGORY_TREE_KEY, ['tree'])
        cache.set(SYSTEM_CONFIG_KEY, {'a': 1})
        cache.set(get_content_cache_key('home_hero'), {'title': 'x'})

        notify_changed('category')
        notify_changed('shipping_zone')
        notify_changed('content', key='home_hero')

        self.assertIsNone(cache.get(CATEGORY_TREE_KEY))
        self.assertIsNone(cache.get(SYSTEM_CONFIG_KEY))
        self.assertIsNone(cache.get(get_content_cache_key('home_hero')))


class ExceptionHandlerTests(TestCase):
    """Test the DRF exception handler for backend errors"""

    def test_backend_errors_become_json(self):
        response = backend_exception_handler(BackendUnavailable(), {})
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertIn('error', response.data)

        response = backend_exception_handler(BackendNotFound(404, 'Product not found'), {})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'error': 'Product not found'})

    def test_other_exceptions_fall_through(self):
        self.assertIsNone(backend_exception_handler(ValueError('x'), {}))

    def test_modules_import_in_any_order(self):
        for module in ('storefront.core.exceptions', 'storefront.core.api_client',
                       'storefront.core.exception_handlers', 'storefront.core.authentication'):
            code = f"import django; django.setup(); import {module}; import rest_framework.views"
            result = subprocess.run(
                [sys.executable, '-c', code], cwd=settings.BASE_DIR, capture_output=True, text=True,
                env={**os.environ, 'DJANGO_SETTINGS_MODULE': 'storefront.config.settings'},
            )
            self.assertEqual(result.returncode, 0, f"{module}: {result.stderr}")
