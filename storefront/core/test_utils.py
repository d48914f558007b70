"""
Test utilities and factories for creating backend-shaped test data
"""
from unittest import mock

from django.core.cache import cache
from django.test import TestCase
from rest_framework.test import APIClient

from storefront.core.api_client import BackendClient
from storefront.core.exceptions import BackendUnavailable, error_for_status
import random
import string

ADMIN_TOKEN = 'admin-token'
CUSTOMER_TOKEN = 'customer-token'


class TestDataFactory:
    """Factory class for creating backend records"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(role='customer', email=None, **extra):
        """Create a /auth/me payload"""
        uid = TestDataFactory.random_string(8)
        user = {
            'id': uid,
            'email': email or f'user_{uid.lower()}@test.com',
            'firstName': 'Test',
            'lastName': 'User',
            'role': role,
            'phone': '01700000000',
        }
        user.update(extra)
        return user

    @staticmethod
    def create_category(name=None, slug=None, children=None, **extra):
        """Create a category node"""
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        category = {
            'id': extra.pop('id', None) or TestDataFactory.random_string(8),
            'name': name,
            'slug': slug or name.lower().replace(' ', '-'),
            'isActive': True,
            'children': children or [],
        }
        category.update(extra)
        return category

    @staticmethod
    def create_product(name=None, base_price=1000, sale_price=None, stock=10,
                       stock_status='in_stock', categories=None, created_at='2024-01-01T00:00:00Z', **extra):
        """Create a product record"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        product = {
            'id': extra.pop('id', None) or TestDataFactory.random_string(8),
            'name': name,
            'slug': name.lower().replace(' ', '-'),
            'description': f'Test product {name}',
            'basePrice': base_price,
            'salePrice': sale_price,
            'stock': stock,
            'stockStatus': stock_status,
            'images': [],
            'categories': categories or [],
            'sku': f'SKU-{TestDataFactory.random_string(6).upper()}',
            'isActive': True,
            'lowStockThreshold': 5,
            'createdAt': created_at,
        }
        product.update(extra)
        return product

    @staticmethod
    def create_order(status='pending', total=1500, paid=0, refunded=0, **extra):
        """Create an order record"""
        order = {
            'id': TestDataFactory.random_string(8),
            'status': status,
            'totalAmount': total,
            'paymentStatus': 'unpaid',
            'paidAmount': paid,
            'refundedAmount': refunded,
            'isPreOrder': False,
            'items': [],
            'createdAt': '2024-01-01T00:00:00Z',
            'user': {'email': 'buyer@test.com', 'firstName': 'Buyer'},
        }
        order.update(extra)
        return order

    @staticmethod
    def create_shipping_zone(key='inside_dhaka', label='Inside Dhaka', cost=60, **extra):
        zone = {
            'id': random.randint(1, 10000),
            'key': key,
            'label': label,
            'cost': cost,
            'isActive': True,
        }
        zone.update(extra)
        return zone


class FakeBackend:
    """
    Stand-in for the backend API, patched over BackendClient.request.

    Routes are keyed by (METHOD, endpoint). A route value may be:
    - any JSON-able value (returned as is)
    - a callable(client, params, json, files) returning the value
    - an int status code >= 400 (raised as the matching BackendAPIError)
    - BackendUnavailable to simulate a network failure
    """

    def __init__(self):
        self.routes = {}
        self.calls = []
        self.users = {}

    def add_user(self, token, user):
        self.users[token] = user
        return user

    def on(self, method, endpoint, result):
        self.routes[(method.upper(), endpoint)] = result
        return self

    def fail(self, method, endpoint, status_code, message='error'):
        self.routes[(method.upper(), endpoint)] = (status_code, message)
        return self

    def calls_to(self, method, endpoint):
        return [c for c in self.calls if c['method'] == method.upper() and c['endpoint'] == endpoint]

    def __call__(self, client, method, endpoint, params=None, json=None, files=None, timeout=None):
        method = method.upper()
        self.calls.append({
            'method': method, 'endpoint': endpoint, 'params': params,
            'json': json, 'files': files, 'token': client.token,
        })

        key = (method, endpoint)
        if key == ('GET', '/auth/me') and key not in self.routes:
            if client.token in self.users:
                return self.users[client.token]
            raise error_for_status(401, 'Unauthorized')

        if key not in self.routes:
            raise error_for_status(404, f'No fake route for {method} {endpoint}')

        result = self.routes[key]
        if result is BackendUnavailable:
            raise BackendUnavailable()
        if isinstance(result, tuple) and len(result) == 2 and isinstance(result[0], int):
            raise error_for_status(result[0], result[1])
        if callable(result):
            return result(client, params, json, files)
        return result


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_token(self, token):
        """Authenticate the client with a backend token"""
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
        super().logout()


class BackendTestCase(TestCase):
    """TestCase with a FakeBackend patched in and a clean cache"""

    def setUp(self):
        cache.clear()
        self.backend = FakeBackend()
        patcher = mock.patch.object(BackendClient, 'request', autospec=True, side_effect=self.backend)
        patcher.start()
        self.addCleanup(patcher.stop)

        self.admin = self.backend.add_user(ADMIN_TOKEN, TestDataFactory.create_user(role='admin'))
        self.customer = self.backend.add_user(CUSTOMER_TOKEN, TestDataFactory.create_user())

        self.client = AuthenticatedAPIClient()

    def as_admin(self):
        return self.client.authenticate_token(ADMIN_TOKEN)

    def as_customer(self):
        return self.client.authenticate_token(CUSTOMER_TOKEN)
