"""
Test suite for the inventory module
Tests: stock levels, manual adjustments, stock logs, variant thresholds
"""
from django.test import TestCase
from rest_framework import status

from storefront.core.test_utils import BackendTestCase, TestDataFactory
from .stock import STOCK_LOW, STOCK_OK, STOCK_OUT, products_from_listing, stock_level


class StockLevelTests(TestCase):
    """Test stock level classification"""

    def test_levels(self):
        self.assertEqual(stock_level({'stock': 0, 'lowStockThreshold': 5}), STOCK_OUT)
        self.assertEqual(stock_level({'stock': -2}), STOCK_OUT)
        self.assertEqual(stock_level({'stock': 5, 'lowStockThreshold': 5}), STOCK_LOW)
        self.assertEqual(stock_level({'stock': 6, 'lowStockThreshold': 5}), STOCK_OK)

    def test_missing_threshold_defaults_to_five(self):
        self.assertEqual(stock_level({'stock': 4}), STOCK_LOW)
        self.assertEqual(stock_level({'stock': 9, 'lowStockThreshold': None}), STOCK_OK)

    def test_listing_shapes(self):
        self.assertEqual(products_from_listing([{'id': 1}]), [{'id': 1}])
        self.assertEqual(products_from_listing({'data': [{'id': 2}]}), [{'id': 2}])
        self.assertEqual(products_from_listing(None), [])


class InventoryAdminTests(BackendTestCase):
    """Test admin inventory endpoints"""

    def setUp(self):
        super().setUp()
        self.products = [
            TestDataFactory.create_product('Lamp', stock=0, id='p1'),
            TestDataFactory.create_product('Chair', stock=3, id='p2'),
            TestDataFactory.create_product('Table', stock=40, id='p3'),
        ]
        self.backend.on('GET', '/admin/products', {'data': self.products, 'total': 3})
        self.backend.on('POST', '/admin/inventory/adjust', {'success': True})

    def test_requires_admin(self):
        response = self.client.get('/api/v1/admin/inventory/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.as_customer()
        response = self.client.get('/api/v1/admin/inventory/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_with_stock_levels(self):
        self.as_admin()
        response = self.client.get('/api/v1/admin/inventory/', {'search': 'a'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['stockLevel'] for p in response.data], [STOCK_OUT, STOCK_LOW, STOCK_OK])
        self.assertEqual(self.backend.calls_to('GET', '/admin/products')[0]['params'], {'limit': 100, 'search': 'a'})

    def test_restock_uses_default_reason(self):
        self.as_admin()
        response = self.client.post('/api/v1/admin/inventory/adjust/', {
            'productId': 'p1', 'type': 'add', 'amount': 12,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.backend.calls_to('POST', '/admin/inventory/adjust')[0]['json'], {
            'productId': 'p1', 'changeAmount': 12, 'reason': 'Manual Restock',
        })

    def test_deduction_of_variant(self):
        self.as_admin()
        self.client.post('/api/v1/admin/inventory/adjust/', {
            'variantId': 'v9', 'type': 'deduct', 'amount': 2, 'reason': ' Damaged ',
        }, format='json')
        self.assertEqual(self.backend.calls_to('POST', '/admin/inventory/adjust')[0]['json'], {
            'variantId': 'v9', 'changeAmount': -2, 'reason': 'Damaged',
        })

    def test_adjust_validation(self):
        self.as_admin()
        response = self.client.post('/api/v1/admin/inventory/adjust/', {'type': 'add', 'amount': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/admin/inventory/adjust/', {'type': 'add', 'amount': 3}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.backend.calls_to('POST', '/admin/inventory/adjust'), [])

    def test_backend_rejects_adjustment(self):
        self.backend.fail('POST', '/admin/inventory/adjust', 400, 'Insufficient stock')
        self.as_admin()
        response = self.client.post('/api/v1/admin/inventory/adjust/', {
            'productId': 'p2', 'type': 'deduct', 'amount': 10,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Insufficient stock')

    def test_logs(self):
        self.backend.on('GET', '/admin/inventory/logs', [{'changeAmount': 5, 'reason': 'Manual Restock'}])
        self.as_admin()
        response = self.client.get('/api/v1/admin/inventory/logs/', {'productId': 'p1'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(
            self.backend.calls_to('GET', '/admin/inventory/logs')[0]['params'],
            {'productId': 'p1', 'limit': 20},
        )

    def test_logs_need_target(self):
        self.as_admin()
        response = self.client.get('/api/v1/admin/inventory/logs/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_variant_threshold(self):
        self.backend.on('PUT', '/admin/products/variants/v1', lambda c, p, json, f: {'id': 'v1', **json})
        self.as_admin()
        response = self.client.patch(
            '/api/v1/admin/inventory/variants/v1/threshold/', {'lowStockThreshold': 8}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['lowStockThreshold'], 8)

        response = self.client.patch(
            '/api/v1/admin/inventory/variants/v1/threshold/', {'lowStockThreshold': -1}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
