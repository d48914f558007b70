"""
Test suite for the locations module
Tests: zone lookups, admin shipping zone management
"""
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status

from storefront.core.cache_utils import SYSTEM_CONFIG_KEY
from storefront.core.test_utils import BackendTestCase, TestDataFactory
from .zones import default_zone, shipping_cost, zone_for_key


class ZoneLookupTests(TestCase):
    """Test zone helpers"""

    def setUp(self):
        self.zones = [
            TestDataFactory.create_shipping_zone('inside_dhaka', 'Inside Dhaka', 60),
            TestDataFactory.create_shipping_zone('outside_dhaka', 'Outside Dhaka', 120),
            TestDataFactory.create_shipping_zone('express', 'Express', 200, isActive=False),
        ]

    def test_zone_for_key(self):
        self.assertEqual(zone_for_key(self.zones, 'outside_dhaka')['cost'], 120)
        self.assertIsNone(zone_for_key(self.zones, 'mars'))

    def test_inactive_zone_ignored(self):
        self.assertIsNone(zone_for_key(self.zones, 'express'))
        self.assertEqual(shipping_cost(self.zones, 'express'), 0)

    def test_default_zone(self):
        self.assertEqual(default_zone(self.zones)['key'], 'inside_dhaka')
        self.assertIsNone(default_zone([]))

    def test_shipping_cost(self):
        self.assertEqual(shipping_cost(self.zones, 'inside_dhaka'), 60)
        self.assertEqual(shipping_cost(None, 'inside_dhaka'), 0)


class ShippingZoneAdminTests(BackendTestCase):
    """Test admin shipping zone endpoints"""

    def setUp(self):
        super().setUp()
        self.zone = TestDataFactory.create_shipping_zone(id=7)
        self.backend.on('GET', '/admin/config/shipping-zones', [self.zone])
        self.backend.on('POST', '/admin/config/shipping-zones', lambda c, p, json, f: {'id': 8, **json})
        self.backend.on('PATCH', '/admin/config/shipping-zones/7', lambda c, p, json, f: {**self.zone, **json})
        self.backend.on('DELETE', '/admin/config/shipping-zones/7', None)

    def test_requires_admin(self):
        self.as_customer()
        response = self.client.get('/api/v1/admin/shipping-zones/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list(self):
        self.as_admin()
        response = self.client.get('/api/v1/admin/shipping-zones/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['key'], 'inside_dhaka')

    def test_create_validates(self):
        self.as_admin()
        response = self.client.post('/api/v1/admin/shipping-zones/', {
            'key': 'far away', 'label': 'Far', 'cost': -5,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('key', response.data)
        self.assertIn('cost', response.data)
        self.assertEqual(self.backend.calls_to('POST', '/admin/config/shipping-zones'), [])

    def test_create_drops_cached_config(self):
        cache.set(SYSTEM_CONFIG_KEY, {'shippingZones': []})
        self.as_admin()
        response = self.client.post('/api/v1/admin/shipping-zones/', {
            'key': 'sylhet', 'label': 'Sylhet', 'cost': 150,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['id'], 8)
        self.assertTrue(self.backend.calls_to('POST', '/admin/config/shipping-zones')[0]['json']['isActive'])
        self.assertIsNone(cache.get(SYSTEM_CONFIG_KEY))

    def test_update_sends_id(self):
        self.as_admin()
        response = self.client.patch('/api/v1/admin/shipping-zones/7/', {'cost': 80}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['cost'], 80)
        self.assertEqual(
            self.backend.calls_to('PATCH', '/admin/config/shipping-zones/7')[0]['json'],
            {'id': 7, 'cost': 80},
        )

    def test_delete(self):
        cache.set(SYSTEM_CONFIG_KEY, {'shippingZones': [self.zone]})
        self.as_admin()
        response = self.client.delete('/api/v1/admin/shipping-zones/7/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertIsNone(cache.get(SYSTEM_CONFIG_KEY))
