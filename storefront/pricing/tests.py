"""
Test suite for the pricing module
Tests: coupon validation, coupon state, admin coupon endpoints
"""
from datetime import datetime, timezone as dt_timezone

from django.test import TestCase
from rest_framework import status

from storefront.core.test_utils import BackendTestCase
from .coupons import (
    STATE_ACTIVE, STATE_EXHAUSTED, STATE_EXPIRED, STATE_INACTIVE, STATE_SCHEDULED, coupon_state,
)
from .serializers import CouponSerializer


def coupon_data(**overrides):
    data = {'code': ' summer10 ', 'type': 'percentage', 'value': 10}
    data.update(overrides)
    return data


class CouponSerializerTests(TestCase):
    """Test coupon validation"""

    def test_code_normalized(self):
        serializer = CouponSerializer(data=coupon_data())
        self.assertTrue(serializer.is_valid(), serializer.errors)
        payload = serializer.to_backend()
        self.assertEqual(payload['code'], 'SUMMER10')
        self.assertEqual(payload['minSpend'], 0)
        self.assertEqual(payload['usageLimit'], 0)
        self.assertTrue(payload['isActive'])

    def test_percentage_capped(self):
        serializer = CouponSerializer(data=coupon_data(value=120))
        self.assertFalse(serializer.is_valid())
        self.assertIn('value', serializer.errors)

        serializer = CouponSerializer(data=coupon_data(type='fixed', value=120))
        self.assertTrue(serializer.is_valid(), serializer.errors)

    def test_value_must_be_positive(self):
        serializer = CouponSerializer(data=coupon_data(value=0))
        self.assertFalse(serializer.is_valid())
        self.assertIn('value', serializer.errors)

    def test_negative_limits(self):
        serializer = CouponSerializer(data=coupon_data(minSpend=-1, usageLimit=-1))
        self.assertFalse(serializer.is_valid())
        self.assertIn('minSpend', serializer.errors)
        self.assertIn('usageLimit', serializer.errors)

    def test_date_window(self):
        serializer = CouponSerializer(data=coupon_data(startAt='2024-02-01', expiresAt='2024-01-01'))
        self.assertFalse(serializer.is_valid())
        self.assertIn('expiresAt', serializer.errors)

        serializer = CouponSerializer(data=coupon_data(startAt='2024-01-01', expiresAt=''))
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertIsNone(serializer.to_backend()['expiresAt'])


class CouponStateTests(TestCase):
    """Test coupon lifecycle state"""

    now = datetime(2024, 6, 1, tzinfo=dt_timezone.utc)

    def test_states(self):
        self.assertEqual(coupon_state({'isActive': False}, self.now), STATE_INACTIVE)
        self.assertEqual(coupon_state({'startAt': '2024-07-01T00:00:00Z'}, self.now), STATE_SCHEDULED)
        self.assertEqual(coupon_state({'expiresAt': '2024-05-01'}, self.now), STATE_EXPIRED)
        self.assertEqual(coupon_state({'usageLimit': 5, 'usedCount': 5}, self.now), STATE_EXHAUSTED)
        self.assertEqual(coupon_state({'usageLimit': 0, 'usedCount': 500}, self.now), STATE_ACTIVE)


class CouponAdminTests(BackendTestCase):
    """Test admin coupon endpoints"""

    def setUp(self):
        super().setUp()
        self.backend.on('GET', '/admin/coupons', {'data': [{'id': 'c1', 'code': 'OLD', 'isActive': False}]})
        self.backend.on('POST', '/admin/coupons', lambda c, p, json, f: {'id': 'c2', **json})
        self.backend.on('PUT', '/admin/coupons/c1', lambda c, p, json, f: {'id': 'c1', **json})
        self.backend.on('DELETE', '/admin/coupons/c1', None)
        self.as_admin()

    def test_requires_admin(self):
        self.as_customer()
        response = self.client.get('/api/v1/admin/coupons/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list(self):
        response = self.client.get('/api/v1/admin/coupons/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['state'], STATE_INACTIVE)
        self.assertEqual(self.backend.calls_to('GET', '/admin/coupons')[0]['params'], {'limit': 100})

    def test_create(self):
        response = self.client.post('/api/v1/admin/coupons/', coupon_data(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['code'], 'SUMMER10')

    def test_create_invalid(self):
        response = self.client.post('/api/v1/admin/coupons/', coupon_data(type='bogo'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.backend.calls_to('POST', '/admin/coupons'), [])

    def test_update_and_delete(self):
        response = self.client.put('/api/v1/admin/coupons/c1/', coupon_data(value=15), format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['value'], 15)

        response = self.client.delete('/api/v1/admin/coupons/c1/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
