"""
Test suite for the reports module
Tests: date ranges, dashboard aggregation, section passthroughs, caching
"""
from datetime import date, timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from storefront.core.exceptions import BackendUnavailable
from storefront.core.test_utils import BackendTestCase
from .stats import DateRangeError, resolve_date_range

RANGE = {'start': '2024-01-01', 'end': '2024-01-31'}


class DateRangeTests(TestCase):
    """Test date range resolution"""

    def test_defaults_to_last_30_days(self):
        start, end = resolve_date_range()
        self.assertEqual(end, timezone.localdate())
        self.assertEqual(end - start, timedelta(days=30))

    def test_start_after_end(self):
        with self.assertRaises(DateRangeError):
            resolve_date_range(date(2024, 2, 1), date(2024, 1, 1))


class DashboardTests(BackendTestCase):
    """Test the admin analytics dashboard"""

    def setUp(self):
        super().setUp()
        self.backend.on('GET', '/admin/stats/kpis', {'totalRevenue': 50000, 'totalOrders': 40})
        self.backend.on('GET', '/admin/stats/revenue', [{'date': '2024-01-01', 'revenue': 1000}])
        self.backend.on('GET', '/admin/stats/inventory/low-stock', [{'id': 'p1', 'stock': 2}])
        self.backend.on('GET', '/admin/stats/products/top-selling', [{'id': 'p2', 'sold': 30}])
        self.backend.on('GET', '/admin/stats/customers/top', [{'email': 'a@test.com'}])
        self.backend.on('GET', '/admin/stats/customers/retention', {'returning': 10, 'new': 30})
        self.as_admin()

    def test_requires_admin(self):
        self.as_customer()
        response = self.client.get('/api/v1/admin/stats/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_aggregates_sections(self):
        response = self.client.get('/api/v1/admin/stats/dashboard/', RANGE)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['kpis']['totalOrders'], 40)
        self.assertEqual(len(response.data['salesData']), 1)
        self.assertEqual(response.data['lowStock'][0]['id'], 'p1')
        self.assertEqual(response.data['topProducts'][0]['id'], 'p2')
        self.assertEqual(len(response.data['topCustomers']), 1)
        self.assertEqual(response.data['retention']['returning'], 10)
        self.assertEqual(response.data['errors'], [])

        self.assertEqual(
            self.backend.calls_to('GET', '/admin/stats/products/top-selling')[0]['params'],
            {'start': '2024-01-01', 'end': '2024-01-31', 'limit': 10},
        )
        self.assertEqual(
            self.backend.calls_to('GET', '/admin/stats/inventory/low-stock')[0]['params'],
            {'threshold': 5, 'limit': 10},
        )

    def test_default_range(self):
        response = self.client.get('/api/v1/admin/stats/dashboard/')
        end = timezone.localdate()
        self.assertEqual(response.data['range'], {
            'start': (end - timedelta(days=30)).isoformat(), 'end': end.isoformat(),
        })

    def test_start_after_end(self):
        response = self.client.get('/api/v1/admin/stats/dashboard/', {'start': '2024-02-01', 'end': '2024-01-01'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.backend.calls_to('GET', '/admin/stats/kpis'), [])

    def test_invalid_date(self):
        response = self.client.get('/api/v1/admin/stats/dashboard/', {'start': 'yesterday'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_top_selling_rejection_is_empty(self):
        self.backend.fail('GET', '/admin/stats/products/top-selling', 400, 'Bad range')
        response = self.client.get('/api/v1/admin/stats/dashboard/', RANGE)
        self.assertEqual(response.data['topProducts'], [])
        self.assertEqual(response.data['errors'], [])

    def test_failing_section_is_reported(self):
        self.backend.fail('GET', '/admin/stats/customers/retention', 500, 'boom')
        response = self.client.get('/api/v1/admin/stats/dashboard/', RANGE)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['retention'])
        self.assertEqual(response.data['errors'], ['retention'])

    def test_backend_down(self):
        self.backend.on('GET', '/admin/stats/kpis', BackendUnavailable)
        response = self.client.get('/api/v1/admin/stats/dashboard/', RANGE)
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)

    def test_sections_are_cached(self):
        self.client.get('/api/v1/admin/stats/dashboard/', RANGE)
        self.client.get('/api/v1/admin/stats/dashboard/', RANGE)
        self.assertEqual(len(self.backend.calls_to('GET', '/admin/stats/kpis')), 1)
        self.assertEqual(len(self.backend.calls_to('GET', '/admin/stats/revenue')), 1)

    def test_section_passthrough(self):
        response = self.client.get('/api/v1/admin/stats/top-customers/', RANGE)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [{'email': 'a@test.com'}])

    def test_unknown_section(self):
        response = self.client.get('/api/v1/admin/stats/profit-forecast/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
