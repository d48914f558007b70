"""
Test suite for the orders module
Tests: order progress, admin order list, status changes, refunds
"""
from django.test import TestCase
from rest_framework import status

from storefront.core.test_utils import BackendTestCase, TestDataFactory
from .progress import order_progress


class OrderProgressTests(TestCase):
    """Test the fulfilment track"""

    def test_linear_steps(self):
        self.assertEqual(order_progress('pending')['currentIndex'], 0)
        self.assertEqual(order_progress('shipped')['currentIndex'], 2)
        self.assertEqual(order_progress('shipped')['percentage'], 50)
        self.assertEqual(order_progress('paid')['percentage'], 100)

    def test_pending_verification_is_first_step(self):
        progress = order_progress('pending_verification')
        self.assertEqual(progress['currentIndex'], 0)
        self.assertFalse(progress['isTerminal'])

    def test_terminal_statuses(self):
        for value in ('cancelled', 'returned', 'fake', 'refunded'):
            progress = order_progress(value)
            self.assertEqual(progress['currentIndex'], -1)
            self.assertTrue(progress['isTerminal'])
            self.assertEqual(progress['percentage'], 0)


class OrderAdminTests(BackendTestCase):
    """Test admin order endpoints"""

    def setUp(self):
        super().setUp()
        self.order = TestDataFactory.create_order(status='shipped', total=2000, paid=2000, refunded=500)
        self.order['id'] = 'o1'
        self.backend.on('GET', '/admin/orders', {'data': [self.order], 'total': 1})
        self.backend.on('GET', '/admin/orders/o1', self.order)
        self.backend.on('GET', '/admin/orders/o1/history', [{'newStatus': 'shipped'}])
        self.backend.on('GET', '/config/enums', {
            'orderStatuses': ['pending', 'processing', 'shipped', 'delivered', 'cancelled'],
            'paymentStatuses': ['unpaid', 'paid', 'refunded'],
        })
        self.backend.on('PATCH', '/admin/orders/o1/status', lambda c, p, json, f: {**self.order, **json})
        self.backend.on('POST', '/admin/orders/o1/refund', {'success': True})
        self.as_admin()

    def test_requires_admin(self):
        self.as_customer()
        response = self.client.get('/api/v1/admin/orders/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_forwards_only_given_filters(self):
        response = self.client.get('/api/v1/admin/orders/', {'status': 'pending', 'is_preorder': 'true', 'search': ''})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            self.backend.calls_to('GET', '/admin/orders')[0]['params'],
            {'status': 'pending', 'is_preorder': 'true'},
        )

    def test_detail(self):
        response = self.client.get('/api/v1/admin/orders/o1/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order']['id'], 'o1')
        self.assertEqual(response.data['progress']['currentIndex'], 2)
        self.assertEqual(response.data['history'], [{'newStatus': 'shipped'}])

    def test_detail_without_history(self):
        self.backend.fail('GET', '/admin/orders/o1/history', 500)
        response = self.client.get('/api/v1/admin/orders/o1/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['history'], [])

    def test_unknown_order(self):
        response = self.client.get('/api/v1/admin/orders/zzz/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_status_change(self):
        response = self.client.patch('/api/v1/admin/orders/o1/status/', {'status': 'delivered', 'note': 'Signed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'delivered')

    def test_status_must_be_known(self):
        response = self.client.patch('/api/v1/admin/orders/o1/status/', {'status': 'teleported'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.backend.calls_to('PATCH', '/admin/orders/o1/status'), [])

    def test_payment_status(self):
        self.backend.on('PATCH', '/admin/orders/o1/payment-status', {'success': True})
        response = self.client.patch('/api/v1/admin/orders/o1/payment-status/', {'status': 'paid'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.patch('/api/v1/admin/orders/o1/payment-status/', {'status': 'lost'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_verify_payment(self):
        self.backend.on('POST', '/admin/orders/o1/verify-payment', {'success': True})
        response = self.client.post('/api/v1/admin/orders/o1/verify-payment/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(self.backend.calls_to('POST', '/admin/orders/o1/verify-payment')), 1)

    def test_refund_within_balance(self):
        response = self.client.post('/api/v1/admin/orders/o1/refund/', {
            'amount': 1500, 'reason': 'Damaged', 'restock': True,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.backend.calls_to('POST', '/admin/orders/o1/refund')[0]['json'], {
            'amount': 1500.0, 'reason': 'Damaged', 'restock': True,
        })

    def test_refund_above_balance(self):
        response = self.client.post('/api/v1/admin/orders/o1/refund/', {
            'amount': 1500.01, 'reason': 'Too much',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('amount', response.data)
        self.assertEqual(self.backend.calls_to('POST', '/admin/orders/o1/refund'), [])

    def test_refund_requires_positive_amount(self):
        response = self.client.post('/api/v1/admin/orders/o1/refund/', {'amount': 0, 'reason': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_history(self):
        response = self.client.get('/api/v1/admin/orders/o1/history/')
        self.assertEqual(response.data, [{'newStatus': 'shipped'}])
