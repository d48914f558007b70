"""
Test suite for the cart module
Tests: cart lines, guest and signed-in carts, wishlist, checkout flow
"""
from django.test import TestCase
from rest_framework import status

from storefront.core.test_utils import CUSTOMER_TOKEN, BackendTestCase, TestDataFactory
from .checkout import (
    DEPOSIT_DETAILS_MESSAGE, EMPTY_CART_MESSAGE,
    CheckoutError, CheckoutFlow, CheckoutStatus, InvalidTransition, deposit_required,
)
from .services import add_line, cart_summary, server_cart_lines, set_quantity, snapshot


class FakeClient:
    """Minimal client recording posted orders"""

    token = CUSTOMER_TOKEN

    def __init__(self, order=None, error=None):
        self.order = order or {'id': 'o1'}
        self.error = error
        self.posted = []

    def post(self, endpoint, json=None):
        self.posted.append((endpoint, json))
        if self.error:
            raise self.error
        return self.order


class CartLineTests(TestCase):
    """Test cart line arithmetic"""

    def setUp(self):
        self.lamp = TestDataFactory.create_product('Lamp', base_price=500, id='p1')
        self.chair = TestDataFactory.create_product('Chair', base_price=1500, sale_price=1200, id='p2')

    def test_snapshot_keeps_cart_fields(self):
        line = snapshot(self.lamp, 2)
        self.assertEqual(line['quantity'], 2)
        self.assertNotIn('description', line)
        self.assertEqual(line['basePrice'], 500)

    def test_add_line_increments_existing(self):
        lines = add_line([], self.lamp)
        lines = add_line(lines, self.lamp, 2)
        self.assertEqual(len(lines), 1)
        self.assertEqual(lines[0]['quantity'], 3)

    def test_total_uses_sale_price(self):
        lines = add_line(add_line([], self.lamp, 2), self.chair)
        summary = cart_summary(lines)
        self.assertEqual(summary['total'], 2 * 500 + 1200)
        self.assertEqual(summary['count'], 3)

    def test_quantity_below_one_removes(self):
        lines = add_line([], self.lamp)
        self.assertEqual(set_quantity(lines, 'p1', 0), [])

    def test_server_cart_lines(self):
        lines = server_cart_lines({'items': [{'product': self.chair, 'quantity': 4}, {'quantity': 1}]})
        self.assertEqual(len(lines), 1)
        self.assertEqual(lines[0]['quantity'], 4)
        self.assertEqual(server_cart_lines(None), [])


class GuestCartTests(BackendTestCase):
    """Test the session cart of anonymous visitors"""

    def setUp(self):
        super().setUp()
        self.product = TestDataFactory.create_product('Lamp', base_price=500, sale_price=450, id='p1')
        self.backend.on('GET', '/product/p1', self.product)

    def test_add_and_read_cart(self):
        response = self.client.post('/api/v1/cart/items/', {'productId': 'p1', 'quantity': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get('/api/v1/cart/')
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['total'], 900)
        self.assertEqual(self.backend.calls_to('POST', '/cart'), [])

    def test_add_unknown_product(self):
        self.backend.fail('GET', '/product/zzz', 404, 'Product not found')
        response = self.client.post('/api/v1/cart/items/', {'productId': 'zzz'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_quantity_and_remove(self):
        self.client.post('/api/v1/cart/items/', {'productId': 'p1'}, format='json')

        response = self.client.patch('/api/v1/cart/items/p1/', {'quantity': 5}, format='json')
        self.assertEqual(response.data['count'], 5)

        response = self.client.patch('/api/v1/cart/items/p1/', {'quantity': 0}, format='json')
        self.assertEqual(response.data['items'], [])

    def test_missing_line(self):
        response = self.client.delete('/api/v1/cart/items/p9/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_clear_cart(self):
        self.client.post('/api/v1/cart/items/', {'productId': 'p1'}, format='json')
        response = self.client.delete('/api/v1/cart/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(self.client.get('/api/v1/cart/').data['count'], 0)


class SignedInCartTests(BackendTestCase):
    """Test the backend-mirrored cart of signed-in visitors"""

    def setUp(self):
        super().setUp()
        self.as_customer()
        self.product = TestDataFactory.create_product('Lamp', base_price=500, id='p1')
        self.backend.on('GET', '/product/p1', self.product)
        self.backend.on('GET', '/cart', {'items': []})

    def test_add_syncs_to_backend(self):
        self.backend.on('POST', '/cart', {'success': True})
        response = self.client.post('/api/v1/cart/items/', {'productId': 'p1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(self.backend.calls_to('POST', '/cart')[0]['json'], {'productId': 'p1', 'quantity': 1})

    def test_rejected_add_rolls_back(self):
        self.backend.fail('POST', '/cart', 409, 'Out of stock')
        response = self.client.post('/api/v1/cart/items/', {'productId': 'p1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data, {'error': 'Out of stock'})
        self.assertEqual(self.client.get('/api/v1/cart/').data['items'], [])

    def test_rejected_remove_rolls_back(self):
        self.backend.on('GET', '/cart', {'items': [{'product': self.product, 'quantity': 1}]})
        self.backend.fail('DELETE', '/cart/p1', 500, 'boom')
        response = self.client.delete('/api/v1/cart/items/p1/')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(self.client.get('/api/v1/cart/').data['count'], 1)

    def test_server_cart_loaded_once(self):
        self.client.get('/api/v1/cart/')
        self.client.get('/api/v1/cart/')
        self.assertEqual(len(self.backend.calls_to('GET', '/cart')), 1)


class WishlistTests(BackendTestCase):
    """Test wishlist endpoints"""

    def test_anonymous_is_rejected(self):
        response = self.client.post('/api/v1/wishlist/', {'productId': 'p1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(self.backend.calls_to('POST', '/wishlist'), [])

    def test_list_and_membership(self):
        self.as_customer()
        self.backend.on('GET', '/wishlist', {'items': [
            {'id': 'w1', 'productId': 'p1', 'product': {'id': 'p1'}},
        ]})
        response = self.client.get('/api/v1/wishlist/')
        self.assertEqual(len(response.data['items']), 1)

        self.assertTrue(self.client.get('/api/v1/wishlist/p1/').data['inWishlist'])
        self.assertFalse(self.client.get('/api/v1/wishlist/p2/').data['inWishlist'])

    def test_add_and_remove(self):
        self.as_customer()
        self.backend.on('POST', '/wishlist', {'id': 'w1'})
        self.backend.on('DELETE', '/wishlist/p1', None)

        response = self.client.post('/api/v1/wishlist/', {'productId': 'p1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.delete('/api/v1/wishlist/p1/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)


class CheckoutFlowTests(TestCase):
    """Test the checkout state machine"""

    def setUp(self):
        self.zones = [
            TestDataFactory.create_shipping_zone('inside_dhaka', 'Inside Dhaka', 60),
            TestDataFactory.create_shipping_zone('outside_dhaka', 'Outside Dhaka', 120),
            TestDataFactory.create_shipping_zone('abroad', 'Abroad', 999, isActive=False),
        ]
        self.lines = [snapshot(TestDataFactory.create_product('Lamp', base_price=500, id='p1'), 2)]
        self.address = {'firstName': 'Rina', 'phone': '017', 'address': 'Road 1',
                        'division': 'Dhaka', 'district': 'Dhaka', 'thana': 'Gulshan'}

    def test_empty_cart_is_an_error(self):
        flow = CheckoutFlow(self.zones).load([])
        self.assertEqual(flow.status, CheckoutStatus.ERROR)
        self.assertEqual(flow.error, EMPTY_CART_MESSAGE)

    def test_load_is_ready(self):
        flow = CheckoutFlow(self.zones).load(self.lines)
        self.assertEqual(flow.status, CheckoutStatus.READY)
        self.assertEqual(flow.total, 1000)
        self.assertEqual(flow.to_dict()['grandTotal'], 1060)
        self.assertEqual(flow.to_dict('outside_dhaka')['shippingCost'], 120)

    def test_inactive_zones_are_hidden(self):
        flow = CheckoutFlow(self.zones)
        self.assertEqual([z['key'] for z in flow.shipping_zones], ['inside_dhaka', 'outside_dhaka'])

    def test_invalid_transitions(self):
        flow = CheckoutFlow()
        with self.assertRaises(InvalidTransition):
            flow.transition(CheckoutStatus.SUCCESS)
        flow.load(self.lines)
        with self.assertRaises(InvalidTransition):
            flow.transition(CheckoutStatus.INITIALIZING)

    def test_retry_after_error(self):
        flow = CheckoutFlow(self.zones).load([])
        flow.retry(self.lines)
        self.assertEqual(flow.status, CheckoutStatus.READY)
        self.assertIsNone(flow.error)

    def test_submit_success(self):
        client = FakeClient(order={'id': 'o1'})
        flow = CheckoutFlow(self.zones).load(self.lines)
        order = flow.submit(client, {**self.address, 'deliveryLocation': 'outside_dhaka'})

        self.assertEqual(order, {'id': 'o1'})
        self.assertEqual(flow.status, CheckoutStatus.SUCCESS)
        endpoint, payload = client.posted[0]
        self.assertEqual(endpoint, '/checkout')
        self.assertEqual(payload['paymentMethod'], 'cod')
        self.assertEqual(payload['items'], [{'productId': 'p1', 'quantity': 2}])
        self.assertEqual(payload['address']['deliveryLocation'], 'outside_dhaka')
        self.assertNotIn('paymentTrxId', payload)

        with self.assertRaises(InvalidTransition):
            flow.submit(client, self.address)

    def test_unknown_zone_rejected(self):
        flow = CheckoutFlow(self.zones).load(self.lines)
        with self.assertRaises(CheckoutError):
            flow.submit(FakeClient(), {**self.address, 'deliveryLocation': 'abroad'})
        self.assertEqual(flow.status, CheckoutStatus.ERROR)

    def test_deposit_for_pre_orders(self):
        pre_order = TestDataFactory.create_product('Sofa', base_price=1000, stock_status='pre_order', id='p3')
        lines = self.lines + [snapshot(pre_order, 2)]
        self.assertEqual(deposit_required(lines), 1000.0)

        flow = CheckoutFlow(self.zones).load(lines)
        with self.assertRaises(CheckoutError) as ctx:
            flow.submit(FakeClient(), self.address, {'paymentTrxId': 'TX1'})
        self.assertEqual(ctx.exception.message, DEPOSIT_DETAILS_MESSAGE)

        client = FakeClient()
        flow.retry(lines)
        flow.submit(client, self.address, {'paymentTrxId': 'TX1', 'paymentPhone': '018'})
        payload = client.posted[0][1]
        self.assertEqual(payload['paymentTrxId'], 'TX1')
        self.assertEqual(payload['paymentProvider'], 'bkash')


class CheckoutViewTests(BackendTestCase):
    """Test the checkout endpoint"""

    def setUp(self):
        super().setUp()
        self.as_customer()
        self.product = TestDataFactory.create_product('Lamp', base_price=500, id='p1')
        self.backend.on('GET', '/cart', {'items': [{'product': self.product, 'quantity': 2}]})
        self.backend.on('GET', '/config/enums', {
            'orderStatuses': ['pending'],
            'shippingZones': [TestDataFactory.create_shipping_zone('inside_dhaka', 'Inside Dhaka', 60)],
        })
        self.backend.on('GET', '/user/addresses', [])
        self.payload = {
            'address': {'firstName': 'Rina', 'phone': '017', 'address': 'Road 1',
                        'division': 'Dhaka', 'district': 'Dhaka', 'thana': 'Gulshan'},
            'saveAddress': True,
        }

    def test_requires_login(self):
        self.client.logout()
        response = self.client.get('/api/v1/checkout/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_describe_checkout(self):
        response = self.client.get('/api/v1/checkout/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'ready')
        self.assertEqual(response.data['total'], 1000)
        self.assertEqual(response.data['grandTotal'], 1060)
        self.assertEqual(response.data['depositRequired'], 0)

    def test_empty_cart(self):
        self.backend.on('GET', '/cart', {'items': []})
        response = self.client.post('/api/v1/checkout/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], EMPTY_CART_MESSAGE)

    def test_invalid_address(self):
        self.payload['address']['thana'] = ''
        response = self.client.post('/api/v1/checkout/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.backend.calls_to('POST', '/checkout'), [])

    def test_place_order(self):
        self.backend.on('POST', '/user/addresses', {'id': 'a1'})
        self.backend.on('POST', '/checkout', {'id': 'o1', 'status': 'pending'})

        response = self.client.post('/api/v1/checkout/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'success')
        self.assertEqual(response.data['order']['id'], 'o1')

        saved = self.backend.calls_to('POST', '/user/addresses')[0]['json']
        self.assertTrue(saved['isDefault'])
        self.assertEqual(saved['addressLine'], 'Road 1')

        sent = self.backend.calls_to('POST', '/checkout')[0]['json']
        self.assertEqual(sent['address']['email'], self.customer['email'])
        self.assertEqual(sent['address']['deliveryLocation'], 'inside_dhaka')

        self.backend.on('GET', '/cart', {'items': []})
        self.assertEqual(self.client.get('/api/v1/cart/').data['count'], 0)

    def test_address_save_failure_does_not_block(self):
        self.backend.fail('POST', '/user/addresses', 500, 'boom')
        self.backend.on('POST', '/checkout', {'id': 'o1'})
        response = self.client.post('/api/v1/checkout/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_backend_rejects_order(self):
        self.backend.fail('POST', '/checkout', 400, 'Insufficient stock')
        response = self.client.post('/api/v1/checkout/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'status': 'error', 'error': 'Insufficient stock'})
