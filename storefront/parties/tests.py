"""
Test suite for the parties module
Tests: customer list, profile updates, profile orders, saved addresses
"""
from rest_framework import status

from storefront.core.test_utils import BackendTestCase, TestDataFactory


def address_data(**overrides):
    data = {
        'label': 'Home',
        'firstName': 'Rahim',
        'phone': '+880 1700-000000',
        'addressLine': 'House 12, Road 5',
        'division': 'Dhaka',
        'district': 'Dhaka',
        'thana': 'Dhanmondi',
    }
    data.update(overrides)
    return data


class CustomerListTests(BackendTestCase):
    """Test the admin customer list"""

    def test_requires_admin(self):
        self.as_customer()
        response = self.client.get('/api/v1/admin/customers/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_users_envelope(self):
        self.backend.on('GET', '/admin/users', {'users': [TestDataFactory.create_user()]})
        self.as_admin()
        response = self.client.get('/api/v1/admin/customers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)


class ProfileTests(BackendTestCase):
    """Test profile endpoints"""

    def setUp(self):
        super().setUp()
        self.backend.on('PUT', '/user/profile', lambda c, p, json, f: {**self.customer, **json})

    def test_requires_login(self):
        response = self.client.put('/api/v1/profile/', {'firstName': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_update_refreshes_current_user(self):
        self.as_customer()
        self.client.get('/api/v1/auth/me/')
        response = self.client.put('/api/v1/profile/', {'firstName': 'Karim', 'phone': '01800000000'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['firstName'], 'Karim')

        self.client.get('/api/v1/auth/me/')
        # cached before the update, fetched again after it
        self.assertEqual(len(self.backend.calls_to('GET', '/auth/me')), 2)

    def test_first_name_required(self):
        self.as_customer()
        response = self.client.put('/api/v1/profile/', {'lastName': 'Uddin'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_orders(self):
        self.backend.on('GET', '/orders', [TestDataFactory.create_order()])
        self.as_customer()
        response = self.client.get('/api/v1/profile/orders/')
        self.assertEqual(len(response.data), 1)

    def test_orders_empty_on_failure(self):
        self.backend.fail('GET', '/orders', 500, 'boom')
        self.as_customer()
        response = self.client.get('/api/v1/profile/orders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])


class AddressTests(BackendTestCase):
    """Test saved address endpoints"""

    def setUp(self):
        super().setUp()
        self.backend.on('GET', '/user/addresses', [{'id': 'a1', **address_data()}])
        self.backend.on('POST', '/user/addresses', lambda c, p, json, f: {'id': 'a2', **json})
        self.backend.on('PUT', '/user/addresses/a1', lambda c, p, json, f: {'id': 'a1', **json})
        self.backend.on('DELETE', '/user/addresses/a1', None)
        self.as_customer()

    def test_list(self):
        response = self.client.get('/api/v1/profile/addresses/')
        self.assertEqual(response.data[0]['id'], 'a1')

    def test_create(self):
        response = self.client.post('/api/v1/profile/addresses/', address_data(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['id'], 'a2')

    def test_create_requires_fields(self):
        response = self.client.post('/api/v1/profile/addresses/', {'label': 'Office'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        for field in ('firstName', 'phone', 'addressLine', 'division', 'district', 'thana'):
            self.assertIn(field, response.data)
        self.assertEqual(self.backend.calls_to('POST', '/user/addresses'), [])

    def test_invalid_phone(self):
        response = self.client.post('/api/v1/profile/addresses/', address_data(phone='call me'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('phone', response.data)

    def test_partial_update(self):
        response = self.client.put('/api/v1/profile/addresses/a1/', {'label': 'Office'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.backend.calls_to('PUT', '/user/addresses/a1')[0]['json'], {'label': 'Office'})

    def test_delete(self):
        response = self.client.delete('/api/v1/profile/addresses/a1/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
