"""
Test suite for the content module
Tests: public content reads, per-key validation, cache invalidation
"""
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status

from storefront.core.cache_utils import get_content_cache_key
from storefront.core.test_utils import BackendTestCase
from .serializers import AboutPageSerializer, GlobalSettingsSerializer, PolicyPageSerializer


class ContentSerializerTests(TestCase):
    """Test per-key validation"""

    def test_about_block_types(self):
        serializer = AboutPageSerializer(data={'blocks': [{'type': 'carousel'}]})
        self.assertFalse(serializer.is_valid())

        serializer = AboutPageSerializer(data={'blocks': [{'type': 'stats', 'items': []}]})
        self.assertFalse(serializer.is_valid())

        serializer = AboutPageSerializer(data={
            'hero': {'title': 'Our story'},
            'blocks': [
                {'type': 'text', 'heading': 'Since 2010', 'body': '...'},
                {'type': 'image_split', 'imageUrl': '/img/shop.jpg', 'position': 'left'},
                {'type': 'stats', 'items': [{'label': 'Customers', 'value': '10k'}]},
            ],
        })
        self.assertTrue(serializer.is_valid(), serializer.errors)

    def test_image_block_needs_image(self):
        serializer = AboutPageSerializer(data={'blocks': [{'type': 'image_split'}]})
        self.assertFalse(serializer.is_valid())

    def test_global_settings(self):
        serializer = GlobalSettingsSerializer(data={
            'branding': {'siteName': 'Shop', 'primaryColor': '#ff0000'},
            'contact': {'supportEmail': 'help@shop.test', 'address': {'city': 'Dhaka'}},
        })
        self.assertTrue(serializer.is_valid(), serializer.errors)

        serializer = GlobalSettingsSerializer(data={'branding': {'primaryColor': 'red'}})
        self.assertFalse(serializer.is_valid())
        serializer = GlobalSettingsSerializer(data={'contact': {'supportEmail': 'nope'}})
        self.assertFalse(serializer.is_valid())

    def test_policy_sections_need_heading(self):
        serializer = PolicyPageSerializer(data={'sections': [{'content': 'text'}]})
        self.assertFalse(serializer.is_valid())


class ContentViewTests(BackendTestCase):
    """Test content endpoints"""

    def setUp(self):
        super().setUp()
        self.backend.on('GET', '/content/home_hero', {'key': 'home_hero', 'content': {'title': 'Sale'}})
        self.backend.on('PUT', '/admin/content/home_hero', lambda c, p, json, f: {'key': 'home_hero', 'content': json})
        self.backend.on('PUT', '/admin/content/policy_return', lambda c, p, json, f: {'content': json})

    def test_read_is_cached(self):
        self.client.get('/api/v1/content/home_hero/')
        response = self.client.get('/api/v1/content/home_hero/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['content'], {'title': 'Sale'})
        self.assertEqual(len(self.backend.calls_to('GET', '/content/home_hero')), 1)

    def test_unknown_key_skips_backend(self):
        response = self.client.get('/api/v1/content/secret_page/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.backend.calls, [])

    def test_update_requires_admin(self):
        self.as_customer()
        response = self.client.put('/api/v1/admin/content/home_hero/', {'title': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_drops_cache(self):
        cache.set(get_content_cache_key('home_hero'), {'content': {'title': 'Old'}})
        self.as_admin()
        response = self.client.put('/api/v1/admin/content/home_hero/', {'title': 'New'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(cache.get(get_content_cache_key('home_hero')))

    def test_policy_update_is_validated_and_stamped(self):
        self.as_admin()
        response = self.client.put('/api/v1/admin/content/policy_return/', {'sections': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.put('/api/v1/admin/content/policy_return/', {
            'sections': [{'heading': 'Returns', 'content': 'Within 7 days'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        sent = self.backend.calls_to('PUT', '/admin/content/policy_return')[0]['json']
        self.assertTrue(sent['lastUpdated'])

    def test_non_object_rejected(self):
        self.as_admin()
        response = self.client.put('/api/v1/admin/content/home_footer/', ['a', 'b'], format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
