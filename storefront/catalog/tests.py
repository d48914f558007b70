"""
Test suite for the catalog module
Tests: category tree utilities, shop listing, public catalog and admin catalog endpoints
"""
from unittest import mock

from django.test import TestCase
from rest_framework import status

from storefront.core.exceptions import BackendUnavailable
from storefront.core.test_utils import BackendTestCase, TestDataFactory
from .category_tree import (
    CategoryHierarchyError, build_breadcrumbs, category_options,
    find_category_by_slug, flatten_categories, flatten_category_tree,
    get_category_path, indent, move_down, move_up, outdent, resolve_hierarchy,
)
from .shop import effective_price


def sample_tree():
    return [
        TestDataFactory.create_category('Lighting', id='A', children=[
            TestDataFactory.create_category('Lamps', id='A1'),
            TestDataFactory.create_category('Ceiling', id='A2', children=[
                TestDataFactory.create_category('Pendants', id='A2a'),
            ]),
        ]),
        TestDataFactory.create_category('Furniture', id='B'),
    ]


def ids(items):
    return [item['id'] for item in items]


def depths(items):
    return [item['depth'] for item in items]


class CategoryTreeTests(TestCase):
    """Test flattening, hierarchy resolution and reorder moves"""

    def setUp(self):
        self.items = flatten_categories(sample_tree())

    def test_flatten_categories(self):
        """Rows come out pre-ordered with depth, parent and position"""
        self.assertEqual(ids(self.items), ['A', 'A1', 'A2', 'A2a', 'B'])
        self.assertEqual(depths(self.items), [0, 1, 1, 2, 0])
        self.assertEqual([i['parentId'] for i in self.items], [None, 'A', 'A', 'A2', None])
        self.assertEqual([i['index'] for i in self.items], [0, 1, 2, 3, 4])
        self.assertNotIn('children', self.items[0])

    def test_resolve_hierarchy(self):
        """Parents and per-parent order indexes are rebuilt from depths"""
        updates = resolve_hierarchy(self.items)
        self.assertEqual(updates, [
            {'ID': 'A', 'ParentID': None, 'OrderIndex': 0},
            {'ID': 'A1', 'ParentID': 'A', 'OrderIndex': 0},
            {'ID': 'A2', 'ParentID': 'A', 'OrderIndex': 1},
            {'ID': 'A2a', 'ParentID': 'A2', 'OrderIndex': 0},
            {'ID': 'B', 'ParentID': None, 'OrderIndex': 1},
        ])

    def test_resolve_hierarchy_empty(self):
        self.assertEqual(resolve_hierarchy([]), [])

    def test_resolve_hierarchy_rejects_deep_first_row(self):
        with self.assertRaises(CategoryHierarchyError):
            resolve_hierarchy([{'id': 'x', 'depth': 1}])

    def test_resolve_hierarchy_rejects_depth_jump(self):
        with self.assertRaises(CategoryHierarchyError):
            resolve_hierarchy([{'id': 'a', 'depth': 0}, {'id': 'b', 'depth': 2}])

    def test_move_down_swaps_with_sibling_subtree(self):
        """Moving a row down jumps over the whole subtree of its sibling"""
        moved = move_down(self.items, 'A1')
        self.assertEqual(ids(moved), ['A', 'A2', 'A2a', 'A1', 'B'])
        self.assertEqual(depths(moved), [0, 1, 2, 1, 0])
        self.assertEqual([i['index'] for i in moved], [0, 1, 2, 3, 4])

    def test_move_up_carries_subtree(self):
        moved = move_up(self.items, 'B')
        self.assertEqual(ids(moved), ['B', 'A', 'A1', 'A2', 'A2a'])

    def test_move_up_without_sibling_is_noop(self):
        """First child cannot move above its parent"""
        moved = move_up(self.items, 'A1')
        self.assertEqual(ids(moved), ids(self.items))

    def test_move_down_last_sibling_is_noop(self):
        moved = move_down(self.items, 'B')
        self.assertEqual(ids(moved), ids(self.items))

    def test_indent_moves_subtree(self):
        """Indented row becomes a child of the row above, taking its children along"""
        moved = indent(self.items, 'A2')
        self.assertEqual(depths(moved), [0, 1, 2, 3, 0])
        self.assertEqual(moved[2]['parentId'], 'A1')
        self.assertEqual(moved[3]['parentId'], 'A2')

    def test_indent_first_row_is_noop(self):
        self.assertEqual(depths(indent(self.items, 'A')), depths(self.items))

    def test_outdent_moves_subtree(self):
        moved = outdent(self.items, 'A2')
        self.assertEqual(depths(moved), [0, 1, 0, 1, 0])
        self.assertIsNone(moved[2]['parentId'])
        self.assertEqual(moved[3]['parentId'], 'A2')

    def test_outdent_root_is_noop(self):
        self.assertEqual(depths(outdent(self.items, 'B')), depths(self.items))

    def test_moves_leave_input_untouched(self):
        before = [dict(item) for item in self.items]
        indent(self.items, 'A2')
        move_down(self.items, 'A1')
        outdent(self.items, 'A2a')
        self.assertEqual(self.items, before)

    def test_moved_lists_stay_resolvable(self):
        moved = outdent(indent(move_down(self.items, 'A1'), 'B'), 'A2')
        self.assertEqual(len(resolve_hierarchy(moved)), 5)

    def test_navigation_helpers(self):
        """Breadcrumbs, id paths and select options follow the tree"""
        tree = sample_tree()
        self.assertEqual(find_category_by_slug('pendants', tree)['id'], 'A2a')
        self.assertIsNone(find_category_by_slug('missing', tree))
        self.assertEqual(get_category_path('A2a', tree), ['A', 'A2', 'A2a'])
        self.assertEqual(get_category_path('zzz', tree), [])

        breadcrumbs = build_breadcrumbs('A2', tree)
        self.assertEqual([b['href'] for b in breadcrumbs], ['/category/lighting', '/category/ceiling'])

        options = category_options(tree)
        self.assertIn({'id': 'A2a', 'name': 'Lighting > Ceiling > Pendants'}, options)

        rows = flatten_category_tree(tree)
        self.assertEqual(rows[3]['path'], ['A', 'A2', 'A2a'])


class ShopTests(BackendTestCase):
    """Test the shop listing endpoint"""

    def setUp(self):
        super().setUp()
        furniture = [{'slug': 'furniture', 'name': 'Furniture'}]
        self.lamp = TestDataFactory.create_product(
            'Alpha Lamp', base_price=500, categories=[{'slug': 'lighting'}],
            created_at='2024-01-01T00:00:00Z')
        self.chair = TestDataFactory.create_product(
            'Beta Chair', base_price=1500, sale_price=1200, stock=0, categories=furniture,
            created_at='2024-03-01T00:00:00Z')
        self.table = TestDataFactory.create_product(
            'Gamma Table', base_price=3000, categories=furniture,
            created_at='2024-02-01T00:00:00Z')
        self.backend.on('GET', '/products', {'data': [self.lamp, self.chair, self.table]})

    def names(self, response):
        return [p['name'] for p in response.data['products']]

    def test_effective_price(self):
        self.assertEqual(effective_price(self.chair), 1200)
        self.assertEqual(effective_price(self.lamp), 500)
        self.assertEqual(effective_price({'basePrice': 100, 'salePrice': 150}), 100)

    def test_default_listing(self):
        """Newest first, one page of 12"""
        response = self.client.get('/api/v1/shop/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.names(response), ['Beta Chair', 'Gamma Table', 'Alpha Lamp'])
        self.assertEqual(response.data['pagination'], {'total': 3, 'page': 1, 'limit': 12, 'totalPages': 1})

        call = self.backend.calls_to('GET', '/products')[0]
        self.assertEqual(call['params'], {'limit': 500, 'page': 1})

    def test_category_filter_and_price_sort(self):
        response = self.client.get('/api/v1/shop/?category=furniture,decor&sort=price_asc')
        self.assertEqual(self.names(response), ['Beta Chair', 'Gamma Table'])

    def test_in_stock_filter(self):
        response = self.client.get('/api/v1/shop/?inStock=true')
        self.assertEqual(self.names(response), ['Gamma Table', 'Alpha Lamp'])

    def test_price_range_uses_base_price(self):
        response = self.client.get('/api/v1/shop/?minPrice=1000&maxPrice=2000')
        self.assertEqual(self.names(response), ['Beta Chair'])

    def test_search_filter(self):
        response = self.client.get('/api/v1/shop/?search=LAMP')
        self.assertEqual(self.names(response), ['Alpha Lamp'])

    def test_pagination(self):
        response = self.client.get('/api/v1/shop/?limit=2&page=2&sort=name')
        self.assertEqual(self.names(response), ['Gamma Table'])
        self.assertEqual(response.data['pagination']['totalPages'], 2)

    def test_invalid_sort(self):
        response = self.client.get('/api/v1/shop/?sort=random')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_backend_failure_returns_empty_page(self):
        self.backend.on('GET', '/products', BackendUnavailable)
        response = self.client.get('/api/v1/shop/?page=3')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {
            'products': [],
            'pagination': {'total': 0, 'page': 1, 'limit': 12, 'totalPages': 0},
        })


class PublicCatalogTests(BackendTestCase):
    """Test category, product, search and review endpoints"""

    def setUp(self):
        super().setUp()
        self.backend.on('GET', '/categories/tree', sample_tree())

    def test_category_tree_is_cached(self):
        self.client.get('/api/v1/categories/tree/')
        response = self.client.get('/api/v1/categories/tree/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(self.backend.calls_to('GET', '/categories/tree')), 1)

    def test_category_list(self):
        response = self.client.get('/api/v1/categories/')
        self.assertEqual([c['id'] for c in response.data], ['A', 'A1', 'A2', 'A2a', 'B'])
        self.assertNotIn('children', response.data[0])

    def test_category_detail(self):
        self.backend.on('GET', '/products', {'products': [TestDataFactory.create_product('Pendant')]})
        response = self.client.get('/api/v1/categories/ceiling/?inStock=true')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['category']['id'], 'A2')
        self.assertEqual([b['slug'] for b in response.data['breadcrumbs']], ['lighting', 'ceiling'])
        self.assertEqual([c['id'] for c in response.data['children']], ['A2a'])
        self.assertEqual(len(response.data['products']), 1)

        call = self.backend.calls_to('GET', '/products')[0]
        self.assertEqual(call['params'], {'category': 'ceiling', 'inStock': 'true'})

    def test_unknown_category(self):
        response = self.client.get('/api/v1/categories/unknown/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_product_detail_not_found(self):
        self.backend.fail('GET', '/product/missing', 404, 'Product not found')
        response = self.client.get('/api/v1/products/missing/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'error': 'Product not found'})

    def test_empty_search_skips_backend(self):
        response = self.client.get('/api/v1/search/?q=%20%20')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'], [])
        self.assertEqual(self.backend.calls_to('GET', '/search'), [])

    def test_search(self):
        self.backend.on('GET', '/search', {'success': True, 'data': [{'id': '1'}], 'meta': {}})
        response = self.client.get('/api/v1/search/?q=lamp')
        self.assertEqual(response.data['data'], [{'id': '1'}])
        self.assertEqual(self.backend.calls_to('GET', '/search')[0]['params'], {'q': 'lamp', 'page': 1, 'limit': 20})

    def test_review_requires_login(self):
        response = self.client.post('/api/v1/products/p1/reviews/', {'rating': 5, 'comment': 'Great'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_review_validation(self):
        self.as_customer()
        response = self.client.post('/api/v1/products/p1/reviews/', {'rating': 6, 'comment': '  '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('rating', response.data)
        self.assertIn('comment', response.data)

    def test_create_review(self):
        self.as_customer()
        self.backend.on('POST', '/products/p1/reviews', lambda client, params, json, files: {'id': 'r1', **json})
        response = self.client.post('/api/v1/products/p1/reviews/', {'rating': 4, 'comment': 'Nice'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['rating'], 4)
        self.assertEqual(self.backend.calls_to('POST', '/products/p1/reviews')[0]['token'], 'customer-token')


class AdminProductTests(BackendTestCase):
    """Test admin product endpoints"""

    def test_requires_admin(self):
        response = self.client.get('/api/v1/admin/products/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        self.as_customer()
        response = self.client.get('/api/v1/admin/products/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_product_coerces_numbers(self):
        self.as_admin()
        self.backend.on('POST', '/admin/products', lambda client, params, json, files: {'id': 'p1', **json})
        response = self.client.post('/api/v1/admin/products/', {
            'name': 'Desk Lamp', 'slug': 'desk-lamp', 'basePrice': '1200',
            'salePrice': '999', 'stock': '7', 'lowStockThreshold': '2',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        sent = self.backend.calls_to('POST', '/admin/products')[0]['json']
        self.assertEqual(sent['basePrice'], 1200.0)
        self.assertEqual(sent['stock'], 7)
        self.assertEqual(sent['lowStockThreshold'], 2)

    def test_sale_price_above_base_price(self):
        self.as_admin()
        response = self.client.post('/api/v1/admin/products/', {
            'name': 'Desk Lamp', 'slug': 'desk-lamp', 'basePrice': 100, 'salePrice': 150,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('salePrice', response.data)

    def test_toggle_status(self):
        self.as_admin()
        self.backend.on('PATCH', '/admin/products/p1/status', {'id': 'p1', 'isActive': False})
        response = self.client.patch('/api/v1/admin/products/p1/status/', {'isActive': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.backend.calls_to('PATCH', '/admin/products/p1/status')[0]['json'], {'isActive': False})

    def test_bulk_delete_reports_each_id(self):
        self.as_admin()
        self.backend.on('DELETE', '/admin/products/p1', None)
        self.backend.fail('DELETE', '/admin/products/p2', 409, 'Product has orders')
        response = self.client.post('/api/v1/admin/products/bulk-delete/', {'ids': ['p1', 'p2']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['deleted'], 1)
        self.assertEqual(response.data['failed'], 1)
        self.assertEqual(response.data['results'][1]['error'], 'Product has orders')

    def test_bulk_delete_invalidates_stats_once(self):
        self.as_admin()
        for product_id in ('p1', 'p2', 'p3'):
            self.backend.on('DELETE', f'/admin/products/{product_id}', None)
        with mock.patch('storefront.core.cache_signals.invalidate_stats_cache') as invalidate:
            response = self.client.post(
                '/api/v1/admin/products/bulk-delete/', {'ids': ['p1', 'p2', 'p3']}, format='json'
            )
        self.assertEqual(response.data['deleted'], 3)
        invalidate.assert_called_once_with()


class AdminCategoryTests(BackendTestCase):
    """Test admin category CRUD and the reorder draft"""

    def setUp(self):
        super().setUp()
        self.as_admin()
        self.backend.on('GET', '/admin/categories/tree', sample_tree())
        self.backend.on('POST', '/admin/categories/reorder', {'success': True})

    def test_draft_starts_clean(self):
        response = self.client.get('/api/v1/admin/categories/draft/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['isDirty'])
        self.assertEqual(ids(response.data['items']), ['A', 'A1', 'A2', 'A2a', 'B'])

    def test_draft_move_and_save(self):
        """Moves accumulate in the session until saved"""
        response = self.client.post('/api/v1/admin/categories/draft/', {'action': 'move_down', 'id': 'A1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['isDirty'])

        response = self.client.get('/api/v1/admin/categories/draft/')
        self.assertEqual(ids(response.data['items']), ['A', 'A2', 'A2a', 'A1', 'B'])

        response = self.client.post('/api/v1/admin/categories/draft/save/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        sent = self.backend.calls_to('POST', '/admin/categories/reorder')[0]['json']
        self.assertEqual(sent['updates'][3], {'ID': 'A1', 'ParentID': 'A', 'OrderIndex': 1})

        response = self.client.get('/api/v1/admin/categories/draft/')
        self.assertFalse(response.data['isDirty'])

    def test_discard_draft(self):
        self.client.post('/api/v1/admin/categories/draft/', {'action': 'indent', 'id': 'A2'}, format='json')
        response = self.client.delete('/api/v1/admin/categories/draft/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

        response = self.client.get('/api/v1/admin/categories/draft/')
        self.assertFalse(response.data['isDirty'])

    def test_save_without_changes(self):
        response = self.client.post('/api/v1/admin/categories/draft/save/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_draft_unknown_category(self):
        response = self.client.post('/api/v1/admin/categories/draft/', {'action': 'indent', 'id': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_stateless_reorder_rejects_bad_depths(self):
        response = self.client.post('/api/v1/admin/categories/reorder/', {
            'items': [{'id': 'A', 'depth': 0}, {'id': 'B', 'depth': 2}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.backend.calls_to('POST', '/admin/categories/reorder'), [])

    def test_category_change_drops_public_tree_cache(self):
        self.backend.on('GET', '/categories/tree', sample_tree())
        self.backend.on('PUT', '/admin/categories/B', {'id': 'B', 'name': 'Home'})
        self.client.get('/api/v1/categories/tree/')

        response = self.client.put('/api/v1/admin/categories/B/', {'name': 'Home'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.get('/api/v1/categories/tree/')
        self.assertEqual(len(self.backend.calls_to('GET', '/categories/tree')), 2)
