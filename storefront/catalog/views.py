import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticatedOrReadOnly
from rest_framework.response import Response

from storefront.core.api_client import BackendClient
from storefront.core.cache_signals import notify_changed
from storefront.core.exceptions import BackendAPIError
from storefront.core.permissions import IsBackendAdmin
from storefront.core.utils import log_admin_action
from .category_tree import (
    REORDER_ACTIONS, CategoryHierarchyError,
    build_breadcrumbs, category_options, find_category_by_slug,
    flatten_categories, flatten_category_tree, resolve_hierarchy,
)
from .serializers import (
    BulkDeleteSerializer, CategorySerializer, CollectionProductSerializer,
    CollectionSerializer, DraftActionSerializer, ProductSerializer,
    ProductStatusSerializer, ReorderSerializer, ReviewSerializer,
    SearchQuerySerializer, ShopQuerySerializer,
)
from .shop import get_category_products, get_category_tree, get_shop_products

logger = logging.getLogger('storefront.catalog')

CATEGORY_DRAFT_SESSION_KEY = 'category_draft'


# Public category views
@api_view(['GET'])
@permission_classes([AllowAny])
def category_tree(request):
    """Nested category tree"""
    with BackendClient() as client:
        return Response(get_category_tree(client))


@api_view(['GET'])
@permission_classes([AllowAny])
def category_list(request):
    """All categories, flattened with depth and id path"""
    with BackendClient() as client:
        tree = get_category_tree(client)

    rows = flatten_category_tree(tree)
    for row in rows:
        row.pop('children', None)
    return Response(rows)


@api_view(['GET'])
@permission_classes([AllowAny])
def category_detail(request, slug):
    """Category page: the category, its breadcrumbs, subcategories and products"""
    query = ShopQuerySerializer(data=request.query_params)
    if not query.is_valid():
        return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)

    with BackendClient() as client:
        tree = get_category_tree(client)
        category = find_category_by_slug(slug, tree)
        if not category:
            return Response({'error': 'Category not found'}, status=status.HTTP_404_NOT_FOUND)
        products = get_category_products(client, slug, query.validated_data)

    children = category.get('children') or []
    return Response({
        'category': {key: value for key, value in category.items() if key != 'children'},
        'breadcrumbs': build_breadcrumbs(category.get('id'), tree),
        'children': children,
        'products': products,
    })


# Shop & products
@api_view(['GET'])
@permission_classes([AllowAny])
def shop(request):
    """Shop listing with filtering, sorting and pagination"""
    query = ShopQuerySerializer(data=request.query_params)
    if not query.is_valid():
        return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)

    with BackendClient() as client:
        return Response(get_shop_products(client, query.validated_data))


@api_view(['GET'])
@permission_classes([AllowAny])
def product_detail(request, pk):
    """Single product (404 when the backend does not know it)"""
    with BackendClient() as client:
        return Response(client.get(f'/product/{pk}'))


@api_view(['GET'])
@permission_classes([AllowAny])
def search(request):
    """Product search"""
    query = SearchQuerySerializer(data=request.query_params)
    if not query.is_valid():
        return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)

    q = query.validated_data['q'].strip()
    page = query.validated_data['page']
    limit = query.validated_data['limit']
    if not q:
        return Response({
            'success': True,
            'data': [],
            'meta': {'page': page, 'limit': limit, 'totalItems': 0, 'totalPages': 0},
        })

    with BackendClient() as client:
        return Response(client.get('/search', params={'q': q, 'page': page, 'limit': limit}))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedOrReadOnly])
def product_reviews(request, pk):
    """List reviews of a product or post a new one"""
    with BackendClient.for_request(request) as client:
        if request.method == 'GET':
            data = client.get(f'/products/{pk}/reviews')
            return Response(data if data is not None else [])

        serializer = ReviewSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        review = client.post(f'/products/{pk}/reviews', json=serializer.validated_data)
        return Response(review, status=status.HTTP_201_CREATED)


# Collections
@api_view(['GET'])
@permission_classes([AllowAny])
def collection_list(request):
    with BackendClient() as client:
        data = client.get('/collections')
    return Response(data if data is not None else [])


@api_view(['GET'])
@permission_classes([AllowAny])
def collection_detail(request, pk):
    with BackendClient() as client:
        return Response(client.get(f'/collections/{pk}'))


# Admin product views
@api_view(['GET', 'POST'])
@permission_classes([IsBackendAdmin])
def admin_product_list_create(request):
    """List products (admin) or create a new product"""
    with BackendClient.for_request(request) as client:
        if request.method == 'GET':
            return Response(client.get('/admin/products', params=request.query_params.dict()))

        serializer = ProductSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        product = client.post('/admin/products', json=serializer.validated_data)

    product_id = product.get('id') if isinstance(product, dict) else None
    log_admin_action(request, 'create', 'product', product_id, changes={'name': serializer.validated_data['name']})
    notify_changed('product')
    return Response(product, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsBackendAdmin])
def admin_product_detail(request, pk):
    """Retrieve, update or delete a product"""
    with BackendClient.for_request(request) as client:
        if request.method == 'GET':
            return Response(client.get(f'/admin/products/{pk}'))

        if request.method == 'PUT':
            serializer = ProductSerializer(data=request.data, partial=True)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
            product = client.put(f'/admin/products/{pk}', json=serializer.validated_data)
            log_admin_action(request, 'update', 'product', pk, changes=serializer.validated_data)
            notify_changed('product')
            return Response(product)

        client.delete(f'/admin/products/{pk}')

    log_admin_action(request, 'delete', 'product', pk)
    notify_changed('product')
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PATCH'])
@permission_classes([IsBackendAdmin])
def admin_product_status(request, pk):
    """Activate or deactivate a product"""
    serializer = ProductStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with BackendClient.for_request(request) as client:
        data = client.patch(f'/admin/products/{pk}/status', json=serializer.validated_data)

    log_admin_action(request, 'status_change', 'product', pk, changes=serializer.validated_data)
    notify_changed('product')
    return Response(data if data is not None else serializer.validated_data)


@api_view(['POST'])
@permission_classes([IsBackendAdmin])
def admin_product_bulk_delete(request):
    """
    Delete several products, one backend call each.

    Failures do not stop the batch; the response lists the outcome per id.
    """
    serializer = BulkDeleteSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    results = []
    with BackendClient.for_request(request) as client:
        for product_id in serializer.validated_data['ids']:
            try:
                client.delete(f'/admin/products/{product_id}')
                results.append({'id': product_id, 'deleted': True})
            except BackendAPIError as e:
                logger.warning(f"Bulk delete failed for product {product_id}: {e}")
                results.append({'id': product_id, 'deleted': False, 'error': e.message})

    deleted = [r['id'] for r in results if r['deleted']]
    if deleted:
        log_admin_action(request, 'bulk_delete', 'product', changes={'ids': deleted})
        notify_changed('product')

    return Response({
        'results': results,
        'deleted': len(deleted),
        'failed': len(results) - len(deleted),
    })


@api_view(['GET'])
@permission_classes([IsBackendAdmin])
def admin_product_stats(request):
    with BackendClient.for_request(request) as client:
        return Response(client.get('/admin/products/stats'))


# Admin category views
@api_view(['GET'])
@permission_classes([IsBackendAdmin])
def admin_category_tree(request):
    """Full category tree including inactive categories, plus select options"""
    with BackendClient.for_request(request) as client:
        tree = client.get('/admin/categories/tree') or []
    return Response({'tree': tree, 'options': category_options(tree)})


@api_view(['POST'])
@permission_classes([IsBackendAdmin])
def admin_category_create(request):
    serializer = CategorySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with BackendClient.for_request(request) as client:
        category = client.post('/admin/categories', json=serializer.validated_data)

    category_id = category.get('id') if isinstance(category, dict) else None
    log_admin_action(request, 'create', 'category', category_id, changes={'name': serializer.validated_data['name']})
    notify_changed('category')
    return Response(category, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsBackendAdmin])
def admin_category_detail(request, pk):
    """Update or delete a category"""
    with BackendClient.for_request(request) as client:
        if request.method == 'PUT':
            serializer = CategorySerializer(data=request.data, partial=True)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
            category = client.put(f'/admin/categories/{pk}', json=serializer.validated_data)
            log_admin_action(request, 'update', 'category', pk, changes=serializer.validated_data)
            notify_changed('category')
            return Response(category)

        client.delete(f'/admin/categories/{pk}')

    log_admin_action(request, 'delete', 'category', pk)
    notify_changed('category')
    return Response(status=status.HTTP_204_NO_CONTENT)


def _load_draft(request, client):
    """Unsaved draft from the session, or a fresh flattening of the backend tree"""
    draft = request.session.get(CATEGORY_DRAFT_SESSION_KEY)
    if draft and draft.get('isDirty'):
        return draft['items'], True
    tree = client.get('/admin/categories/tree') or []
    return flatten_categories(tree), False


@api_view(['GET', 'POST', 'DELETE'])
@permission_classes([IsBackendAdmin])
def admin_category_draft(request):
    """
    Category reorder draft held in the session.

    GET returns the draft (or the current tree when nothing is pending),
    POST applies one move (move_up, move_down, indent, outdent),
    DELETE discards pending changes.
    """
    if request.method == 'DELETE':
        request.session.pop(CATEGORY_DRAFT_SESSION_KEY, None)
        return Response(status=status.HTTP_204_NO_CONTENT)

    with BackendClient.for_request(request) as client:
        items, is_dirty = _load_draft(request, client)

    if request.method == 'GET':
        return Response({'items': items, 'isDirty': is_dirty})

    serializer = DraftActionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    category_id = serializer.validated_data['id']
    if not any(item.get('id') == category_id for item in items):
        return Response({'error': 'Category not found'}, status=status.HTTP_404_NOT_FOUND)

    operation = REORDER_ACTIONS[serializer.validated_data['action']]
    items = operation(items, category_id)
    request.session[CATEGORY_DRAFT_SESSION_KEY] = {'items': items, 'isDirty': True}
    return Response({'items': items, 'isDirty': True})


def _save_hierarchy(request, items):
    """Send the resolved hierarchy to the backend; returns the updates sent"""
    updates = resolve_hierarchy(items)
    with BackendClient.for_request(request) as client:
        client.post('/admin/categories/reorder', json={'updates': updates})

    log_admin_action(request, 'reorder', 'category', changes={'count': len(updates)})
    notify_changed('category')
    return updates


@api_view(['POST'])
@permission_classes([IsBackendAdmin])
def admin_category_draft_save(request):
    """Persist the session draft as the new category hierarchy"""
    draft = request.session.get(CATEGORY_DRAFT_SESSION_KEY)
    if not draft or not draft.get('isDirty'):
        return Response({'error': 'No unsaved changes'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        updates = _save_hierarchy(request, draft['items'])
    except CategoryHierarchyError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    request.session.pop(CATEGORY_DRAFT_SESSION_KEY, None)
    return Response({'updates': updates})


@api_view(['POST'])
@permission_classes([IsBackendAdmin])
def admin_category_reorder(request):
    """Save a hierarchy given directly as a flat list of {id, depth}"""
    serializer = ReorderSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        updates = _save_hierarchy(request, serializer.validated_data['items'])
    except CategoryHierarchyError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({'updates': updates})


# Admin collection views
@api_view(['GET', 'POST'])
@permission_classes([IsBackendAdmin])
def admin_collection_list_create(request):
    with BackendClient.for_request(request) as client:
        if request.method == 'GET':
            data = client.get('/admin/collections')
            return Response(data if data is not None else [])

        serializer = CollectionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        collection = client.post('/admin/collections', json=serializer.validated_data)

    collection_id = collection.get('id') if isinstance(collection, dict) else None
    log_admin_action(request, 'create', 'collection', collection_id, changes={'title': serializer.validated_data['title']})
    return Response(collection, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsBackendAdmin])
def admin_collection_detail(request, pk):
    with BackendClient.for_request(request) as client:
        if request.method == 'PUT':
            serializer = CollectionSerializer(data=request.data, partial=True)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
            collection = client.put(f'/admin/collections/{pk}', json=serializer.validated_data)
            log_admin_action(request, 'update', 'collection', pk, changes=serializer.validated_data)
            return Response(collection)

        client.delete(f'/admin/collections/{pk}')

    log_admin_action(request, 'delete', 'collection', pk)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsBackendAdmin])
def admin_collection_products(request, pk):
    """Add a product to, or remove it from, a collection"""
    serializer = CollectionProductSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with BackendClient.for_request(request) as client:
        data = client.post(f'/admin/collections/{pk}/products', json=serializer.validated_data)

    log_admin_action(request, serializer.validated_data['action'], 'collection_product', pk,
                     changes={'productId': serializer.validated_data['productId']})
    return Response(data if data is not None else serializer.validated_data)
