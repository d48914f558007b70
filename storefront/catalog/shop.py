"""
Shop listing and catalog reads

The backend's product listing has no filtering of its own, so the shop
fetches one large page and filters, sorts and paginates it here.
"""
import logging
import math

from django.conf import settings
from django.utils.dateparse import parse_datetime

from storefront.core.cache_utils import CATEGORY_TREE_CACHE_TTL, CATEGORY_TREE_KEY, get_or_fetch
from storefront.core.exceptions import BackendAPIError

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 12

SORT_NEWEST = 'newest'
SORT_PRICE_ASC = 'price_asc'
SORT_PRICE_DESC = 'price_desc'
SORT_NAME = 'name'
SORT_CHOICES = [SORT_NEWEST, SORT_PRICE_ASC, SORT_PRICE_DESC, SORT_NAME]


def get_category_tree(client):
    """Public category tree, cached for an hour"""
    tree = get_or_fetch(CATEGORY_TREE_KEY, CATEGORY_TREE_CACHE_TTL, lambda: client.get('/categories/tree'))
    return tree if isinstance(tree, list) else []


def effective_price(product):
    """Sale price when it undercuts the base price, else the base price"""
    base_price = product.get('basePrice') or 0
    sale_price = product.get('salePrice')
    if sale_price and sale_price < base_price:
        return sale_price
    return base_price


def _created_timestamp(product):
    created = product.get('createdAt')
    parsed = parse_datetime(created) if isinstance(created, str) else None
    return parsed.timestamp() if parsed else 0


def empty_listing():
    return {
        'products': [],
        'pagination': {'total': 0, 'page': DEFAULT_PAGE, 'limit': DEFAULT_LIMIT, 'totalPages': 0},
    }


def filter_products(products, params):
    """Apply the shop filters (category, price range, stock, search)"""
    category = params.get('category')
    if category:
        selected = {slug.strip() for slug in category.split(',') if slug.strip()}
        products = [
            p for p in products
            if any(c.get('slug') in selected for c in (p.get('categories') or []))
        ]

    min_price = params.get('minPrice')
    if min_price is not None:
        products = [p for p in products if (p.get('basePrice') or 0) >= min_price]

    max_price = params.get('maxPrice')
    if max_price is not None:
        products = [p for p in products if (p.get('basePrice') or 0) <= max_price]

    if params.get('inStock'):
        products = [p for p in products if (p.get('stock') or 0) > 0]

    search = (params.get('search') or '').strip().lower()
    if search:
        products = [
            p for p in products
            if search in (p.get('name') or '').lower()
            or search in (p.get('description') or '').lower()
        ]

    return products


def sort_products(products, sort_mode=None):
    sort_mode = sort_mode or SORT_NEWEST
    if sort_mode == SORT_PRICE_ASC:
        return sorted(products, key=effective_price)
    if sort_mode == SORT_PRICE_DESC:
        return sorted(products, key=effective_price, reverse=True)
    if sort_mode == SORT_NAME:
        return sorted(products, key=lambda p: (p.get('name') or '').lower())
    return sorted(products, key=_created_timestamp, reverse=True)


def paginate(products, page=None, limit=None):
    page = page or DEFAULT_PAGE
    limit = limit or DEFAULT_LIMIT
    start = (page - 1) * limit
    return {
        'products': products[start:start + limit],
        'pagination': {
            'total': len(products),
            'page': page,
            'limit': limit,
            'totalPages': math.ceil(len(products) / limit),
        },
    }


def get_shop_products(client, params):
    """
    Filtered, sorted and paginated shop listing.

    Args:
        client: BackendClient
        params: validated query params (page, limit, sort, category,
            minPrice, maxPrice, inStock, search)

    Returns:
        {"products": [...], "pagination": {total, page, limit, totalPages}};
        an empty first page when the backend cannot be read
    """
    try:
        data = client.get('/products', params={'limit': settings.SHOP_FETCH_LIMIT, 'page': 1})
    except BackendAPIError as e:
        logger.error(f"Shop listing failed: {e}")
        return empty_listing()

    products = (data.get('data') or []) if isinstance(data, dict) else []
    products = filter_products(products, params)
    products = sort_products(products, params.get('sort'))
    return paginate(products, params.get('page'), params.get('limit'))


def get_category_products(client, slug, filters=None):
    """Products of one category as filtered by the backend ([] on failure)"""
    filters = filters or {}
    query = {'category': slug}
    if filters.get('minPrice'):
        query['minPrice'] = filters['minPrice']
    if filters.get('maxPrice'):
        query['maxPrice'] = filters['maxPrice']
    if filters.get('inStock'):
        query['inStock'] = 'true'
    if filters.get('sort'):
        query['sort'] = filters['sort']

    try:
        data = client.get('/products', params=query)
    except BackendAPIError as e:
        logger.error(f"Category products failed for {slug}: {e}")
        return []

    if not isinstance(data, dict):
        return []
    return data.get('products') or []
