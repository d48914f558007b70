"""Stock level classification for the inventory screen"""

DEFAULT_LOW_STOCK_THRESHOLD = 5

STOCK_OUT = 'out_of_stock'
STOCK_LOW = 'low'
STOCK_OK = 'ok'


def stock_level(item):
    """out_of_stock at 0 or below, low up to the item's threshold, ok otherwise"""
    stock = item.get('stock') or 0
    threshold = item.get('lowStockThreshold') or DEFAULT_LOW_STOCK_THRESHOLD
    if stock <= 0:
        return STOCK_OUT
    if stock <= threshold:
        return STOCK_LOW
    return STOCK_OK


def annotate_stock_levels(products):
    return [{**product, 'stockLevel': stock_level(product)} for product in products]


def products_from_listing(data):
    """Product records from an admin listing payload (list or paginated dict)"""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return data.get('data') or data.get('products') or []
    return []
