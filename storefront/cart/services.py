"""
Session-held shopping cart

Guests keep their cart in the session only. For signed-in visitors the
session copy mirrors the backend cart (``/cart``): additions and removals are
applied locally first and rolled back when the backend rejects them.
"""
import logging

from storefront.core.exceptions import BackendAPIError

logger = logging.getLogger(__name__)

CART_SESSION_KEY = 'cart'
CART_SYNCED_SESSION_KEY = 'cart_synced'

SNAPSHOT_FIELDS = ('id', 'name', 'slug', 'basePrice', 'salePrice', 'stock', 'stockStatus', 'images', 'sku')


def snapshot(product, quantity):
    """Cart line: the product fields the cart needs plus a quantity"""
    line = {field: product.get(field) for field in SNAPSHOT_FIELDS}
    line['quantity'] = quantity
    return line


def line_price(line):
    return line.get('salePrice') or line.get('basePrice') or 0


def cart_total(lines):
    return sum(line_price(line) * line.get('quantity', 0) for line in lines)


def cart_count(lines):
    return sum(line.get('quantity', 0) for line in lines)


def cart_summary(lines):
    return {'items': lines, 'total': cart_total(lines), 'count': cart_count(lines)}


def get_cart(session):
    return [dict(line) for line in session.get(CART_SESSION_KEY) or []]


def save_cart(session, lines):
    session[CART_SESSION_KEY] = lines


def clear_cart(session):
    session.pop(CART_SESSION_KEY, None)


def find_line(lines, product_id):
    for line in lines:
        if line.get('id') == product_id:
            return line
    return None


def add_line(lines, product, quantity=1):
    """New line list with ``quantity`` more of ``product``"""
    updated = [dict(line) for line in lines]
    existing = find_line(updated, product.get('id'))
    if existing:
        existing['quantity'] += quantity
    else:
        updated.append(snapshot(product, quantity))
    return updated


def set_quantity(lines, product_id, quantity):
    """New line list with the quantity replaced (a quantity below 1 removes the line)"""
    if quantity < 1:
        return remove_line(lines, product_id)
    updated = [dict(line) for line in lines]
    existing = find_line(updated, product_id)
    if existing:
        existing['quantity'] = quantity
    return updated


def remove_line(lines, product_id):
    return [dict(line) for line in lines if line.get('id') != product_id]


def server_cart_lines(data):
    """Lines from a backend cart payload ({"items": [{"product", "quantity"}]})"""
    items = (data.get('items') or []) if isinstance(data, dict) else []
    return [
        snapshot(item.get('product') or {}, item.get('quantity', 1))
        for item in items
        if item.get('product')
    ]


def load_server_cart(session, client):
    """Replace the session cart with the backend cart"""
    lines = server_cart_lines(client.get('/cart'))
    save_cart(session, lines)
    session[CART_SYNCED_SESSION_KEY] = True
    return lines


def current_cart(session, client=None):
    """
    Cart for this visitor.

    With an authenticated client the backend cart is loaded once per session;
    if that fails the session copy is used as is.
    """
    if client is not None and client.token and not session.get(CART_SYNCED_SESSION_KEY):
        try:
            return load_server_cart(session, client)
        except BackendAPIError as e:
            logger.error(f"Failed to load server cart: {e}")
    return get_cart(session)


def merge_guest_cart(session, client):
    """
    Move the guest cart into the backend cart after login.

    Every guest line is posted to ``/cart`` (a failing line is logged and
    skipped), the guest cart is dropped, then the merged backend cart becomes
    the session cart.
    """
    guest_lines = get_cart(session)
    for line in guest_lines:
        try:
            client.post('/cart', json={'productId': line['id'], 'quantity': line['quantity']})
        except BackendAPIError as e:
            logger.warning(f"Could not merge cart line {line.get('id')}: {e}")

    if guest_lines:
        clear_cart(session)
        logger.info(f"Merged {len(guest_lines)} guest cart line(s)")

    try:
        return load_server_cart(session, client)
    except BackendAPIError as e:
        logger.error(f"Failed to fetch merged cart: {e}")
        save_cart(session, guest_lines)
        session[CART_SYNCED_SESSION_KEY] = False
        return guest_lines


def add_to_cart(session, client, product, quantity=1):
    """
    Add a product; signed-in carts are synced to the backend.

    Raises:
        BackendAPIError: the backend rejected the change (session rolled back)
    """
    previous = get_cart(session)
    lines = add_line(previous, product, quantity)
    save_cart(session, lines)

    if client is not None and client.token:
        try:
            client.post('/cart', json={'productId': product.get('id'), 'quantity': quantity})
        except BackendAPIError:
            logger.error(f"Cart sync failed for product {product.get('id')}, rolling back")
            save_cart(session, previous)
            raise
    return lines


def remove_from_cart(session, client, product_id):
    """
    Remove a line; signed-in carts are synced to the backend.

    Raises:
        BackendAPIError: the backend rejected the removal (session rolled back)
    """
    previous = get_cart(session)
    lines = remove_line(previous, product_id)
    save_cart(session, lines)

    if client is not None and client.token:
        try:
            client.delete(f'/cart/{product_id}')
        except BackendAPIError:
            logger.error(f"Cart removal failed for product {product_id}, rolling back")
            save_cart(session, previous)
            raise
    return lines


def update_quantity(session, client, product_id, quantity):
    """Set a line's quantity; below 1 the line is removed"""
    if quantity < 1:
        return remove_from_cart(session, client, product_id)
    # The backend has no set-quantity endpoint, so this stays local
    lines = set_quantity(get_cart(session), product_id, quantity)
    save_cart(session, lines)
    return lines


def empty_cart(session, client=None):
    """Drop every line (backend lines too for signed-in visitors)"""
    lines = get_cart(session)
    if client is not None and client.token:
        for line in lines:
            try:
                client.delete(f"/cart/{line['id']}")
            except BackendAPIError as e:
                logger.warning(f"Could not remove cart line {line.get('id')}: {e}")
    clear_cart(session)
