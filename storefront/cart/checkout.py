"""
Checkout flow

A small state machine over the checkout of the current cart:

    initializing -> ready | error
    ready        -> submitting | error
    submitting   -> success | error
    error        -> ready        (retry once the cart is refreshed)

Totals, the pre-order deposit and the shipping charge are computed here;
the order itself is created by the backend.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings

from storefront.core.exceptions import BackendAPIError, response_status_for
from storefront.locations.zones import default_zone, zone_for_key
from .services import cart_total, line_price

logger = logging.getLogger(__name__)


class CheckoutStatus:
    INITIALIZING = 'initializing'
    READY = 'ready'
    SUBMITTING = 'submitting'
    SUCCESS = 'success'
    ERROR = 'error'


TRANSITIONS = {
    CheckoutStatus.INITIALIZING: {CheckoutStatus.READY, CheckoutStatus.ERROR},
    CheckoutStatus.READY: {CheckoutStatus.SUBMITTING, CheckoutStatus.ERROR},
    CheckoutStatus.SUBMITTING: {CheckoutStatus.SUCCESS, CheckoutStatus.ERROR},
    CheckoutStatus.ERROR: {CheckoutStatus.READY},
    CheckoutStatus.SUCCESS: set(),
}

CHECKOUT_MODE_CART = 'cart'
EMPTY_CART_MESSAGE = 'Your cart is empty'
DEPOSIT_DETAILS_MESSAGE = 'Please provide transaction ID and phone number for the pre-order deposit.'


class InvalidTransition(Exception):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move checkout from {current} to {target}")


class CheckoutError(Exception):
    """Checkout rejected before or by the backend"""

    def __init__(self, message, status_code=400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def deposit_required(lines, rate=None):
    """Deposit owed up front for pre-order lines (rate x price x quantity)"""
    rate = Decimal(str(settings.PREORDER_DEPOSIT_RATE if rate is None else rate))
    total = Decimal('0')
    for line in lines:
        if line.get('stockStatus') == 'pre_order':
            total += Decimal(str(line_price(line))) * line.get('quantity', 0) * rate
    return float(total.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


class CheckoutFlow:
    """
    Checkout of the current cart.

    Usage:
        flow = CheckoutFlow(zones)
        flow.load(cart_lines)
        order = flow.submit(client, address, payment)
    """

    def __init__(self, shipping_zones=None):
        self.status = CheckoutStatus.INITIALIZING
        self.mode = CHECKOUT_MODE_CART
        self.items = []
        self.total = 0
        self.error = None
        self.order = None
        self.shipping_zones = [z for z in shipping_zones or [] if z.get('isActive', True)]

    def transition(self, target):
        if target not in TRANSITIONS.get(self.status, set()):
            raise InvalidTransition(self.status, target)
        logger.debug(f"Checkout {self.status} -> {target}")
        self.status = target

    def fail(self, message):
        self.transition(CheckoutStatus.ERROR)
        self.error = message

    def load(self, lines):
        """Take the cart lines; an empty cart puts the flow in error"""
        self.items = [dict(line) for line in lines or []]
        self.total = cart_total(self.items)
        if not self.items:
            self.fail(EMPTY_CART_MESSAGE)
            return self
        self.error = None
        self.transition(CheckoutStatus.READY)
        return self

    def retry(self, lines):
        """Back to ready after an error, with a refreshed cart"""
        self.items = [dict(line) for line in lines or []]
        self.total = cart_total(self.items)
        self.transition(CheckoutStatus.READY)
        self.error = None
        return self

    @property
    def deposit_required(self):
        return deposit_required(self.items)

    def delivery_zone(self, key=None):
        if key:
            return zone_for_key(self.shipping_zones, key)
        return default_zone(self.shipping_zones)

    def shipping_cost(self, key=None):
        zone = self.delivery_zone(key)
        return (zone or {}).get('cost') or 0

    def grand_total(self, key=None):
        return self.total + self.shipping_cost(key)

    def build_payload(self, address, payment=None):
        """
        Order payload for ``POST /checkout``.

        Raises:
            CheckoutError: unknown delivery zone, or deposit details missing
        """
        payment = payment or {}
        address = dict(address)

        zone = self.delivery_zone(address.get('deliveryLocation'))
        if self.shipping_zones and not zone:
            raise CheckoutError('Please select a valid delivery location.')
        if zone:
            address['deliveryLocation'] = zone['key']

        payload = {
            'paymentMethod': 'cod',
            'address': address,
            'items': [{'productId': line['id'], 'quantity': line['quantity']} for line in self.items],
        }

        if self.deposit_required > 0:
            trx_id = (payment.get('paymentTrxId') or '').strip()
            phone = (payment.get('paymentPhone') or '').strip()
            if not trx_id or not phone:
                raise CheckoutError(DEPOSIT_DETAILS_MESSAGE)
            payload['paymentTrxId'] = trx_id
            payload['paymentProvider'] = payment.get('paymentProvider') or 'bkash'
            payload['paymentPhone'] = phone

        return payload

    def submit(self, client, address, payment=None):
        """
        Place the order.

        Returns:
            The order created by the backend

        Raises:
            InvalidTransition: the flow is not ready
            CheckoutError: validation failed or the backend rejected the order
                (the flow is left in error)
        """
        if self.status != CheckoutStatus.READY:
            raise InvalidTransition(self.status, CheckoutStatus.SUBMITTING)

        try:
            payload = self.build_payload(address, payment)
        except CheckoutError as e:
            self.fail(e.message)
            raise

        self.transition(CheckoutStatus.SUBMITTING)
        try:
            self.order = client.post('/checkout', json=payload)
        except BackendAPIError as e:
            logger.error(f"Checkout failed: {e}")
            self.fail(e.message or 'Checkout failed')
            raise CheckoutError(self.error, status_code=response_status_for(e))

        self.transition(CheckoutStatus.SUCCESS)
        logger.info(f"Order placed with {len(self.items)} line(s), total {self.total}")
        return self.order

    def to_dict(self, delivery_location=None):
        zone = self.delivery_zone(delivery_location)
        data = {
            'status': self.status,
            'mode': self.mode,
            'items': self.items,
            'total': self.total,
            'shippingZones': self.shipping_zones,
            'deliveryLocation': (zone or {}).get('key'),
            'shippingCost': self.shipping_cost(delivery_location),
            'grandTotal': self.grand_total(delivery_location),
            'depositRequired': self.deposit_required,
        }
        if self.error:
            data['error'] = self.error
        return data
