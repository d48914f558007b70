"""System enums published by the backend (order statuses, shipping zones, ...)"""
import logging

from .cache_utils import SYSTEM_CONFIG_CACHE_TTL, SYSTEM_CONFIG_KEY, get_or_fetch

logger = logging.getLogger(__name__)

EMPTY_CONFIG = {
    'orderStatuses': [],
    'paymentStatuses': [],
    'paymentMethods': [],
    'shippingZones': [],
}


def get_system_config(client):
    """Fetch /config/enums, cached for an hour"""
    data = get_or_fetch(SYSTEM_CONFIG_KEY, SYSTEM_CONFIG_CACHE_TTL, lambda: client.get('/config/enums'))
    if not isinstance(data, dict):
        return dict(EMPTY_CONFIG)
    return {**EMPTY_CONFIG, **data}


def get_shipping_zones(client, active_only=True):
    zones = get_system_config(client).get('shippingZones') or []
    if active_only:
        zones = [z for z in zones if z.get('isActive', True)]
    return zones
