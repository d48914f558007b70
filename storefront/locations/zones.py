"""Shipping zone lookups used at checkout"""


def zone_for_key(zones, key):
    """Active zone with the given key, or None"""
    for zone in zones or []:
        if zone.get('key') == key and zone.get('isActive', True):
            return zone
    return None


def default_zone(zones):
    active = [zone for zone in zones or [] if zone.get('isActive', True)]
    return active[0] if active else None


def shipping_cost(zones, key):
    """Delivery cost of a zone (0 when the zone is unknown)"""
    zone = zone_for_key(zones, key)
    return (zone or {}).get('cost') or 0
