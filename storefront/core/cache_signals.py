"""
Cache invalidation signals
Drop cached backend reads when an admin mutation changes the data behind them
"""
from django.dispatch import Signal, receiver
import logging

from .cache_utils import (
    invalidate_category_cache,
    invalidate_content_cache,
    invalidate_stats_cache,
    invalidate_system_config_cache,
)

logger = logging.getLogger(__name__)

# Sent by admin views after a successful backend mutation.
# kwargs: resource (str), key (optional identifier, e.g. content key)
backend_resource_changed = Signal()

# Resources whose changes move analytics numbers
STATS_RESOURCES = {'product', 'order', 'inventory', 'coupon'}


def notify_changed(resource, key=None, sender=None):
    """Shortcut used by views: announce that a backend resource changed"""
    backend_resource_changed.send(sender=sender, resource=resource, key=key)


@receiver(backend_resource_changed)
def invalidate_on_change(sender, resource=None, key=None, **kwargs):
    if resource == 'category':
        invalidate_category_cache()
    elif resource == 'shipping_zone':
        invalidate_system_config_cache()
    elif resource == 'content' and key:
        invalidate_content_cache(key)

    if resource in STATS_RESOURCES:
        invalidate_stats_cache()
