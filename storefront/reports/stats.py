"""
Analytics reads for the admin dashboard.

Every section is cached under the admin_stats prefix so that order,
product, inventory and coupon changes drop them together.
"""
import logging
from datetime import timedelta

from django.utils import timezone

from storefront.core.cache_utils import LOW_STOCK_CACHE_TTL, STATS_CACHE_TTL, STATS_KEY_PREFIX, cached_query
from storefront.core.exceptions import BackendAPIError, BackendUnavailable

logger = logging.getLogger(__name__)

DEFAULT_RANGE_DAYS = 30
LOW_STOCK_THRESHOLD = 5
TOP_LIMIT = 10


class DateRangeError(ValueError):
    pass


def resolve_date_range(start=None, end=None):
    """Default to the last 30 days; start may not come after end"""
    end = end or timezone.localdate()
    start = start or end - timedelta(days=DEFAULT_RANGE_DAYS)
    if start > end:
        raise DateRangeError('Start date must be before end date.')
    return start, end


def _range_params(start, end, **extra):
    return {'start': start.isoformat(), 'end': end.isoformat(), **extra}


@cached_query(cache_ttl=STATS_CACHE_TTL, key_prefix=STATS_KEY_PREFIX)
def fetch_kpis(client, start, end):
    return client.get('/admin/stats/kpis', params=_range_params(start, end))


@cached_query(cache_ttl=STATS_CACHE_TTL, key_prefix=STATS_KEY_PREFIX)
def fetch_revenue(client, start, end):
    return client.get('/admin/stats/revenue', params=_range_params(start, end))


@cached_query(cache_ttl=LOW_STOCK_CACHE_TTL, key_prefix=STATS_KEY_PREFIX)
def fetch_low_stock(client, start=None, end=None):
    return client.get('/admin/stats/inventory/low-stock',
                      params={'threshold': LOW_STOCK_THRESHOLD, 'limit': TOP_LIMIT})


@cached_query(cache_ttl=STATS_CACHE_TTL, key_prefix=STATS_KEY_PREFIX)
def fetch_top_products(client, start, end):
    return client.get('/admin/stats/products/top-selling', params=_range_params(start, end, limit=TOP_LIMIT))


@cached_query(cache_ttl=STATS_CACHE_TTL, key_prefix=STATS_KEY_PREFIX)
def fetch_top_customers(client, start, end):
    return client.get('/admin/stats/customers/top', params=_range_params(start, end, limit=TOP_LIMIT))


@cached_query(cache_ttl=STATS_CACHE_TTL, key_prefix=STATS_KEY_PREFIX)
def fetch_retention(client, start, end):
    return client.get('/admin/stats/customers/retention', params=_range_params(start, end))


def top_products_or_empty(client, start, end):
    """A 400 from top-selling means an empty range, not a failure"""
    try:
        return fetch_top_products(client, start, end)
    except BackendAPIError as e:
        if e.status_code == 400:
            logger.warning(f"Top products rejected for {start}..{end}: {e}")
            return []
        raise


# section name -> (dashboard key, fetcher, empty value)
SECTIONS = {
    'kpis': ('kpis', fetch_kpis, None),
    'revenue': ('salesData', fetch_revenue, []),
    'low-stock': ('lowStock', fetch_low_stock, []),
    'top-products': ('topProducts', top_products_or_empty, []),
    'top-customers': ('topCustomers', fetch_top_customers, []),
    'retention': ('retention', fetch_retention, None),
}


def get_section(client, section, start, end):
    """
    Raises:
        KeyError: unknown section
        BackendAPIError: the backend failed
    """
    _, fetch, empty = SECTIONS[section]
    data = fetch(client, start, end)
    return empty if data is None else data


def get_dashboard(client, start, end):
    """
    All dashboard sections for a date range.

    A failing section is reported in ``errors`` and left empty; an
    unreachable backend fails the whole dashboard.
    """
    dashboard = {'range': {'start': start.isoformat(), 'end': end.isoformat()}, 'errors': []}
    for section, (key, _, empty) in SECTIONS.items():
        try:
            dashboard[key] = get_section(client, section, start, end)
        except BackendUnavailable:
            raise
        except BackendAPIError as e:
            logger.error(f"Dashboard section {section} failed: {e}")
            dashboard[key] = empty
            dashboard['errors'].append(section)
    return dashboard
