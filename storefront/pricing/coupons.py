"""Coupon lifecycle state shown in the admin coupon list"""
from datetime import datetime, time

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

STATE_INACTIVE = 'inactive'
STATE_SCHEDULED = 'scheduled'
STATE_EXPIRED = 'expired'
STATE_EXHAUSTED = 'exhausted'
STATE_ACTIVE = 'active'


def _parse_moment(value):
    if not value:
        return None
    if isinstance(value, datetime):
        moment = value
    else:
        moment = parse_datetime(value)
        if moment is None:
            day = parse_date(value)
            if day is None:
                return None
            moment = datetime.combine(day, time.min)
    if timezone.is_naive(moment):
        moment = timezone.make_aware(moment)
    return moment


def coupon_state(coupon, now=None):
    """
    inactive, scheduled (not started), expired, exhausted (usage limit hit)
    or active; a usageLimit of 0 means unlimited.
    """
    if not coupon.get('isActive', True):
        return STATE_INACTIVE

    now = now or timezone.now()
    start_at = _parse_moment(coupon.get('startAt'))
    if start_at and start_at > now:
        return STATE_SCHEDULED
    expires_at = _parse_moment(coupon.get('expiresAt'))
    if expires_at and expires_at < now:
        return STATE_EXPIRED

    usage_limit = coupon.get('usageLimit') or 0
    if usage_limit > 0 and (coupon.get('usedCount') or 0) >= usage_limit:
        return STATE_EXHAUSTED
    return STATE_ACTIVE


def coupons_from_listing(data):
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return data.get('data') or []
    return []
