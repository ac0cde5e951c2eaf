# offers/status.py
from django.db.models import Q
from django.utils import timezone

from .models import OfferStatus

EXPIRING_WITHIN_DAYS = 7


def offer_status(offer, today=None):
    """
    inactive  -> switched off, or no start / end date
    upcoming  -> today before start_date
    expired   -> today after end_date
    active    -> otherwise
    """
    today = today or timezone.localdate()
    if not offer.is_active or not offer.start_date or not offer.end_date:
        return OfferStatus.INACTIVE
    if today < offer.start_date:
        return OfferStatus.UPCOMING
    if today > offer.end_date:
        return OfferStatus.EXPIRED
    return OfferStatus.ACTIVE


def status_q(status, today=None):
    """Same rules as offer_status, as a queryset filter."""
    today = today or timezone.localdate()
    dated = Q(is_active=True, start_date__isnull=False, end_date__isnull=False)
    if status == OfferStatus.INACTIVE:
        return ~dated
    if status == OfferStatus.UPCOMING:
        return dated & Q(start_date__gt=today)
    if status == OfferStatus.EXPIRED:
        return dated & Q(start_date__lte=today, end_date__lt=today)
    if status == OfferStatus.ACTIVE:
        return dated & Q(start_date__lte=today, end_date__gte=today)
    return None


def days_to_end(offer, today=None):
    if not offer.end_date:
        return None
    today = today or timezone.localdate()
    return (offer.end_date - today).days


def offer_statistics(offers, today=None):
    """total / active / upcoming / expiring (active and ending within a week)."""
    today = today or timezone.localdate()
    stats = {"total": 0, "active": 0, "upcoming": 0, "expiring": 0}
    for offer in offers:
        stats["total"] += 1
        state = offer_status(offer, today)
        if state == OfferStatus.ACTIVE:
            stats["active"] += 1
            if 0 < days_to_end(offer, today) <= EXPIRING_WITHIN_DAYS:
                stats["expiring"] += 1
        elif state == OfferStatus.UPCOMING:
            stats["upcoming"] += 1
    return stats
