# offers/filters.py
from django.db.models import Q

from accounts.utils import scoped_property
from booking.filters import date_param, query_param
from setup.properties import ALL_PROPERTIES

from .models import Offer, OfferStatus
from .status import status_q


def scoped_offers(user, queryset=None):
    qs = queryset if queryset is not None else Offer.objects.all()
    prop = scoped_property(user)
    if prop is None:
        return qs
    if not prop:
        return qs.none()
    return qs.filter(property=prop)


def apply_offer_filters(qs, params, today=None):
    """
    ?property=  (all = no filter)
    ?status=    active / upcoming / expired / inactive, computed
    ?category=
    ?search=    title, description, offer code, property
    ?date_from= start_date on or after, ?date_to= end_date on or before
    """
    prop = query_param(params, "property")
    if prop and prop != ALL_PROPERTIES:
        qs = qs.filter(property=prop)

    status = query_param(params, "status")
    if status and status != "all" and status in OfferStatus.values:
        qs = qs.filter(status_q(status, today))

    category = query_param(params, "category")
    if category and category != "all":
        qs = qs.filter(category=category)

    date_from = date_param(params, "date_from", "dateFrom")
    if date_from:
        qs = qs.filter(start_date__gte=date_from)
    date_to = date_param(params, "date_to", "dateTo")
    if date_to:
        qs = qs.filter(end_date__lte=date_to)

    term = query_param(params, "search", "q")
    if term:
        term = term.strip()
        qs = qs.filter(
            Q(title__icontains=term)
            | Q(description__icontains=term)
            | Q(offer_code__icontains=term)
            | Q(property__icontains=term)
        )
    return qs
