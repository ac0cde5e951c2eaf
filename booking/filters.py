# booking/filters.py
from django.db.models import Q
from django.utils.dateparse import parse_date
from rest_framework.exceptions import ValidationError

from accounts.utils import scoped_property
from setup.properties import ALL_PROPERTIES

from .models import Booking


def scoped_bookings(user, queryset=None):
    """
    Bookings ``user`` may see: everything for a general manager, only the
    assigned property for managers / staff.
    """
    qs = queryset if queryset is not None else Booking.objects.all()
    prop = scoped_property(user)
    if prop is None:
        return qs
    if not prop:
        return qs.none()
    return qs.filter(resort=prop)


def query_param(params, *names):
    for name in names:
        value = params.get(name)
        if value not in (None, ""):
            return value
    return None


def date_param(params, *names):
    raw = query_param(params, *names)
    if raw is None:
        return None
    try:
        value = parse_date(raw)
    except ValueError:
        value = None
    if value is None:
        raise ValidationError({names[0]: f"Invalid date '{raw}', use YYYY-MM-DD."})
    return value


def apply_booking_filters(qs, params):
    """
    ?property= / ?resort=   (all = no filter)
    ?status=
    ?payment_status= / ?paymentStatus=
    ?date_from= / ?date_to=  inclusive, on check_in
    ?search= / ?q=           booking id / guest name (case-insensitive), phone
    """
    prop = query_param(params, "property", "resort")
    if prop and prop != ALL_PROPERTIES:
        qs = qs.filter(resort=prop)

    status = query_param(params, "status")
    if status and status != "all":
        qs = qs.filter(status=status)

    payment_status = query_param(params, "payment_status", "paymentStatus")
    if payment_status and payment_status != "all":
        qs = qs.filter(payment_status=payment_status)

    date_from = date_param(params, "date_from", "dateFrom")
    if date_from:
        qs = qs.filter(check_in__gte=date_from)
    date_to = date_param(params, "date_to", "dateTo")
    if date_to:
        qs = qs.filter(check_in__lte=date_to)

    term = query_param(params, "search", "q")
    if term:
        term = term.strip()
        qs = qs.filter(
            Q(booking_id__icontains=term)
            | Q(first_name__icontains=term)
            | Q(last_name__icontains=term)
            | Q(phone__contains=term)
        )
    return qs
