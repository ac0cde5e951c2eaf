# feedback/filters.py
from django.db.models import Q
from rest_framework.exceptions import ValidationError

from accounts.utils import scoped_property
from booking.filters import date_param, query_param
from setup.properties import ALL_PROPERTIES

from .models import Feedback


def scoped_feedback(user, queryset=None):
    qs = queryset if queryset is not None else Feedback.objects.all()
    prop = scoped_property(user)
    if prop is None:
        return qs
    if not prop:
        return qs.none()
    return qs.filter(property=prop)


def apply_feedback_filters(qs, params):
    """
    ?property= ?status=
    ?rating=N     whole stars, so 4 matches 4.0 to 4.9
    ?search=      guest name, email, comment, property
    ?date_from= / ?date_to=  inclusive, on submission date
    """
    prop = query_param(params, "property")
    if prop and prop != ALL_PROPERTIES:
        qs = qs.filter(property=prop)

    status = query_param(params, "status")
    if status and status != "all":
        qs = qs.filter(status=status)

    rating = query_param(params, "rating")
    if rating and rating != "all":
        try:
            stars = int(rating)
        except ValueError:
            raise ValidationError({"rating": f"Invalid rating '{rating}', use a whole number 0-5."})
        qs = qs.filter(rating__gte=stars, rating__lt=stars + 1)

    date_from = date_param(params, "date_from", "dateFrom")
    if date_from:
        qs = qs.filter(created_at__date__gte=date_from)
    date_to = date_param(params, "date_to", "dateTo")
    if date_to:
        qs = qs.filter(created_at__date__lte=date_to)

    term = query_param(params, "search", "q")
    if term:
        term = term.strip()
        qs = qs.filter(
            Q(guest_name__icontains=term)
            | Q(email__icontains=term)
            | Q(comment__icontains=term)
            | Q(property__icontains=term)
        )
    return qs
