# dashboard/views.py

import logging

from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.utils import scoped_property
from booking.filters import scoped_bookings
from common.utils import csv_response, dated_filename
from setup.properties import ALL_PROPERTIES

from .calendar import (
    EXPORT_HEADERS,
    build_calendar_events,
    calendar_export_rows,
    calendar_statistics,
)

logger = logging.getLogger(__name__)

CALENDAR_EXPORT_PREFIX = "jumuia_calendar_export"


# =====================================================
# Helpers
# =====================================================

def get_property_filter(request):
    """
    ?property=limuru|kanamai|kisumu|all, pinned to the user's own property
    for managers / staff whatever they ask for.
    """
    scoped = scoped_property(request.user)
    if scoped is not None:
        return scoped
    return request.query_params.get("property") or ALL_PROPERTIES


def get_date_range(request):
    """
    ?start=YYYY-MM-DD&end=YYYY-MM-DD (FullCalendar also sends full
    datetimes, only the date part is used).
    """
    return _date_only(request.query_params.get("start")), _date_only(request.query_params.get("end"))


def _date_only(raw):
    raw = (raw or "")[:10]
    if not raw:
        return None
    try:
        return parse_date(raw)
    except ValueError:
        return None


def calendar_bookings(request, property_code):
    qs = scoped_bookings(request.user).order_by("check_in", "id")
    if property_code and property_code != ALL_PROPERTIES:
        qs = qs.filter(resort=property_code)
    return qs


# =====================================================
# Calendar
# =====================================================

class CalendarEventsView(APIView):
    """
    GET /api/dashboard/calendar/events/?start=2024-01-01&end=2024-02-01&property=limuru
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        start, end = get_date_range(request)
        if start is None or end is None:
            return Response(
                {"detail": "start and end are required (YYYY-MM-DD)."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        if end < start:
            return Response({"detail": "end must not be before start."}, status=status.HTTP_400_BAD_REQUEST)

        prop = get_property_filter(request)
        qs = calendar_bookings(request, prop).filter(check_in__lte=end, check_out__gte=start)
        events = build_calendar_events(qs, start, end, prop)
        return Response(events)


class CalendarStatsView(APIView):
    """
    GET /api/dashboard/calendar/stats/?property=all
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        prop = get_property_filter(request)
        qs = calendar_bookings(request, prop)
        stats = calendar_statistics(qs, prop, today=timezone.localdate())
        stats["property"] = prop
        return Response(stats)


class CalendarExportView(APIView):
    """
    GET /api/dashboard/calendar/export/?property=all[&start=&end=]
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        prop = get_property_filter(request)
        qs = calendar_bookings(request, prop)

        start, end = get_date_range(request)
        if start:
            qs = qs.filter(check_out__gte=start)
        if end:
            qs = qs.filter(check_in__lte=end)

        logger.info("Calendar export by user %s (property=%s)", request.user.pk, prop)
        return csv_response(
            dated_filename(CALENDAR_EXPORT_PREFIX), EXPORT_HEADERS, calendar_export_rows(qs)
        )
