# booking/views.py
from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from accounts.utils import scoped_property
from common.pagination import BookingPagination

from .exports import export_bookings
from .filters import apply_booking_filters, scoped_bookings
from .lifecycle import (
    check_availability,
    compute_nights,
    create_booking,
    mark_paid,
    revenue_total,
    transition_status,
    validate_transition,
)
from .models import Booking, BookingSource, BookingStatus
from .pricing import calculate_rate
from .serializers import (
    BookingSerializer,
    BookingStatusHistorySerializer,
    BookingUpdateSerializer,
    PublicBookingSerializer,
    QuoteSerializer,
    StatusActionSerializer,
)

PUBLIC_ACTIONS = ("public", "quote", "availability")


class BookingViewSet(viewsets.ModelViewSet):
    """
    /api/bookings/
      GET    -> list (?property ?status ?payment_status ?date_from ?date_to ?search ?page)
      POST   -> admin create (source=admin)
    /api/bookings/{id}/
      GET    -> detail
      PUT / PATCH -> partial update, ``status`` goes through the lifecycle

    /api/bookings/{id}/confirm|check-in|check-out|cancel/   POST
    /api/bookings/{id}/mark-paid/                           POST
    /api/bookings/{id}/history/                             GET
    /api/bookings/stats/        GET
    /api/bookings/changes/      GET ?since=<iso>
    /api/bookings/export/       GET ?format=csv|xlsx

    Public (no token):
    /api/bookings/public/       POST guest booking form (source=web)
    /api/bookings/quote/        POST rate quote
    /api/bookings/availability/ GET
    """

    queryset = Booking.objects.select_related("created_by", "updated_by").all()
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = BookingPagination
    http_method_names = ["get", "post", "put", "patch", "head", "options"]
    throttle_scope = "public_booking"

    def get_permissions(self):
        if self.action in PUBLIC_ACTIONS:
            return [permissions.AllowAny()]
        return super().get_permissions()

    def get_throttles(self):
        if self.action in PUBLIC_ACTIONS:
            return [ScopedRateThrottle()]
        return super().get_throttles()

    def get_serializer_class(self):
        if self.action in ("update", "partial_update"):
            return BookingUpdateSerializer
        return BookingSerializer

    # -------------------------------------------------
    # FILTERS FOR LIST ENDPOINT
    # -------------------------------------------------
    def get_queryset(self):
        qs = scoped_bookings(self.request.user, super().get_queryset())
        if self.action in ("list", "export", "stats"):
            qs = apply_booking_filters(qs, self.request.query_params)
        return qs.order_by("-created_at", "-id")

    # -------------------------------------------------
    # CREATE (admin panel)
    # -------------------------------------------------
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        prop = scoped_property(request.user)
        if prop is not None:
            # managers / staff can only book into their own property
            if data.get("resort") and data["resort"] != prop:
                return Response(
                    {"resort": [f"You can only create bookings for {prop}."]},
                    status=status.HTTP_400_BAD_REQUEST,
                )
            data["resort"] = prop

        booking = create_booking(data, source=BookingSource.ADMIN, user=request.user)
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    # -------------------------------------------------
    # UPDATE: every PUT is treated as partial
    # -------------------------------------------------
    def update(self, request, *args, **kwargs):
        booking = self.get_object()
        serializer = BookingUpdateSerializer(booking, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        new_status = data.pop("status", None)
        reason = data.pop("status_reason", "")

        prop = scoped_property(request.user)
        if prop is not None and data.get("resort") not in (None, prop):
            return Response(
                {"resort": ["You cannot move a booking to another property."]},
                status=status.HTTP_400_BAD_REQUEST,
            )

        if new_status:
            # bad status -> 400 before any field is written
            validate_transition(booking, new_status)

        with transaction.atomic():
            if data:
                for field, value in data.items():
                    setattr(booking, field, value)
                booking.updated_by = request.user
                booking.save()
            if new_status:
                transition_status(booking, new_status, request.user, reason=reason)

        booking.refresh_from_db()
        return Response(BookingSerializer(booking).data)

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    # -------------------------------------------------
    # STATUS ACTIONS
    # -------------------------------------------------
    def _status_action(self, request, new_status):
        booking = self.get_object()
        ser = StatusActionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        transition_status(booking, new_status, request.user, reason=ser.validated_data["reason"])
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"], url_path="confirm")
    def confirm(self, request, pk=None):
        return self._status_action(request, BookingStatus.CONFIRMED)

    @action(detail=True, methods=["post"], url_path="check-in")
    def check_in(self, request, pk=None):
        return self._status_action(request, BookingStatus.CHECKED_IN)

    @action(detail=True, methods=["post"], url_path="check-out")
    def check_out(self, request, pk=None):
        return self._status_action(request, BookingStatus.CHECKED_OUT)

    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        return self._status_action(request, BookingStatus.CANCELLED)

    @action(detail=True, methods=["post"], url_path="mark-paid")
    def mark_as_paid(self, request, pk=None):
        booking = self.get_object()
        mark_paid(booking, user=request.user, receipt=request.data.get("receipt") or None)
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["get"], url_path="history")
    def history(self, request, pk=None):
        booking = self.get_object()
        rows = booking.status_history.select_related("changed_by").all()
        return Response(BookingStatusHistorySerializer(rows, many=True).data)

    # -------------------------------------------------
    # DASHBOARD-ish READS
    # -------------------------------------------------
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        qs = self.get_queryset()
        today = timezone.localdate()
        return Response({
            "total": qs.count(),
            "pending": qs.filter(status=BookingStatus.PENDING).count(),
            "confirmed": qs.filter(status=BookingStatus.CONFIRMED).count(),
            "checked_in": qs.filter(status=BookingStatus.CHECKED_IN).count(),
            "arrivals_today": qs.filter(check_in=today).exclude(status=BookingStatus.CANCELLED).count(),
            "departures_today": qs.filter(check_out=today).exclude(status=BookingStatus.CANCELLED).count(),
            "revenue": revenue_total(qs),
        })

    @action(detail=False, methods=["get"], url_path="changes")
    def changes(self, request):
        """
        Poll feed for the admin list. Call again with ``since=<as_of>`` after
        ``poll_after`` seconds.
        """
        as_of = timezone.now()
        qs = self.get_queryset()
        raw = request.query_params.get("since")

        if raw:
            since = parse_datetime(raw.replace(" ", "+"))
            if since is None:
                return Response(
                    {"since": [f"Invalid datetime '{raw}', use ISO-8601."]},
                    status=status.HTTP_400_BAD_REQUEST,
                )
            if timezone.is_naive(since):
                since = timezone.make_aware(since)
            rows = qs.filter(updated_at__gt=since).order_by("updated_at", "id")
        else:
            rows = qs[: settings.BOOKING_PAGE_SIZE]

        return Response({
            "changes": BookingSerializer(rows, many=True).data,
            "as_of": as_of.isoformat(),
            "poll_after": settings.BOOKING_POLL_INTERVAL_SECONDS,
        })

    @action(detail=False, methods=["get"], url_path="export")
    def export(self, request):
        fmt = (request.query_params.get("format") or "csv").lower()
        if fmt not in ("csv", "xlsx"):
            return Response({"format": ["Use csv or xlsx."]}, status=status.HTTP_400_BAD_REQUEST)
        return export_bookings(self.get_queryset(), fmt)

    # -------------------------------------------------
    # PUBLIC (guest booking form)
    # -------------------------------------------------
    @action(detail=False, methods=["post"], url_path="public")
    def public(self, request):
        ser = PublicBookingSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        booking = create_booking(ser.validated_data, source=BookingSource.WEB)
        return Response(
            {
                "booking_id": booking.booking_id,
                "status": booking.status,
                "payment_status": booking.payment_status,
                "nights": booking.nights,
                "total_amount": booking.total_amount,
                "currency": booking.currency,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["post"], url_path="quote")
    def quote(self, request):
        ser = QuoteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data
        nights = compute_nights(d["check_in"], d["check_out"])
        return Response(
            calculate_rate(d["resort"], d["room_type"], d["package_type"], nights, d["adults"], d["children"])
        )

    @action(detail=False, methods=["get"], url_path="availability")
    def availability(self, request):
        ser = QuoteSerializer(data=request.query_params)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data
        return Response(check_availability(d["resort"], d["room_type"], d["check_in"], d["check_out"]))
