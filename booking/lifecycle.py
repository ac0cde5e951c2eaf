# booking/lifecycle.py
"""
Booking lifecycle: id generation, creation defaults, status transitions and
the payment flags the M-Pesa bridge flips.

Views and the payment service go through these helpers instead of poking at
Booking fields directly, so every status change leaves a history row.
"""
import logging
import math
import random
import time
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from .models import (
    Booking,
    BookingSource,
    BookingStatus,
    BookingStatusHistory,
    PaymentMethod,
    PaymentStatus,
)
from .pricing import calculate_rate, room_capacity_for

logger = logging.getLogger(__name__)

BOOKING_ID_ATTEMPTS = 5

# current status -> statuses staff may move it to
ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.CHECKED_IN, BookingStatus.CANCELLED},
    BookingStatus.CHECKED_IN: {BookingStatus.CHECKED_OUT, BookingStatus.CANCELLED},
    BookingStatus.CHECKED_OUT: set(),
    BookingStatus.CANCELLED: set(),
}

TRANSITION_ACTIONS = {
    BookingStatus.CONFIRMED: "CONFIRM",
    BookingStatus.CHECKED_IN: "CHECK_IN",
    BookingStatus.CHECKED_OUT: "CHECK_OUT",
    BookingStatus.CANCELLED: "CANCEL",
}

STATUS_BADGES = {
    BookingStatus.PENDING: {"label": "Pending", "color": "#f59e0b", "icon": "fas fa-clock", "badge": "warning"},
    BookingStatus.CONFIRMED: {"label": "Confirmed", "color": "#10b981", "icon": "fas fa-check-circle", "badge": "success"},
    BookingStatus.CHECKED_IN: {"label": "Checked In", "color": "#3b82f6", "icon": "fas fa-door-open", "badge": "info"},
    BookingStatus.CHECKED_OUT: {"label": "Checked Out", "color": "#8b5cf6", "icon": "fas fa-sign-out-alt", "badge": "info"},
    BookingStatus.CANCELLED: {"label": "Cancelled", "color": "#ef4444", "icon": "fas fa-times-circle", "badge": "danger"},
}

PAYMENT_BADGES = {
    PaymentStatus.PENDING: {"label": "Pending", "color": "#f59e0b", "icon": "fas fa-clock", "badge": "warning"},
    PaymentStatus.AWAITING_PAYMENT: {"label": "Awaiting Payment", "color": "#f59e0b", "icon": "fas fa-money-check-alt", "badge": "warning"},
    PaymentStatus.PAID: {"label": "Paid", "color": "#10b981", "icon": "fas fa-check-circle", "badge": "success"},
    PaymentStatus.FAILED: {"label": "Failed", "color": "#ef4444", "icon": "fas fa-times-circle", "badge": "danger"},
    PaymentStatus.REFUNDED: {"label": "Refunded", "color": "#3b82f6", "icon": "fas fa-undo", "badge": "info"},
}

UNKNOWN_BADGE = {"label": "Unknown", "color": "#6c757d", "icon": "fas fa-question-circle", "badge": "secondary"}


class InvalidTransition(ValidationError):
    default_code = "invalid_transition"


# ---------- ids / derived fields ----------

def _booking_id_candidate(source, resort=None):
    suffix = f"{str(int(time.time() * 1000))[-6:]}{random.randint(0, 999):03d}"
    if source == BookingSource.ADMIN:
        return f"ADM-{suffix}"
    prefix = (resort or "")[:3].upper() or "GEN"
    return f"JUM-{prefix}-{suffix}"


def generate_booking_id(source, resort=None):
    """
    ADM-123456789 for admin bookings, JUM-LIM-123456789 for web ones.

    6 digits of epoch millis + 3 random digits; checked against the table and
    retried a few times on collision.
    """
    for _ in range(BOOKING_ID_ATTEMPTS):
        candidate = _booking_id_candidate(source, resort)
        if not Booking.objects.filter(booking_id=candidate).exists():
            return candidate
    raise ValidationError({"booking_id": "Could not allocate a unique booking id, try again."})


def compute_nights(check_in, check_out):
    """Whole nights between the two dates, partial days round up."""
    delta = check_out - check_in
    return max(0, math.ceil(delta.total_seconds() / 86400))


# ---------- create ----------

REQUIRED_FIELDS = ("first_name", "email", "check_in", "check_out", "room_type")


def create_booking(data, source=BookingSource.WEB, user=None):
    """
    Persist a new booking from already field-validated ``data``.

    Admin bookings default to Limuru + cash. Every booking starts pending
    and awaiting payment; the "booking created" emails go out after commit
    from the post_save signal.
    """
    data = dict(data)
    missing = [name for name in REQUIRED_FIELDS if not data.get(name)]
    if source == BookingSource.WEB and not data.get("phone"):
        missing.append("phone")
    if missing:
        raise ValidationError({name: "This field is required." for name in missing})

    if data["check_out"] <= data["check_in"]:
        raise ValidationError({"check_out": "Check-out must be after check-in."})

    if source == BookingSource.ADMIN:
        data["resort"] = data.get("resort") or "limuru"
        data["payment_method"] = data.get("payment_method") or PaymentMethod.CASH

    if not data.get("nights"):
        data["nights"] = compute_nights(data["check_in"], data["check_out"])

    if data.get("total_amount") in (None, ""):
        quote = calculate_rate(
            data.get("resort"),
            data.get("room_type"),
            data.get("package_type") or "bnb",
            data["nights"],
            data.get("adults") or 1,
            data.get("children") or 0,
        )
        data["total_amount"] = quote["grand_total"]

    for name in ("booking_id", "status", "payment_status", "source", "created_by", "updated_by"):
        data.pop(name, None)

    with transaction.atomic():
        booking = Booking.objects.create(
            booking_id=generate_booking_id(source, data.get("resort")),
            source=source,
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.AWAITING_PAYMENT,
            created_by=user,
            updated_by=user,
            **data,
        )
        BookingStatusHistory.objects.create(
            booking=booking,
            old_status="",
            new_status=booking.status,
            action="CREATE",
            reason=f"Created via {source}",
            changed_by=user,
        )

    logger.info("Booking %s created (source=%s, resort=%s)", booking.booking_id, source, booking.resort)
    return booking


# ---------- status ----------

def validate_transition(booking, new_status):
    """
    Raise InvalidTransition unless ``new_status`` is reachable from the
    current one. Returns False for a same-status no-op.
    """
    if new_status not in BookingStatus.values:
        raise InvalidTransition({"status": f"Unknown status '{new_status}'."})
    if new_status == booking.status:
        return False
    if new_status not in ALLOWED_TRANSITIONS.get(booking.status, set()):
        raise InvalidTransition(
            {"status": f"Cannot change status from '{booking.status}' to '{new_status}'."}
        )
    return True


def transition_status(booking, new_status, user=None, reason=""):
    """
    Move ``booking`` to ``new_status`` if the lifecycle allows it.

    Same status again is a no-op. Check-in / check-out stamp their
    timestamps. Every real change writes a BookingStatusHistory row.
    """
    old_status = booking.status
    if not validate_transition(booking, new_status):
        return booking

    now = timezone.now()
    booking.status = new_status
    booking.updated_by = user if user and user.is_authenticated else None
    update_fields = ["status", "updated_by", "updated_at"]

    if new_status == BookingStatus.CHECKED_IN:
        booking.checked_in_at = now
        update_fields.append("checked_in_at")
    elif new_status == BookingStatus.CHECKED_OUT:
        booking.checked_out_at = now
        update_fields.append("checked_out_at")

    with transaction.atomic():
        booking.save(update_fields=update_fields)
        BookingStatusHistory.objects.create(
            booking=booking,
            old_status=old_status,
            new_status=new_status,
            action=TRANSITION_ACTIONS.get(new_status, "MANUAL_UPDATE"),
            reason=reason or "",
            changed_by=booking.updated_by,
        )

    logger.info(
        "Booking %s status %s -> %s by user %s",
        booking.booking_id, old_status, new_status, getattr(booking.updated_by, "pk", None),
    )
    return booking


# ---------- payment flags ----------

def mark_paid(booking, user=None, receipt=None, completed_at=None):
    """
    payment_status -> paid. Stay status is left alone; calling it twice is
    harmless.
    """
    if booking.payment_status == PaymentStatus.PAID:
        return booking

    booking.payment_status = PaymentStatus.PAID
    booking.payment_completed_at = completed_at or timezone.now()
    booking.payment_failure_reason = ""
    update_fields = ["payment_status", "payment_completed_at", "payment_failure_reason", "updated_at"]
    if receipt:
        booking.mpesa_receipt = receipt
        update_fields.append("mpesa_receipt")
    if user is not None and user.is_authenticated:
        booking.updated_by = user
        update_fields.append("updated_by")

    booking.save(update_fields=update_fields)
    BookingStatusHistory.objects.create(
        booking=booking,
        old_status=booking.status,
        new_status=booking.status,
        action="PAYMENT",
        reason=f"Payment received{f' ({receipt})' if receipt else ''}",
        changed_by=user if user is not None and user.is_authenticated else None,
    )
    logger.info("Booking %s marked paid (receipt=%s)", booking.booking_id, receipt or "-")
    return booking


def mark_payment_failed(booking, reason=""):
    if booking.payment_status == PaymentStatus.PAID:
        # a late failure callback must not undo a completed payment
        return booking
    booking.payment_status = PaymentStatus.FAILED
    booking.payment_failure_reason = (reason or "")[:255]
    booking.save(update_fields=["payment_status", "payment_failure_reason", "updated_at"])
    logger.info("Booking %s payment failed: %s", booking.booking_id, reason)
    return booking


# ---------- availability ----------

def check_availability(resort, room_type, check_in, check_out, exclude_pk=None):
    """
    Count pending/confirmed bookings of the same room type whose stay overlaps
    [check_in, check_out) and compare with the physical room count.
    """
    max_rooms = room_capacity_for(resort, room_type)
    qs = Booking.objects.filter(
        resort=resort,
        room_type=room_type,
        status__in=[BookingStatus.PENDING, BookingStatus.CONFIRMED],
        check_in__lt=check_out,
        check_out__gt=check_in,
    )
    if exclude_pk:
        qs = qs.exclude(pk=exclude_pk)
    conflicting = qs.count()
    return {
        "available": conflicting < max_rooms,
        "conflicting_bookings": conflicting,
        "max_rooms": max_rooms,
        "available_rooms": max(0, max_rooms - conflicting),
    }


# ---------- display ----------

def status_badge(value):
    return dict(STATUS_BADGES.get(value, UNKNOWN_BADGE))


def payment_badge(value):
    return dict(PAYMENT_BADGES.get(value, UNKNOWN_BADGE))


def revenue_total(queryset):
    """Sum of total_amount for confirmed and checked-in bookings."""
    total = queryset.filter(
        status__in=[BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN]
    ).aggregate(total=Sum("total_amount"))["total"]
    return total or Decimal("0")
