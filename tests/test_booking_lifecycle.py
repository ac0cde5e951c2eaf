import datetime as dt
import re
from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError

from booking import lifecycle
from booking.lifecycle import (
    InvalidTransition,
    check_availability,
    compute_nights,
    create_booking,
    generate_booking_id,
    mark_paid,
    mark_payment_failed,
    payment_badge,
    status_badge,
    transition_status,
)
from booking.models import BookingSource, BookingStatus, BookingStatusHistory, PaymentStatus

pytestmark = pytest.mark.django_db


def _form(**overrides):
    data = {
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane@example.com",
        "phone": "0712345678",
        "resort": "limuru",
        "room_type": "standard_single",
        "package_type": "bnb",
        "adults": 1,
        "check_in": dt.date(2024, 1, 15),
        "check_out": dt.date(2024, 1, 18),
    }
    data.update(overrides)
    return data


# ---------- ids / nights ----------

def test_compute_nights():
    assert compute_nights(dt.date(2024, 1, 15), dt.date(2024, 1, 18)) == 3


def test_compute_nights_rounds_partial_days_up():
    start = dt.datetime(2024, 1, 15, 14, 0)
    end = dt.datetime(2024, 1, 17, 10, 0)
    assert compute_nights(start, end) == 2


def test_admin_booking_id_shape():
    assert re.fullmatch(r"ADM-\d{9}", generate_booking_id(BookingSource.ADMIN))


def test_web_booking_id_uses_resort_prefix():
    assert re.fullmatch(r"JUM-KAN-\d{9}", generate_booking_id(BookingSource.WEB, "kanamai"))
    assert re.fullmatch(r"JUM-GEN-\d{9}", generate_booking_id(BookingSource.WEB, ""))


def test_booking_id_retries_on_collision(monkeypatch, booking_factory):
    booking_factory(booking_id="ADM-111111001")
    candidates = iter(["ADM-111111001", "ADM-111111002"])
    monkeypatch.setattr(lifecycle, "_booking_id_candidate", lambda source, resort=None: next(candidates))
    assert generate_booking_id(BookingSource.ADMIN) == "ADM-111111002"


def test_booking_id_gives_up_after_bounded_attempts(monkeypatch, booking_factory):
    booking_factory(booking_id="ADM-000000000")
    monkeypatch.setattr(lifecycle, "_booking_id_candidate", lambda source, resort=None: "ADM-000000000")
    with pytest.raises(ValidationError):
        generate_booking_id(BookingSource.ADMIN)


# ---------- create ----------

def test_create_web_booking_defaults():
    booking = create_booking(_form(), source=BookingSource.WEB)

    assert booking.booking_id.startswith("JUM-LIM-")
    assert booking.status == BookingStatus.PENDING
    assert booking.payment_status == PaymentStatus.AWAITING_PAYMENT
    assert booking.nights == 3
    assert booking.currency == "KES"
    # 3560 x 1 adult x 3 nights + 16% VAT
    assert booking.total_amount == Decimal("12388.80")

    history = BookingStatusHistory.objects.get(booking=booking)
    assert history.action == "CREATE"
    assert history.new_status == BookingStatus.PENDING


def test_create_admin_booking_defaults(general_manager):
    data = _form(total_amount=Decimal("0"))
    data.pop("resort")
    data.pop("phone")
    booking = create_booking(data, source=BookingSource.ADMIN, user=general_manager)

    assert re.fullmatch(r"ADM-\d{9}", booking.booking_id)
    assert booking.resort == "limuru"
    assert booking.payment_method == "cash"
    assert booking.total_amount == Decimal("0")
    assert booking.created_by == general_manager


def test_create_web_booking_requires_phone():
    with pytest.raises(ValidationError) as exc:
        create_booking(_form(phone=""), source=BookingSource.WEB)
    assert "phone" in exc.value.detail


def test_create_rejects_checkout_before_checkin():
    with pytest.raises(ValidationError):
        create_booking(_form(check_out=dt.date(2024, 1, 15)), source=BookingSource.WEB)


def test_create_keeps_supplied_nights():
    booking = create_booking(_form(nights=5), source=BookingSource.WEB)
    assert booking.nights == 5


# ---------- transitions ----------

def test_check_in_stamps_time_and_history(booking_factory, limuru_manager):
    booking = booking_factory()
    transition_status(booking, BookingStatus.CHECKED_IN, limuru_manager)

    booking.refresh_from_db()
    assert booking.status == BookingStatus.CHECKED_IN
    assert booking.checked_in_at is not None
    assert booking.updated_by == limuru_manager

    row = booking.status_history.first()
    assert (row.old_status, row.new_status, row.action) == ("pending", "checked-in", "CHECK_IN")
    assert row.changed_by == limuru_manager


def test_check_out_after_check_in(booking_factory, limuru_manager):
    booking = booking_factory(status=BookingStatus.CHECKED_IN)
    transition_status(booking, BookingStatus.CHECKED_OUT, limuru_manager)
    booking.refresh_from_db()
    assert booking.checked_out_at is not None


def test_same_status_is_noop(booking_factory, limuru_manager):
    booking = booking_factory(status=BookingStatus.CONFIRMED)
    transition_status(booking, BookingStatus.CONFIRMED, limuru_manager)
    assert booking.status_history.count() == 0


@pytest.mark.parametrize(
    "current,target",
    [
        (BookingStatus.PENDING, BookingStatus.CHECKED_OUT),
        (BookingStatus.CONFIRMED, BookingStatus.PENDING),
        (BookingStatus.CANCELLED, BookingStatus.CONFIRMED),
        (BookingStatus.CHECKED_OUT, BookingStatus.CHECKED_IN),
    ],
)
def test_disallowed_transitions(booking_factory, current, target):
    booking = booking_factory(status=current)
    with pytest.raises(InvalidTransition):
        transition_status(booking, target)
    booking.refresh_from_db()
    assert booking.status == current


def test_unknown_status_rejected(booking_factory):
    with pytest.raises(InvalidTransition):
        transition_status(booking_factory(), "archived")


# ---------- payment flags ----------

def test_mark_paid_is_independent_of_status_and_idempotent(booking_factory):
    booking = booking_factory(status=BookingStatus.PENDING)
    mark_paid(booking, receipt="QKL123")
    mark_paid(booking, receipt="QKL123")

    booking.refresh_from_db()
    assert booking.payment_status == PaymentStatus.PAID
    assert booking.status == BookingStatus.PENDING
    assert booking.mpesa_receipt == "QKL123"
    assert booking.payment_completed_at is not None
    assert booking.status_history.filter(action="PAYMENT").count() == 1


def test_late_failure_does_not_undo_payment(booking_factory):
    booking = booking_factory(payment_status=PaymentStatus.PAID)
    mark_payment_failed(booking, "Request cancelled by user")
    booking.refresh_from_db()
    assert booking.payment_status == PaymentStatus.PAID


# ---------- availability ----------

def test_check_availability_counts_overlaps(booking_factory):
    # villa at kanamai has 2 rooms
    for _ in range(2):
        booking_factory(resort="kanamai", room_type="villa", check_in=dt.date(2024, 3, 1), check_out=dt.date(2024, 3, 5))
    booking_factory(resort="kanamai", room_type="villa", check_in=dt.date(2024, 3, 5), check_out=dt.date(2024, 3, 7))
    booking_factory(
        resort="kanamai", room_type="villa", status=BookingStatus.CANCELLED,
        check_in=dt.date(2024, 3, 2), check_out=dt.date(2024, 3, 4),
    )

    result = check_availability("kanamai", "villa", dt.date(2024, 3, 3), dt.date(2024, 3, 4))
    assert result == {"available": False, "conflicting_bookings": 2, "max_rooms": 2, "available_rooms": 0}

    later = check_availability("kanamai", "villa", dt.date(2024, 3, 6), dt.date(2024, 3, 8))
    assert later["available"] is True
    assert later["conflicting_bookings"] == 1


# ---------- badges ----------

def test_badges_cover_every_value():
    for value in BookingStatus.values:
        assert status_badge(value)["label"] != "Unknown"
    for value in PaymentStatus.values:
        assert payment_badge(value)["label"] != "Unknown"


def test_badges_fall_back_for_unknown_values():
    assert status_badge("archived")["label"] == "Unknown"
    assert status_badge(None)["badge"] == "secondary"
    assert payment_badge("chargeback") == {
        "label": "Unknown", "color": "#6c757d", "icon": "fas fa-question-circle", "badge": "secondary",
    }
    assert status_badge("checked-in") == {
        "label": "Checked In", "color": "#3b82f6", "icon": "fas fa-door-open", "badge": "info",
    }
