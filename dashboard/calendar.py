# dashboard/calendar.py
"""
Turns bookings into FullCalendar event dicts and works out the calendar
sidebar numbers (counts per status / property, today's movements,
occupancy).
"""
import math
from collections import Counter

from django.utils import timezone

from booking.models import BookingStatus
from setup.properties import ALL_PROPERTIES, property_color, room_capacity

STATUS_COLORS = {
    BookingStatus.PENDING: "#ffc107",
    BookingStatus.CONFIRMED: "#28a745",
    BookingStatus.CHECKED_IN: "#007bff",
    BookingStatus.CHECKED_OUT: "#6c757d",
    BookingStatus.CANCELLED: "#dc3545",
}
DEFAULT_STATUS_COLOR = "#6c757d"

STATUS_TEXT_COLORS = {
    BookingStatus.PENDING: "#856404",
    BookingStatus.CONFIRMED: "#155724",
    BookingStatus.CHECKED_IN: "#004085",
    BookingStatus.CHECKED_OUT: "#383d41",
    BookingStatus.CANCELLED: "#721c24",
}
DEFAULT_TEXT_COLOR = "#383d41"

OCCUPIED_STATUSES = (BookingStatus.CHECKED_IN, BookingStatus.CONFIRMED)

EXPORT_HEADERS = [
    "Booking ID", "Guest Name", "Property", "Check-in", "Check-out", "Nights",
    "Room Type", "Status", "Payment Status", "Total Amount", "Phone", "Email",
]


def status_color(status):
    return STATUS_COLORS.get(status, DEFAULT_STATUS_COLOR)


def status_text_color(status):
    return STATUS_TEXT_COLORS.get(status, DEFAULT_TEXT_COLOR)


def _for_property(bookings, property_code):
    if not property_code or property_code == ALL_PROPERTIES:
        return list(bookings)
    return [b for b in bookings if b.resort == property_code]


def build_calendar_events(bookings, start, end, property_code=ALL_PROPERTIES):
    """
    One main event + a check-in and a check-out background marker for every
    booking whose stay touches [start, end]. Bookings without dates are
    skipped.
    """
    events = []
    for booking in _for_property(bookings, property_code):
        if not booking.check_in or not booking.check_out:
            continue
        if not (booking.check_in <= end and booking.check_out >= start):
            continue

        event_id = str(booking.pk)
        check_in = booking.check_in.isoformat()
        check_out = booking.check_out.isoformat()

        events.append({
            "id": event_id,
            "title": booking.guest_name,
            "start": check_in,
            "end": check_out,
            "allDay": True,
            "color": status_color(booking.status),
            "textColor": status_text_color(booking.status),
            "borderColor": property_color(booking.resort),
            "className": f"event-{booking.status} event-{booking.resort}",
            "extendedProps": {
                "status": booking.status,
                "property": booking.resort,
                "guestName": booking.guest_name,
                "bookingId": booking.booking_id,
                "roomType": booking.room_type,
                "nights": booking.nights,
                "totalAmount": float(booking.total_amount or 0),
                "phone": booking.phone,
                "email": booking.email,
            },
        })
        events.append({
            "id": f"{event_id}-checkin",
            "title": "Check-in",
            "start": check_in,
            "allDay": True,
            "display": "background",
            "backgroundColor": status_color(BookingStatus.CHECKED_IN),
            "extendedProps": {"type": "checkin", "bookingId": booking.booking_id},
        })
        events.append({
            "id": f"{event_id}-checkout",
            "title": "Check-out",
            "start": check_out,
            "allDay": True,
            "display": "background",
            "backgroundColor": status_color(BookingStatus.CHECKED_OUT),
            "extendedProps": {"type": "checkout", "bookingId": booking.booking_id},
        })
    return events


def occupancy_rate(occupied, property_code=ALL_PROPERTIES):
    capacity = room_capacity(property_code)
    if capacity <= 0:
        return 0
    # half-up like the dashboard has always shown it
    return int(math.floor(occupied / capacity * 100 + 0.5))


def calendar_statistics(bookings, property_code=ALL_PROPERTIES, today=None):
    today = today or timezone.localdate()
    rows = _for_property(bookings, property_code)

    by_status = Counter(b.status for b in rows)
    by_property = Counter(b.resort for b in rows)
    occupied = sum(1 for b in rows if b.status in OCCUPIED_STATUSES)

    return {
        "total": len(rows),
        "by_status": {status: by_status.get(status, 0) for status in BookingStatus.values},
        "by_property": dict(by_property),
        "today_checkins": sum(
            1 for b in rows if b.check_in == today and b.status == BookingStatus.CHECKED_IN
        ),
        "today_checkouts": sum(
            1 for b in rows if b.check_out == today and b.status == BookingStatus.CHECKED_OUT
        ),
        "occupied": occupied,
        "capacity": room_capacity(property_code),
        "occupancy_rate": occupancy_rate(occupied, property_code),
    }


def calendar_export_rows(bookings):
    for b in bookings:
        yield {
            "Booking ID": b.booking_id,
            "Guest Name": b.guest_name,
            "Property": b.resort,
            "Check-in": b.check_in.isoformat() if b.check_in else "",
            "Check-out": b.check_out.isoformat() if b.check_out else "",
            "Nights": b.nights,
            "Room Type": b.room_type,
            "Status": b.status,
            "Payment Status": b.payment_status,
            "Total Amount": b.total_amount,
            "Phone": b.phone,
            "Email": b.email,
        }
