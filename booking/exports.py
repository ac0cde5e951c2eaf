# booking/exports.py
from django.utils import timezone

from common.utils import csv_response, dated_filename, excel_response

BOOKING_EXPORT_PREFIX = "jumuia_bookings"

BOOKING_EXPORT_HEADERS = [
    "Booking ID", "Guest Name", "Email", "Phone", "Property", "Room Type",
    "Check-in", "Check-out", "Nights", "Rooms", "Adults", "Children",
    "Total Amount", "Payment Status", "Booking Status", "Payment Method",
    "Created Date", "Special Requests",
]


def booking_export_row(b):
    created = timezone.localtime(b.created_at).date().isoformat() if b.created_at else ""
    return {
        "Booking ID": b.booking_id,
        "Guest Name": b.guest_name,
        "Email": b.email,
        "Phone": b.phone,
        "Property": b.resort,
        "Room Type": b.room_type,
        "Check-in": b.check_in.isoformat() if b.check_in else "",
        "Check-out": b.check_out.isoformat() if b.check_out else "",
        "Nights": b.nights,
        "Rooms": b.rooms,
        "Adults": b.adults,
        "Children": b.children,
        "Total Amount": b.total_amount,
        "Payment Status": b.payment_status,
        "Booking Status": b.status,
        "Payment Method": b.payment_method,
        "Created Date": created,
        "Special Requests": b.special_requests,
    }


def export_bookings(queryset, fmt="csv"):
    rows = [booking_export_row(b) for b in queryset]
    if fmt == "xlsx":
        return excel_response(
            dated_filename(BOOKING_EXPORT_PREFIX, "xlsx"), BOOKING_EXPORT_HEADERS, rows, sheet_title="Bookings"
        )
    return csv_response(dated_filename(BOOKING_EXPORT_PREFIX), BOOKING_EXPORT_HEADERS, rows)
