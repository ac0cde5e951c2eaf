# offers/exports.py
from django.utils import timezone

from common.utils import csv_response, dated_filename

from .status import offer_status

OFFER_EXPORT_PREFIX = "jumuia_offers"

OFFER_EXPORT_HEADERS = [
    "Offer Title", "Property", "Category", "Start Date", "End Date",
    "Original Price", "Current Price", "Discount %", "Promo Code", "Status",
    "Active", "Featured", "Views", "Bookings", "Created Date", "Created By",
]


def offer_export_row(o, today=None):
    created = timezone.localtime(o.created_at).date().isoformat() if o.created_at else ""
    return {
        "Offer Title": o.title,
        "Property": o.property,
        "Category": o.category,
        "Start Date": o.start_date.isoformat() if o.start_date else "",
        "End Date": o.end_date.isoformat() if o.end_date else "",
        "Original Price": o.original_price,
        "Current Price": o.current_price,
        "Discount %": "" if o.discount_percentage is None else o.discount_percentage,
        "Promo Code": o.offer_code,
        "Status": offer_status(o, today),
        "Active": "Yes" if o.is_active else "No",
        "Featured": "Yes" if o.featured else "No",
        "Views": o.views,
        "Bookings": o.bookings,
        "Created Date": created,
        "Created By": o.created_by.email if o.created_by else "",
    }


def export_offers(queryset):
    today = timezone.localdate()
    rows = [offer_export_row(o, today) for o in queryset]
    return csv_response(dated_filename(OFFER_EXPORT_PREFIX), OFFER_EXPORT_HEADERS, rows)
