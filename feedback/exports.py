# feedback/exports.py
from django.utils import timezone

from common.utils import csv_response, dated_filename

FEEDBACK_EXPORT_PREFIX = "jumuia_feedback"

FEEDBACK_EXPORT_HEADERS = [
    "Guest Name", "Email", "Property", "Rating", "Comment", "Status",
    "Replied", "Reply", "Submitted", "Published By", "Published At",
    "Replied By", "Replied At",
]


def _stamp(value):
    return timezone.localtime(value).strftime("%Y-%m-%d %H:%M") if value else ""


def feedback_export_row(f):
    return {
        "Guest Name": f.guest_name,
        "Email": f.email,
        "Property": f.property,
        "Rating": f.rating,
        "Comment": f.comment,
        "Status": f.status,
        "Replied": "Yes" if f.replied else "No",
        "Reply": f.reply,
        "Submitted": _stamp(f.created_at),
        "Published By": f.published_by.email if f.published_by else "",
        "Published At": _stamp(f.published_at),
        "Replied By": f.replied_by.email if f.replied_by else "",
        "Replied At": _stamp(f.replied_at),
    }


def export_feedback(queryset):
    rows = [feedback_export_row(f) for f in queryset]
    return csv_response(dated_filename(FEEDBACK_EXPORT_PREFIX), FEEDBACK_EXPORT_HEADERS, rows)
