# common/utils.py
import csv
import io

from django.http import HttpResponse
from django.utils import timezone
from openpyxl import Workbook


def dated_filename(prefix, extension="csv"):
    """jumuia_bookings -> jumuia_bookings_2024-01-15.csv"""
    return f"{prefix}_{timezone.localdate().isoformat()}.{extension}"


def csv_response(filename, headers, rows):
    """
    ``rows`` are dicts keyed by header. csv.writer quotes any value holding a
    comma, quote or newline and doubles embedded quotes.
    """
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(headers)
    for row in rows:
        writer.writerow(["" if row.get(h) is None else row.get(h) for h in headers])

    resp = HttpResponse(buf.getvalue(), content_type="text/csv; charset=utf-8")
    resp["Content-Disposition"] = f'attachment; filename="{filename}"'
    return resp


def excel_response(filename, headers, rows, sheet_title="Export"):
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title
    ws.append(headers)
    for row in rows:
        ws.append([_excel_value(row.get(h)) for h in headers])
    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    resp = HttpResponse(
        buf.read(),
        content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
    resp["Content-Disposition"] = f'attachment; filename="{filename}"'
    return resp


def _excel_value(value):
    if value is None:
        return ""
    if isinstance(value, (int, float, str)):
        return value
    return str(value)
