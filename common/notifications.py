# common/notifications.py
"""
Email bridge.

EmailJS (REST API) is tried first; if it is not configured or the call
fails we fall back to Django send_mail over SMTP with a plain-text version
of the same template params. Every attempt lands in NotificationLog.
Nothing in here raises to the caller.
"""
import logging

import requests
from django.conf import settings
from django.core.mail import send_mail
from django.utils import timezone

from setup.properties import property_email, property_name, property_phone

from .models import DeliveryChannel, NotificationEvent, NotificationLog

logger = logging.getLogger(__name__)

RESORT_TEMPLATE = "booking_notification_resort"
GUEST_TEMPLATE = "booking_confirmation_guest"
PAYMENT_TEMPLATE = "template_payment_confirmation"
FEEDBACK_REPLY_TEMPLATE = "template_feedback_reply"

TEMPLATE_SUBJECTS = {
    RESORT_TEMPLATE: "New booking {booking_id} - {resort_name}",
    GUEST_TEMPLATE: "Your booking {booking_id} at {resort_name}",
    PAYMENT_TEMPLATE: "Payment received for booking {booking_id}",
    FEEDBACK_REPLY_TEMPLATE: "Response to your feedback at {resort_name}",
}


def format_amount(amount):
    try:
        return f"KSh {amount:,.0f}"
    except (TypeError, ValueError):
        return f"KSh {amount}"


# ---------- template params ----------

def resort_booking_params(booking, to_email):
    return {
        "to_email": to_email,
        "booking_id": booking.booking_id,
        "guest_name": booking.guest_name,
        "guest_email": booking.email,
        "guest_phone": booking.phone,
        "resort_name": property_name(booking.resort),
        "check_in": booking.check_in.isoformat(),
        "check_out": booking.check_out.isoformat(),
        "room_type": booking.room_type,
        "package_type": booking.package_type,
        "total_amount": format_amount(booking.total_amount),
        "special_requests": booking.special_requests or "None",
        "payment_method": booking.get_payment_method_display() or "Not specified",
    }


def guest_booking_params(booking):
    return {
        "to_email": booking.email,
        "booking_id": booking.booking_id,
        "guest_name": booking.guest_name,
        "resort_name": property_name(booking.resort),
        "resort_email": property_email(booking.resort) or settings.ADMIN_NOTIFICATION_EMAIL,
        "resort_phone": property_phone(booking.resort) or "Contact Resort",
        "check_in": booking.check_in.isoformat(),
        "check_out": booking.check_out.isoformat(),
        "room_type": booking.room_type,
        "package_type": booking.package_type,
        "total_amount": format_amount(booking.total_amount),
        "payment_status": booking.get_payment_status_display() or "Pending",
        "booking_date": timezone.localdate().strftime("%d/%m/%Y"),
    }


def payment_confirmation_params(booking, receipt):
    return {
        "to_email": booking.email,
        "guest_name": booking.guest_name,
        "booking_id": booking.booking_id,
        "mpesa_receipt": receipt or booking.mpesa_receipt,
        "amount_paid": format_amount(booking.total_amount),
        "resort_name": property_name(booking.resort),
        "payment_date": timezone.localdate().strftime("%d/%m/%Y"),
    }



def feedback_reply_params(feedback):
    return {
        "to_email": feedback.email,
        "guest_name": feedback.guest_name,
        "resort_name": property_name(feedback.property),
        "rating": str(feedback.rating),
        "comment": feedback.comment,
        "reply": feedback.reply,
        "reply_date": timezone.localdate().strftime("%d/%m/%Y"),
    }


# ---------- channels ----------

def _emailjs_configured():
    cfg = getattr(settings, "EMAILJS", {}) or {}
    return bool(cfg.get("ENABLED") and cfg.get("SERVICE_ID") and cfg.get("PUBLIC_KEY"))


def send_via_emailjs(template_id, params):
    cfg = settings.EMAILJS
    body = {
        "service_id": cfg["SERVICE_ID"],
        "template_id": template_id,
        "user_id": cfg["PUBLIC_KEY"],
        "template_params": params,
    }
    if cfg.get("PRIVATE_KEY"):
        body["accessToken"] = cfg["PRIVATE_KEY"]

    resp = requests.post(cfg["API_URL"], json=body, timeout=cfg.get("TIMEOUT", 10))
    resp.raise_for_status()
    return {"status_code": resp.status_code, "body": resp.text[:200]}


def send_via_smtp(template_id, params):
    subject = TEMPLATE_SUBJECTS.get(template_id, "Jumuia Resorts").format(**params)
    lines = [f"{key.replace('_', ' ').title()}: {value}" for key, value in params.items() if key != "to_email"]
    send_mail(
        subject,
        "\n".join(lines),
        settings.DEFAULT_FROM_EMAIL,
        [params["to_email"]],
        fail_silently=False,
    )
    return {"subject": subject}


def deliver(event, template_id, params, booking=None):
    """
    Send one templated email. Returns True if any channel accepted it.
    """
    recipient = params.get("to_email")
    if not recipient:
        return False

    if _emailjs_configured():
        try:
            meta = send_via_emailjs(template_id, params)
            NotificationLog.objects.create(
                event=event, booking=booking, recipient=recipient, template_id=template_id,
                channel=DeliveryChannel.EMAILJS, success=True, response_meta=meta,
            )
            return True
        except requests.RequestException as exc:
            logger.warning("EmailJS send failed for %s (%s): %s", recipient, template_id, exc)
            NotificationLog.objects.create(
                event=event, booking=booking, recipient=recipient, template_id=template_id,
                channel=DeliveryChannel.EMAILJS, success=False, response_meta={"error": str(exc)},
            )

    success = False
    response_meta = {}
    try:
        response_meta = send_via_smtp(template_id, params)
        success = True
    except Exception as exc:
        logger.exception("SMTP fallback failed for %s (%s)", recipient, template_id)
        response_meta = {"error": str(exc)}

    NotificationLog.objects.create(
        event=event, booking=booking, recipient=recipient, template_id=template_id,
        channel=DeliveryChannel.SMTP, success=success, response_meta=response_meta,
    )
    return success


# ---------- events ----------

def notify_booking_created(booking):
    """
    Resort inbox + guest, plus an admin copy for "all" bookings or when
    NOTIFY_ADMIN_ON_BOOKING is on.
    """
    results = {}
    resort_email = property_email(booking.resort) or settings.ADMIN_NOTIFICATION_EMAIL
    results["resort"] = deliver(
        NotificationEvent.BOOKING_CREATED, RESORT_TEMPLATE,
        resort_booking_params(booking, resort_email), booking=booking,
    )
    results["guest"] = deliver(
        NotificationEvent.BOOKING_CREATED, GUEST_TEMPLATE,
        guest_booking_params(booking), booking=booking,
    )

    if booking.resort == "all" or getattr(settings, "NOTIFY_ADMIN_ON_BOOKING", False):
        results["admin"] = deliver(
            NotificationEvent.BOOKING_CREATED, RESORT_TEMPLATE,
            resort_booking_params(booking, settings.ADMIN_NOTIFICATION_EMAIL), booking=booking,
        )
    return results


def notify_payment_confirmed(booking, receipt=None):
    return deliver(
        NotificationEvent.PAYMENT_CONFIRMED, PAYMENT_TEMPLATE,
        payment_confirmation_params(booking, receipt), booking=booking,
    )


def notify_feedback_reply(feedback):
    return deliver(NotificationEvent.FEEDBACK_REPLY, FEEDBACK_REPLY_TEMPLATE, feedback_reply_params(feedback))
