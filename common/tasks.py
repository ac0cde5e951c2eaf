# common/tasks.py
import logging

from celery import shared_task

from booking.models import Booking
from feedback.models import Feedback

from .notifications import notify_booking_created, notify_feedback_reply, notify_payment_confirmed

logger = logging.getLogger(__name__)


# ---------- 1) new booking -> resort inbox + guest ----------

@shared_task
def send_booking_created_email(booking_id: int):
    try:
        booking = Booking.objects.get(pk=booking_id)
    except Booking.DoesNotExist:
        logger.warning("send_booking_created_email: booking %s not found", booking_id)
        return

    results = notify_booking_created(booking)
    logger.info("Booking %s created emails: %s", booking.booking_id, results)


# ---------- 2) M-Pesa payment completed -> guest ----------

@shared_task
def send_payment_confirmation_email(booking_id: int, receipt: str = ""):
    try:
        booking = Booking.objects.get(pk=booking_id)
    except Booking.DoesNotExist:
        logger.warning("send_payment_confirmation_email: booking %s not found", booking_id)
        return

    ok = notify_payment_confirmed(booking, receipt)
    logger.info("Booking %s payment confirmation email sent=%s", booking.booking_id, ok)


# ---------- 3) staff replied to feedback -> guest ----------

@shared_task
def send_feedback_reply_email(feedback_id: int):
    try:
        feedback = Feedback.objects.get(pk=feedback_id)
    except Feedback.DoesNotExist:
        logger.warning("send_feedback_reply_email: feedback %s not found", feedback_id)
        return

    ok = notify_feedback_reply(feedback)
    logger.info("Feedback %s reply email sent=%s", feedback.pk, ok)
