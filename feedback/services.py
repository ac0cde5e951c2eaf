# feedback/services.py
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Avg
from django.utils import timezone

from common.tasks import send_feedback_reply_email

from .models import FeedbackStatus

logger = logging.getLogger(__name__)


def set_status(feedback, new_status, user):
    """Publishing stamps published_by / published_at, other moves leave them."""
    feedback.status = new_status
    feedback.updated_by = user
    if new_status == FeedbackStatus.PUBLISHED:
        feedback.published_by = user
        feedback.published_at = timezone.now()
    feedback.save()
    return feedback


def bulk_set_status(queryset, new_status, user):
    now = timezone.now()
    changes = {"status": new_status, "updated_by": user, "updated_at": now}
    if new_status == FeedbackStatus.PUBLISHED:
        changes.update(published_by=user, published_at=now)
    return queryset.update(**changes)


def reply_to_feedback(feedback, reply, user):
    """
    Store the reply and queue the guest email after commit. Guests who left
    no email only get the stored reply.
    """
    with transaction.atomic():
        feedback.reply = reply
        feedback.replied = True
        feedback.replied_at = timezone.now()
        feedback.replied_by = user
        feedback.updated_by = user
        feedback.save()

        if feedback.email:
            feedback_pk = feedback.pk
            transaction.on_commit(lambda: send_feedback_reply_email.delay(feedback_pk))
        else:
            logger.info("Feedback %s has no email, reply stored only", feedback.pk)
    return feedback


def feedback_statistics(queryset, today=None):
    today = today or timezone.localdate()
    avg = queryset.filter(status=FeedbackStatus.PUBLISHED).aggregate(avg=Avg("rating"))["avg"]
    return {
        "total": queryset.count(),
        "pending": queryset.filter(status=FeedbackStatus.PENDING).count(),
        "published": queryset.filter(status=FeedbackStatus.PUBLISHED).count(),
        "archived": queryset.filter(status=FeedbackStatus.ARCHIVED).count(),
        "average_rating": round(Decimal(avg), 1) if avg is not None else Decimal("0.0"),
        "today": queryset.filter(created_at__date=today).count(),
    }
