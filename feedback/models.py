# feedback/models
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from setup.models import TimeStamped
from setup.properties import PropertyCode


class FeedbackStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PUBLISHED = "published", "Published"
    ARCHIVED = "archived", "Archived"


class Feedback(TimeStamped):
    """
    Guest review from the public site. Lands as pending, staff publish,
    archive or reply. created_at is the submission time.
    """

    guest_name = models.CharField(max_length=150)
    email = models.EmailField(blank=True)
    property = models.CharField(max_length=20, choices=PropertyCode.choices)
    rating = models.DecimalField(
        max_digits=2, decimal_places=1, default=5,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    comment = models.TextField()
    status = models.CharField(max_length=20, choices=FeedbackStatus.choices, default=FeedbackStatus.PENDING)

    # ---------- Reply ----------
    reply = models.TextField(blank=True)
    replied = models.BooleanField(default=False)
    replied_at = models.DateTimeField(null=True, blank=True)
    replied_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="feedback_replied"
    )

    # ---------- Moderation ----------
    published_at = models.DateTimeField(null=True, blank=True)
    published_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="feedback_published"
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="feedback_updated"
    )

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "feedback"

    def __str__(self):
        return f"{self.guest_name} ({self.property}, {self.rating})"
