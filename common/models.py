# common/models.py
from django.db import models

from setup.models import TimeStamped


class NotificationEvent(models.TextChoices):
    BOOKING_CREATED = "booking_created", "Booking Created"
    PAYMENT_CONFIRMED = "payment_confirmed", "Payment Confirmed"
    FEEDBACK_REPLY = "feedback_reply", "Feedback Reply"


class DeliveryChannel(models.TextChoices):
    EMAILJS = "emailjs", "EmailJS"
    SMTP = "smtp", "SMTP"


class NotificationLog(TimeStamped):
    """
    One row per delivery attempt (EmailJS or SMTP fallback).
    """

    event = models.CharField(max_length=30, choices=NotificationEvent.choices)
    booking = models.ForeignKey(
        "booking.Booking",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notification_logs",
    )
    recipient = models.EmailField()
    template_id = models.CharField(max_length=100, blank=True)
    channel = models.CharField(max_length=10, choices=DeliveryChannel.choices)
    success = models.BooleanField(default=False)
    response_meta = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        state = "ok" if self.success else "failed"
        return f"{self.event} -> {self.recipient} via {self.channel} ({state})"
