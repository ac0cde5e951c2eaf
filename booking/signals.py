# booking/signals.py

from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from common.tasks import send_booking_created_email

from .models import Booking


@receiver(post_save, sender=Booking)
def booking_post_save(sender, instance, created, **kwargs):
    if created:
        pk = instance.pk
        transaction.on_commit(lambda: send_booking_created_email.delay(pk))
