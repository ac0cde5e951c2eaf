# payments/models.py
from django.db import models

from setup.models import TimeStamped


class MpesaPaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"


class MpesaPayment(TimeStamped):
    """
    One STK push attempt for a booking.

    Row is only written once Daraja accepted the push (ResponseCode "0"),
    so it starts pending and the callback moves it to completed / failed.
    """

    booking = models.ForeignKey(
        "booking.Booking",
        on_delete=models.PROTECT,
        related_name="mpesa_payments",
    )
    phone_number = models.CharField(max_length=20)
    amount = models.DecimalField(max_digits=12, decimal_places=2)

    checkout_request_id = models.CharField(max_length=100, unique=True)
    merchant_request_id = models.CharField(max_length=100, blank=True)

    status = models.CharField(
        max_length=12,
        choices=MpesaPaymentStatus.choices,
        default=MpesaPaymentStatus.PENDING,
        db_index=True,
    )

    # ---------- filled from the callback ----------
    mpesa_receipt = models.CharField(max_length=32, blank=True)
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    phone_number_paid = models.CharField(max_length=20, blank=True)
    result_code = models.IntegerField(null=True, blank=True)
    result_desc = models.CharField(max_length=255, blank=True)
    failure_reason = models.CharField(max_length=255, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)
    raw_callback = models.JSONField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.checkout_request_id} ({self.status})"

    @property
    def is_final(self):
        return self.status in (MpesaPaymentStatus.COMPLETED, MpesaPaymentStatus.FAILED)
