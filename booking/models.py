# booking/models
from django.conf import settings
from django.db import models

from setup.models import TimeStamped
from setup.properties import PropertyCode


class BookingStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    CHECKED_IN = "checked-in", "Checked In"
    CHECKED_OUT = "checked-out", "Checked Out"
    CANCELLED = "cancelled", "Cancelled"


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    AWAITING_PAYMENT = "awaiting_payment", "Awaiting Payment"
    PAID = "paid", "Paid"
    FAILED = "failed", "Failed"
    REFUNDED = "refunded", "Refunded"


class PaymentMethod(models.TextChoices):
    MPESA = "mpesa", "M-Pesa"
    CASH = "cash", "Cash"
    CARD = "card", "Card"
    BANK = "bank", "Bank Transfer"


class PackageType(models.TextChoices):
    BNB = "bnb", "Bed & Breakfast"
    HB = "hb", "Half Board"
    FB = "fb", "Full Board"
    CONFERENCE = "conference", "Conference"


class BookingSource(models.TextChoices):
    WEB = "web", "Website"
    ADMIN = "admin", "Admin Panel"


class Booking(TimeStamped):
    """
    One guest stay at one of the properties.

    - booking_id: human code (JUM-LIM-123456789 / ADM-123456789), set once
    - status: stay lifecycle, payment_status: money side, the two move
      independently
    - never hard-deleted, cancel instead
    """

    booking_id = models.CharField(max_length=32, unique=True, editable=False, db_index=True)

    # ---------- Guest ----------
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100, blank=True)
    email = models.EmailField()
    phone = models.CharField(max_length=32, blank=True)

    # ---------- Stay ----------
    resort = models.CharField(max_length=20, choices=PropertyCode.choices, default=PropertyCode.LIMURU)
    room_type = models.CharField(max_length=50)
    package_type = models.CharField(max_length=20, choices=PackageType.choices, default=PackageType.BNB)
    adults = models.PositiveIntegerField(default=1)
    children = models.PositiveIntegerField(default=0)
    rooms = models.PositiveIntegerField(default=1)
    check_in = models.DateField()
    check_out = models.DateField()
    nights = models.PositiveIntegerField(default=1)
    special_requests = models.TextField(blank=True)

    # ---------- Money ----------
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    currency = models.CharField(max_length=3, default="KES", editable=False)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.MPESA)
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.AWAITING_PAYMENT,
        db_index=True,
    )
    mpesa_receipt = models.CharField(max_length=32, blank=True)
    payment_completed_at = models.DateTimeField(null=True, blank=True)
    payment_failure_reason = models.CharField(max_length=255, blank=True)

    # ---------- Lifecycle ----------
    status = models.CharField(
        max_length=16,
        choices=BookingStatus.choices,
        default=BookingStatus.PENDING,
        db_index=True,
    )
    source = models.CharField(max_length=10, choices=BookingSource.choices, default=BookingSource.WEB)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    checked_out_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings_created",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings_updated",
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["resort", "check_in"], name="booking_resort_checkin_idx"),
            models.Index(fields=["updated_at"], name="booking_updated_at_idx"),
        ]

    def __str__(self):
        return f"{self.booking_id} - {self.guest_name}"

    @property
    def guest_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def status_label(self) -> str:
        return self.get_status_display()


class BookingStatusHistory(TimeStamped):
    """
    Audit log:
    - which booking changed status
    - old -> new status
    - who changed it, when (created_at from TimeStamped)
    - reason + action type
    """

    ACTION_CHOICES = [
        ("CREATE", "Create"),
        ("CONFIRM", "Confirm"),
        ("CHECK_IN", "Check In"),
        ("CHECK_OUT", "Check Out"),
        ("CANCEL", "Cancel"),
        ("PAYMENT", "Payment"),
        ("MANUAL_UPDATE", "Manual Update"),
    ]

    booking = models.ForeignKey(
        Booking,
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status = models.CharField(max_length=16, choices=BookingStatus.choices, blank=True)
    new_status = models.CharField(max_length=16, choices=BookingStatus.choices)
    action = models.CharField(max_length=20, choices=ACTION_CHOICES, default="MANUAL_UPDATE")
    reason = models.TextField(blank=True)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="booking_status_changes",
    )

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.booking.booking_id}: {self.old_status or '-'} -> {self.new_status}"
