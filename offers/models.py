# offers/models
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.db import models

from setup.models import TimeStamped
from setup.properties import PropertyCode


class OfferCategory(models.TextChoices):
    ACCOMMODATION = "accommodation", "Accommodation"
    CONFERENCE = "conference", "Conference"
    CHURCH = "church", "Church Groups"
    FAMILY = "family", "Family"
    HONEYMOON = "honeymoon", "Honeymoon"
    BEACH = "beach", "Beach"
    WEEKEND = "weekend", "Weekend Getaway"
    SEASONAL = "seasonal", "Seasonal"


class OfferStatus(models.TextChoices):
    """Derived from is_active and the date window, never stored."""

    ACTIVE = "active", "Active"
    UPCOMING = "upcoming", "Upcoming"
    EXPIRED = "expired", "Expired"
    INACTIVE = "inactive", "Inactive"


def discount_percentage(original_price, current_price):
    """round((original - current) / original * 100), or None unless both prices are positive."""
    if not original_price or not current_price or original_price <= 0 or current_price <= 0:
        return None
    pct = (Decimal(original_price) - Decimal(current_price)) / Decimal(original_price) * 100
    return int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class Offer(TimeStamped):
    """
    A promotion shown on the public site for one property.

    - status is computed (see offers.status), not a column
    - discount_percentage is recomputed from the two prices on every save
    """

    title = models.CharField(max_length=200)
    property = models.CharField(max_length=20, choices=PropertyCode.choices)
    category = models.CharField(max_length=20, choices=OfferCategory.choices)
    description = models.TextField()

    # ---------- Pricing ----------
    original_price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    current_price = models.DecimalField(max_digits=12, decimal_places=2)
    discount_percentage = models.IntegerField(null=True, blank=True, editable=False)
    offer_code = models.CharField(max_length=50, blank=True)

    # ---------- Display ----------
    image_url = models.URLField(max_length=500, blank=True)
    terms_conditions = models.TextField(blank=True)
    features = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    featured = models.BooleanField(default=False)

    # ---------- Window ----------
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)

    # ---------- Counters ----------
    views = models.PositiveIntegerField(default=0)
    bookings = models.PositiveIntegerField(default=0)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="offers_created"
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="offers_updated"
    )

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.title} ({self.property})"

    def save(self, *args, **kwargs):
        self.discount_percentage = discount_percentage(self.original_price, self.current_price)
        super().save(*args, **kwargs)
