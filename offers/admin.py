from django.contrib import admin

from .models import Offer


@admin.register(Offer)
class OfferAdmin(admin.ModelAdmin):
    list_display = (
        "title", "property", "category", "current_price", "discount_percentage",
        "start_date", "end_date", "is_active", "featured", "created_at",
    )
    list_filter = ("property", "category", "is_active", "featured")
    search_fields = ("title", "description", "offer_code")
    readonly_fields = ("discount_percentage", "views", "bookings", "created_at", "updated_at")
