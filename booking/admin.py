from django.contrib import admin

from .models import Booking, BookingStatusHistory


class BookingStatusHistoryInline(admin.TabularInline):
    model = BookingStatusHistory
    extra = 0
    readonly_fields = ("old_status", "new_status", "action", "reason", "changed_by", "created_at")
    can_delete = False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_id", "first_name", "last_name", "resort", "check_in", "check_out",
        "status", "payment_status", "total_amount", "source", "created_at",
    )
    list_filter = ("resort", "status", "payment_status", "source", "payment_method")
    search_fields = ("booking_id", "first_name", "last_name", "email", "phone")
    readonly_fields = ("booking_id", "created_at", "updated_at", "checked_in_at", "checked_out_at")
    date_hierarchy = "check_in"
    inlines = [BookingStatusHistoryInline]


@admin.register(BookingStatusHistory)
class BookingStatusHistoryAdmin(admin.ModelAdmin):
    list_display = ("booking", "old_status", "new_status", "action", "changed_by", "created_at")
    list_filter = ("action", "new_status")
    search_fields = ("booking__booking_id",)
