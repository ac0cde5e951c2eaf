from django.contrib import admin

from .models import NotificationLog


@admin.register(NotificationLog)
class NotificationLogAdmin(admin.ModelAdmin):
    list_display = ("event", "recipient", "template_id", "channel", "success", "created_at")
    list_filter = ("event", "channel", "success")
    search_fields = ("recipient", "booking__booking_id")
