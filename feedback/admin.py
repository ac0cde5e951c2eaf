from django.contrib import admin

from .models import Feedback


@admin.register(Feedback)
class FeedbackAdmin(admin.ModelAdmin):
    list_display = ("guest_name", "property", "rating", "status", "replied", "created_at")
    list_filter = ("property", "status", "replied")
    search_fields = ("guest_name", "email", "comment")
    readonly_fields = ("replied_at", "published_at", "created_at", "updated_at")
