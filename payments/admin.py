from django.contrib import admin

from .models import MpesaPayment


@admin.register(MpesaPayment)
class MpesaPaymentAdmin(admin.ModelAdmin):
    list_display = (
        "checkout_request_id", "booking", "phone_number", "amount",
        "status", "mpesa_receipt", "created_at",
    )
    list_filter = ("status",)
    search_fields = ("checkout_request_id", "mpesa_receipt", "booking__booking_id", "phone_number")
    readonly_fields = ("raw_callback", "created_at", "updated_at")
