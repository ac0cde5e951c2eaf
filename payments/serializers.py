from rest_framework import serializers

from .models import MpesaPayment


class StkPushSerializer(serializers.Serializer):
    phone_number = serializers.CharField(max_length=20)
    booking_id = serializers.CharField(max_length=32)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=1)


class MpesaPaymentSerializer(serializers.ModelSerializer):
    booking_id = serializers.CharField(source="booking.booking_id", read_only=True)

    class Meta:
        model = MpesaPayment
        fields = [
            "id", "booking", "booking_id", "phone_number", "amount",
            "checkout_request_id", "merchant_request_id", "status",
            "mpesa_receipt", "amount_paid", "phone_number_paid",
            "result_code", "result_desc", "failure_reason",
            "completed_at", "failed_at", "created_at",
        ]
        read_only_fields = fields
