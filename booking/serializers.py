from rest_framework import serializers

from setup.properties import PropertyCode, property_name

from .lifecycle import compute_nights, payment_badge, status_badge
from .models import Booking, BookingStatus, BookingStatusHistory, PackageType


class BookingSerializer(serializers.ModelSerializer):
    guest_name = serializers.CharField(read_only=True)
    property_name = serializers.SerializerMethodField()
    status_badge = serializers.SerializerMethodField()
    payment_badge = serializers.SerializerMethodField()
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    nights = serializers.IntegerField(required=False, min_value=1)

    class Meta:
        model = Booking
        fields = [
            "id", "booking_id",
            "first_name", "last_name", "guest_name", "email", "phone",
            "resort", "property_name", "room_type", "package_type",
            "adults", "children", "rooms",
            "check_in", "check_out", "nights",
            "total_amount", "currency",
            "status", "status_badge",
            "payment_status", "payment_badge", "payment_method",
            "mpesa_receipt", "payment_completed_at", "payment_failure_reason",
            "special_requests", "source",
            "checked_in_at", "checked_out_at",
            "created_by", "updated_by", "created_at", "updated_at",
        ]
        read_only_fields = [
            "id", "booking_id", "currency", "status", "payment_status", "source",
            "mpesa_receipt", "payment_completed_at", "payment_failure_reason",
            "checked_in_at", "checked_out_at",
            "created_by", "updated_by", "created_at", "updated_at",
        ]
        extra_kwargs = {
            "resort": {"required": False},
        }

    def get_property_name(self, obj):
        return property_name(obj.resort)

    def get_status_badge(self, obj):
        return status_badge(obj.status)

    def get_payment_badge(self, obj):
        return payment_badge(obj.payment_status)

    def validate(self, attrs):
        check_in = attrs.get("check_in", getattr(self.instance, "check_in", None))
        check_out = attrs.get("check_out", getattr(self.instance, "check_out", None))
        if check_in and check_out and check_out <= check_in:
            raise serializers.ValidationError({"check_out": "Check-out must be after check-in."})

        # dates moved on an update without explicit nights -> recompute
        if self.instance is not None and ("check_in" in attrs or "check_out" in attrs) and "nights" not in attrs:
            attrs["nights"] = compute_nights(check_in, check_out)
        return attrs


class BookingUpdateSerializer(BookingSerializer):
    """
    PUT/PATCH body. Same fields as BookingSerializer plus a writable
    ``status`` which the view routes through the lifecycle instead of
    saving it straight onto the row.
    """

    status = serializers.ChoiceField(choices=BookingStatus.choices, required=False)
    # null is only meaningful on create, where it means "compute from the rate card"
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=0)
    status_reason = serializers.CharField(required=False, allow_blank=True, write_only=True)

    class Meta(BookingSerializer.Meta):
        fields = BookingSerializer.Meta.fields + ["status_reason"]
        read_only_fields = [f for f in BookingSerializer.Meta.read_only_fields if f != "status"]


class PublicBookingSerializer(serializers.ModelSerializer):
    """Fields the guest booking form is allowed to send."""

    resort = serializers.ChoiceField(choices=PropertyCode.choices)
    phone = serializers.CharField(max_length=32)

    class Meta:
        model = Booking
        fields = [
            "first_name", "last_name", "email", "phone",
            "resort", "room_type", "package_type",
            "adults", "children", "rooms",
            "check_in", "check_out",
            "payment_method", "special_requests",
        ]

    def validate(self, attrs):
        if attrs["check_out"] <= attrs["check_in"]:
            raise serializers.ValidationError({"check_out": "Check-out must be after check-in."})
        return attrs


class QuoteSerializer(serializers.Serializer):
    resort = serializers.ChoiceField(choices=PropertyCode.choices)
    room_type = serializers.CharField()
    package_type = serializers.ChoiceField(choices=PackageType.choices, default=PackageType.BNB)
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    adults = serializers.IntegerField(min_value=1, default=1)
    children = serializers.IntegerField(min_value=0, default=0)

    def validate(self, attrs):
        if attrs["check_out"] <= attrs["check_in"]:
            raise serializers.ValidationError({"check_out": "Check-out must be after check-in."})
        return attrs


class StatusActionSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class BookingStatusHistorySerializer(serializers.ModelSerializer):
    changed_by_email = serializers.EmailField(source="changed_by.email", read_only=True, default=None)

    class Meta:
        model = BookingStatusHistory
        fields = [
            "id", "old_status", "new_status", "action", "reason",
            "changed_by", "changed_by_email", "created_at",
        ]
