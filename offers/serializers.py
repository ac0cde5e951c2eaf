from rest_framework import serializers

from setup.properties import property_name

from .models import Offer
from .status import days_to_end, offer_status


class OfferSerializer(serializers.ModelSerializer):
    property_name = serializers.SerializerMethodField()
    status = serializers.SerializerMethodField()
    days_to_end = serializers.SerializerMethodField()
    features = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    current_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    original_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)

    class Meta:
        model = Offer
        fields = [
            "id", "title", "property", "property_name", "category", "description",
            "original_price", "current_price", "discount_percentage", "offer_code",
            "image_url", "terms_conditions", "features",
            "is_active", "featured", "start_date", "end_date",
            "status", "days_to_end", "views", "bookings",
            "created_by", "updated_by", "created_at", "updated_at",
        ]
        read_only_fields = [
            "id", "discount_percentage", "views", "bookings",
            "created_by", "updated_by", "created_at", "updated_at",
        ]

    def get_property_name(self, obj):
        return property_name(obj.property)

    def get_status(self, obj):
        return offer_status(obj)

    def get_days_to_end(self, obj):
        return days_to_end(obj)

    def validate_features(self, value):
        # blank rows from the form are dropped
        return [f.strip() for f in value if f and f.strip()]

    def validate(self, attrs):
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end < start:
            raise serializers.ValidationError({"end_date": "End date cannot be before start date."})
        return attrs


class PublicOfferSerializer(serializers.ModelSerializer):
    property_name = serializers.SerializerMethodField()

    class Meta:
        model = Offer
        fields = [
            "id", "title", "property", "property_name", "category", "description",
            "original_price", "current_price", "discount_percentage", "offer_code",
            "image_url", "terms_conditions", "features", "featured",
            "start_date", "end_date",
        ]

    def get_property_name(self, obj):
        return property_name(obj.property)
