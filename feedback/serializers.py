from rest_framework import serializers

from setup.properties import PropertyCode, property_name

from .models import Feedback, FeedbackStatus


class FeedbackSerializer(serializers.ModelSerializer):
    property_name = serializers.SerializerMethodField()
    replied_by_email = serializers.EmailField(source="replied_by.email", read_only=True, default=None)
    published_by_email = serializers.EmailField(source="published_by.email", read_only=True, default=None)

    class Meta:
        model = Feedback
        fields = [
            "id", "guest_name", "email", "property", "property_name", "rating", "comment", "status",
            "reply", "replied", "replied_at", "replied_by", "replied_by_email",
            "published_at", "published_by", "published_by_email",
            "updated_by", "created_at", "updated_at",
        ]
        read_only_fields = fields

    def get_property_name(self, obj):
        return property_name(obj.property)


class PublicFeedbackSerializer(serializers.ModelSerializer):
    """Guest feedback form. Name, property and comment are required."""

    property = serializers.ChoiceField(choices=PropertyCode.choices)
    rating = serializers.DecimalField(max_digits=2, decimal_places=1, min_value=0, max_value=5, default=5)

    class Meta:
        model = Feedback
        fields = ["guest_name", "email", "property", "rating", "comment"]


class PublishedFeedbackSerializer(serializers.ModelSerializer):
    property_name = serializers.SerializerMethodField()

    class Meta:
        model = Feedback
        fields = ["id", "guest_name", "property", "property_name", "rating", "comment", "reply", "created_at"]

    def get_property_name(self, obj):
        return property_name(obj.property)


class FeedbackStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=FeedbackStatus.choices)


class FeedbackReplySerializer(serializers.Serializer):
    reply = serializers.CharField()


class FeedbackBulkSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    action = serializers.ChoiceField(choices=["publish", "archive", "delete"])
