# feedback/views.py
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from setup.properties import ALL_PROPERTIES

from .exports import export_feedback
from .filters import apply_feedback_filters, scoped_feedback
from .models import Feedback, FeedbackStatus
from .serializers import (
    FeedbackBulkSerializer,
    FeedbackReplySerializer,
    FeedbackSerializer,
    FeedbackStatusSerializer,
    PublicFeedbackSerializer,
    PublishedFeedbackSerializer,
)
from .services import bulk_set_status, feedback_statistics, reply_to_feedback, set_status

PUBLIC_ACTIONS = ("public", "published")

BULK_STATUS = {
    "publish": FeedbackStatus.PUBLISHED,
    "archive": FeedbackStatus.ARCHIVED,
}


class FeedbackViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    /api/feedback/            GET list (?property ?status ?rating ?search ?date_from ?date_to)
    /api/feedback/{id}/       GET / DELETE
    /api/feedback/{id}/status/  POST {status}
    /api/feedback/{id}/reply/   POST {reply}, emails the guest
    /api/feedback/bulk/       POST {ids, action: publish|archive|delete}
    /api/feedback/stats/      GET
    /api/feedback/export/     GET CSV

    Public (no token):
    /api/feedback/public/     POST guest form, lands as pending
    /api/feedback/published/  GET published reviews (?property)
    """

    queryset = Feedback.objects.select_related("replied_by", "published_by").all()
    serializer_class = FeedbackSerializer
    permission_classes = [permissions.IsAuthenticated]
    throttle_scope = "public_feedback"

    def get_permissions(self):
        if self.action in PUBLIC_ACTIONS:
            return [permissions.AllowAny()]
        return super().get_permissions()

    def get_throttles(self):
        if self.action == "public":
            return [ScopedRateThrottle()]
        return super().get_throttles()

    def get_queryset(self):
        qs = scoped_feedback(self.request.user, super().get_queryset())
        if self.action in ("list", "export", "stats"):
            qs = apply_feedback_filters(qs, self.request.query_params)
        return qs.order_by("-created_at", "-id")

    # -------------------------------------------------
    # MODERATION
    # -------------------------------------------------
    @action(detail=True, methods=["post"], url_path="status")
    def change_status(self, request, pk=None):
        feedback = self.get_object()
        ser = FeedbackStatusSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        set_status(feedback, ser.validated_data["status"], request.user)
        return Response(FeedbackSerializer(feedback).data)

    @action(detail=True, methods=["post"], url_path="reply")
    def reply(self, request, pk=None):
        feedback = self.get_object()
        ser = FeedbackReplySerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        reply_to_feedback(feedback, ser.validated_data["reply"], request.user)
        return Response(FeedbackSerializer(feedback).data)

    @action(detail=False, methods=["post"], url_path="bulk")
    def bulk(self, request):
        ser = FeedbackBulkSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        # ids outside the caller's scope are silently left alone
        qs = self.get_queryset().filter(pk__in=ser.validated_data["ids"])
        bulk_action = ser.validated_data["action"]

        if bulk_action == "delete":
            count, _ = qs.delete()
        else:
            count = bulk_set_status(qs, BULK_STATUS[bulk_action], request.user)
        return Response({"action": bulk_action, "count": count})

    # -------------------------------------------------
    # READS
    # -------------------------------------------------
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        return Response(feedback_statistics(self.get_queryset()))

    @action(detail=False, methods=["get"], url_path="export")
    def export(self, request):
        return export_feedback(self.get_queryset())

    # -------------------------------------------------
    # PUBLIC
    # -------------------------------------------------
    @action(detail=False, methods=["post"], url_path="public")
    def public(self, request):
        ser = PublicFeedbackSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        feedback = ser.save(status=FeedbackStatus.PENDING)
        return Response(
            {"id": feedback.id, "status": feedback.status, "message": "Thank you for your feedback!"},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["get"], url_path="published")
    def published(self, request):
        qs = Feedback.objects.filter(status=FeedbackStatus.PUBLISHED)
        prop = request.query_params.get("property")
        if prop and prop != ALL_PROPERTIES:
            qs = qs.filter(property=prop)
        qs = qs.order_by("-created_at", "-id")
        return Response(PublishedFeedbackSerializer(qs, many=True).data)
