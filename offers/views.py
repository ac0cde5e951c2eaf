# offers/views.py
from django.utils import timezone
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.utils import scoped_property
from setup.properties import ALL_PROPERTIES

from .exports import export_offers
from .filters import apply_offer_filters, scoped_offers
from .models import Offer, OfferStatus
from .serializers import OfferSerializer, PublicOfferSerializer
from .status import offer_statistics, status_q

PUBLIC_OFFER_LIMIT = 10


class OfferViewSet(viewsets.ModelViewSet):
    """
    /api/offers/
      GET    -> list (?property ?status ?category ?search ?date_from ?date_to)
      POST   -> create
    /api/offers/{id}/  GET / PUT / PATCH / DELETE
    /api/offers/{id}/toggle/  POST  flip is_active
    /api/offers/stats/        GET
    /api/offers/export/       GET   CSV

    Public (no token):
    /api/offers/public/       GET   active offers, newest first
    """

    queryset = Offer.objects.select_related("created_by", "updated_by").all()
    serializer_class = OfferSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_permissions(self):
        if self.action == "public":
            return [permissions.AllowAny()]
        return super().get_permissions()

    # -------------------------------------------------
    # FILTERS FOR LIST ENDPOINT
    # -------------------------------------------------
    def get_queryset(self):
        qs = scoped_offers(self.request.user, super().get_queryset())
        if self.action in ("list", "export", "stats"):
            qs = apply_offer_filters(qs, self.request.query_params)
        return qs.order_by("-created_at", "-id")

    def _property_error(self, data):
        prop = scoped_property(self.request.user)
        if prop is not None and data.get("property") not in (None, prop):
            return Response(
                {"property": [f"You can only manage offers for {prop}."]},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return None

    # -------------------------------------------------
    # CREATE / UPDATE
    # -------------------------------------------------
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        error = self._property_error(serializer.validated_data)
        if error is not None:
            return error
        offer = serializer.save(created_by=request.user, updated_by=request.user)
        return Response(OfferSerializer(offer).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        offer = self.get_object()
        serializer = self.get_serializer(offer, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        error = self._property_error(serializer.validated_data)
        if error is not None:
            return error
        offer = serializer.save(updated_by=request.user)
        return Response(OfferSerializer(offer).data)

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    # -------------------------------------------------
    # ACTIONS
    # -------------------------------------------------
    @action(detail=True, methods=["post"], url_path="toggle")
    def toggle(self, request, pk=None):
        offer = self.get_object()
        offer.is_active = not offer.is_active
        offer.updated_by = request.user
        offer.save(update_fields=["is_active", "updated_by", "discount_percentage", "updated_at"])
        return Response(OfferSerializer(offer).data)

    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        return Response(offer_statistics(self.get_queryset()))

    @action(detail=False, methods=["get"], url_path="export")
    def export(self, request):
        return export_offers(self.get_queryset())

    @action(detail=False, methods=["get"], url_path="public")
    def public(self, request):
        qs = Offer.objects.filter(status_q(OfferStatus.ACTIVE, timezone.localdate()))
        prop = request.query_params.get("property")
        if prop and prop != ALL_PROPERTIES:
            qs = qs.filter(property=prop)
        rows = qs.order_by("-created_at", "-id")[:PUBLIC_OFFER_LIMIT]
        return Response(PublicOfferSerializer(rows, many=True).data)
