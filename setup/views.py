from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .properties import registry_payload


class PropertyListView(APIView):
    """GET /api/setup/properties/ -> property registry for dropdowns / legends."""

    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(registry_payload())
