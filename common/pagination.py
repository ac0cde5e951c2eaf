from django.conf import settings
from rest_framework.pagination import PageNumberPagination


class BookingPagination(PageNumberPagination):
    """Fixed 50 rows per page, ?page=N."""

    page_size = getattr(settings, "BOOKING_PAGE_SIZE", 50)
    page_query_param = "page"
