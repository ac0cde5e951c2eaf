from django.urls import path

from .views import CalendarEventsView, CalendarExportView, CalendarStatsView

urlpatterns = [
    path("calendar/events/", CalendarEventsView.as_view(), name="calendar-events"),
    path("calendar/stats/", CalendarStatsView.as_view(), name="calendar-stats"),
    path("calendar/export/", CalendarExportView.as_view(), name="calendar-export"),
]
