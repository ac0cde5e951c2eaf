from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("accounts.urls")),
    path("api/", include("booking.urls")),
    path("api/", include("offers.urls")),
    path("api/", include("feedback.urls")),
    path("api/payments/", include("payments.urls")),
    path("api/dashboard/", include("dashboard.urls")),
    path("api/setup/", include("setup.urls")),
]
