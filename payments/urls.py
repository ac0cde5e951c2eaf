from django.urls import path

from .views import MpesaCallbackView, PaymentStatusView, StkPushView

urlpatterns = [
    path("mpesa/stk-push/", StkPushView.as_view(), name="mpesa-stk-push"),
    path("mpesa/callback/", MpesaCallbackView.as_view(), name="mpesa-callback"),
    path("mpesa/status/<str:checkout_request_id>/", PaymentStatusView.as_view(), name="mpesa-status"),
]
