import logging

from django.db.models import Q
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from booking.models import Booking, PaymentStatus

from .models import MpesaPayment
from .serializers import MpesaPaymentSerializer, StkPushSerializer
from .services import InvalidCallback, PaymentNotFound, check_status, handle_callback, initiate_payment

logger = logging.getLogger(__name__)


class StkPushView(APIView):
    """
    POST /api/payments/mpesa/stk-push/
    { "phone_number": "0712345678", "booking_id": "JUM-LIM-123456789", "amount": 1500 }

    Public (called from the guest booking page). Amount defaults to the
    booking total.
    """

    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "public_booking"

    def post(self, request):
        serializer = StkPushSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        ref = data["booking_id"]
        lookup = Q(booking_id=ref)
        if ref.isdigit():
            lookup |= Q(pk=int(ref))
        booking = Booking.objects.filter(lookup).first()
        if booking is None:
            return Response({"detail": "Booking not found."}, status=status.HTTP_404_NOT_FOUND)

        if booking.payment_status == PaymentStatus.PAID:
            return Response({"detail": "Booking is already paid."}, status=status.HTTP_400_BAD_REQUEST)

        amount = data.get("amount") or booking.total_amount
        if not amount or amount <= 0:
            return Response({"amount": ["Booking has no amount to pay."]}, status=status.HTTP_400_BAD_REQUEST)

        # MpesaError bubbles up to the exception handler -> 502
        result = initiate_payment(data["phone_number"], amount, booking)
        return Response({"success": True, **result}, status=status.HTTP_200_OK)


class MpesaCallbackView(APIView):
    """
    POST /api/payments/mpesa/callback/   (Safaricom -> us)
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        try:
            outcome = handle_callback(request.data)
        except InvalidCallback as exc:
            logger.warning("Invalid M-Pesa callback: %s", exc)
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except PaymentNotFound as exc:
            logger.warning("M-Pesa callback for unknown payment: %s", exc)
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)

        message = "Callback processed" if outcome == "processed" else "Callback already processed"
        return Response({"detail": message}, status=status.HTTP_200_OK)


class PaymentStatusView(APIView):
    """
    GET /api/payments/mpesa/status/<checkout_request_id>/

    Asks Daraja directly; also returns our stored record when we have one.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request, checkout_request_id):
        result = check_status(checkout_request_id)
        payment = MpesaPayment.objects.filter(checkout_request_id=checkout_request_id).first()
        result["payment"] = MpesaPaymentSerializer(payment).data if payment else None
        return Response({"success": True, **result})
