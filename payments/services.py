# payments/services.py
import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from booking.lifecycle import mark_paid, mark_payment_failed
from common.tasks import send_payment_confirmation_email

from .models import MpesaPayment, MpesaPaymentStatus
from .mpesa import DarajaClient, MpesaError, normalize_phone, whole_shillings

logger = logging.getLogger(__name__)


class InvalidCallback(Exception):
    pass


class PaymentNotFound(Exception):
    pass


def _client(client=None):
    return client or DarajaClient.from_settings()


def initiate_payment(phone, amount, booking, client=None):
    """
    Send an STK push for ``booking`` and store a pending MpesaPayment keyed
    by Daraja's CheckoutRequestID.

    Daraja only takes whole shillings, so the amount is rounded up and the
    rounded figure is what the callback is checked against.
    """
    phone = normalize_phone(phone)
    amount = whole_shillings(amount)
    client = _client(client)

    data = client.stk_push(
        phone,
        amount,
        account_reference=booking.booking_id,
        description=f"Jumuia Resorts Booking - {booking.booking_id}",
    )

    if str(data.get("ResponseCode")) != "0":
        logger.warning(
            "STK push rejected for booking %s: %s %s",
            booking.booking_id, data.get("ResponseCode"), data.get("ResponseDescription"),
        )
        raise MpesaError(cause=data.get("ResponseDescription") or data)

    payment = MpesaPayment.objects.create(
        booking=booking,
        phone_number=phone,
        amount=amount,
        checkout_request_id=data["CheckoutRequestID"],
        merchant_request_id=data.get("MerchantRequestID", ""),
        status=MpesaPaymentStatus.PENDING,
    )
    logger.info("STK push sent for booking %s (checkout=%s)", booking.booking_id, payment.checkout_request_id)

    return {
        "checkout_request_id": payment.checkout_request_id,
        "merchant_request_id": payment.merchant_request_id,
        "message": "Payment request sent successfully",
    }


def _metadata_value(items, name):
    for item in items or []:
        if isinstance(item, dict) and item.get("Name") == name:
            return item.get("Value")
    return None


def handle_callback(payload):
    """
    Apply a Daraja STK callback.

    Returns "processed" or "duplicate". Raises InvalidCallback (400) when
    Body.stkCallback is missing or not an object, PaymentNotFound (404) for an unknown
    CheckoutRequestID.
    """
    body = payload.get("Body") if isinstance(payload, dict) else None
    stk = body.get("stkCallback") if isinstance(body, dict) else None
    if not isinstance(stk, dict) or not stk:
        raise InvalidCallback("Invalid callback data")

    checkout_id = stk.get("CheckoutRequestID")
    if not isinstance(checkout_id, str) or not checkout_id:
        raise InvalidCallback("Invalid callback data")
    result_code = stk.get("ResultCode")
    result_desc = str(stk.get("ResultDesc") or "")

    with transaction.atomic():
        try:
            payment = (
                MpesaPayment.objects.select_for_update()
                .select_related("booking")
                .get(checkout_request_id=checkout_id)
            )
        except MpesaPayment.DoesNotExist:
            raise PaymentNotFound("Payment record not found")

        # Daraja can deliver the same callback more than once
        if payment.is_final:
            logger.info("Duplicate callback for %s ignored (status=%s)", checkout_id, payment.status)
            return "duplicate"

        now = timezone.now()
        payment.raw_callback = payload
        payment.result_code = _as_int(result_code)
        payment.result_desc = result_desc[:255]
        booking = payment.booking

        if payment.result_code == 0:
            metadata = stk.get("CallbackMetadata")
            items = metadata.get("Item") if isinstance(metadata, dict) else None
            if not isinstance(items, list):
                items = []
            receipt = str(_metadata_value(items, "MpesaReceiptNumber") or "")
            payment.status = MpesaPaymentStatus.COMPLETED
            payment.mpesa_receipt = receipt
            payment.amount_paid = _as_decimal(_metadata_value(items, "Amount"))
            payment.phone_number_paid = str(_metadata_value(items, "PhoneNumber") or "")
            payment.completed_at = now

            if payment.amount_paid is not None and payment.amount_paid < payment.amount:
                # money came in but short of what was asked, booking stays unpaid
                payment.failure_reason = f"Amount paid {payment.amount_paid} is less than requested {payment.amount}"
                payment.save()
                mark_payment_failed(booking, payment.failure_reason)
                logger.warning("Underpayment for booking %s: %s", booking.booking_id, payment.failure_reason)
                return "processed"

            payment.save()
            mark_paid(booking, receipt=receipt, completed_at=now)
            booking_pk = booking.pk
            transaction.on_commit(lambda: send_payment_confirmation_email.delay(booking_pk, receipt))
            logger.info("Payment completed for booking %s, receipt: %s", booking.booking_id, receipt)
        else:
            payment.status = MpesaPaymentStatus.FAILED
            payment.failure_reason = result_desc[:255]
            payment.failed_at = now
            payment.save()

            mark_payment_failed(booking, result_desc)
            logger.info("Payment failed for booking %s: %s", booking.booking_id, result_desc)

    return "processed"


def check_status(checkout_request_id, client=None):
    """
    Fallback when the callback never arrives. ResultCode "0" -> completed,
    anything else -> pending.
    """
    try:
        data = _client(client).stk_query(checkout_request_id)
    except MpesaError as exc:
        raise MpesaError("Failed to check payment status", cause=exc.cause) from exc

    state = (
        MpesaPaymentStatus.COMPLETED
        if str(data.get("ResultCode")) == "0"
        else MpesaPaymentStatus.PENDING
    )
    return {"status": state, "data": data}


def _as_int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_decimal(value):
    if value in (None, ""):
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None
