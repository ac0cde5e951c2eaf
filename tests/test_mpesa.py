import base64
import datetime as dt
from decimal import Decimal

import pytest
import requests

from booking.lifecycle import create_booking
from booking.models import BookingSource, PaymentStatus
from common.models import NotificationEvent, NotificationLog
from payments.models import MpesaPayment, MpesaPaymentStatus
from payments.mpesa import DarajaClient, MpesaError, normalize_phone, stk_password, whole_shillings
from payments.services import initiate_payment

pytestmark = pytest.mark.django_db

CALLBACK_URL = "/api/payments/mpesa/callback/"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("0712345678", "254712345678"),
        ("+254712345678", "254712345678"),
        ("254712345678", "254712345678"),
        ("0712 345-678", "254712345678"),
    ],
)
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw) == expected


def test_stk_password():
    assert base64.b64decode(stk_password("174379", "pk", "20240115101010")) == b"174379pk20240115101010"


@pytest.fixture
def daraja(monkeypatch, fake_response):
    """Patch Daraja's OAuth + STK endpoints; returns the list of POST bodies."""
    state = {"posts": [], "push": {}, "query": {}}

    def _get(url, params=None, auth=None, timeout=None):
        assert url.endswith("/oauth/v1/generate")
        assert auth == ("key", "secret")
        return fake_response({"access_token": "tok", "expires_in": "3599"})

    def _post(url, json=None, headers=None, timeout=None, **kwargs):
        state["posts"].append({"url": url, "json": json, "headers": headers})
        if url.endswith("/stkpush/v1/processrequest"):
            return fake_response(state["push"])
        if url.endswith("/stkpushquery/v1/query"):
            return fake_response(state["query"])
        return fake_response({})

    monkeypatch.setattr("payments.mpesa.requests.get", _get)
    monkeypatch.setattr("payments.mpesa.requests.post", _post)
    return state


def _accepted(checkout="ws_CO_1"):
    return {
        "MerchantRequestID": "29115-34620561-1",
        "CheckoutRequestID": checkout,
        "ResponseCode": "0",
        "ResponseDescription": "Success. Request accepted for processing",
        "CustomerMessage": "Success. Request accepted for processing",
    }


def _callback(checkout="ws_CO_1", code=0, desc="The service request is processed successfully.", receipt="QKL1ABC2DE"):
    stk = {
        "MerchantRequestID": "29115-34620561-1",
        "CheckoutRequestID": checkout,
        "ResultCode": code,
        "ResultDesc": desc,
    }
    if code == 0:
        stk["CallbackMetadata"] = {
            "Item": [
                {"Name": "Amount", "Value": 10000.00},
                {"Name": "MpesaReceiptNumber", "Value": receipt},
                {"Name": "TransactionDate", "Value": 20240115101010},
                {"Name": "PhoneNumber", "Value": 254712345678},
            ]
        }
    return {"Body": {"stkCallback": stk}}


# ---------- client ----------

def test_stk_push_sends_bearer_and_payload(daraja):
    daraja["push"] = _accepted()
    client = DarajaClient.from_settings()
    data = client.stk_push("254712345678", Decimal("1500.00"), "JUM-LIM-000000001", "Jumuia Resorts Booking")

    assert data["CheckoutRequestID"] == "ws_CO_1"
    sent = daraja["posts"][0]
    assert sent["url"] == "https://sandbox.safaricom.co.ke/mpesa/stkpush/v1/processrequest"
    assert sent["headers"] == {"Authorization": "Bearer tok"}
    body = sent["json"]
    assert body["Amount"] == 1500
    assert body["PartyA"] == body["PhoneNumber"] == "254712345678"
    assert body["BusinessShortCode"] == body["PartyB"] == "174379"
    assert body["TransactionType"] == "CustomerPayBillOnline"
    assert body["AccountReference"] == "JUM-LIM-000000001"


def test_transport_error_becomes_mpesa_error(monkeypatch):
    def _boom(*args, **kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr("payments.mpesa.requests.get", _boom)
    with pytest.raises(MpesaError) as exc:
        DarajaClient.from_settings().access_token()
    assert str(exc.value) == "Payment processing failed"
    assert isinstance(exc.value.cause, requests.ConnectionError)


def test_http_error_becomes_mpesa_error(monkeypatch, fake_response):
    monkeypatch.setattr("payments.mpesa.requests.get", lambda *a, **k: fake_response({}, 401, "Unauthorized"))
    with pytest.raises(MpesaError):
        DarajaClient.from_settings().access_token()


# ---------- initiate ----------

class FakeClient:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def stk_push(self, phone, amount, account_reference, description):
        self.calls.append((phone, amount, account_reference, description))
        return self.response


def test_initiate_payment_stores_pending_record(booking_factory):
    booking = booking_factory()
    client = FakeClient(_accepted("ws_CO_9"))

    result = initiate_payment("0712345678", Decimal("10000.00"), booking, client=client)

    assert result["checkout_request_id"] == "ws_CO_9"
    assert client.calls[0][0] == "254712345678"
    assert client.calls[0][3] == f"Jumuia Resorts Booking - {booking.booking_id}"
    payment = MpesaPayment.objects.get(checkout_request_id="ws_CO_9")
    assert payment.status == MpesaPaymentStatus.PENDING
    assert payment.booking == booking


def test_initiate_payment_rejected_by_gateway(booking_factory):
    booking = booking_factory()
    client = FakeClient({"ResponseCode": "1", "ResponseDescription": "Invalid Access Token"})
    with pytest.raises(MpesaError):
        initiate_payment("0712345678", 100, booking, client=client)
    assert not MpesaPayment.objects.exists()


# ---------- stk push endpoint ----------

def test_stk_push_endpoint(api_client, booking_factory, daraja):
    daraja["push"] = _accepted()
    booking = booking_factory()
    resp = api_client.post(
        "/api/payments/mpesa/stk-push/",
        {"phone_number": "0712345678", "booking_id": booking.booking_id},
        format="json",
    )
    assert resp.status_code == 200, resp.data
    assert resp.json()["success"] is True
    assert resp.json()["checkout_request_id"] == "ws_CO_1"
    # amount defaults to the booking total
    assert daraja["posts"][0]["json"]["Amount"] == 10000


def test_stk_push_unknown_booking(api_client, daraja):
    resp = api_client.post(
        "/api/payments/mpesa/stk-push/", {"phone_number": "0712345678", "booking_id": "JUM-XXX-1"}, format="json"
    )
    assert resp.status_code == 404


def test_stk_push_already_paid(api_client, booking_factory, daraja):
    booking = booking_factory(payment_status=PaymentStatus.PAID)
    resp = api_client.post(
        "/api/payments/mpesa/stk-push/", {"phone_number": "0712345678", "booking_id": booking.booking_id}, format="json"
    )
    assert resp.status_code == 400


def test_stk_push_gateway_failure_is_502(api_client, booking_factory, monkeypatch):
    def _boom(*args, **kwargs):
        raise requests.Timeout("slow")

    monkeypatch.setattr("payments.mpesa.requests.get", _boom)
    booking = booking_factory()
    resp = api_client.post(
        "/api/payments/mpesa/stk-push/", {"phone_number": "0712345678", "booking_id": booking.booking_id}, format="json"
    )
    assert resp.status_code == 502
    assert resp.json() == {"detail": "Payment processing failed"}


# ---------- callback ----------

@pytest.fixture
def pending_payment(booking_factory):
    booking = booking_factory()
    return MpesaPayment.objects.create(
        booking=booking, phone_number="254712345678", amount=Decimal("10000.00"), checkout_request_id="ws_CO_1",
    )


def test_successful_callback_marks_paid_and_emails_guest(
    api_client, pending_payment, emailjs_calls, django_capture_on_commit_callbacks
):
    with django_capture_on_commit_callbacks(execute=True):
        resp = api_client.post(CALLBACK_URL, _callback(), format="json")
    assert resp.status_code == 200
    assert resp.json() == {"detail": "Callback processed"}

    pending_payment.refresh_from_db()
    assert pending_payment.status == MpesaPaymentStatus.COMPLETED
    assert pending_payment.mpesa_receipt == "QKL1ABC2DE"
    assert pending_payment.amount_paid == Decimal("10000.00")
    assert pending_payment.phone_number_paid == "254712345678"

    booking = pending_payment.booking
    booking.refresh_from_db()
    assert booking.payment_status == PaymentStatus.PAID
    assert booking.status == "pending"
    assert booking.mpesa_receipt == "QKL1ABC2DE"

    assert len(emailjs_calls) == 1
    assert emailjs_calls[0]["json"]["template_id"] == "template_payment_confirmation"
    assert emailjs_calls[0]["json"]["template_params"]["mpesa_receipt"] == "QKL1ABC2DE"
    assert NotificationLog.objects.filter(event=NotificationEvent.PAYMENT_CONFIRMED, success=True).count() == 1


def test_duplicate_callback_is_acknowledged_once(api_client, pending_payment):
    api_client.post(CALLBACK_URL, _callback(), format="json")
    resp = api_client.post(CALLBACK_URL, _callback(code=1032, desc="Request cancelled by user"), format="json")
    assert resp.status_code == 200
    assert resp.json() == {"detail": "Callback already processed"}

    pending_payment.refresh_from_db()
    booking = pending_payment.booking
    booking.refresh_from_db()
    assert pending_payment.status == MpesaPaymentStatus.COMPLETED
    assert booking.payment_status == PaymentStatus.PAID
    assert booking.status_history.filter(action="PAYMENT").count() == 1


def test_failed_callback(api_client, pending_payment):
    resp = api_client.post(CALLBACK_URL, _callback(code=1032, desc="Request cancelled by user"), format="json")
    assert resp.status_code == 200

    pending_payment.refresh_from_db()
    assert pending_payment.status == MpesaPaymentStatus.FAILED
    assert pending_payment.failure_reason == "Request cancelled by user"
    assert pending_payment.failed_at is not None
    booking = pending_payment.booking
    booking.refresh_from_db()
    assert booking.payment_status == PaymentStatus.FAILED


def test_callback_without_stk_body(api_client):
    resp = api_client.post(CALLBACK_URL, {"Body": {}}, format="json")
    assert resp.status_code == 400


def test_callback_for_unknown_checkout(api_client, pending_payment):
    resp = api_client.post(CALLBACK_URL, _callback(checkout="ws_CO_missing"), format="json")
    assert resp.status_code == 404


# ---------- status query ----------

def test_status_query(gm_client, pending_payment, daraja):
    daraja["query"] = {"ResultCode": "0", "ResultDesc": "The service request is processed successfully."}
    resp = gm_client.get("/api/payments/mpesa/status/ws_CO_1/")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "completed"
    assert body["payment"]["checkout_request_id"] == "ws_CO_1"


def test_status_query_pending_and_unknown(gm_client, daraja):
    daraja["query"] = {"ResultCode": "1037", "ResultDesc": "DS timeout user cannot be reached"}
    body = gm_client.get("/api/payments/mpesa/status/ws_CO_x/").json()
    assert body["status"] == "pending"
    assert body["payment"] is None


def test_status_query_failure(gm_client, monkeypatch):
    def _boom(*args, **kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr("payments.mpesa.requests.get", _boom)
    resp = gm_client.get("/api/payments/mpesa/status/ws_CO_1/")
    assert resp.status_code == 502
    assert resp.json() == {"detail": "Failed to check payment status"}


def test_status_query_requires_auth(api_client):
    assert api_client.get("/api/payments/mpesa/status/ws_CO_1/").status_code == 401


@pytest.mark.parametrize(
    "payload",
    [
        {"Body": "x"},
        {"Body": {"stkCallback": "x"}},
        {"Body": {"stkCallback": {"CheckoutRequestID": {"id": 1}, "ResultCode": 0}}},
        ["Body"],
    ],
)
def test_malformed_callback_is_rejected(api_client, payload):
    resp = api_client.post(CALLBACK_URL, payload, format="json")
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Invalid callback data"}


def test_non_string_result_desc(api_client, pending_payment):
    resp = api_client.post(CALLBACK_URL, _callback(code=1, desc=["insufficient", "funds"]), format="json")
    assert resp.status_code == 200
    pending_payment.refresh_from_db()
    assert pending_payment.status == MpesaPaymentStatus.FAILED
    assert "insufficient" in pending_payment.failure_reason


# ---------- amounts ----------

def test_whole_shillings_rounds_up():
    assert whole_shillings(Decimal("4129.60")) == Decimal("4130")
    assert whole_shillings(Decimal("4129.00")) == Decimal("4129")
    assert whole_shillings(1500) == Decimal("1500")


def _web_booking_with_cents():
    # limuru standard_single, 1 adult, 1 night: 3560 + 16% VAT = 4129.60
    return create_booking(
        {
            "first_name": "Jane", "email": "jane@example.com", "phone": "0712345678",
            "resort": "limuru", "room_type": "standard_single", "package_type": "bnb",
            "adults": 1, "check_in": dt.date(2024, 1, 15), "check_out": dt.date(2024, 1, 16),
        },
        source=BookingSource.WEB,
    )


def test_stk_push_rounds_computed_total_up(api_client, daraja):
    daraja["push"] = _accepted("ws_CO_cents")
    booking = _web_booking_with_cents()
    assert booking.total_amount == Decimal("4129.60")

    resp = api_client.post(
        "/api/payments/mpesa/stk-push/",
        {"phone_number": "0712345678", "booking_id": booking.booking_id},
        format="json",
    )
    assert resp.status_code == 200, resp.data
    assert daraja["posts"][0]["json"]["Amount"] == 4130
    assert MpesaPayment.objects.get(checkout_request_id="ws_CO_cents").amount == Decimal("4130.00")


def _paid_callback(checkout, amount):
    payload = _callback(checkout=checkout)
    items = payload["Body"]["stkCallback"]["CallbackMetadata"]["Item"]
    items[0]["Value"] = amount
    return payload


def test_full_payment_of_rounded_amount_marks_paid(api_client):
    booking = _web_booking_with_cents()
    initiate_payment("0712345678", booking.total_amount, booking, client=FakeClient(_accepted("ws_CO_full")))

    resp = api_client.post(CALLBACK_URL, _paid_callback("ws_CO_full", 4130), format="json")
    assert resp.status_code == 200
    booking.refresh_from_db()
    assert booking.payment_status == PaymentStatus.PAID


def test_underpayment_leaves_booking_unpaid(api_client):
    booking = _web_booking_with_cents()
    initiate_payment("0712345678", booking.total_amount, booking, client=FakeClient(_accepted("ws_CO_short")))

    resp = api_client.post(CALLBACK_URL, _paid_callback("ws_CO_short", 4129), format="json")
    assert resp.status_code == 200

    payment = MpesaPayment.objects.get(checkout_request_id="ws_CO_short")
    assert payment.status == MpesaPaymentStatus.COMPLETED
    assert payment.amount_paid == Decimal("4129")
    assert "less than requested" in payment.failure_reason

    booking.refresh_from_db()
    assert booking.payment_status == PaymentStatus.FAILED
    assert booking.status_history.filter(action="PAYMENT").count() == 0
