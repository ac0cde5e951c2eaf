# payments/mpesa.py
"""
Thin client for the Safaricom Daraja API (Lipa na M-Pesa Online).

    client = DarajaClient.from_settings()
    client.stk_push("254712345678", 1500, "JUM-LIM-123456789", "Jumuia Resorts Booking - JUM-LIM-123456789")

Every transport / HTTP / decode problem is re-raised as MpesaError with a
generic message; the underlying error is kept on ``.cause`` for logging.
No retries.
"""
import base64
import logging
from decimal import ROUND_CEILING, Decimal

import requests
from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)

BASE_URLS = {
    "sandbox": "https://sandbox.safaricom.co.ke",
    "production": "https://api.safaricom.co.ke",
}

GENERIC_FAILURE = "Payment processing failed"


class MpesaError(Exception):
    def __init__(self, message=GENERIC_FAILURE, cause=None):
        super().__init__(message)
        self.cause = cause


def normalize_phone(raw):
    """
    0712345678     -> 254712345678
    +254712345678  -> 254712345678
    anything else passes through (spaces/dashes stripped)
    """
    phone = "".join(str(raw or "").split()).replace("-", "")
    if phone.startswith("0"):
        return "254" + phone[1:]
    if phone.startswith("+254"):
        return phone[1:]
    return phone


def whole_shillings(amount):
    """Daraja only accepts whole KES; anything with cents is rounded up."""
    return Decimal(str(amount)).to_integral_value(rounding=ROUND_CEILING)


def daraja_timestamp(now=None):
    now = now or timezone.localtime()
    return now.strftime("%Y%m%d%H%M%S")


def stk_password(shortcode, passkey, timestamp):
    return base64.b64encode(f"{shortcode}{passkey}{timestamp}".encode()).decode()


class DarajaClient:
    def __init__(self, consumer_key, consumer_secret, shortcode, passkey, callback_url,
                 environment="sandbox", timeout=30):
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.shortcode = str(shortcode)
        self.passkey = passkey
        self.callback_url = callback_url
        self.base_url = BASE_URLS.get(environment, BASE_URLS["sandbox"])
        self.timeout = timeout

    @classmethod
    def from_settings(cls):
        cfg = settings.MPESA
        return cls(
            consumer_key=cfg["CONSUMER_KEY"],
            consumer_secret=cfg["CONSUMER_SECRET"],
            shortcode=cfg["SHORTCODE"],
            passkey=cfg["PASSKEY"],
            callback_url=cfg["CALLBACK_URL"],
            environment=cfg.get("ENVIRONMENT", "sandbox"),
            timeout=cfg.get("TIMEOUT", 30),
        )

    # ---------- low level ----------

    def _json(self, resp):
        try:
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise MpesaError(cause=exc) from exc

    def access_token(self):
        url = f"{self.base_url}/oauth/v1/generate"
        try:
            resp = requests.get(
                url,
                params={"grant_type": "client_credentials"},
                auth=(self.consumer_key, self.consumer_secret),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise MpesaError(cause=exc) from exc

        token = self._json(resp).get("access_token")
        if not token:
            raise MpesaError(cause="no access_token in OAuth response")
        return token

    def _post(self, path, payload):
        token = self.access_token()
        try:
            resp = requests.post(
                f"{self.base_url}{path}",
                json=payload,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise MpesaError(cause=exc) from exc
        return self._json(resp)

    # ---------- API ----------

    def stk_push(self, phone, amount, account_reference, description):
        timestamp = daraja_timestamp()
        payload = {
            "BusinessShortCode": self.shortcode,
            "Password": stk_password(self.shortcode, self.passkey, timestamp),
            "Timestamp": timestamp,
            "TransactionType": "CustomerPayBillOnline",
            "Amount": int(whole_shillings(amount)),
            "PartyA": phone,
            "PartyB": self.shortcode,
            "PhoneNumber": phone,
            "CallBackURL": self.callback_url,
            "AccountReference": account_reference,
            "TransactionDesc": description,
        }
        return self._post("/mpesa/stkpush/v1/processrequest", payload)

    def stk_query(self, checkout_request_id):
        timestamp = daraja_timestamp()
        payload = {
            "BusinessShortCode": self.shortcode,
            "Password": stk_password(self.shortcode, self.passkey, timestamp),
            "Timestamp": timestamp,
            "CheckoutRequestID": checkout_request_id,
        }
        return self._post("/mpesa/stkpushquery/v1/query", payload)
