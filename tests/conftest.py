import datetime as dt
from decimal import Decimal

import pytest
import requests
from rest_framework.test import APIClient

from accounts.models import Role, User
from booking.models import Booking, BookingSource


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=None):
        self._payload = payload if payload is not None else {}
        self.status_code = status_code
        self.text = text if text is not None else "OK"

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture(autouse=True)
def emailjs_calls(monkeypatch):
    """Every outgoing requests.post lands here unless a test patches it again."""
    calls = []

    def _post(url, json=None, timeout=None, **kwargs):
        calls.append({"url": url, "json": json, "timeout": timeout})
        return FakeResponse({}, 200, "OK")

    monkeypatch.setattr("common.notifications.requests.post", _post)
    return calls


@pytest.fixture
def api_client():
    return APIClient()


def make_user(email, role, assigned_property="", password="secret123", **extra):
    return User.objects.create_user(
        username=email,
        email=email,
        password=password,
        role=role,
        assigned_property=assigned_property,
        **extra,
    )


@pytest.fixture
def general_manager(db):
    return make_user("gm@jumuiaresorts.com", Role.GENERAL_MANAGER, first_name="Grace", last_name="Mwangi")


@pytest.fixture
def limuru_manager(db, general_manager):
    return make_user(
        "peter.otieno@jumuiaresorts.com", Role.MANAGER, "limuru",
        first_name="Peter", last_name="Otieno", created_by=general_manager,
    )


@pytest.fixture
def gm_client(api_client, general_manager):
    api_client.force_authenticate(user=general_manager)
    return api_client


@pytest.fixture
def manager_client(limuru_manager):
    client = APIClient()
    client.force_authenticate(user=limuru_manager)
    return client


@pytest.fixture
def booking_factory(db):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "booking_id": f"JUM-LIM-{counter['n']:09d}",
            "first_name": "Jane",
            "last_name": "Doe",
            "email": "jane@example.com",
            "phone": "0712345678",
            "resort": "limuru",
            "room_type": "standard_single",
            "package_type": "bnb",
            "adults": 2,
            "children": 0,
            "rooms": 1,
            "check_in": dt.date(2024, 1, 15),
            "check_out": dt.date(2024, 1, 18),
            "nights": 3,
            "total_amount": Decimal("10000.00"),
            "source": BookingSource.WEB,
        }
        data.update(overrides)
        return Booking.objects.create(**data)

    return _make
