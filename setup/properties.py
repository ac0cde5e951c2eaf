# setup/properties.py
"""
Static registry of the three Jumuia properties.

Names, reservation inboxes, phone lines and calendar colors live here so the
booking, calendar and notification code all read from one place.
"""
from django.conf import settings
from django.db import models

ALL_PROPERTIES = "all"
DEFAULT_PROPERTY_COLOR = "#22440f"


class PropertyCode(models.TextChoices):
    LIMURU = "limuru", "Limuru Country Home"
    KANAMAI = "kanamai", "Kanamai Beach Resort"
    KISUMU = "kisumu", "Kisumu Hotel"


PROPERTIES = {
    PropertyCode.LIMURU: {
        "name": "Jumuia Conference & Country Home - Limuru",
        "short_name": "Limuru Country Home",
        "email": "reservations.limuru@resortjumuia.com",
        "phone": "0759 423 589, 020 2048881",
        "color": "#1a5c1a",
    },
    PropertyCode.KANAMAI: {
        "name": "Jumuia Conference & Beach Resort - Kanamai",
        "short_name": "Kanamai Beach Resort",
        "email": "reservations.kanamai@resortjumuia.com",
        "phone": "0710 288 043",
        "color": "#007c00",
    },
    PropertyCode.KISUMU: {
        "name": "Jumuia Hotel - Kisumu",
        "short_name": "Kisumu Hotel",
        "email": "reservations.kisumu@resortjumuia.com",
        "phone": "0713 576969, 0115 994486",
        "color": "#0047ab",
    },
}


def get_property(code):
    return PROPERTIES.get(code)


def property_name(code):
    info = PROPERTIES.get(code)
    return info["name"] if info else (code or "")


def property_short_name(code):
    info = PROPERTIES.get(code)
    return info["short_name"] if info else (code or "")


def property_color(code):
    info = PROPERTIES.get(code)
    return info["color"] if info else DEFAULT_PROPERTY_COLOR


def property_email(code):
    info = PROPERTIES.get(code)
    return info["email"] if info else None


def property_phone(code):
    info = PROPERTIES.get(code)
    return info["phone"] if info else ""


def is_known_property(code):
    return code in PROPERTIES


def room_capacity(code=ALL_PROPERTIES):
    """Rooms available at one property, or across all of them for ``all``."""
    per_property = getattr(settings, "ROOMS_PER_PROPERTY", 30)
    if not code or code == ALL_PROPERTIES:
        return per_property * len(PROPERTIES)
    return per_property


def registry_payload():
    return [
        {
            "code": code.value,
            "name": info["name"],
            "short_name": info["short_name"],
            "email": info["email"],
            "phone": info["phone"],
            "color": info["color"],
            "rooms": room_capacity(code.value),
        }
        for code, info in PROPERTIES.items()
    ]
