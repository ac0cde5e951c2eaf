# booking/pricing.py
"""
Nightly rate card and room inventory per property / room type.

calculate_rate() gives the quote shown on the public booking form, and the
same numbers are used to fill total_amount when a booking is created without
one.
"""
from decimal import Decimal, ROUND_HALF_UP

VAT_RATE = Decimal("0.16")
CHILD_FACTOR = Decimal("0.5")
HOSTEL_CHILD_FACTOR = Decimal("0.75")

DEFAULT_RESORT = "limuru"
DEFAULT_PACKAGE = "bnb"

# resort -> room type -> package -> KES per person per night
ROOM_RATES = {
    "limuru": {
        "standard_single": {"bnb": 3560, "hb": 4240, "fb": 4880, "conference": 5000},
        "standard_double": {"bnb": 6280, "hb": 7200, "fb": 8080, "conference": 4750},
        "executive": {"bnb": 7200, "hb": 8080, "fb": 8960, "conference": 5500},
        "studio_suite": {"bnb": 11360, "hb": 12480, "fb": 13560, "conference": 8000},
        "hostel": {"bnb": 1500, "hb": 2000, "fb": 2500, "conference": 1500},
    },
    "kanamai": {
        "standard": {"bnb": 5300, "hb": 6600, "fb": 7800, "conference": 6000},
        "deluxe": {"bnb": 6800, "hb": 8200, "fb": 9500, "conference": 7500},
        "executive": {"bnb": 8500, "hb": 9900, "fb": 11200, "conference": 9000},
        "suite": {"bnb": 12000, "hb": 13800, "fb": 15500, "conference": 12500},
        "villa": {"bnb": 18000, "hb": 21000, "fb": 24000, "conference": 20000},
    },
    "kisumu": {
        "standard": {"bnb": 4500, "hb": 5500, "fb": 6500, "conference": 5000},
        "deluxe": {"bnb": 6000, "hb": 7200, "fb": 8400, "conference": 6800},
        "executive": {"bnb": 7500, "hb": 8800, "fb": 10000, "conference": 8000},
        "suite": {"bnb": 9500, "hb": 11000, "fb": 12500, "conference": 10000},
    },
}

# physical rooms per room type, used by the availability check
ROOM_CAPACITY = {
    "limuru": {"standard_single": 10, "standard_double": 8, "executive": 6, "studio_suite": 4, "hostel": 20},
    "kanamai": {"standard": 12, "deluxe": 8, "executive": 6, "suite": 4, "villa": 2},
    "kisumu": {"standard": 15, "deluxe": 10, "executive": 8, "suite": 6},
}
DEFAULT_ROOM_CAPACITY = 5


def _money(value):
    return Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def base_rate_for(resort, room_type, package_type):
    resort_rates = ROOM_RATES.get(resort) or ROOM_RATES[DEFAULT_RESORT]
    room_rates = (
        resort_rates.get(room_type)
        or resort_rates.get("standard_single")
        or resort_rates.get("standard")
    )
    if not room_rates:
        return Decimal("0")
    return Decimal(room_rates.get(package_type) or room_rates.get(DEFAULT_PACKAGE) or 0)


def calculate_rate(resort, room_type, package_type, nights, adults, children=0):
    """
    Quote for a stay.

    Adults pay the full base rate, children pay half (three quarters in the
    hostel). 16% VAT goes on top.
    """
    nights = int(nights or 0)
    adults = int(adults or 0)
    children = int(children or 0)

    base = base_rate_for(resort, room_type, package_type)
    total = base * adults * nights
    if children > 0:
        factor = HOSTEL_CHILD_FACTOR if room_type == "hostel" else CHILD_FACTOR
        total += base * factor * children * nights

    tax = total * VAT_RATE
    return {
        "base_rate": _money(base),
        "total": _money(total),
        "tax": _money(tax),
        "grand_total": _money(total + tax),
        "nights": nights,
        "adults": adults,
        "children": children,
    }


def room_capacity_for(resort, room_type):
    return ROOM_CAPACITY.get(resort, {}).get(room_type, DEFAULT_ROOM_CAPACITY)
