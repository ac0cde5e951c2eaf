# accounts/utils.py
from datetime import datetime, timezone

from django.conf import settings


def build_login_email(first_name, last_name, domain=None):
    """
    "Jane", "Doe" -> "jane.doe@jumuiaresorts.com"

    Whitespace is dropped from both parts. Returns None when either name is
    blank, the form then has nothing to show.
    """
    domain = domain or getattr(settings, "MANAGER_EMAIL_DOMAIN", "jumuiaresorts.com")
    first = "".join((first_name or "").split()).lower()
    last = "".join((last_name or "").split()).lower()
    if not first or not last:
        return None
    return f"{first}.{last}@{domain}"


def scoped_property(user):
    """
    Property the user is limited to, or None for "every property".

    Staff without an assigned property get "" which matches nothing.
    """
    if not user or not user.is_authenticated:
        return ""
    if getattr(user, "is_general_manager", False):
        return None
    return getattr(user, "assigned_property", "") or ""


def session_payload(user, access_token):
    """Shape the admin UI keeps in local storage after login."""
    expires = access_token.get("exp")
    expiry = datetime.fromtimestamp(expires, tz=timezone.utc).isoformat() if expires else None
    return {
        "token": str(access_token),
        "name": user.display_name,
        "email": user.email,
        "role": user.role,
        "assignedProperty": user.assigned_property or None,
        "expiryTime": expiry,
    }
