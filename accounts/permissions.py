# accounts/permissions.py
from rest_framework import permissions

from .models import Role


class IsGeneralManager(permissions.BasePermission):
    """
    Only general managers (or superusers) can manage other accounts.
    """

    message = "Only a general manager can do this."

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return user.is_superuser or getattr(user, "role", None) == Role.GENERAL_MANAGER
