# accounts/models.py
import random
import string

from django.contrib.auth.models import AbstractUser, UserManager as DjangoUserManager
from django.core.exceptions import ValidationError
from django.db import models

from setup.properties import PropertyCode


class Role(models.TextChoices):
    GENERAL_MANAGER = "general-manager", "General Manager"
    MANAGER = "manager", "Manager"
    STAFF = "staff", "Staff"


class UserManager(DjangoUserManager):
    """
    Django 5.x dropped make_random_password, so we keep our own copy for the
    reset-password flow.
    """

    def make_random_password(self, length=10, allowed_chars=None):
        if allowed_chars is None:
            allowed_chars = string.ascii_letters + string.digits
        return "".join(random.SystemRandom().choice(allowed_chars) for _ in range(length))


class User(AbstractUser):
    """
    Staff account for the admin panel.

    - role: general-manager sees every property, manager/staff are pinned
      to ``assigned_property``
    - created_by: the general manager who opened the account
    - login is by email, username just mirrors it
    """

    email = models.EmailField(
        unique=True,
        blank=False,
        null=False,
        error_messages={"unique": "A user with that email already exists."},
    )

    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.STAFF,
        help_text="Business role",
    )

    assigned_property = models.CharField(
        max_length=20,
        choices=PropertyCode.choices,
        blank=True,
        default="",
        help_text="Property a manager/staff account is limited to",
    )

    created_by = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="created_users",
        help_text="Who created this user",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    objects = UserManager()

    def clean(self):
        if self.role in (Role.MANAGER, Role.STAFF) and not self.assigned_property:
            raise ValidationError({"assigned_property": "Managers and staff need an assigned property."})

    @property
    def display_name(self):
        full = self.get_full_name().strip()
        return full or self.email

    @property
    def is_general_manager(self):
        return self.is_superuser or self.role == Role.GENERAL_MANAGER

    def __str__(self):
        return self.email
