from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.tokens import AccessToken

from .models import Role
from .utils import build_login_email, session_payload

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source="display_name", read_only=True)

    class Meta:
        model = User
        fields = [
            "id", "email", "first_name", "last_name", "name",
            "role", "assigned_property", "created_by", "is_active", "date_joined",
        ]
        read_only_fields = ["id", "email", "created_by", "date_joined"]


class RegisterUserSerializer(serializers.ModelSerializer):
    """
    Branch manager / staff creation.

    Rules:
      - email is optional, when missing it is built from first + last name
      - manager / staff need an assigned_property
      - password min 6 chars, stored hashed only
      - created_by is always request.user
    """

    password = serializers.CharField(write_only=True, min_length=6, required=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    first_name = serializers.CharField(required=True, allow_blank=False)
    last_name = serializers.CharField(required=True, allow_blank=False)
    role = serializers.ChoiceField(choices=Role.choices, default=Role.MANAGER)

    class Meta:
        model = User
        fields = [
            "id", "email", "password", "first_name", "last_name",
            "role", "assigned_property",
        ]
        read_only_fields = ["id"]

    def validate(self, data):
        email = (data.get("email") or "").strip().lower()
        if not email:
            email = build_login_email(data.get("first_name"), data.get("last_name"))
        if not email:
            raise serializers.ValidationError({"email": "Could not build an email from the given names."})

        if User.objects.filter(email__iexact=email).exists():
            raise serializers.ValidationError({"email": "A user with that email already exists."})

        role = data.get("role") or Role.MANAGER
        if role in (Role.MANAGER, Role.STAFF) and not data.get("assigned_property"):
            raise serializers.ValidationError({"assigned_property": "This field is required for managers and staff."})
        if role == Role.GENERAL_MANAGER:
            data["assigned_property"] = ""

        data["email"] = email
        data["role"] = role
        return data

    def create(self, validated_data):
        password = validated_data.pop("password")
        user = User(username=validated_data["email"], **validated_data)
        user.set_password(password)
        try:
            user.full_clean()
        except DjangoValidationError as exc:
            raise serializers.ValidationError(exc.message_dict)
        user.save()
        return user


class LoginSerializer(TokenObtainPairSerializer):
    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)

        # Extra claims inside JWT
        token["email"] = user.email
        token["role"] = user.role
        token["assigned_property"] = user.assigned_property
        return token

    def validate(self, attrs):
        """
        Login response = session object the admin UI stores, plus refresh.
        """
        data = super().validate(attrs)
        payload = session_payload(self.user, AccessToken(data["access"]))
        payload["refresh"] = data["refresh"]
        return payload
