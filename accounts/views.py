import logging

from django.contrib.auth import get_user_model
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView

from .permissions import IsGeneralManager
from .serializers import LoginSerializer, RegisterUserSerializer, UserSerializer

User = get_user_model()
logger = logging.getLogger(__name__)


class LoginView(TokenObtainPairView):
    """
    POST /api/auth/login/  {email, password}
      -> {token, refresh, name, email, role, assignedProperty, expiryTime}
    """

    serializer_class = LoginSerializer


class UserViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    /api/users/                          GET list (?role=manager), POST create
    /api/users/<id>/                     GET detail, DELETE remove
    /api/users/<id>/reset-password/      PUT -> new one-time password
    /api/users/me/                       GET current user's profile
    """

    queryset = User.objects.all().order_by("id")
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated]

    def get_permissions(self):
        if self.action in ("create", "destroy", "reset_password"):
            return [IsAuthenticated(), IsGeneralManager()]
        return super().get_permissions()

    def get_serializer_class(self):
        if self.action == "create":
            return RegisterUserSerializer
        return UserSerializer

    def get_queryset(self):
        user = self.request.user

        # general manager / superuser => everybody, others only their own record
        if user.is_general_manager:
            qs = User.objects.all().order_by("id")
        else:
            qs = User.objects.filter(id=user.id)

        role = self.request.query_params.get("role")
        if role:
            qs = qs.filter(role=role)
        return qs

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save(created_by=request.user)
        logger.info("User %s created account %s (%s)", request.user.pk, user.pk, user.role)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        target = self.get_object()
        if target.pk == request.user.pk:
            return Response(
                {"detail": "You cannot delete your own account."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        logger.info("User %s deleted account %s", request.user.pk, target.pk)
        target.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["put"], url_path="reset-password")
    def reset_password(self, request, pk=None):
        """
        Generates a fresh password, stores its hash and returns the plaintext
        once so the general manager can hand it over.
        """
        target = self.get_object()
        new_password = User.objects.make_random_password(length=10)
        target.set_password(new_password)
        target.save(update_fields=["password"])
        logger.info("User %s reset password for account %s", request.user.pk, target.pk)
        return Response({"id": target.pk, "email": target.email, "password": new_password})

    @action(detail=False, methods=["get"], url_path="me")
    def me(self, request):
        return Response(UserSerializer(request.user).data)
