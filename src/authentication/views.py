"""Authentication endpoints: register, verify, login, refresh, logout, and profiles."""

from typing import Any

from django.contrib.auth import get_user_model
from django.http import JsonResponse
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.response import Response
from rest_framework.views import APIView

from core.authentication import get_bearer_token
from core.response import BaseAPIView, api_response, page_params, result_response
from core.session import get_admin_session, get_auth_session

from . import accounts
from .serializers import LoginSerializer
from .services import TokenService

User = get_user_model()


class RegisterView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Create an account and send the verification email."""
        return result_response(accounts.register_user(request.data))


class VerifyEmailView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def get(self, request):
        """Consume the emailed token and mark the address verified."""
        return result_response(accounts.verify_email(request.query_params.get("token")))


class LoginView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Authenticate and issue access + refresh tokens."""
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]
        access, refresh = TokenService.generate_tokens(user)
        return api_response({"access": access, "refresh": refresh})


class RefreshView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Exchange a valid refresh token for new access/refresh tokens."""
        refresh_token = request.data.get("refresh")
        if not refresh_token:
            raise AuthenticationFailed("Refresh token required")

        payload = TokenService.decode_token(refresh_token, expected_type="refresh")
        user = _get_active_user(payload.get("sub"))
        if not user:
            raise AuthenticationFailed("User not found or inactive")

        # Tokens minted before the last logout-all carry an older version.
        token_ver = payload.get("ver")
        if token_ver is None or token_ver != getattr(user, "token_version", 1):
            raise AuthenticationFailed("Invalid or revoked refresh token")

        access, new_refresh = TokenService.generate_tokens(user)
        return api_response({"access": access, "refresh": new_refresh})


class LogoutView(APIView):
    """Invalidate the current access token by blocklisting its jti."""

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Blocklist the bearer access token and return 204 No Content."""
        token = get_bearer_token(request)
        if not token:
            return JsonResponse({"data": None, "errors": ["Missing token."]}, status=401)

        payload = TokenService.decode_token(token, expected_type="access")
        TokenService.block_token(payload["jti"], payload["exp"])
        # 204 responses must not include a body.
        return Response(status=status.HTTP_204_NO_CONTENT)


class LogoutAllView(APIView):
    """Invalidate all existing tokens for the current user across devices."""

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Increment token_version and blocklist the current access token."""
        get_auth_session(request)

        user = request.user
        current_version = getattr(user, "token_version", 1) or 1
        user.token_version = current_version + 1
        user.save(update_fields=["token_version"])

        token = get_bearer_token(request)
        if token:
            payload = TokenService.decode_token(token, expected_type="access")
            TokenService.block_token(payload["jti"], payload["exp"])

        return Response(status=status.HTTP_204_NO_CONTENT)


class MeView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def get(self, request):
        """Return the current user's profile."""
        session = get_auth_session(request)
        return result_response(accounts.get_current_user(session))

    # noinspection PyMethodMayBeStatic
    def patch(self, request):
        """Update name and bio of the current user."""
        session = get_auth_session(request)
        return result_response(accounts.update_profile(session, request.data))

    # noinspection PyMethodMayBeStatic
    def delete(self, request):
        """Deactivate the current user and blocklist the current access token."""
        get_auth_session(request)
        token = get_bearer_token(request)
        if token:
            payload = TokenService.decode_token(token, expected_type="access")
            TokenService.block_token(payload["jti"], payload["exp"])
        request.user.is_active = False
        request.user.save(update_fields=["is_active"])
        # 204 responses must not include a body.
        return Response(status=status.HTTP_204_NO_CONTENT)


class UserListView(BaseAPIView):
    """Paginated user directory for administrators."""

    # noinspection PyMethodMayBeStatic
    def get(self, request):
        session = get_admin_session(request)
        page, per_page = page_params(request, default_per_page=20)
        return result_response(accounts.get_all_users(session, page, per_page))


class UserDetailView(BaseAPIView):
    # noinspection PyMethodMayBeStatic
    def get(self, request, user_id):
        session = get_auth_session(request)
        return result_response(accounts.get_user_by_id(session, user_id))


def _get_active_user(user_id) -> User | None:
    """Retrieve an active user by id, or None if missing/inactive."""
    if not user_id:
        return None
    user = User.objects.filter(id=user_id).first()
    if user is None or not user.is_active:
        return None
    return user

