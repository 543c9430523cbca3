"""Resolve the bearer access token into ``request.user``.

A request without a bearer token continues anonymously. A request with a
token that fails any check (signature, expiry, type, blocklist, inactive
user, stale ``token_version``) is answered with 401 right here; the
blocklist being unreachable yields 503.
"""

import logging
from typing import Any, Optional

from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed

from authentication.models import User
from authentication.services import BlocklistUnavailable, TokenService
from core.authentication import get_bearer_token

logger = logging.getLogger(__name__)


class JWTAuthMiddleware(MiddlewareMixin):
    """Attach the user named by a valid access token, or reject the request."""

    def process_request(self, request):  # type: ignore[override]
        token = get_bearer_token(request)
        if token is None:
            request.user = AnonymousUser()
            return None

        try:
            user = self._authenticate(token)
        except AuthenticationFailed as exc:
            logger.debug("Rejected bearer token: %s", exc.detail)
            return _unauthorized()
        except BlocklistUnavailable:
            logger.error("Token blocklist unavailable; rejecting request")
            return _service_unavailable()

        request.user = user
        return None

    def _authenticate(self, token: str) -> User:
        payload = TokenService.decode_token(token, expected_type="access")
        jti = payload.get("jti")
        if not jti:
            raise AuthenticationFailed("Token has no jti")
        if TokenService.is_token_blocked(jti):
            raise AuthenticationFailed("Token revoked")

        user = self._get_user(payload.get("sub"))
        if user is None or not user.is_active:
            raise AuthenticationFailed("User missing or inactive")
        if not _version_matches(payload, user):
            raise AuthenticationFailed("Token predates logout-all")
        return user

    @staticmethod
    def _get_user(user_id: Optional[str]) -> Optional[User]:
        if not user_id:
            return None
        try:
            return User.objects.get(id=user_id)
        except (User.DoesNotExist, ValidationError, ValueError):
            return None


def _version_matches(payload: dict[str, Any], user: User) -> bool:
    return payload.get("ver") == user.token_version


def _unauthorized() -> JsonResponse:
    return JsonResponse(
        {
            "data": None,
            "errors": [
                "Authentication credentials were not provided or are invalid, token revoked, or user is inactive."
            ],
        },
        status=status.HTTP_401_UNAUTHORIZED,
    )


def _service_unavailable() -> JsonResponse:
    return JsonResponse(
        {"data": None, "errors": ["Authentication service unavailable (blocklist)."]},
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )


__all__ = ["JWTAuthMiddleware"]
