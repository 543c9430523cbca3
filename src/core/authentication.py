"""DRF authenticator surfacing the user attached by ``JWTAuthMiddleware``.

Token parsing happens once, in the middleware. DRF's ``Request.user``
would otherwise run its own authentication classes, so this one simply
hands over whatever user the middleware resolved.
"""

from typing import Any, Optional, Tuple

from django.contrib.auth.models import AnonymousUser
from rest_framework.authentication import BaseAuthentication

BEARER_PREFIX = "Bearer "


def get_bearer_token(request) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer ...`` header, if any."""
    auth_header = request.META.get("HTTP_AUTHORIZATION", "")
    if not auth_header.startswith(BEARER_PREFIX):
        return None
    return auth_header[len(BEARER_PREFIX):].strip() or None


class MiddlewareUserAuthentication(BaseAuthentication):
    """Expose ``request._request.user`` (set by middleware) to DRF views."""

    def authenticate(self, request) -> Optional[Tuple[Any, None]]:
        django_request = getattr(request, "_request", None)
        if django_request is None:
            return None

        user = getattr(django_request, "user", None)
        if user is None or isinstance(user, AnonymousUser):
            return None

        if not getattr(user, "is_authenticated", False):
            return None

        return user, None

    def authenticate_header(self, request) -> str:
        # Lets DRF answer NotAuthenticated with 401 instead of 403.
        return "Bearer"


__all__ = ["MiddlewareUserAuthentication", "get_bearer_token"]
