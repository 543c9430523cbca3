"""Custom exception handling to enforce the API error envelope."""

import logging
from typing import Any

from django.conf import settings
from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException, AuthenticationFailed, NotAuthenticated
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class RedirectRequired(APIException):
    """Abort the request flow with a redirect-equivalent response.

    Subclasses name the settings attribute holding the destination; the
    exception handler copies it into the ``Location`` header.
    """

    location_setting = "LOGIN_URL"

    @property
    def location(self) -> str:
        return getattr(settings, self.location_setting)


class LoginRequired(RedirectRequired):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required."
    default_code = "login_required"
    location_setting = "LOGIN_URL"


class AdminRequired(RedirectRequired):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Administrator access required."
    default_code = "admin_required"
    location_setting = "UNAUTHORIZED_URL"


def _normalize_errors(payload: Any) -> list[Any]:
    """Convert DRF's response.data into a list for the envelope."""

    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and "detail" in payload:
        # Common DRF pattern: {"detail": "..."}
        return [payload["detail"]]
    return [payload]


def custom_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """Wrap errors in `{ "data": null, "errors": [...] }` shape.

    - Redirect-equivalent exceptions keep their status and gain a Location header.
    - Database errors become 503; anything DRF does not know becomes a logged 500.
    - Optionally exposes more detailed auth errors when DEBUG_AUTH_ERRORS is enabled.
    """
    # Imported lazily: authentication.services depends on core modules.
    from authentication.services import BlocklistUnavailable

    if isinstance(exc, RedirectRequired):
        response = Response(
            {"data": None, "errors": [str(exc.detail)], "redirect": exc.location},
            status=exc.status_code,
        )
        response["Location"] = exc.location
        return response

    # Blocklist connectivity errors are security-critical and fail closed.
    if isinstance(exc, BlocklistUnavailable):
        return Response(
            {"data": None, "errors": ["Authentication service unavailable (blocklist)."]},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    if isinstance(exc, DatabaseError):
        logger.exception("Database error while handling %s", _view_name(context))
        return Response(
            {"data": None, "errors": ["Service temporarily unavailable."]},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    response = drf_exception_handler(exc, context)

    if response is None:
        logger.exception("Unhandled error in %s", _view_name(context), exc_info=exc)
        return Response(
            {"data": None, "errors": ["An unexpected error occurred."]},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    # AuthenticationFailed/NotAuthenticated consistently produce 401.
    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        response.status_code = status.HTTP_401_UNAUTHORIZED

    if response.status_code >= 400:
        base_errors = response.data

        if response.status_code == status.HTTP_401_UNAUTHORIZED:
            if getattr(settings, "DEBUG_AUTH_ERRORS", False):
                errors = _normalize_errors(base_errors)
            else:
                errors = [
                    "Authentication credentials were not provided or are invalid, "
                    "token revoked, or user is inactive."
                ]
        elif response.status_code == status.HTTP_403_FORBIDDEN:
            errors = [
                "You do not have permission to perform this action on this resource."
            ]
        else:
            errors = _normalize_errors(base_errors)

        response.data = {"data": None, "errors": errors}

    return response


def _view_name(context: dict[str, Any]) -> str:
    view = context.get("view")
    return type(view).__name__ if view is not None else "unknown view"


__all__ = ["AdminRequired", "LoginRequired", "RedirectRequired", "custom_exception_handler"]
