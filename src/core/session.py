"""Session resolution on top of the JWT middleware.

``JWTAuthMiddleware`` validates the bearer token and attaches the user to
the request. The helpers here turn that into a small immutable ``Session``
identity and offer three access levels:

- ``get_session``: nullable, never raises.
- ``get_auth_session``: raises ``LoginRequired`` when unauthenticated.
- ``get_admin_session``: additionally raises ``AdminRequired`` for
  non-admin roles.

Both exceptions are rendered by ``core.exceptions`` as redirect-equivalent
responses carrying a ``Location`` header.
"""

import logging
from dataclasses import dataclass

from core.exceptions import AdminRequired, LoginRequired

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


class UnauthenticatedSessionError(RuntimeError):
    """Raised when a user id is requested from a session without identity."""


@dataclass(frozen=True)
class Session:
    """Authenticated identity resolved from a validated access token."""

    user_id: str
    role: str
    email: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def session_for_user(user) -> Session | None:
    """Build a ``Session`` from a user object, or None for anonymous users."""
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    user_id = getattr(user, "id", None)
    if not user_id:
        return None
    return Session(
        user_id=str(user_id),
        role=getattr(user, "role", None) or "user",
        email=getattr(user, "email", None),
    )


def get_session(request) -> Session | None:
    """Return the current session, or None when the caller is anonymous."""
    try:
        return session_for_user(getattr(request, "user", None))
    except Exception:  # pragma: no cover - attribute access on exotic user objects
        logger.exception("Failed to resolve session")
        return None


def get_auth_session(request) -> Session:
    """Return the current session or abort with a login redirect."""
    session = get_session(request)
    if session is None:
        raise LoginRequired()
    return session


def get_admin_session(request) -> Session:
    """Return the current admin session or abort with a redirect."""
    session = get_auth_session(request)
    if not session.is_admin:
        raise AdminRequired()
    return session


def get_session_user_id(session: Session | None) -> str:
    """Return the user id of an already-validated session.

    Calling this with an unauthenticated session is a programming error.
    """
    if session is None or not session.user_id:
        raise UnauthenticatedSessionError("Session has no authenticated user")
    return session.user_id


__all__ = [
    "ADMIN_ROLE",
    "Session",
    "UnauthenticatedSessionError",
    "get_admin_session",
    "get_auth_session",
    "get_session",
    "get_session_user_id",
    "session_for_user",
]
