"""Ownership-based permission checks for posts, comments, chats, profiles, and files.

``check_permission`` answers one question: may the caller operate on this
resource? Admins always may. Everyone else needs to own the resource, or,
for comments, own the parent post, or, for chats, be a participant.

The checker never raises for storage faults; they surface as a generic
denial while the detail is logged server-side.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Callable

from django.db import DatabaseError
from rest_framework import status

from chats.models import ChatParticipant
from core.session import Session
from posts.models import Comment, Post
from uploads.models import File

logger = logging.getLogger(__name__)

POST = "post"
COMMENT = "comment"
CHAT = "chat"
PROFILE = "profile"
FILE = "file"
RESOURCE_KINDS = (POST, COMMENT, CHAT, PROFILE, FILE)

# Result codes, mapped to HTTP statuses at the API boundary.
CODE_OK = "ok"
CODE_UNAUTHENTICATED = "unauthenticated"
CODE_NOT_FOUND = "not_found"
CODE_FORBIDDEN = "forbidden"
CODE_UNKNOWN_RESOURCE = "unknown_resource"
CODE_ERROR = "error"

_HTTP_STATUS = {
    CODE_OK: status.HTTP_200_OK,
    CODE_UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    CODE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    CODE_FORBIDDEN: status.HTTP_403_FORBIDDEN,
    CODE_UNKNOWN_RESOURCE: status.HTTP_400_BAD_REQUEST,
    CODE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@dataclass(frozen=True)
class PermissionResult:
    allowed: bool
    reason: str | None = None
    code: str = CODE_OK

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self.code]


ALLOWED = PermissionResult(allowed=True)


def _denied(reason: str, code: str = CODE_FORBIDDEN) -> PermissionResult:
    return PermissionResult(allowed=False, reason=reason, code=code)


def _as_uuid(resource_id) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(resource_id))
    except (TypeError, ValueError):
        return None


def check_permission(session: Session | None, resource_kind: str, resource_id) -> PermissionResult:
    """Decide whether the session may operate on ``resource_kind``/``resource_id``.

    Anonymous callers are denied without touching storage; admins are
    allowed without touching storage.
    """
    if session is None or not session.user_id:
        return _denied("Authentication required.", CODE_UNAUTHENTICATED)

    if session.is_admin:
        return ALLOWED

    checker = _CHECKERS.get(resource_kind)
    if checker is None:
        return _denied("Unknown resource type.", CODE_UNKNOWN_RESOURCE)

    try:
        return checker(session.user_id, resource_id)
    except DatabaseError:
        logger.exception("Permission check failed for %s %s", resource_kind, resource_id)
        return _denied("An error occurred while checking permissions.", CODE_ERROR)


def _check_post(user_id: str, post_id) -> PermissionResult:
    key = _as_uuid(post_id)
    owner_id = Post.objects.filter(pk=key).values_list("user_id", flat=True).first() if key else None
    if owner_id is None:
        return _denied("Post not found.", CODE_NOT_FOUND)
    if str(owner_id) != user_id:
        return _denied("You do not have permission to modify this post.")
    return ALLOWED


def _check_comment(user_id: str, comment_id) -> PermissionResult:
    key = _as_uuid(comment_id)
    owners = (
        Comment.objects.filter(pk=key).values_list("user_id", "post__user_id").first()
        if key
        else None
    )
    if owners is None:
        return _denied("Comment not found.", CODE_NOT_FOUND)
    comment_owner, post_owner = (str(owner) for owner in owners)
    # The post owner may moderate comments on their post.
    if user_id not in (comment_owner, post_owner):
        return _denied("You do not have permission to modify this comment.")
    return ALLOWED


def _check_chat(user_id: str, chat_id) -> PermissionResult:
    key = _as_uuid(chat_id)
    if key is None or not ChatParticipant.objects.filter(user_id=user_id, chat_id=key).exists():
        return _denied("You do not have access to this chat.")
    return ALLOWED


def _check_profile(user_id: str, profile_id) -> PermissionResult:
    if str(profile_id) != user_id:
        return _denied("You do not have permission to access another user's profile.")
    return ALLOWED


def _check_file(user_id: str, file_id) -> PermissionResult:
    key = _as_uuid(file_id)
    owner_id = File.objects.filter(pk=key).values_list("user_id", flat=True).first() if key else None
    if owner_id is None:
        return _denied("File not found.", CODE_NOT_FOUND)
    if str(owner_id) != user_id:
        return _denied("You do not have permission to modify this file.")
    return ALLOWED


_CHECKERS: dict[str, Callable[[str, object], PermissionResult]] = {
    POST: _check_post,
    COMMENT: _check_comment,
    CHAT: _check_chat,
    PROFILE: _check_profile,
    FILE: _check_file,
}


__all__ = [
    "CHAT",
    "COMMENT",
    "FILE",
    "POST",
    "PROFILE",
    "RESOURCE_KINDS",
    "PermissionResult",
    "check_permission",
]
