"""Conversion of stored records into client-facing payloads.

Every converter enumerates the fields that are safe to expose; password
hashes, tokens and other credentials are never copied. Converters only
read attributes, so they work on model instances as well as any other
record with the same attribute names. Collection variants preserve input
order.
"""

from datetime import datetime
from typing import Any, Iterable


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _id(value: Any) -> str | None:
    return str(value) if value is not None else None


def _items(value: Any) -> list:
    """Materialize a related manager, queryset or plain iterable."""
    if value is None:
        return []
    if hasattr(value, "all"):
        return list(value.all())
    return list(value)


def _author(user) -> dict:
    return {
        "id": _id(user.id),
        "name": getattr(user, "name", None),
        "image": getattr(user, "image", None),
    }


def to_user_dto(user) -> dict:
    return {
        "id": _id(user.id),
        "name": getattr(user, "name", None),
        "email": getattr(user, "email", None),
        "image": getattr(user, "image", None),
        "bio": getattr(user, "bio", None),
        "role": getattr(user, "role", None),
        "email_verified": _iso(getattr(user, "email_verified", None)),
        "created_at": _iso(getattr(user, "created_at", None)),
    }


def to_post_dto(post) -> dict:
    return {
        "id": _id(post.id),
        "title": post.title,
        "content": post.content,
        "published": post.published,
        "created_at": _iso(post.created_at),
        "updated_at": _iso(post.updated_at),
        "author": _author(post.user),
        "comment_count": getattr(post, "comment_count", None) or 0,
    }


def to_comment_dto(comment) -> dict:
    return {
        "id": _id(comment.id),
        "content": comment.content,
        "created_at": _iso(comment.created_at),
        "author": _author(comment.user),
    }


def to_chat_dto(chat) -> dict:
    """Convert a peer chat; ``last_message`` is read when the caller attached one."""
    last_message = getattr(chat, "last_message", None)
    return {
        "id": _id(chat.id),
        "name": getattr(chat, "name", None),
        "created_at": _iso(chat.created_at),
        "updated_at": _iso(getattr(chat, "updated_at", None)),
        "participants": [_author(p.user) for p in _items(getattr(chat, "participants", None))],
        "last_message": (
            {"content": last_message.content, "created_at": _iso(last_message.created_at)}
            if last_message is not None
            else None
        ),
    }


def to_message_dto(message) -> dict:
    return {
        "id": _id(message.id),
        "content": message.content,
        "created_at": _iso(message.created_at),
        "user_id": _id(message.user_id),
    }


def to_file_dto(file) -> dict:
    return {
        "id": _id(file.id),
        "name": file.name,
        "size": file.size,
        "url": file.url,
        "content_type": file.content_type,
        "created_at": _iso(file.created_at),
    }


def to_assistant_chat_dto(chat) -> dict:
    return {
        "id": _id(chat.id),
        "title": chat.title,
        "created_at": _iso(chat.created_at),
        "updated_at": _iso(chat.updated_at),
    }


def to_assistant_message_dto(message) -> dict:
    return {
        "id": _id(message.id),
        "role": message.role,
        "content": message.content,
        "created_at": _iso(message.created_at),
    }


def to_user_dtos(users: Iterable) -> list[dict]:
    return [to_user_dto(user) for user in users]


def to_post_dtos(posts: Iterable) -> list[dict]:
    return [to_post_dto(post) for post in posts]


def to_comment_dtos(comments: Iterable) -> list[dict]:
    return [to_comment_dto(comment) for comment in comments]


def to_chat_dtos(chats: Iterable) -> list[dict]:
    return [to_chat_dto(chat) for chat in chats]


def to_message_dtos(messages: Iterable) -> list[dict]:
    return [to_message_dto(message) for message in messages]


def to_file_dtos(files: Iterable) -> list[dict]:
    return [to_file_dto(file) for file in files]


def to_assistant_chat_dtos(chats: Iterable) -> list[dict]:
    return [to_assistant_chat_dto(chat) for chat in chats]


def to_assistant_message_dtos(messages: Iterable) -> list[dict]:
    return [to_assistant_message_dto(message) for message in messages]
