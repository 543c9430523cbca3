"""Peer chat actions.

Authorization is participancy: every action on an existing chat passes
``check_permission(session, CHAT, chat_id)`` first. Clients poll
``get_chat_messages`` with the id of the last message they hold.
"""

import logging
import uuid

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import OuterRef, Q, Subquery
from django.utils import timezone
from rest_framework import status

from access_control.permissions import CHAT, check_permission
from core.cache import revalidate_path
from core.dto import to_chat_dto, to_chat_dtos, to_message_dto, to_message_dtos
from core.results import ActionResult, storage_action
from core.session import Session, get_session_user_id

from .models import Chat, ChatParticipant, Message
from .serializers import ChatCreateSerializer, MessageInputSerializer, ParticipantInputSerializer

logger = logging.getLogger(__name__)

User = get_user_model()

CHATS_PATH = "/chats"
NO_ACCESS = "You do not have access to this chat."

# Messages sharing a timestamp are ordered by id so the polling cursor is total.
MESSAGE_ORDER = ("created_at", "id")


def chat_path(chat_id) -> str:
    return f"/chats/{chat_id}"


def _chat_queryset():
    return Chat.objects.prefetch_related("participants__user")


def _touch(chat_id) -> None:
    # QuerySet.update() skips auto_now.
    Chat.objects.filter(pk=chat_id).update(updated_at=timezone.now())


@storage_action("Failed to load chats.")
def get_user_chats(session: Session) -> ActionResult:
    """Chats the caller participates in, most recently active first."""
    user_id = get_session_user_id(session)
    latest = Message.objects.filter(chat_id=OuterRef("pk")).order_by("-created_at", "-id")
    chats = list(
        _chat_queryset()
        .filter(participants__user_id=user_id)
        .annotate(last_message_id=Subquery(latest.values("pk")[:1]))
        .order_by("-updated_at")
        .distinct()
    )
    last_messages = Message.objects.in_bulk([chat.last_message_id for chat in chats if chat.last_message_id])
    for chat in chats:
        chat.last_message = last_messages.get(chat.last_message_id)
    return ActionResult.ok({"chats": to_chat_dtos(chats)})


@storage_action("Failed to load the chat.")
def get_chat_by_id(session: Session, chat_id) -> ActionResult:
    permission = check_permission(session, CHAT, chat_id)
    if not permission.allowed:
        return ActionResult.denied(permission, NO_ACCESS)

    chat = _chat_queryset().filter(pk=chat_id).first()
    if chat is None:
        return ActionResult.not_found("Chat not found.")

    messages = chat.messages.order_by(*MESSAGE_ORDER)
    return ActionResult.ok({"chat": to_chat_dto(chat), "messages": to_message_dtos(messages)})


@storage_action("Failed to load messages.")
def get_chat_messages(session: Session, chat_id, after=None) -> ActionResult:
    """Messages in ascending order, optionally only those newer than ``after``."""
    permission = check_permission(session, CHAT, chat_id)
    if not permission.allowed:
        return ActionResult.denied(permission, NO_ACCESS)

    messages = Message.objects.filter(chat_id=chat_id).order_by(*MESSAGE_ORDER)
    if after:
        try:
            after = uuid.UUID(str(after))
        except ValueError:
            return ActionResult.fail("Unknown message cursor.")
        anchor = Message.objects.filter(chat_id=chat_id, pk=after).only("created_at").first()
        if anchor is None:
            return ActionResult.fail("Unknown message cursor.")
        messages = messages.filter(
            Q(created_at__gt=anchor.created_at) | Q(created_at=anchor.created_at, pk__gt=anchor.pk)
        )

    return ActionResult.ok({"messages": to_message_dtos(messages)})


@storage_action("Failed to create the chat.")
def create_chat(session: Session, data) -> ActionResult:
    user_id = get_session_user_id(session)
    serializer = ChatCreateSerializer(data=data)
    if not serializer.is_valid():
        return ActionResult.invalid(serializer)

    member_ids = {str(pk) for pk in serializer.validated_data["participant_ids"]}
    member_ids.add(user_id)
    if User.objects.filter(pk__in=member_ids).count() != len(member_ids):
        return ActionResult.fail(
            "One or more participants do not exist.",
            field_errors={"participant_ids": ["One or more participants do not exist."]},
        )

    with transaction.atomic():
        chat = Chat.objects.create(name=serializer.validated_data.get("name") or None)
        ChatParticipant.objects.bulk_create(
            [ChatParticipant(chat=chat, user_id=member_id) for member_id in sorted(member_ids)]
        )

    logger.info("Chat %s created by %s with %d participants", chat.id, user_id, len(member_ids))
    revalidate_path(CHATS_PATH)
    return ActionResult.ok({"chat_id": str(chat.id)}, status=status.HTTP_201_CREATED)


@storage_action("Failed to send the message.")
def send_message(session: Session, chat_id, data) -> ActionResult:
    permission = check_permission(session, CHAT, chat_id)
    if not permission.allowed:
        return ActionResult.denied(permission, NO_ACCESS)

    serializer = MessageInputSerializer(data=data)
    if not serializer.is_valid():
        return ActionResult.invalid(serializer)

    if not Chat.objects.filter(pk=chat_id).exists():
        return ActionResult.not_found("Chat not found.")

    with transaction.atomic():
        message = Message.objects.create(
            chat_id=chat_id, user_id=get_session_user_id(session), **serializer.validated_data
        )
        _touch(chat_id)

    revalidate_path(chat_path(chat_id), CHATS_PATH)
    return ActionResult.ok({"message": to_message_dto(message)}, status=status.HTTP_201_CREATED)


@storage_action("Failed to leave the chat.")
def leave_chat(session: Session, chat_id) -> ActionResult:
    """Remove the caller from the chat; the last one out deletes it."""
    permission = check_permission(session, CHAT, chat_id)
    if not permission.allowed:
        return ActionResult.denied(permission, NO_ACCESS)

    user_id = get_session_user_id(session)
    with transaction.atomic():
        removed, _ = ChatParticipant.objects.filter(chat_id=chat_id, user_id=user_id).delete()
        if not removed:
            return ActionResult.not_found("You are not a participant in this chat.")
        if not ChatParticipant.objects.filter(chat_id=chat_id).exists():
            Chat.objects.filter(pk=chat_id).delete()
            logger.info("Chat %s deleted after its last participant left", chat_id)

    revalidate_path(chat_path(chat_id), CHATS_PATH)
    return ActionResult.ok(status=status.HTTP_204_NO_CONTENT)


@storage_action("Failed to add the participant.")
def add_chat_participant(session: Session, chat_id, data) -> ActionResult:
    permission = check_permission(session, CHAT, chat_id)
    if not permission.allowed:
        return ActionResult.denied(permission, NO_ACCESS)

    serializer = ParticipantInputSerializer(data=data)
    if not serializer.is_valid():
        return ActionResult.invalid(serializer)

    new_user_id = serializer.validated_data["user_id"]
    if not Chat.objects.filter(pk=chat_id).exists():
        return ActionResult.not_found("Chat not found.")
    if not User.objects.filter(pk=new_user_id).exists():
        return ActionResult.not_found("User not found.")
    if ChatParticipant.objects.filter(chat_id=chat_id, user_id=new_user_id).exists():
        return ActionResult.fail("User is already a participant.")

    try:
        with transaction.atomic():
            ChatParticipant.objects.create(chat_id=chat_id, user_id=new_user_id)
    except IntegrityError:
        return ActionResult.fail("User is already a participant.")

    revalidate_path(chat_path(chat_id), CHATS_PATH)
    return ActionResult.ok({"user_id": str(new_user_id)}, status=status.HTTP_201_CREATED)


__all__ = [
    "add_chat_participant",
    "create_chat",
    "get_chat_by_id",
    "get_chat_messages",
    "get_user_chats",
    "leave_chat",
    "send_message",
]
