"""Assistant chat actions.

A conversation belongs to the user who started it. Only the newest user
turn and the assistant reply are stored per completion; the client sends
the full history with every request.
"""

import logging
import uuid

from django.db import transaction
from django.utils import timezone
from rest_framework import status

from core.dto import to_assistant_chat_dto, to_assistant_chat_dtos, to_assistant_message_dtos
from core.results import ActionResult, storage_action
from core.session import Session, get_session_user_id

from .completion import CompletionFailed, CompletionNotConfigured, create_completion
from .models import AssistantChat, AssistantMessage
from .serializers import CompletionRequestSerializer, StoredMessageSerializer

logger = logging.getLogger(__name__)

TITLE_LENGTH = 20
CHAT_NOT_FOUND = "Chat not found."


def chat_title(content: str) -> str:
    """First characters of the opening message, marked when truncated."""
    if len(content) > TITLE_LENGTH:
        return f"{content[:TITLE_LENGTH]}..."
    return content


def _owned_chat(user_id: str, chat_id) -> AssistantChat | None:
    try:
        chat_id = uuid.UUID(str(chat_id))
    except ValueError:
        return None
    return AssistantChat.objects.filter(pk=chat_id, user_id=user_id).first()


def _chat_for(user_id: str, chat_id, content: str) -> AssistantChat:
    """Existing chat, or a new one titled after ``content``; call inside a transaction."""
    if chat_id:
        return AssistantChat.objects.get(pk=chat_id, user_id=user_id)
    return AssistantChat.objects.create(user_id=user_id, title=chat_title(content))


def _touch(chat: AssistantChat) -> None:
    AssistantChat.objects.filter(pk=chat.pk).update(updated_at=timezone.now())


@storage_action("Failed to save the conversation.")
def complete_chat(session: Session, data) -> ActionResult:
    """Proxy one completion and store the exchange."""
    user_id = get_session_user_id(session)
    serializer = CompletionRequestSerializer(data=data)
    if not serializer.is_valid():
        return ActionResult.invalid(serializer)

    messages = [dict(message) for message in serializer.validated_data["messages"]]
    chat_id = serializer.validated_data.get("chat_id")
    last_user_message = next(
        message for message in reversed(messages) if message["role"] == AssistantMessage.Role.USER
    )

    if chat_id and _owned_chat(user_id, chat_id) is None:
        return ActionResult.not_found(CHAT_NOT_FOUND)

    try:
        completion = create_completion(messages)
    except CompletionNotConfigured:
        logger.error("Completion requested but OPENAI_API_KEY is not set")
        return ActionResult.fail(
            "The completion service is not configured.",
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    except CompletionFailed:
        return ActionResult.fail(
            "An error occurred while communicating with the assistant.",
            status=status.HTTP_502_BAD_GATEWAY,
        )

    reply = completion["message"]
    with transaction.atomic():
        chat = _chat_for(user_id, chat_id, last_user_message["content"])
        AssistantMessage.objects.create(
            chat=chat, role=AssistantMessage.Role.USER, content=last_user_message["content"]
        )
        AssistantMessage.objects.create(chat=chat, role=reply["role"], content=reply["content"])
        _touch(chat)

    logger.info("Assistant chat %s answered for %s", chat.id, user_id)
    return ActionResult.ok(
        {"response": reply, "usage": completion["usage"], "chat_id": str(chat.id)}
    )


@storage_action("Failed to load the chat history.")
def list_chats(session: Session) -> ActionResult:
    user_id = get_session_user_id(session)
    chats = AssistantChat.objects.filter(user_id=user_id).order_by("-updated_at")
    return ActionResult.ok({"chats": to_assistant_chat_dtos(chats)})


@storage_action("Failed to load the chat history.")
def get_chat_with_messages(session: Session, chat_id) -> ActionResult:
    chat = _owned_chat(get_session_user_id(session), chat_id)
    if chat is None:
        return ActionResult.not_found(CHAT_NOT_FOUND)
    messages = chat.messages.order_by("created_at")
    return ActionResult.ok(
        {"chat": to_assistant_chat_dto(chat), "messages": to_assistant_message_dtos(messages)}
    )


@storage_action("Failed to save the message.")
def send_chat_message(session: Session, data) -> ActionResult:
    """Store a user message without requesting a completion."""
    user_id = get_session_user_id(session)
    serializer = StoredMessageSerializer(data=data)
    if not serializer.is_valid():
        return ActionResult.invalid(serializer)

    content = serializer.validated_data["content"]
    chat_id = serializer.validated_data.get("chat_id")
    if chat_id and _owned_chat(user_id, chat_id) is None:
        return ActionResult.not_found(CHAT_NOT_FOUND)

    with transaction.atomic():
        chat = _chat_for(user_id, chat_id, content)
        message = AssistantMessage.objects.create(
            chat=chat, role=AssistantMessage.Role.USER, content=content
        )
        _touch(chat)

    return ActionResult.ok(
        {"chat_id": str(chat.id), "message_id": str(message.id)}, status=status.HTTP_201_CREATED
    )


__all__ = ["chat_title", "complete_chat", "get_chat_with_messages", "list_chats", "send_chat_message"]
