"""Input schemas for chat actions."""

from rest_framework import serializers

from core.sanitize import SanitizedCharField


class ChatCreateSerializer(serializers.Serializer):
    """A new chat; the creator is added to ``participant_ids`` by the caller."""

    name = SanitizedCharField(
        max_length=100,
        required=False,
        allow_blank=True,
        allow_null=True,
        error_messages={"max_length": "Chat name must be at most 100 characters."},
    )
    participant_ids = serializers.ListField(
        child=serializers.UUIDField(),
        min_length=1,
        error_messages={
            "required": "At least one participant is required.",
            "min_length": "At least one participant is required.",
            "empty": "At least one participant is required.",
        },
    )


class MessageInputSerializer(serializers.Serializer):
    content = SanitizedCharField(
        min_length=1,
        max_length=5000,
        error_messages={
            "required": "Message content is required.",
            "blank": "Message content is required.",
            "min_length": "Message content is required.",
            "max_length": "Messages must be at most 5000 characters.",
        },
    )


class ParticipantInputSerializer(serializers.Serializer):
    user_id = serializers.UUIDField(
        error_messages={"required": "User id is required.", "invalid": "Enter a valid user id."}
    )


__all__ = ["ChatCreateSerializer", "MessageInputSerializer", "ParticipantInputSerializer"]
