"""Input schemas for assistant chat actions.

Message content is forwarded to the completion API verbatim, so it is
length-checked but not HTML-escaped.
"""

from rest_framework import serializers

from .models import AssistantMessage


class ChatMessageSerializer(serializers.Serializer):
    role = serializers.ChoiceField(
        choices=AssistantMessage.Role.choices,
        error_messages={"invalid_choice": "Role must be one of user, assistant or system."},
    )
    # Assistant replies may come back empty and are echoed in later requests.
    content = serializers.CharField(
        max_length=10000,
        allow_blank=True,
        trim_whitespace=False,
        error_messages={"max_length": "Messages must be at most 10000 characters."},
    )

    def validate(self, attrs):
        if attrs["role"] == AssistantMessage.Role.USER and not attrs["content"].strip():
            raise serializers.ValidationError({"content": "Message content is required."})
        return attrs


class CompletionRequestSerializer(serializers.Serializer):
    messages = ChatMessageSerializer(many=True, allow_empty=False)
    chat_id = serializers.UUIDField(required=False, allow_null=True)

    def validate_messages(self, messages):
        if not any(message["role"] == AssistantMessage.Role.USER for message in messages):
            raise serializers.ValidationError("A user message is required.")
        return messages


class StoredMessageSerializer(serializers.Serializer):
    content = serializers.CharField(
        max_length=10000,
        error_messages={
            "required": "Message content is required.",
            "blank": "Message content is required.",
            "max_length": "Messages must be at most 10000 characters.",
        },
    )
    chat_id = serializers.UUIDField(required=False, allow_null=True)


__all__ = ["ChatMessageSerializer", "CompletionRequestSerializer", "StoredMessageSerializer"]
