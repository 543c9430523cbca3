"""Input schemas for post and comment actions."""

from rest_framework import serializers

from core.sanitize import SanitizedCharField


class PostInputSerializer(serializers.Serializer):
    """Fields accepted when creating or updating a post."""

    title = SanitizedCharField(
        min_length=1,
        max_length=100,
        error_messages={
            "required": "Title is required.",
            "blank": "Title is required.",
            "min_length": "Title is required.",
            "max_length": "Title must be at most 100 characters.",
        },
    )
    content = SanitizedCharField(
        min_length=1,
        max_length=10000,
        error_messages={
            "required": "Content is required.",
            "blank": "Content is required.",
            "min_length": "Content is required.",
            "max_length": "Content must be at most 10000 characters.",
        },
    )
    published = serializers.BooleanField(default=True)


class PostUpdateSerializer(PostInputSerializer):
    """Edits leave ``published`` untouched unless it is sent."""

    published = serializers.BooleanField(required=False)



class CommentInputSerializer(serializers.Serializer):
    content = SanitizedCharField(
        min_length=1,
        max_length=1000,
        error_messages={
            "required": "Comment content is required.",
            "blank": "Comment content is required.",
            "min_length": "Comment content is required.",
            "max_length": "Comments must be at most 1000 characters.",
        },
    )


__all__ = ["CommentInputSerializer", "PostInputSerializer", "PostUpdateSerializer"]
