"""Validation of uploaded files."""

from rest_framework import serializers

from core.sanitize import sanitize_filename

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
MAX_NAME_LENGTH = 255


class FileUploadSerializer(serializers.Serializer):
    """Accept one multipart ``file`` part and expose its sanitized metadata."""

    file = serializers.FileField(
        allow_empty_file=True,
        use_url=False,
        error_messages={"required": "A file is required.", "invalid": "A file is required."},
    )

    def validate_file(self, upload):
        name = sanitize_filename(upload.name or "").strip()
        if not name:
            raise serializers.ValidationError("File name is required.")
        if len(name) > MAX_NAME_LENGTH:
            raise serializers.ValidationError(
                f"File name must be at most {MAX_NAME_LENGTH} characters."
            )
        if not getattr(upload, "content_type", None):
            raise serializers.ValidationError("File type is required.")
        if upload.size < 1:
            raise serializers.ValidationError("File must not be empty.")
        if upload.size > MAX_UPLOAD_BYTES:
            raise serializers.ValidationError("File must be at most 10 MB.")
        upload.name = name
        return upload


__all__ = ["FileUploadSerializer", "MAX_UPLOAD_BYTES"]
