"""Input sanitizing helpers and serializer fields that apply them."""

import re

from django.utils.html import escape, strip_tags
from rest_framework import serializers

_UNSAFE_FILENAME_CHARS = re.compile(r'[/\\?%*:|"<>]')


def sanitize_input(value: str) -> str:
    """Strip HTML tags, then escape what remains."""
    return str(escape(strip_tags(value)))


def sanitize_filename(filename: str) -> str:
    """Replace characters that are unsafe in file names with underscores."""
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)


class SanitizedCharField(serializers.CharField):
    """CharField that sanitizes its value before length validators run."""

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        return sanitize_input(value)


__all__ = ["SanitizedCharField", "sanitize_filename", "sanitize_input"]
