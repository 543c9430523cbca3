"""Thin wrapper around the OpenAI-compatible chat completion API."""

import logging
from typing import Any

from django.conf import settings
from openai import OpenAI, OpenAIError

logger = logging.getLogger(__name__)

TEMPERATURE = 0.7


class CompletionNotConfigured(Exception):
    """Raised when no API key is configured."""


class CompletionFailed(Exception):
    """Raised when the completion API call fails or returns nothing usable."""


def get_completion_client() -> OpenAI:
    """Build a client from settings; the key is read on every call."""
    if not settings.OPENAI_API_KEY:
        raise CompletionNotConfigured("OPENAI_API_KEY is not set")
    return OpenAI(api_key=settings.OPENAI_API_KEY, base_url=settings.OPENAI_API_URL or None)


def create_completion(messages: list[dict[str, str]]) -> dict[str, Any]:
    """Send ``messages`` and return the reply and token usage.

    Returns ``{"message": {"role", "content"}, "usage": {...} | None}``.
    """
    client = get_completion_client()
    try:
        completion = client.chat.completions.create(
            model=settings.OPENAI_API_MODEL,
            messages=messages,
            temperature=TEMPERATURE,
        )
    except OpenAIError as exc:
        logger.exception("Completion request failed")
        raise CompletionFailed("Completion request failed") from exc

    choices = getattr(completion, "choices", None) or []
    first_choice = next(iter(choices), None)
    if first_choice is None:
        raise CompletionFailed("Completion returned no choices")

    usage = getattr(completion, "usage", None)
    return {
        "message": {
            "role": getattr(first_choice.message, "role", None) or "assistant",
            "content": first_choice.message.content or "",
        },
        "usage": (
            {
                "prompt_tokens": getattr(usage, "prompt_tokens", 0),
                "completion_tokens": getattr(usage, "completion_tokens", 0),
                "total_tokens": getattr(usage, "total_tokens", 0),
            }
            if usage is not None
            else None
        ),
    }


__all__ = ["CompletionFailed", "CompletionNotConfigured", "create_completion", "get_completion_client"]
