"""Discriminated results returned by action handlers."""

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable

from django.db import DatabaseError
from rest_framework import status as http_status

logger = logging.getLogger(__name__)

INVALID_INPUT = "Invalid input."


@dataclass
class ActionResult:
    """Outcome of one action handler.

    ``success`` discriminates the two shapes: on success ``data`` holds the
    DTO payload, otherwise ``error`` holds one user-facing message and
    ``field_errors`` optionally maps field names to message lists.
    ``status`` is the HTTP status the boundary should use.
    """

    success: bool
    data: Any = None
    error: str | None = None
    field_errors: dict[str, list[str]] | None = None
    status: int = http_status.HTTP_200_OK

    @classmethod
    def ok(cls, data: Any = None, status: int = http_status.HTTP_200_OK) -> "ActionResult":
        return cls(success=True, data=data, status=status)

    @classmethod
    def fail(
        cls,
        error: str,
        status: int = http_status.HTTP_400_BAD_REQUEST,
        field_errors: dict[str, list[str]] | None = None,
    ) -> "ActionResult":
        return cls(success=False, error=error, field_errors=field_errors, status=status)

    @classmethod
    def invalid(cls, serializer) -> "ActionResult":
        """Build a validation failure from a rejected serializer."""
        return cls.fail(INVALID_INPUT, field_errors=field_errors(serializer.errors))

    @classmethod
    def not_found(cls, error: str) -> "ActionResult":
        return cls.fail(error, status=http_status.HTTP_404_NOT_FOUND)

    @classmethod
    def denied(cls, permission, fallback: str) -> "ActionResult":
        """Translate a denied ``PermissionResult`` into a failure."""
        return cls.fail(permission.reason or fallback, status=permission.http_status)


def field_errors(errors: Any) -> dict[str, list[str]]:
    """Flatten DRF serializer errors into ``{field: [message, ...]}``.

    Nested serializer errors are keyed by dotted paths.
    """
    flat: dict[str, list[str]] = {}

    def _walk(value: Any, path: str) -> None:
        if isinstance(value, dict):
            for key, nested in value.items():
                _walk(nested, f"{path}.{key}" if path else str(key))
        elif isinstance(value, list) and value and all(isinstance(v, (dict, list)) for v in value):
            for index, nested in enumerate(value):
                _walk(nested, f"{path}.{index}")
        elif isinstance(value, list):
            if value:
                flat.setdefault(path, []).extend(str(v) for v in value)
        else:
            flat.setdefault(path, []).append(str(value))

    _walk(errors, "")
    return flat


def storage_action(failure_message: str) -> Callable:
    """Turn storage faults raised by an action into a generic failure.

    The exception detail is logged and never returned to the caller.
    """

    def decorator(func: Callable[..., ActionResult]) -> Callable[..., ActionResult]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> ActionResult:
            try:
                return func(*args, **kwargs)
            except DatabaseError:
                logger.exception("%s failed", func.__qualname__)
                return ActionResult.fail(
                    failure_message, status=http_status.HTTP_500_INTERNAL_SERVER_ERROR
                )

        return wrapper

    return decorator


__all__ = ["ActionResult", "INVALID_INPUT", "field_errors", "storage_action"]
