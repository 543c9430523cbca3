"""Response helpers and base classes for consistent API envelopes."""

from typing import Any

from rest_framework.response import Response
from rest_framework.views import APIView

from core.results import ActionResult


def api_response(data: Any, status: int = 200) -> Response:
    """Return data wrapped in the standard envelope.

    All successful JSON responses should use this helper to ensure the
    `{ "data": ..., "errors": [] }` shape.
    """

    return Response({"data": data, "errors": []}, status=status)


def result_response(result: ActionResult) -> Response:
    """Render an ``ActionResult`` using the standard envelope.

    Failures carry their single message in ``errors`` and, for validation
    failures, a ``field_errors`` mapping keyed by field name.
    """
    if result.success:
        if result.status == 204:
            return Response(status=204)
        return api_response(result.data, status=result.status)

    payload: dict[str, Any] = {"data": None, "errors": [result.error]}
    if result.field_errors:
        payload["field_errors"] = result.field_errors
    return Response(payload, status=result.status)


def _is_enveloped(payload: Any) -> bool:
    return isinstance(payload, dict) and "data" in payload and "errors" in payload


class EnvelopeMixin:
    """Mixin to wrap successful responses in the standard envelope."""

    def finalize_response(self, request, response, *args, **kwargs):  # type: ignore[override]
        """Ensure non-error responses include the `{data, errors}` envelope."""
        if hasattr(response, "data") and response.status_code and response.status_code < 400:
            if response.status_code != 204 and not _is_enveloped(response.data):
                response.data = {"data": response.data, "errors": []}
        return super().finalize_response(request, response, *args, **kwargs)  # type: ignore[attr-defined]


class BaseAPIView(EnvelopeMixin, APIView):
    """APIView that ensures successful responses use the standard envelope."""


def page_params(request, default_per_page: int = 10, max_per_page: int = 100) -> tuple[int, int]:
    """Read ``page``/``per_page`` query parameters, clamped to sane bounds."""
    def _int(name: str, default: int) -> int:
        try:
            return int(request.query_params.get(name, default))
        except (TypeError, ValueError):
            return default

    page = max(1, _int("page", 1))
    per_page = min(max(1, _int("per_page", default_per_page)), max_per_page)
    return page, per_page


__all__ = ["BaseAPIView", "EnvelopeMixin", "api_response", "page_params", "result_response"]
