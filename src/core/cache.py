"""Cached view payloads keyed by the path that renders them.

Each path has a version counter; cached payloads embed the version in
their key, so ``revalidate_path`` invalidates every variant of a path
(pages, page sizes) with one increment.
"""

import logging
from typing import Any, Callable

from django.core.cache import cache

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300


def _version_key(path: str) -> str:
    return f"path-version:{path}"


def _path_version(path: str) -> int:
    version = cache.get(_version_key(path))
    if version is None:
        cache.add(_version_key(path), 1, timeout=None)
        version = cache.get(_version_key(path), 1)
    return version


def cached_for_path(
    path: str,
    variant: str,
    builder: Callable[[], Any],
    timeout: int = DEFAULT_TIMEOUT,
) -> Any:
    """Return the cached payload for ``path``/``variant`` or build and store it."""
    key = f"path:{path}:v{_path_version(path)}:{variant}"
    payload = cache.get(key)
    if payload is None:
        payload = builder()
        cache.set(key, payload, timeout=timeout)
    return payload


def revalidate_path(*paths: str) -> None:
    """Invalidate cached payloads rendered for the given paths."""
    for path in paths:
        try:
            cache.incr(_version_key(path))
        except ValueError:
            # Nothing cached for this path yet.
            cache.set(_version_key(path), 1, timeout=None)
        logger.debug("Revalidated cached path %s", path)


__all__ = ["cached_for_path", "revalidate_path"]
