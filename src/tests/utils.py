"""Shared helpers for tests (user creation, authenticated clients, fake Redis)."""

from __future__ import annotations

from typing import Dict
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase
from rest_framework.test import APIClient

from authentication.managers import UserManager
from authentication.services import TokenService
from core.session import Session, session_for_user

User = get_user_model()


class FakeRedis:
    """Minimal Redis stub supporting the commands used by TokenService."""

    def __init__(self):
        self._store: Dict[str, str] = {}

    def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        """Mimic Redis SETEX; TTL is ignored in tests, value stored in-memory."""
        self._store[key] = value

    def get(self, key: str):
        """Return stored value for key or None, matching Redis GET semantics."""
        return self._store.get(key)


class FakeRedisTestCase(TestCase):
    """TestCase with both Redis client lookups patched to a shared ``FakeRedis``."""

    @classmethod
    def setUpClass(cls):
        super().setUpClass()
        cls.fake_redis = FakeRedis()
        cls.patchers = [
            mock.patch("core.redis_client.get_redis_client", return_value=cls.fake_redis),
            mock.patch("authentication.services.get_redis_client", return_value=cls.fake_redis),
        ]
        for patcher in cls.patchers:
            patcher.start()

    @classmethod
    def tearDownClass(cls):
        for patcher in cls.patchers:
            patcher.stop()
        super().tearDownClass()

    def setUp(self):
        # Cached view payloads outlive the per-test transaction.
        cache.clear()


def create_user(email: str, password: str | None = "UserPass123!", role: str = "user", **extra):
    """Create a user with a bcrypt-hashed password for tests."""

    return User.objects.create(
        email=email,
        password_hash=UserManager.hash_password(password) if password else None,
        role=role,
        **extra,
    )


def session_of(user) -> Session:
    return session_for_user(user)


def auth_client(user) -> APIClient:
    """APIClient carrying a freshly minted access token for ``user``."""
    access, _ = TokenService.generate_tokens(user)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
    return client
