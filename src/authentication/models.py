"""Custom User model with optional bcrypt credentials and a simple role.

Accounts created through an external identity provider have no password
hash; ``password_hash`` is therefore nullable.
"""

import uuid
from typing import ClassVar, Optional

from django.contrib.auth.models import AbstractBaseUser
from django.db import models

from .managers import UserManager


class User(AbstractBaseUser):
    """User identified by email; ``role`` is either ``admin`` or ``user``."""

    class Role(models.TextChoices):
        ADMIN = "admin", "Admin"
        USER = "user", "User"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=50, blank=True)
    image = models.URLField(blank=True, null=True)
    bio = models.TextField(blank=True, null=True)
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.USER)
    password_hash = models.CharField(max_length=128, blank=True, null=True)
    email_verified = models.DateTimeField(blank=True, null=True)
    is_active = models.BooleanField(default=True)
    token_version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS: ClassVar[list[str]] = []

    objects = UserManager()

    class Meta:
        """Default ordering shows newest users first."""
        ordering = ["-created_at"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.email

    @property
    def is_admin(self) -> bool:
        return self.role == self.Role.ADMIN

    def set_password(self, raw_password: Optional[str]) -> None:  # type: ignore[override]
        """Override to ensure bcrypt hashing via manager utility."""

        if raw_password is None:
            self.password_hash = None
        else:
            self.password_hash = UserManager.hash_password(raw_password)

    def check_password(self, raw_password: Optional[str]) -> bool:  # type: ignore[override]
        if raw_password is None:
            return False
        return UserManager.verify_password(self, raw_password)


class VerificationToken(models.Model):
    """One-time token proving control of an email address."""

    TYPE_VERIFICATION = "verification"

    identifier = models.EmailField()
    token = models.CharField(max_length=128, unique=True)
    type = models.CharField(max_length=32, default=TYPE_VERIFICATION)
    expires = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("identifier", "token")

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.type}:{self.identifier}"


__all__ = ["User", "VerificationToken"]
