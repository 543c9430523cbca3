"""Serializers for authentication flows (register, login, profile)."""

from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed

from core.sanitize import SanitizedCharField

from .managers import UserManager

User = get_user_model()

PASSWORD_POLICY = r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$"
PASSWORD_POLICY_MESSAGE = (
    "Password must contain at least one uppercase letter, one lowercase letter, "
    "one digit, and one special character (@$!%*?&)."
)


class RegisterSerializer(serializers.Serializer):
    """Validate a sign-up form; uniqueness of the email is checked by the caller."""

    name = SanitizedCharField(
        min_length=1,
        max_length=50,
        error_messages={
            "blank": "Name is required.",
            "min_length": "Name is required.",
            "max_length": "Name must be at most 50 characters.",
        },
    )
    email = serializers.EmailField(
        error_messages={"blank": "Email is required.", "invalid": "Enter a valid email address."}
    )
    password = serializers.RegexField(
        PASSWORD_POLICY,
        write_only=True,
        min_length=8,
        error_messages={
            "blank": "Password is required.",
            "min_length": "Password must be at least 8 characters.",
            "invalid": PASSWORD_POLICY_MESSAGE,
        },
    )
    confirm_password = serializers.CharField(
        write_only=True, error_messages={"blank": "Password confirmation is required."}
    )

    def validate(self, attrs):
        """Report a mismatch against the confirmation field."""
        if attrs.get("password") != attrs.get("confirm_password"):
            raise serializers.ValidationError(
                {"confirm_password": ["Password and confirmation do not match."]}
            )
        return attrs


class LoginSerializer(serializers.Serializer):
    """Authenticate a user via email/password using bcrypt verification."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        """Authenticate credentials and attach the user to validated_data."""
        email = attrs.get("email")
        password = attrs.get("password")
        try:
            user = User.objects.get(email__iexact=email)
        except User.DoesNotExist:
            raise AuthenticationFailed("Invalid credentials")

        if not user.is_active:
            raise AuthenticationFailed("User is inactive")

        if not UserManager.verify_password(user, password):
            raise AuthenticationFailed("Invalid credentials")

        attrs["user"] = user
        return attrs


class ProfileUpdateSerializer(serializers.Serializer):
    """Editable profile fields."""

    name = SanitizedCharField(
        min_length=1,
        max_length=50,
        error_messages={
            "blank": "Name is required.",
            "min_length": "Name is required.",
            "max_length": "Name must be at most 50 characters.",
        },
    )
    bio = SanitizedCharField(
        max_length=500,
        required=False,
        allow_blank=True,
        allow_null=True,
        error_messages={"max_length": "Bio must be at most 500 characters."},
    )

    def validate(self, attrs):
        """Disallow attempts to change email via this endpoint."""
        if "email" in getattr(self, "initial_data", {}):
            raise serializers.ValidationError({"email": ["Email cannot be updated via this endpoint."]})
        return attrs


__all__ = ["LoginSerializer", "ProfileUpdateSerializer", "RegisterSerializer"]
