"""Account actions: registration, email verification, and profiles."""

import logging
import math

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework import status

from access_control.permissions import PROFILE, check_permission
from core.cache import revalidate_path
from core.dto import to_user_dto, to_user_dtos
from core.results import ActionResult, storage_action
from core.session import Session, get_session_user_id

from .mail import send_verification_email
from .serializers import ProfileUpdateSerializer, RegisterSerializer
from .services import VerificationTokenService

logger = logging.getLogger(__name__)

User = get_user_model()

PROFILE_PATH = "/profile"
DUPLICATE_EMAIL = "An account with this email address already exists."


def user_path(user_id) -> str:
    return f"/users/{user_id}"


def _duplicate_email() -> ActionResult:
    return ActionResult.fail(
        DUPLICATE_EMAIL, status=status.HTTP_409_CONFLICT, field_errors={"email": [DUPLICATE_EMAIL]}
    )


@storage_action("Failed to create the account.")
def register_user(data) -> ActionResult:
    """Create a ``user`` account and email a verification link.

    A mail delivery failure does not undo the registration; the result
    reports it in ``verification_email_sent``.
    """
    serializer = RegisterSerializer(data=data)
    if not serializer.is_valid():
        return ActionResult.invalid(serializer)

    email = User.objects.normalize_email(serializer.validated_data["email"])
    if User.objects.filter(email__iexact=email).exists():
        return _duplicate_email()

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email,
                password=serializer.validated_data["password"],
                name=serializer.validated_data["name"],
            )
    except IntegrityError:
        return _duplicate_email()

    token = VerificationTokenService.create_token(user.email)
    sent = send_verification_email(user.email, token)
    logger.info("Registered user %s", user.id)
    return ActionResult.ok(
        {"user": to_user_dto(user), "verification_email_sent": sent},
        status=status.HTTP_201_CREATED,
    )


@storage_action("Failed to verify the email address.")
def verify_email(token: str | None) -> ActionResult:
    if not token:
        return ActionResult.fail("Verification token is required.")

    with transaction.atomic():
        email = VerificationTokenService.consume_token(token)
        if email is None:
            return ActionResult.fail("Invalid or expired verification token.")
        updated = User.objects.filter(email__iexact=email).update(
            email_verified=timezone.now(), updated_at=timezone.now()
        )

    if not updated:
        return ActionResult.not_found("User not found.")
    return ActionResult.ok({"email": email, "email_verified": True})


@storage_action("Failed to load the profile.")
def get_current_user(session: Session) -> ActionResult:
    user = User.objects.filter(pk=get_session_user_id(session)).first()
    if user is None:
        return ActionResult.not_found("User not found.")
    return ActionResult.ok(to_user_dto(user))


@storage_action("Failed to update the profile.")
def update_profile(session: Session, data) -> ActionResult:
    user_id = get_session_user_id(session)
    serializer = ProfileUpdateSerializer(data=data, partial=True)
    if not serializer.is_valid():
        return ActionResult.invalid(serializer)

    user = User.objects.filter(pk=user_id).first()
    if user is None:
        return ActionResult.not_found("User not found.")

    for field, value in serializer.validated_data.items():
        setattr(user, field, value)
    user.save(update_fields=[*serializer.validated_data, "updated_at"])
    revalidate_path(PROFILE_PATH, user_path(user_id))
    return ActionResult.ok(to_user_dto(user))


@storage_action("Failed to load the profile.")
def get_user_by_id(session: Session, user_id) -> ActionResult:
    """Own profile, or any profile for callers the profile check allows."""
    if str(user_id) != get_session_user_id(session):
        permission = check_permission(session, PROFILE, user_id)
        if not permission.allowed:
            return ActionResult.denied(permission, "You do not have permission to view this profile.")

    user = User.objects.filter(pk=user_id).first()
    if user is None:
        return ActionResult.not_found("User not found.")
    return ActionResult.ok(to_user_dto(user))


@storage_action("Failed to load users.")
def get_all_users(session: Session, page: int = 1, per_page: int = 20) -> ActionResult:
    if not session.is_admin:
        return ActionResult.fail("Administrator access required.", status=status.HTTP_403_FORBIDDEN)

    queryset = User.objects.order_by("-created_at")
    total = queryset.count()
    offset = (page - 1) * per_page
    users = queryset[offset:offset + per_page]
    return ActionResult.ok(
        {"users": to_user_dtos(users), "total": total, "total_pages": math.ceil(total / per_page)}
    )


__all__ = [
    "get_all_users",
    "get_current_user",
    "get_user_by_id",
    "register_user",
    "update_profile",
    "verify_email",
]
