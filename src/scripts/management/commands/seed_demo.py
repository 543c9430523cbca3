"""Seed the admin account, demo users, posts, and a chat."""

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from authentication.managers import UserManager
from chats.models import Chat, ChatParticipant, Message
from posts.models import Comment, Post

DEMO_USERS = [
    ("alice@example.com", "Alice", "AlicePass123!"),
    ("bob@example.com", "Bob", "BobPass123!"),
]


class Command(BaseCommand):
    """Management command to seed an admin account and sample data."""

    help = (
        "Create the admin account from ADMIN_EMAIL/ADMIN_PASSWORD plus demo "
        "users, posts and a chat. Use --reset to clear previously seeded data first."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Delete the demo users (and everything they own) before seeding.",
        )

    def handle(self, *args, **options):
        """Entrypoint for the management command."""
        if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
            raise CommandError("ADMIN_EMAIL and ADMIN_PASSWORD must be set to seed the admin account.")

        if options.get("reset"):
            self._reset_seeded_data()

        self.stdout.write("Seeding demo data...")
        with transaction.atomic():
            self._create_admin()
            users = self._create_demo_users()
            self._create_posts(users)
            self._create_chat(users)
        self.stdout.write(self.style.SUCCESS("Demo seed completed."))

    def _reset_seeded_data(self) -> None:
        """Remove the demo users; their posts, comments and chat rows cascade."""
        User = get_user_model()
        demo_emails = [email for email, _, _ in DEMO_USERS]
        Chat.objects.filter(participants__user__email__in=demo_emails).delete()
        User.objects.filter(email__in=demo_emails).delete()
        self.stdout.write(self.style.WARNING("Seeded demo data cleared."))

    @staticmethod
    def _create_admin():
        User = get_user_model()
        admin, _ = User.objects.update_or_create(
            email=settings.ADMIN_EMAIL,
            defaults={
                "name": "Admin",
                "role": User.Role.ADMIN,
                "password_hash": UserManager.hash_password(settings.ADMIN_PASSWORD),
                "email_verified": timezone.now(),
            },
        )
        return admin

    @staticmethod
    def _create_demo_users():
        User = get_user_model()
        users = []
        for email, name, password in DEMO_USERS:
            user, _ = User.objects.get_or_create(
                email=email,
                defaults={
                    "name": name,
                    "password_hash": UserManager.hash_password(password),
                    "email_verified": timezone.now(),
                },
            )
            users.append(user)
        return users

    @staticmethod
    def _create_posts(users):
        alice, bob = users
        welcome, _ = Post.objects.get_or_create(
            title="Hello from Alice",
            user=alice,
            defaults={"content": "First post on the board."},
        )
        Post.objects.get_or_create(
            title="Alice's draft",
            user=alice,
            defaults={"content": "Only Alice can see this one.", "published": False},
        )
        Post.objects.get_or_create(
            title="Bob checks in",
            user=bob,
            defaults={"content": "Posting from Bob's account."},
        )
        Comment.objects.get_or_create(
            post=welcome,
            user=bob,
            defaults={"content": "Welcome, Alice!"},
        )

    @staticmethod
    def _create_chat(users):
        alice, bob = users
        if Chat.objects.filter(name="Alice & Bob").exists():
            return
        chat = Chat.objects.create(name="Alice & Bob")
        ChatParticipant.objects.bulk_create(
            [ChatParticipant(chat=chat, user=alice), ChatParticipant(chat=chat, user=bob)]
        )
        Message.objects.create(chat=chat, user=alice, content="Hi Bob!")
        Message.objects.create(chat=chat, user=bob, content="Hi Alice!")
