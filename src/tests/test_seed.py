"""The seed_demo management command."""

from __future__ import annotations

from io import StringIO

from django.core.management import CommandError, call_command
from django.test import TestCase, override_settings

from authentication.models import User
from chats.models import Chat
from posts.models import Post


class SeedDemoTests(TestCase):
    def test_seed_is_idempotent(self):
        call_command("seed_demo", stdout=StringIO())
        call_command("seed_demo", stdout=StringIO())

        admin = User.objects.get(email="root@example.com")
        self.assertTrue(admin.is_admin)
        self.assertTrue(admin.check_password("RootPass123!"))
        self.assertEqual(Post.objects.count(), 3)
        self.assertEqual(Chat.objects.count(), 1)

    def test_reset_clears_demo_data(self):
        call_command("seed_demo", stdout=StringIO())
        call_command("seed_demo", "--reset", stdout=StringIO())

        self.assertEqual(User.objects.filter(email="alice@example.com").count(), 1)
        self.assertEqual(Chat.objects.count(), 1)

    @override_settings(ADMIN_EMAIL=None)
    def test_requires_admin_credentials(self):
        with self.assertRaises(CommandError):
            call_command("seed_demo", stdout=StringIO())
