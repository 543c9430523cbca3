"""Ownership checks for every resource kind."""

from __future__ import annotations

import uuid
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase

from access_control.permissions import (
    CHAT,
    COMMENT,
    FILE,
    POST,
    PROFILE,
    check_permission,
)
from chats.models import Chat, ChatParticipant
from core.session import Session
from posts.models import Comment, Post
from tests.utils import create_user, session_of
from uploads.models import File


class CheckPermissionTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.owner = create_user("owner@example.com", name="Owner")
        cls.other = create_user("other@example.com", name="Other")
        cls.commenter = create_user("commenter@example.com", name="Commenter")
        cls.admin = create_user("admin@example.com", role="admin", name="Admin")

        cls.post = Post.objects.create(user=cls.owner, title="Title", content="Body")
        cls.comment = Comment.objects.create(user=cls.commenter, post=cls.post, content="Nice")
        cls.chat = Chat.objects.create(name="pair")
        ChatParticipant.objects.create(chat=cls.chat, user=cls.owner)
        ChatParticipant.objects.create(chat=cls.chat, user=cls.commenter)
        cls.file = File.objects.create(
            user=cls.owner, blob="uploads/x.txt", name="x.txt", size=1, content_type="text/plain"
        )

    def test_post_allowed_only_for_owner(self):
        self.assertTrue(check_permission(session_of(self.owner), POST, self.post.id).allowed)

        result = check_permission(session_of(self.other), POST, self.post.id)
        self.assertFalse(result.allowed)
        self.assertEqual(result.code, "forbidden")
        self.assertEqual(result.http_status, 403)
        self.assertIn("permission", result.reason)

    def test_missing_post_is_not_found(self):
        result = check_permission(session_of(self.owner), POST, uuid.uuid4())
        self.assertFalse(result.allowed)
        self.assertEqual(result.reason, "Post not found.")
        self.assertEqual(result.http_status, 404)

    def test_malformed_id_is_not_found(self):
        result = check_permission(session_of(self.owner), POST, "not-a-uuid")
        self.assertFalse(result.allowed)
        self.assertEqual(result.code, "not_found")

    def test_comment_allowed_for_comment_owner_and_post_owner(self):
        self.assertTrue(check_permission(session_of(self.commenter), COMMENT, self.comment.id).allowed)
        self.assertTrue(check_permission(session_of(self.owner), COMMENT, self.comment.id).allowed)
        self.assertFalse(check_permission(session_of(self.other), COMMENT, self.comment.id).allowed)

    def test_missing_comment_is_not_found(self):
        result = check_permission(session_of(self.owner), COMMENT, uuid.uuid4())
        self.assertEqual(result.reason, "Comment not found.")

    def test_chat_allowed_for_participants_only(self):
        self.assertTrue(check_permission(session_of(self.owner), CHAT, self.chat.id).allowed)
        self.assertTrue(check_permission(session_of(self.commenter), CHAT, self.chat.id).allowed)

        result = check_permission(session_of(self.other), CHAT, self.chat.id)
        self.assertFalse(result.allowed)
        self.assertEqual(result.reason, "You do not have access to this chat.")

    def test_profile_allowed_only_for_self(self):
        self.assertTrue(check_permission(session_of(self.other), PROFILE, self.other.id).allowed)
        self.assertFalse(check_permission(session_of(self.other), PROFILE, self.owner.id).allowed)

    def test_file_allowed_only_for_owner(self):
        self.assertTrue(check_permission(session_of(self.owner), FILE, self.file.id).allowed)
        self.assertFalse(check_permission(session_of(self.other), FILE, self.file.id).allowed)
        self.assertEqual(
            check_permission(session_of(self.owner), FILE, uuid.uuid4()).reason, "File not found."
        )

    def test_admin_always_allowed_without_queries(self):
        session = session_of(self.admin)
        with self.assertNumQueries(0):
            for kind, resource_id in (
                (POST, self.post.id),
                (COMMENT, self.comment.id),
                (CHAT, self.chat.id),
                (PROFILE, self.owner.id),
                (FILE, self.file.id),
                (POST, uuid.uuid4()),
            ):
                self.assertTrue(check_permission(session, kind, resource_id).allowed)

    def test_anonymous_denied_without_queries(self):
        with self.assertNumQueries(0):
            for kind in (POST, COMMENT, CHAT, PROFILE, FILE):
                result = check_permission(None, kind, self.post.id)
                self.assertFalse(result.allowed)
                self.assertEqual(result.reason, "Authentication required.")
                self.assertEqual(result.http_status, 401)

    def test_session_without_user_id_is_anonymous(self):
        result = check_permission(Session(user_id="", role="user"), POST, self.post.id)
        self.assertEqual(result.code, "unauthenticated")

    def test_unknown_kind_denied(self):
        result = check_permission(session_of(self.owner), "invoice", self.post.id)
        self.assertFalse(result.allowed)
        self.assertEqual(result.reason, "Unknown resource type.")
        self.assertEqual(result.http_status, 400)

    def test_storage_fault_is_generic_denial(self):
        with mock.patch(
                "access_control.permissions.Post.objects.filter",
                side_effect=DatabaseError("connection reset"),
        ):
            result = check_permission(session_of(self.owner), POST, self.post.id)

        self.assertFalse(result.allowed)
        self.assertEqual(result.reason, "An error occurred while checking permissions.")
        self.assertNotIn("connection reset", result.reason)
        self.assertEqual(result.http_status, 500)
