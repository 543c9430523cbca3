"""Post and comment actions, through the service layer and the HTTP API."""

from __future__ import annotations

import uuid
from unittest import mock

from django.db import DatabaseError
from rest_framework.test import APIClient

from posts import services
from posts.models import Comment, Post
from tests.utils import FakeRedisTestCase, auth_client, create_user, session_of


class PostServiceTests(FakeRedisTestCase):
    @classmethod
    def setUpTestData(cls):
        cls.author = create_user("author@example.com", name="Author")
        cls.reader = create_user("reader@example.com", name="Reader")
        cls.admin = create_user("admin@example.com", role="admin", name="Admin")

    def test_unpublished_post_visible_to_owner_only(self):
        created = services.create_post(
            session_of(self.author), {"title": "Draft", "content": "Secret body", "published": False}
        )
        self.assertTrue(created.success)
        post_id = created.data["post_id"]

        denied = services.get_post_by_id(session_of(self.reader), post_id)
        self.assertFalse(denied.success)
        self.assertIn("permission", denied.error)
        self.assertEqual(denied.status, 403)

        allowed = services.get_post_by_id(session_of(self.author), post_id)
        self.assertTrue(allowed.success)
        self.assertEqual(allowed.data["post"]["content"], "Secret body")

        self.assertTrue(services.get_post_by_id(session_of(self.admin), post_id).success)

    def test_create_post_sanitizes_and_validates(self):
        result = services.create_post(
            session_of(self.author), {"title": "<script>x</script>Hi", "content": "a < b"}
        )
        post = Post.objects.get(pk=result.data["post_id"])
        self.assertEqual(post.title, "xHi")
        self.assertEqual(post.content, "a &lt; b")

        invalid = services.create_post(session_of(self.author), {"title": "", "content": "x" * 10001})
        self.assertFalse(invalid.success)
        self.assertEqual(invalid.error, "Invalid input.")
        self.assertIn("title", invalid.field_errors)
        self.assertIn("content", invalid.field_errors)

    def test_feed_lists_published_newest_first_and_refreshes_after_create(self):
        session = session_of(self.author)
        services.create_post(session, {"title": "First", "content": "1"})
        services.create_post(session, {"title": "Hidden", "content": "h", "published": False})

        feed = services.get_posts(1, 10)
        self.assertEqual([p["title"] for p in feed.data["posts"]], ["First"])

        services.create_post(session, {"title": "Second", "content": "2"})
        feed = services.get_posts(1, 10)
        self.assertEqual([p["title"] for p in feed.data["posts"]], ["Second", "First"])
        self.assertEqual(feed.data["total_pages"], 1)

    def test_update_requires_ownership_and_keeps_owner(self):
        post = Post.objects.create(user=self.author, title="Old", content="Body")

        denied = services.update_post(session_of(self.reader), post.id, {"title": "New", "content": "Body"})
        self.assertEqual(denied.status, 403)

        updated = services.update_post(session_of(self.author), post.id, {"title": "New", "content": "Body"})
        self.assertTrue(updated.success)
        post.refresh_from_db()
        self.assertEqual(post.title, "New")
        self.assertEqual(post.user_id, self.author.id)

    def test_update_without_published_keeps_draft_hidden(self):
        created = services.create_post(
            session_of(self.author), {"title": "Draft", "content": "x", "published": False}
        )
        post_id = created.data["post_id"]

        updated = services.update_post(session_of(self.author), post_id, {"title": "Draft v2", "content": "y"})
        self.assertTrue(updated.success)
        post = Post.objects.get(pk=post_id)
        self.assertEqual(post.title, "Draft v2")
        self.assertFalse(post.published)
        self.assertEqual(services.get_posts(1, 10).data["posts"], [])
        self.assertEqual(services.get_post_by_id(session_of(self.reader), post_id).status, 403)

        services.update_post(session_of(self.author), post_id, {"title": "Live", "content": "y", "published": True})
        post.refresh_from_db()
        self.assertTrue(post.published)

    def test_update_missing_post_is_not_found(self):
        result = services.update_post(session_of(self.author), uuid.uuid4(), {"title": "t", "content": "c"})
        self.assertEqual(result.status, 404)

    def test_delete_post_by_admin(self):
        post = Post.objects.create(user=self.author, title="Gone", content="Body")
        result = services.delete_post(session_of(self.admin), post.id)
        self.assertEqual(result.status, 204)
        self.assertFalse(Post.objects.filter(pk=post.id).exists())

    def test_comments_only_on_published_posts(self):
        draft = Post.objects.create(user=self.author, title="Draft", content="x", published=False)
        result = services.create_comment(session_of(self.reader), draft.id, {"content": "hi"})
        self.assertFalse(result.success)
        self.assertEqual(result.error, "Comments are not allowed on unpublished posts.")

        missing = services.create_comment(session_of(self.reader), uuid.uuid4(), {"content": "hi"})
        self.assertEqual(missing.status, 404)

    def test_post_owner_may_delete_foreign_comment(self):
        post = Post.objects.create(user=self.author, title="Open", content="x")
        comment = Comment.objects.create(user=self.reader, post=post, content="hi")
        stranger = create_user("stranger@example.com")

        self.assertEqual(services.delete_comment(session_of(stranger), comment.id).status, 403)
        self.assertEqual(services.delete_comment(session_of(self.author), comment.id).status, 204)

    def test_storage_fault_returns_generic_failure(self):
        with mock.patch("posts.services.Post.objects.create", side_effect=DatabaseError("disk full")):
            result = services.create_post(session_of(self.author), {"title": "t", "content": "c"})

        self.assertFalse(result.success)
        self.assertEqual(result.status, 500)
        self.assertEqual(result.error, "Failed to create the post.")


class PostApiTests(FakeRedisTestCase):
    @classmethod
    def setUpTestData(cls):
        cls.author = create_user("author@example.com", name="Author")
        cls.reader = create_user("reader@example.com", name="Reader")

    def test_create_and_read_post_with_comments(self):
        client = auth_client(self.author)
        created = client.post("/posts/", {"title": "Hello", "content": "World"}, format="json")
        self.assertEqual(created.status_code, 201)
        post_id = created.json()["data"]["post_id"]

        reader = auth_client(self.reader)
        comment = reader.post(f"/posts/{post_id}/comments/", {"content": "Nice"}, format="json")
        self.assertEqual(comment.status_code, 201)

        detail = reader.get(f"/posts/{post_id}/")
        body = detail.json()
        self.assertEqual(detail.status_code, 200)
        self.assertEqual(body["data"]["post"]["author"]["name"], "Author")
        self.assertEqual(body["data"]["post"]["comment_count"], 1)
        self.assertEqual(body["data"]["comments"][0]["content"], "Nice")

    def test_foreign_update_rejected_with_envelope(self):
        post = Post.objects.create(user=self.author, title="Mine", content="x")
        response = auth_client(self.reader).put(
            f"/posts/{post.id}/", {"title": "Hijack", "content": "x"}, format="json"
        )
        body = response.json()

        self.assertEqual(response.status_code, 403)
        self.assertIsNone(body["data"])
        self.assertEqual(body["errors"], ["You do not have permission to modify this post."])

    def test_validation_errors_are_keyed_by_field(self):
        response = auth_client(self.author).post("/posts/", {"content": "x"}, format="json")
        body = response.json()

        self.assertEqual(response.status_code, 400)
        self.assertEqual(body["errors"], ["Invalid input."])
        self.assertEqual(body["field_errors"]["title"], ["Title is required."])

    def test_my_posts_include_drafts(self):
        Post.objects.create(user=self.author, title="Draft", content="x", published=False)
        Post.objects.create(user=self.reader, title="Other", content="x")

        response = auth_client(self.author).get("/posts/mine/")
        self.assertEqual([p["title"] for p in response.json()["data"]["posts"]], ["Draft"])

    def test_anonymous_feed_requires_login(self):
        response = APIClient().get("/posts/")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response["Location"], "/auth/signin")
