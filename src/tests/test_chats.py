"""Peer chat actions: participancy, polling, and leaving."""

from __future__ import annotations

import uuid

from django.db import connection
from django.test.utils import CaptureQueriesContext
from django.utils import timezone

from chats import services
from chats.models import Chat, ChatParticipant, Message
from tests.utils import FakeRedisTestCase, auth_client, create_user, session_of


class ChatServiceTests(FakeRedisTestCase):
    @classmethod
    def setUpTestData(cls):
        cls.alice = create_user("alice@example.com", name="Alice")
        cls.bob = create_user("bob@example.com", name="Bob")
        cls.carol = create_user("carol@example.com", name="Carol")

    def _pair_chat(self) -> str:
        result = services.create_chat(session_of(self.alice), {"participant_ids": [str(self.bob.id)]})
        self.assertEqual(result.status, 201)
        return result.data["chat_id"]

    def test_create_chat_always_includes_creator(self):
        chat_id = self._pair_chat()
        members = set(ChatParticipant.objects.filter(chat_id=chat_id).values_list("user_id", flat=True))
        self.assertEqual(members, {self.alice.id, self.bob.id})

    def test_create_chat_with_unknown_participant_fails_without_rows(self):
        result = services.create_chat(session_of(self.alice), {"participant_ids": [str(uuid.uuid4())]})
        self.assertFalse(result.success)
        self.assertIn("participant_ids", result.field_errors)
        self.assertFalse(Chat.objects.exists())

    def test_create_chat_needs_a_participant(self):
        result = services.create_chat(session_of(self.alice), {"participant_ids": []})
        self.assertEqual(result.error, "Invalid input.")

    def test_outsider_cannot_send_message(self):
        chat_id = self._pair_chat()

        result = services.send_message(session_of(self.carol), chat_id, {"content": "let me in"})

        self.assertFalse(result.success)
        self.assertEqual(result.status, 403)
        self.assertEqual(result.error, "You do not have access to this chat.")
        self.assertFalse(Message.objects.filter(chat_id=chat_id).exists())

    def test_send_message_bumps_chat_timestamp(self):
        chat_id = self._pair_chat()
        before = Chat.objects.get(pk=chat_id).updated_at

        result = services.send_message(session_of(self.bob), chat_id, {"content": "hello"})

        self.assertEqual(result.status, 201)
        self.assertEqual(result.data["message"]["user_id"], str(self.bob.id))
        self.assertGreater(Chat.objects.get(pk=chat_id).updated_at, before)

    def test_poll_returns_only_newer_messages(self):
        chat_id = self._pair_chat()
        first = services.send_message(session_of(self.alice), chat_id, {"content": "one"}).data["message"]
        services.send_message(session_of(self.bob), chat_id, {"content": "two"})
        services.send_message(session_of(self.alice), chat_id, {"content": "three"})

        everything = services.get_chat_messages(session_of(self.bob), chat_id)
        self.assertEqual([m["content"] for m in everything.data["messages"]], ["one", "two", "three"])

        newer = services.get_chat_messages(session_of(self.bob), chat_id, after=first["id"])
        self.assertEqual([m["content"] for m in newer.data["messages"]], ["two", "three"])

        bad_cursor = services.get_chat_messages(session_of(self.bob), chat_id, after="nope")
        self.assertEqual(bad_cursor.status, 400)

    def test_user_chats_ordered_by_activity_with_last_message(self):
        older = self._pair_chat()
        newer = services.create_chat(
            session_of(self.alice), {"name": "trio", "participant_ids": [str(self.carol.id)]}
        ).data["chat_id"]
        services.send_message(session_of(self.bob), older, {"content": "bump"})

        result = services.get_user_chats(session_of(self.alice))
        chats = result.data["chats"]
        self.assertEqual([c["id"] for c in chats], [older, newer])
        self.assertEqual(chats[0]["last_message"]["content"], "bump")
        self.assertIsNone(chats[1]["last_message"])

        self.assertEqual(len(services.get_user_chats(session_of(self.carol)).data["chats"]), 1)

    def test_poll_cursor_keeps_messages_sharing_a_timestamp(self):
        chat_id = self._pair_chat()
        for content in ("a", "b", "c"):
            Message.objects.create(chat_id=chat_id, user=self.alice, content=content)
        Message.objects.filter(chat_id=chat_id).update(created_at=timezone.now())
        ordered = sorted(Message.objects.filter(chat_id=chat_id), key=lambda m: m.pk)

        everything = services.get_chat_messages(session_of(self.bob), chat_id)
        self.assertEqual([m["id"] for m in everything.data["messages"]], [str(m.id) for m in ordered])

        newer = services.get_chat_messages(session_of(self.bob), chat_id, after=str(ordered[0].id))
        self.assertEqual([m["id"] for m in newer.data["messages"]], [str(m.id) for m in ordered[1:]])

    def test_user_chats_query_count_does_not_grow_with_chats(self):
        def count_queries():
            with CaptureQueriesContext(connection) as queries:
                services.get_user_chats(session_of(self.alice))
            return len(queries)

        chat_id = self._pair_chat()
        services.send_message(session_of(self.alice), chat_id, {"content": "first"})
        baseline = count_queries()

        for _ in range(3):
            other = self._pair_chat()
            services.send_message(session_of(self.bob), other, {"content": "more"})

        self.assertEqual(count_queries(), baseline)
        chats = services.get_user_chats(session_of(self.alice)).data["chats"]
        self.assertEqual(len(chats), 4)
        self.assertEqual(chats[-1]["last_message"]["content"], "first")

    def test_last_participant_leaving_deletes_chat(self):
        chat_id = self._pair_chat()

        self.assertEqual(services.leave_chat(session_of(self.alice), chat_id).status, 204)
        self.assertTrue(Chat.objects.filter(pk=chat_id).exists())
        self.assertEqual(services.send_message(session_of(self.alice), chat_id, {"content": "x"}).status, 403)

        self.assertEqual(services.leave_chat(session_of(self.bob), chat_id).status, 204)
        self.assertFalse(Chat.objects.filter(pk=chat_id).exists())

    def test_add_participant_rejects_duplicates_and_unknown_users(self):
        chat_id = self._pair_chat()
        alice = session_of(self.alice)

        self.assertEqual(
            services.add_chat_participant(alice, chat_id, {"user_id": str(self.carol.id)}).status, 201
        )
        duplicate = services.add_chat_participant(alice, chat_id, {"user_id": str(self.carol.id)})
        self.assertEqual(duplicate.error, "User is already a participant.")
        self.assertEqual(
            services.add_chat_participant(alice, chat_id, {"user_id": str(uuid.uuid4())}).status, 404
        )

        self.assertTrue(services.send_message(session_of(self.carol), chat_id, {"content": "hi"}).success)


class ChatApiTests(FakeRedisTestCase):
    @classmethod
    def setUpTestData(cls):
        cls.alice = create_user("alice@example.com", name="Alice")
        cls.bob = create_user("bob@example.com", name="Bob")
        cls.carol = create_user("carol@example.com", name="Carol")

    def test_chat_round_trip_over_http(self):
        alice = auth_client(self.alice)
        created = alice.post("/chats/", {"participant_ids": [str(self.bob.id)]}, format="json")
        self.assertEqual(created.status_code, 201)
        chat_id = created.json()["data"]["chat_id"]

        sent = auth_client(self.bob).post(f"/chats/{chat_id}/messages/", {"content": "hey"}, format="json")
        self.assertEqual(sent.status_code, 201)

        detail = alice.get(f"/chats/{chat_id}/").json()["data"]
        self.assertEqual([m["content"] for m in detail["messages"]], ["hey"])
        self.assertEqual(len(detail["chat"]["participants"]), 2)

        outsider = auth_client(self.carol).get(f"/chats/{chat_id}/messages/")
        self.assertEqual(outsider.status_code, 403)
        self.assertEqual(outsider.json()["errors"], ["You do not have access to this chat."])

    def test_leave_over_http(self):
        chat = Chat.objects.create()
        ChatParticipant.objects.create(chat=chat, user=self.alice)

        response = auth_client(self.alice).delete(f"/chats/{chat.id}/")

        self.assertEqual(response.status_code, 204)
        self.assertFalse(Chat.objects.filter(pk=chat.id).exists())
