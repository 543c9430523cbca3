"""Assistant chat proxy with the completion client mocked out."""

from __future__ import annotations

import uuid
from types import SimpleNamespace
from unittest import mock

import openai
from django.test import override_settings

from assistant import services
from assistant.models import AssistantChat, AssistantMessage
from tests.utils import FakeRedisTestCase, auth_client, create_user, session_of


def _completion(content="Hi there!", role="assistant"):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(role=role, content=content))],
        usage=SimpleNamespace(prompt_tokens=5, completion_tokens=3, total_tokens=8),
    )


class AssistantChatTests(FakeRedisTestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = create_user("user@example.com", name="User")
        cls.other = create_user("other@example.com", name="Other")

    def setUp(self):
        super().setUp()
        patcher = mock.patch("assistant.completion.OpenAI")
        self.openai_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.create = self.openai_cls.return_value.chat.completions.create
        self.create.return_value = _completion()

    def test_completion_creates_titled_chat_and_stores_exchange(self):
        messages = [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "What is the capital of France?"},
        ]
        response = auth_client(self.user).post("/assistant/chat/", {"messages": messages}, format="json")
        body = response.json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(body["data"]["response"], {"role": "assistant", "content": "Hi there!"})
        self.assertEqual(body["data"]["usage"]["total_tokens"], 8)

        chat = AssistantChat.objects.get(pk=body["data"]["chat_id"])
        self.assertEqual(chat.title, "What is the capital ...")
        self.assertEqual(chat.user_id, self.user.id)
        self.assertEqual(
            list(chat.messages.order_by("created_at").values_list("role", "content")),
            [("user", "What is the capital of France?"), ("assistant", "Hi there!")],
        )

        self.openai_cls.assert_called_once_with(api_key="test-key", base_url=None)
        kwargs = self.create.call_args.kwargs
        self.assertEqual(kwargs["model"], "gpt-test")
        self.assertEqual(kwargs["temperature"], 0.7)
        self.assertEqual(kwargs["messages"], messages)

    def test_short_title_is_not_marked(self):
        self.assertEqual(services.chat_title("Hello"), "Hello")
        self.assertEqual(services.chat_title("x" * 20), "x" * 20)
        self.assertEqual(services.chat_title("x" * 21), "x" * 20 + "...")

    def test_continuing_a_chat_appends_messages(self):
        chat = AssistantChat.objects.create(user=self.user, title="Earlier")
        result = services.complete_chat(
            session_of(self.user),
            {"messages": [{"role": "user", "content": "again"}], "chat_id": str(chat.id)},
        )

        self.assertTrue(result.success)
        self.assertEqual(result.data["chat_id"], str(chat.id))
        self.assertEqual(chat.messages.count(), 2)

    def test_foreign_chat_is_not_found_and_model_not_called(self):
        chat = AssistantChat.objects.create(user=self.other, title="Private")
        result = services.complete_chat(
            session_of(self.user),
            {"messages": [{"role": "user", "content": "peek"}], "chat_id": str(chat.id)},
        )

        self.assertEqual(result.status, 404)
        self.create.assert_not_called()

    def test_user_message_required(self):
        result = services.complete_chat(
            session_of(self.user), {"messages": [{"role": "system", "content": "Be brief."}]}
        )

        self.assertEqual(result.status, 400)
        self.assertIn("messages", result.field_errors)
        self.create.assert_not_called()

    def test_empty_assistant_reply_can_be_sent_back(self):
        self.create.return_value = _completion(content=None)
        first = services.complete_chat(
            session_of(self.user), {"messages": [{"role": "user", "content": "hi"}]}
        )
        self.assertTrue(first.success)
        self.assertEqual(first.data["response"], {"role": "assistant", "content": ""})

        self.create.return_value = _completion()
        second = services.complete_chat(
            session_of(self.user),
            {
                "messages": [
                    {"role": "user", "content": "hi"},
                    first.data["response"],
                    {"role": "user", "content": "still there?"},
                ],
                "chat_id": first.data["chat_id"],
            },
        )

        self.assertTrue(second.success)
        self.assertEqual(second.data["chat_id"], first.data["chat_id"])
        self.assertEqual(AssistantMessage.objects.filter(chat_id=first.data["chat_id"]).count(), 4)

    def test_blank_user_message_is_rejected(self):
        result = services.complete_chat(
            session_of(self.user), {"messages": [{"role": "user", "content": "   "}]}
        )

        self.assertEqual(result.status, 400)
        self.assertEqual(result.field_errors["messages.0.content"], ["Message content is required."])
        self.create.assert_not_called()

    @override_settings(OPENAI_API_KEY=None)
    def test_missing_api_key_is_server_error(self):
        result = services.complete_chat(
            session_of(self.user), {"messages": [{"role": "user", "content": "hi"}]}
        )

        self.assertEqual(result.status, 500)
        self.assertEqual(result.error, "The completion service is not configured.")
        self.assertFalse(AssistantChat.objects.exists())

    def test_completion_failure_is_bad_gateway_and_nothing_stored(self):
        self.create.side_effect = openai.OpenAIError("upstream unavailable")

        result = services.complete_chat(
            session_of(self.user), {"messages": [{"role": "user", "content": "hi"}]}
        )

        self.assertEqual(result.status, 502)
        self.assertFalse(AssistantChat.objects.exists())
        self.assertFalse(AssistantMessage.objects.exists())

    def test_history_lists_own_chats_and_returns_messages(self):
        mine = AssistantChat.objects.create(user=self.user, title="Mine")
        AssistantMessage.objects.create(chat=mine, role="user", content="q")
        AssistantChat.objects.create(user=self.other, title="Theirs")
        client = auth_client(self.user)

        listing = client.get("/assistant/chat/").json()["data"]["chats"]
        self.assertEqual([c["title"] for c in listing], ["Mine"])

        detail = client.get("/assistant/chat/", {"chat_id": str(mine.id)}).json()["data"]
        self.assertEqual([m["content"] for m in detail["messages"]], ["q"])

        missing = client.get("/assistant/chat/", {"chat_id": str(uuid.uuid4())})
        self.assertEqual(missing.status_code, 404)

    def test_store_user_message_without_completion(self):
        response = auth_client(self.user).post(
            "/assistant/messages/", {"content": "note to self"}, format="json"
        )
        body = response.json()

        self.assertEqual(response.status_code, 201)
        chat = AssistantChat.objects.get(pk=body["data"]["chat_id"])
        self.assertEqual(chat.title, "note to self")
        self.assertEqual(chat.messages.get().role, "user")
        self.create.assert_not_called()
